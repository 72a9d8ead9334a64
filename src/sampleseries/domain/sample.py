from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sampleseries.domain.errors import InvalidStateError, ValidationError
from sampleseries.utils.workload import (
    DEFAULT_LOAD_WORK_UNITS,
    DEFAULT_VALIDATE_WORK_UNITS,
    simulate_work,
)

TICK_EPOCH = datetime(1, 1, 1)
VALUE_UNIT = timedelta(milliseconds=1)


def timestamp_value(timestamp: datetime) -> int:
    """Encode a timestamp as whole milliseconds since 0001-01-01 (wall clock)."""
    return (timestamp.replace(tzinfo=None) - TICK_EPOCH) // VALUE_UNIT


@dataclass
class Sample:
    """
    A single time-stamped record inside a generated series.

    Attributes:
        is_first: True only for the chronologically earliest sample.
        timestamp: Point in time assigned by ``load_at``.
        value: Deterministic encoding of ``timestamp``.
        validated: Set once ``validate`` succeeds.
    """

    is_first: bool
    timestamp: Optional[datetime] = None
    value: Optional[int] = None
    validated: bool = False

    @property
    def loaded(self) -> bool:
        return self.timestamp is not None

    def load_at(self, timestamp: datetime, *, work_units: int = DEFAULT_LOAD_WORK_UNITS) -> None:
        self.timestamp = timestamp
        self.value = timestamp_value(timestamp)
        simulate_work(work_units)

    def validate(
        self,
        previous: Optional["Sample"],
        expected_interval: timedelta,
        *,
        work_units: int = DEFAULT_VALIDATE_WORK_UNITS,
    ) -> bool:
        """Check this sample against its chronologically earlier neighbour.

        ``previous`` is None only for the first sample of a series.
        """
        simulate_work(work_units)
        if self.timestamp is None:
            raise InvalidStateError("sample has not been loaded")
        if previous is None:
            if not self.is_first:
                raise ValidationError(
                    "Validation Failed: Previous sample is null, but this is not the first sample.",
                    timestamp=self.timestamp,
                )
        else:
            expected = self.timestamp - expected_interval
            if previous.timestamp != expected:
                raise ValidationError(
                    "Validation Failed: Timestamps do not match. "
                    f"Expected previous: {expected.isoformat()}, but got: {previous.timestamp}",
                    timestamp=self.timestamp,
                    expected=expected,
                    previous_timestamp=previous.timestamp,
                )
        self.validated = True
        return True
