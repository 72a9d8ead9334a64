from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional, Sequence

from sampleseries.domain.errors import InvalidStateError, ValidationError
from sampleseries.domain.sample import VALUE_UNIT, Sample
from sampleseries.pipeline.counter import ValidationCounter
from sampleseries.sources.generator import TimestampGenerator
from sampleseries.utils.workload import (
    DEFAULT_LOAD_WORK_UNITS,
    DEFAULT_VALIDATE_WORK_UNITS,
)

logger = logging.getLogger(__name__)

DEFAULT_VALIDATION_CHUNK_SIZE = 4096


class SeriesState(str, Enum):
    EMPTY = "empty"
    BUILT = "built"
    VALIDATED = "validated"


class SeriesBuilder(TimestampGenerator):
    """Builds and validates a regular, time-descending series of samples.

    The stored series runs from the most recent sample (index 0) down to the
    first sample (last index). Validation pairs each position ``i`` with
    position ``i + 1``, its chronologically earlier neighbour.
    """

    def __init__(
        self,
        start: datetime,
        interval: timedelta,
        *,
        load_work_units: int = DEFAULT_LOAD_WORK_UNITS,
        validate_work_units: int = DEFAULT_VALIDATE_WORK_UNITS,
        validation_workers: Optional[int] = None,
        validation_chunk_size: int = DEFAULT_VALIDATION_CHUNK_SIZE,
    ):
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")
        if interval < VALUE_UNIT:
            raise ValueError(f"interval must be at least {VALUE_UNIT}")
        if validation_chunk_size < 1:
            raise ValueError("validation_chunk_size must be >= 1")
        self.start = start
        self.interval = interval
        self.load_work_units = load_work_units
        self.validate_work_units = validate_work_units
        self.validation_workers = validation_workers
        self.validation_chunk_size = validation_chunk_size
        self._samples: list[Sample] = []
        self._requested = 0
        self._validated_count: Optional[int] = None
        self._state = SeriesState.EMPTY

    @property
    def state(self) -> SeriesState:
        return self._state

    @property
    def samples(self) -> Sequence[Sample]:
        """Read-only view of the series, most recent sample first."""
        return tuple(self._samples)

    @property
    def samples_validated(self) -> int:
        if self._validated_count is None:
            raise InvalidStateError("samples have not been validated")
        return self._validated_count

    def generate(self) -> Iterator[datetime]:
        """Yield timestamps in generation (ascending) order for the last build."""
        current = self.start
        for _ in range(self._requested):
            yield current
            current += self.interval

    def count(self) -> Optional[int]:
        return self._requested

    def build(self, count: int) -> None:
        if count < 0:
            raise ValueError("count must be >= 0")
        self._samples.clear()
        self._requested = count
        self._validated_count = None
        # Append in ascending order, then reverse once; inserting at the front is quadratic.
        for idx, timestamp in enumerate(self.generate()):
            sample = Sample(is_first=idx == 0)
            sample.load_at(timestamp, work_units=self.load_work_units)
            self._samples.append(sample)
        self._samples.reverse()
        self._state = SeriesState.BUILT
        logger.debug("Built %d samples starting at %s", count, self.start)

    def validate(self) -> int:
        """Validate every sample concurrently and return how many passed.

        Blocks until all validation tasks finish. The first failure stops the
        remaining tasks at their next sample and is re-raised with its
        position and the position of the neighbour it was checked against;
        ``samples_validated`` then holds the successes seen so far.
        """
        if self._state is SeriesState.EMPTY:
            raise InvalidStateError("series has not been built; call build() first")

        total = len(self._samples)
        counter = ValidationCounter()
        abort = threading.Event()
        chunk = self.validation_chunk_size
        try:
            with ThreadPoolExecutor(
                max_workers=self.validation_workers,
                thread_name_prefix="sample-validate",
            ) as pool:
                futures = [
                    pool.submit(self._validate_range, lo, min(lo + chunk, total), counter, abort)
                    for lo in range(0, total, chunk)
                ]
                wait(futures)
            for future in futures:
                future.result()
        finally:
            self._validated_count = counter.value

        self._state = SeriesState.VALIDATED
        return self._validated_count

    def _validate_range(
        self,
        lo: int,
        hi: int,
        counter: ValidationCounter,
        abort: threading.Event,
    ) -> None:
        samples = self._samples
        last = len(samples) - 1
        for index in range(lo, hi):
            if abort.is_set():
                return
            current = samples[index]
            previous = samples[index + 1] if index < last else None
            try:
                ok = current.validate(
                    previous,
                    self.interval,
                    work_units=self.validate_work_units,
                )
            except ValidationError as exc:
                exc.position = index
                exc.previous_position = index + 1 if previous is not None else None
                abort.set()
                raise
            except Exception:
                abort.set()
                raise
            if ok:
                counter.increment()

    def value_sum(self) -> Decimal:
        total = Decimal(0)
        for sample in self._samples:
            total += Decimal(sample.value)
        return total
