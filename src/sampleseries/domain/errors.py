from __future__ import annotations

from datetime import datetime
from typing import Optional


class SampleSeriesError(Exception):
    """Base class for errors raised by sample generation and validation."""


class ValidationError(SampleSeriesError):
    """Raised when a sample breaks the ordering or continuity of its series.

    ``position`` is the index of the failing sample in the stored
    (time-descending) series and ``previous_position`` the index of the
    neighbour it was checked against. Both stay ``None`` when the sample was
    validated outside a series builder.
    """

    def __init__(
        self,
        message: str,
        *,
        timestamp: Optional[datetime] = None,
        expected: Optional[datetime] = None,
        previous_timestamp: Optional[datetime] = None,
        position: Optional[int] = None,
        previous_position: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.timestamp = timestamp
        self.expected = expected
        self.previous_timestamp = previous_timestamp
        self.position = position
        self.previous_position = previous_position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        if self.previous_position is None:
            return f"{self.message} (position={self.position})"
        return f"{self.message} (position={self.position}, previous_position={self.previous_position})"


class InvalidStateError(SampleSeriesError, RuntimeError):
    """Raised when an operation is invoked in a state that does not support it."""
