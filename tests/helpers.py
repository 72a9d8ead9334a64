from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sampleseries.diagnostics import LOGGER_NAME, Diagnostics

START = datetime(1990, 1, 1, 1, 1, 1, 1000)
INTERVAL = timedelta(minutes=1)


class RecordingDiagnostics(Diagnostics):
    """Diagnostics double that keeps every message in memory."""

    def __init__(self) -> None:
        super().__init__(logging.getLogger(f"{LOGGER_NAME}.tests"))
        self.messages: list[str] = []
        self.failures: list[tuple[str, BaseException]] = []

    def record(self, message: str) -> None:
        self.messages.append(message)

    def record_failure(self, message: str, exc: BaseException) -> None:
        self.failures.append((message, exc))
        self.messages.append(message)
