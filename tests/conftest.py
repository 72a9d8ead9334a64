from __future__ import annotations

import logging
from datetime import datetime, timedelta

import pytest

from sampleseries.diagnostics import LOGGER_NAME
from sampleseries.sources.series import SeriesBuilder
from tests.helpers import INTERVAL, START, RecordingDiagnostics


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers installed by configure_diagnostics between tests."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def diagnostics() -> RecordingDiagnostics:
    return RecordingDiagnostics()


@pytest.fixture
def make_builder():
    """Return a helper creating cheap builders (no synthetic work)."""

    def _make(start: datetime = START, interval: timedelta = INTERVAL, **kwargs) -> SeriesBuilder:
        kwargs.setdefault("load_work_units", 0)
        kwargs.setdefault("validate_work_units", 0)
        return SeriesBuilder(start, interval, **kwargs)

    return _make
