import logging

import pytest

from sampleseries.config import resolution
from sampleseries.config.resolution import (
    cascade,
    derive_worker_bound,
    effective_parallelism,
    resolve_log_level,
)


def test_cascade_prefers_first_non_null():
    assert cascade(None, "cli", "cfg") == "cli"
    assert cascade(None, None, "cfg") == "cfg"
    assert cascade(None, None, fallback="default") == "default"
    assert cascade(0, 5) == 0


def test_resolve_log_level_handles_fallbacks():
    decision = resolve_log_level("debug", fallback="INFO")
    assert decision.name == "DEBUG"
    assert decision.value == logging.DEBUG

    default = resolve_log_level(None, "", fallback="WARNING")
    assert default.name == "WARNING"
    assert default.value == logging.WARNING

    numeric = resolve_log_level(logging.ERROR)
    assert numeric.name == "ERROR"


@pytest.mark.parametrize(
    "cpu, expected",
    [(0, 1), (1, 1), (2, 1), (3, 1), (4, 2), (6, 3), (8, 4), (9, 4), (128, 4)],
)
def test_derive_worker_bound(cpu, expected):
    assert derive_worker_bound(cpu) == expected


def test_derive_worker_bound_detects_cores(monkeypatch):
    monkeypatch.setattr(resolution.os, "cpu_count", lambda: 6)
    assert derive_worker_bound() == 3
    monkeypatch.setattr(resolution.os, "cpu_count", lambda: None)
    assert derive_worker_bound() == 1


def test_effective_parallelism_is_minimum_of_caps():
    assert effective_parallelism(16, 4) == 4
    assert effective_parallelism(16, 2) == 2
    assert effective_parallelism(4, 4) == 2
    assert effective_parallelism(16, 0) == 1
