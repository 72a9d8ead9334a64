from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

MAX_CORE_BOUND = 4
DEFAULT_SCHEDULER_CAP = 4


def cascade(*values, fallback=None):
    """Return the first non-None value from a list, or fallback."""
    for value in values:
        if value is not None:
            return value
    return fallback


def _normalize_upper(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, int):
        return logging.getLevelName(value).upper()
    text = str(value).strip()
    return text.upper() if text else None


@dataclass(frozen=True)
class LogLevelDecision:
    name: str
    value: int


def resolve_log_level(
    *levels: Any,
    fallback: str = "INFO",
) -> LogLevelDecision:
    name = None
    for level in levels:
        normalized = _normalize_upper(level)
        if normalized:
            name = normalized
            break
    if not name:
        name = _normalize_upper(fallback) or "INFO"
    value = logging._nameToLevel.get(name, logging.INFO)
    return LogLevelDecision(name=name, value=value)


def detect_cpu_count() -> int:
    return os.cpu_count() or 1


def derive_worker_bound(cpu_count: Optional[int] = None) -> int:
    """Half the logical processors, clamped to [1, MAX_CORE_BOUND]."""
    cores = detect_cpu_count() if cpu_count is None else cpu_count
    bound = cores // 2 if cores > 1 else 1
    return max(1, min(bound, MAX_CORE_BOUND))


def effective_parallelism(
    cpu_count: Optional[int] = None,
    scheduler_cap: int = DEFAULT_SCHEDULER_CAP,
) -> int:
    """Number of cycles allowed to run at once: both caps apply."""
    return max(1, min(derive_worker_bound(cpu_count), scheduler_cap))
