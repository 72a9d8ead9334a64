from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Any

_TIMECODE_RE = re.compile(r"^\s*(?P<amount>\d+(?:\.\d+)?)\s*(?P<unit>ms|s|m|min|h|d|w)\s*$", re.IGNORECASE)

_UNIT_KWARGS = {
    "ms": "milliseconds",
    "s": "seconds",
    "m": "minutes",
    "min": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def parse_timecode(value: Any) -> timedelta:
    """Parse a compact duration such as ``90s``, ``1m`` or ``500ms``.

    ``timedelta`` instances pass through unchanged.
    """
    if isinstance(value, timedelta):
        return value
    if value is None:
        raise ValueError("timecode cannot be null")
    match = _TIMECODE_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid timecode {value!r}; expected e.g. '500ms', '90s', '1m', '2h', '1d'")
    amount = float(match.group("amount"))
    unit = match.group("unit").lower()
    return timedelta(**{_UNIT_KWARGS[unit]: amount})


def parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if value is None:
        raise ValueError("datetime cannot be null")
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO-8601 datetime {value!r}") from exc


def total_ms(delta: timedelta) -> float:
    return delta.total_seconds() * 1000.0
