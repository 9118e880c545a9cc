"""Time units for barrier timeouts."""

from __future__ import annotations

import math
from datetime import timedelta
from enum import Enum


class TimeUnit(Enum):
    """Granularity of a timeout value."""

    NANOSECONDS = "nanoseconds"
    MICROSECONDS = "microseconds"
    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    def to_seconds(self, amount: float) -> float:
        return amount * _SECONDS_PER_UNIT[self]


_SECONDS_PER_UNIT = {
    TimeUnit.NANOSECONDS: 1e-9,
    TimeUnit.MICROSECONDS: 1e-6,
    TimeUnit.MILLISECONDS: 1e-3,
    TimeUnit.SECONDS: 1.0,
    TimeUnit.MINUTES: 60.0,
    TimeUnit.HOURS: 3600.0,
    TimeUnit.DAYS: 86400.0,
}


def parse_unit(unit: TimeUnit | str) -> TimeUnit:
    """Convert a unit name such as ``"ms"`` or ``"Seconds"`` into a TimeUnit."""
    if isinstance(unit, TimeUnit):
        return unit
    key = str(unit).strip().lower()
    key = _ALIASES.get(key, key)
    try:
        return TimeUnit(key)
    except ValueError:
        raise ValueError(
            f"Unknown time unit: {unit}. Must be one of {[u.value for u in TimeUnit]}"
        ) from None


_ALIASES = {
    "ns": "nanoseconds",
    "us": "microseconds",
    "ms": "milliseconds",
    "s": "seconds",
    "sec": "seconds",
    "min": "minutes",
    "h": "hours",
    "d": "days",
}


def to_seconds(timeout: float | timedelta, unit: TimeUnit | str = TimeUnit.SECONDS) -> float:
    """
    Convert ``timeout`` expressed in ``unit`` to seconds.

    A ``timedelta`` carries its own unit, so ``unit`` is ignored for it.
    """
    if isinstance(timeout, timedelta):
        return timeout.total_seconds()
    amount = float(timeout)
    if math.isnan(amount):
        raise ValueError("timeout must not be NaN")
    return parse_unit(unit).to_seconds(amount)
