"""Nanosecond timestamps used for every stored time value."""

from __future__ import annotations

import time
from datetime import date, datetime, timezone
from typing import Callable

NANOS_PER_SECOND = 1_000_000_000
NANOS_PER_DAY = 86_400 * NANOS_PER_SECOND
COVERAGE_TERM_NS = 365 * NANOS_PER_DAY

Clock = Callable[[], int]


def system_clock() -> int:
    """Return the current wall-clock time in nanoseconds since the epoch."""
    return time.time_ns()


def to_utc_date(timestamp_ns: int) -> date:
    return datetime.fromtimestamp(timestamp_ns // NANOS_PER_SECOND, tz=timezone.utc).date()
