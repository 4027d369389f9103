"""Clock sources. The engine only compares timestamps, it never schedules."""

import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        """Current unix time in seconds, monotonically non-decreasing."""
        ...


class SystemClock:
    """Wall clock, clamped so it never goes backwards within the process."""

    def __init__(self) -> None:
        self._last = 0

    def now(self) -> int:
        self._last = max(self._last, int(time.time()))
        return self._last


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)
