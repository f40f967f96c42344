"""Session clock: monotonic nanosecond timestamps relative to one epoch."""

from __future__ import annotations

import time
from typing import Protocol


class TimeSource(Protocol):
    """Anything that can report the current session time."""

    def now(self) -> int:
        ...


class Clock:
    """Monotonic clock anchored at the moment it was constructed.

    Timestamps are integer nanoseconds since the epoch.  Readings never go
    backwards even if the underlying source stalls.
    """

    def __init__(self) -> None:
        self._epoch_ns = time.monotonic_ns()
        self._last = 0

    @property
    def epoch_ns(self) -> int:
        """Raw ``time.monotonic_ns()`` value recorded at session start."""
        return self._epoch_ns

    def now(self) -> int:
        elapsed = time.monotonic_ns() - self._epoch_ns
        if elapsed > self._last:
            self._last = elapsed
        return self._last
