"""
Clock abstraction for SPELLOTRON.

All timing in the engine reads an injectable monotonic clock so that
pause accounting and tests can supply synthetic time.
"""

import threading
import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Source of monotonic time in seconds."""

    @abstractmethod
    def now(self) -> float: ...


class MonotonicClock(Clock):
    """Real time from time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class ManualClock(Clock):
    """
    Clock advanced by hand.

    Example:
        >>> clock = ManualClock()
        >>> clock.advance(1.5)
        >>> clock.now()
        1.5
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._lock = threading.Lock()

    def now(self) -> float:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> float:
        """Move time forward and return the new reading."""
        if seconds < 0:
            raise ValueError("ManualClock cannot run backwards")
        with self._lock:
            self._now += seconds
            return self._now

    def set(self, value: float) -> None:
        with self._lock:
            if value < self._now:
                raise ValueError("ManualClock cannot run backwards")
            self._now = float(value)


def format_elapsed(seconds: float) -> str:
    """
    Format a duration as MM:SS.cc for the timer labels.

    Args:
        seconds: Duration in seconds (negative values clamp to 0).

    Returns:
        str: e.g. "01:05.42".
    """
    centis = int(round(max(0.0, seconds) * 1000)) // 10
    minutes, centis = divmod(centis, 6000)
    secs, centis = divmod(centis, 100)
    return f"{minutes:02d}:{secs:02d}.{centis:02d}"
