"""Monotonic clock for probe timestamps.

Ticks are integer nanoseconds from a monotonic source. They are only
meaningful as a difference taken within the same process.
"""

import logging
import time
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

# Clock sources in order of preference
CLOCK_SOURCES = ("perf_counter", "monotonic")

NS_PER_MS = 1_000_000


class ClockError(Exception):
    """Raised when no usable monotonic clock is available."""

    pass


class Clock(Protocol):
    """Protocol for tick sources used by the client loops."""

    @property
    def ticks_per_ms(self) -> float: ...
    def now(self) -> int: ...


class MonotonicClock:
    """Nanosecond tick source backed by a monotonic ``time`` clock."""

    def __init__(self, source: str | None = None) -> None:
        self.source = source or _pick_source()
        try:
            info = time.get_clock_info(self.source)
        except ValueError as e:
            raise ClockError(f"Unknown clock {self.source!r}") from e
        if not info.monotonic:
            raise ClockError(f"Clock {self.source!r} is not monotonic")

        read: Callable[[], int] | None = getattr(time, f"{self.source}_ns", None)
        if read is None:
            raise ClockError(f"Clock {self.source!r} has no nanosecond reader")
        self._read = read

        # The *_ns readers always report nanoseconds; resolution is informational
        self._ticks_per_ms = float(NS_PER_MS)
        self.resolution_ms = info.resolution * 1000
        logger.debug(
            f"Clock: {self.source} ({info.implementation}), "
            f"resolution={self.resolution_ms:.6f}ms"
        )

    @property
    def ticks_per_ms(self) -> float:
        return self._ticks_per_ms

    def now(self) -> int:
        """Return the current tick count."""
        try:
            return self._read()
        except OSError as e:
            raise ClockError(f"Reading clock {self.source!r} failed: {e}") from e


def _pick_source() -> str:
    for name in CLOCK_SOURCES:
        try:
            if time.get_clock_info(name).monotonic:
                return name
        except ValueError:
            continue
    raise ClockError("No monotonic clock available on this platform")


def ticks_to_ms(ticks: int | float, ticks_per_ms: float) -> float:
    """Convert a tick delta to milliseconds."""
    return ticks / ticks_per_ms
