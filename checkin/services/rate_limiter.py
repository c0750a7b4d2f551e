# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Sliding-window rate limiter keyed by client IP."""
import time
from collections import defaultdict
from typing import Callable


class SlidingWindowRateLimiter:
    def __init__(self, max_requests: int, window_seconds: int = 60,
                 clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window = window_seconds
        self._clock = clock
        self._hits: dict[str, list[float]] = defaultdict(list)
        self._last_sweep = clock()

    @property
    def enabled(self) -> bool:
        return self.max_requests > 0

    def is_allowed(self, key: str) -> tuple[bool, int, int]:
        """Returns (allowed, remaining, retry_after_seconds)."""
        now = self._clock()
        cutoff = now - self.window
        if now - self._last_sweep >= self.window:
            self._sweep(cutoff)
            self._last_sweep = now
        timestamps = self._hits[key]
        self._hits[key] = timestamps = [t for t in timestamps if t > cutoff]
        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] - cutoff) + 1
            return False, 0, retry_after
        timestamps.append(now)
        return True, self.max_requests - len(timestamps), 0

    def _sweep(self, cutoff: float):
        """Forget clients with no hits left inside the window."""
        stale = [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]
