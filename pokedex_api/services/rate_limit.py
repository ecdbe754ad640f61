import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after_seconds: int


class RateLimiter(Protocol):
    def consume(self, key: str) -> RateLimitDecision: ...


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Process-local fixed-window counter.

    State lives in this object only: it resets on restart and is not shared
    between instances, so it is only correct for a single-process deployment.
    """

    def __init__(self, max_requests: int, window_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def consume(self, key: str) -> RateLimitDecision:
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now >= window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
                return RateLimitDecision(allowed=True, remaining=max(self.max_requests - 1, 0), retry_after_seconds=0)

            if window.count >= self.max_requests:
                retry_after = max(math.ceil(window.reset_at - now), 1)
                return RateLimitDecision(allowed=False, remaining=0, retry_after_seconds=retry_after)

            window.count += 1
            return RateLimitDecision(
                allowed=True,
                remaining=max(self.max_requests - window.count, 0),
                retry_after_seconds=0,
            )

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
