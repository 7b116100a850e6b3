# pixelbridge_project/core/rate_limiter.py
import time
from dataclasses import dataclass
from typing import Callable, Dict


@dataclass
class WindowState:
    count: int
    window_start: float


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: float  # seconds until the caller's window restarts


class FixedWindowRateLimiter:
    """
    Per-key fixed window counter.

    Each key gets `max_requests` hits per `window_seconds`; the window starts at the
    key's first hit and the count resets once it has elapsed. State lives in process
    memory and is only touched from the event loop thread, so no locking is needed.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, WindowState] = {}
        self._last_sweep = clock()

    def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        self._sweep(now)

        state = self._windows.get(key)
        if state is None or now - state.window_start >= self.window_seconds:
            state = WindowState(count=0, window_start=now)
            self._windows[key] = state

        state.count += 1
        reset_after = max(0.0, self.window_seconds - (now - state.window_start))
        return RateLimitDecision(
            allowed=state.count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - state.count),
            reset_after=reset_after,
        )

    def reset(self) -> None:
        self._windows.clear()

    def _sweep(self, now: float) -> None:
        # Drop expired windows once per window so idle IPs don't accumulate forever
        if now - self._last_sweep < self.window_seconds:
            return
        self._windows = {
            key: state for key, state in self._windows.items()
            if now - state.window_start < self.window_seconds
        }
        self._last_sweep = now
