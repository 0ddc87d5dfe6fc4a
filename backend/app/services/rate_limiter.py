"""In-process sliding-window rate limiter keyed by client identifier.

State lives in memory only: it resets on restart and is not shared between
worker processes.
"""
import threading
import time
from typing import Callable, Optional


class SlidingWindowRateLimiter:
    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def _recent(self, identifier: str, now: float) -> list[float]:
        window_start = now - self.window_seconds
        recent = [t for t in self._requests.get(identifier, []) if t > window_start]
        if recent:
            self._requests[identifier] = recent
        else:
            self._requests.pop(identifier, None)
        return recent

    def _prune_idle(self, now: float) -> None:
        # Timestamps are appended in order, so the last one is the newest
        window_start = now - self.window_seconds
        idle = [key for key, stamps in self._requests.items() if stamps[-1] <= window_start]
        for key in idle:
            del self._requests[key]

    def is_allowed(self, identifier: str) -> bool:
        """Record a request for ``identifier`` if it fits in the window."""
        with self._lock:
            now = self._clock()
            self._prune_idle(now)
            recent = self._recent(identifier, now)
            if len(recent) >= self.max_requests:
                return False
            recent.append(now)
            self._requests[identifier] = recent
            return True

    def remaining(self, identifier: str) -> int:
        with self._lock:
            return max(0, self.max_requests - len(self._recent(identifier, self._clock())))

    def reset_after(self, identifier: str) -> float:
        """Seconds until the oldest request in the window expires; 0 if none."""
        with self._lock:
            now = self._clock()
            recent = self._recent(identifier, now)
            if not recent:
                return 0.0
            return max(0.0, recent[0] + self.window_seconds - now)

    def reset(self, identifier: Optional[str] = None) -> None:
        with self._lock:
            if identifier is None:
                self._requests.clear()
            else:
                self._requests.pop(identifier, None)

    def __len__(self) -> int:
        return len(self._requests)
