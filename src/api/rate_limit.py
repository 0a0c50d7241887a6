"""
In-memory fixed window rate limiting.

Counters live in the process: they are lost on restart and not shared between workers.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request

from src.core.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

PRUNE_THRESHOLD = 1024


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """At most 'max_requests' hits per key in each window of 'window_seconds', counted from the key's first hit."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        message: str = "Too many requests, please try again later.",
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.message = message
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> int:
        """Count a request for 'key'. Returns the number of requests left in the window."""
        with self._lock:
            now = self.clock()
            window = self._windows.get(key)
            if window is None or now >= window.reset_at:
                if len(self._windows) >= PRUNE_THRESHOLD:
                    self._prune(now)
                window = _Window(count=0, reset_at=now + self.window_seconds)
                self._windows[key] = window

            if window.count >= self.max_requests:
                retry_after = max(1, math.ceil(window.reset_at - now))
                logger.warning("Rate limit exceeded for %s (retry after %ds)", key, retry_after)
                raise RateLimitExceededError(self.message, retry_after=retry_after)

            window.count += 1
            return self.max_requests - window.count

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)

    def _prune(self, now: float) -> None:
        """Drop expired windows. Caller holds the lock."""
        expired = [key for key, window in self._windows.items() if now >= window.reset_at]
        for key in expired:
            del self._windows[key]


class RateLimit:
    """Route dependency applying a limiter per client IP."""

    def __init__(self, limiter: FixedWindowRateLimiter) -> None:
        self.limiter = limiter

    def __call__(self, request: Request) -> None:
        client_ip = request.client.host if request.client else "unknown"
        self.limiter.hit(client_ip)
