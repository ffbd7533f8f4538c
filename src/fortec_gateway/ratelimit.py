"""Sliding-window request limiting keyed by API key or client address."""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from fortec_gateway.errors import RateLimitExceededError


class SlidingWindowLimiter:
    """Accepts at most ``max_requests`` hits per key within ``window_seconds``."""

    def __init__(self, max_requests: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    def hit(self, key: str) -> bool:
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            timestamps = self._hits.get(key)
            if timestamps is None:
                timestamps = self._hits[key] = deque()
            # Drop timestamps older than the window
            while timestamps and now - timestamps[0] >= self.window_seconds:
                timestamps.popleft()
            if len(timestamps) >= self.max_requests:
                return False
            timestamps.append(now)
            return True

    def _sweep(self, now: float):
        # Forget keys whose newest hit has left the window; caller holds the lock
        stale = [k for k, ts in self._hits.items() if not ts or now - ts[-1] >= self.window_seconds]
        for k in stale:
            del self._hits[k]
        self._last_sweep = now

    def remaining(self, key: str) -> int:
        now = self.clock()
        with self._lock:
            timestamps = self._hits.get(key, ())
            live = sum(1 for t in timestamps if now - t < self.window_seconds)
        return max(self.max_requests - live, 0)

    def reset(self):
        with self._lock:
            self._hits.clear()


class TieredRateLimiter:
    """Default limiter for anonymous callers, one limiter per tier otherwise."""

    def __init__(
        self,
        default_max: int,
        tier_limits: Dict[str, int],
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default = SlidingWindowLimiter(default_max, window_seconds, clock)
        self.tiers = {
            tier: SlidingWindowLimiter(limit, window_seconds, clock)
            for tier, limit in tier_limits.items()
        }

    @classmethod
    def from_settings(cls, settings) -> "TieredRateLimiter":
        return cls(
            default_max=settings.RATE_LIMIT_MAX,
            tier_limits=dict(settings.TIER_RATE_LIMITS),
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        )

    def check(self, key: str, tier: Optional[str] = None):
        limiter = self.tiers.get(tier, self.tiers.get("free", self.default)) if tier else self.default
        if not limiter.hit(key):
            if tier:
                raise RateLimitExceededError(f"{tier.capitalize()} tier rate limit exceeded")
            raise RateLimitExceededError("Too many requests, please try again later.")

    def reset(self):
        self.default.reset()
        for limiter in self.tiers.values():
            limiter.reset()
