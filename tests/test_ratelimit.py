# ===============================================
# tests/test_ratelimit.py
# Sliding-window limiter with a controllable clock.
# ===============================================

import pytest

from fortec_gateway.errors import RateLimitExceededError
from fortec_gateway.ratelimit import SlidingWindowLimiter, TieredRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_rejects_after_max_within_window():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(max_requests=3, window_seconds=60, clock=clock)

    assert [limiter.hit("k") for _ in range(4)] == [True, True, True, False]
    assert limiter.remaining("k") == 0


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(max_requests=2, window_seconds=60, clock=clock)
    limiter.hit("k")
    clock.now += 30
    limiter.hit("k")
    assert limiter.hit("k") is False

    clock.now += 31
    assert limiter.hit("k") is True
    assert limiter.hit("k") is False


def test_keys_are_independent():
    limiter = SlidingWindowLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    assert limiter.hit("a")
    assert limiter.hit("b")
    assert not limiter.hit("a")


def test_tiered_limits():
    limiter = TieredRateLimiter(default_max=1, tier_limits={"free": 2, "premium": 3}, window_seconds=60, clock=FakeClock())

    limiter.check("1.2.3.4")
    with pytest.raises(RateLimitExceededError, match="Too many requests"):
        limiter.check("1.2.3.4")

    for _ in range(3):
        limiter.check("FORTEC_PREMIUM_x", "premium")
    with pytest.raises(RateLimitExceededError, match="Premium tier rate limit exceeded"):
        limiter.check("FORTEC_PREMIUM_x", "premium")


def test_unknown_tier_uses_free_limits():
    limiter = TieredRateLimiter(default_max=10, tier_limits={"free": 1}, window_seconds=60, clock=FakeClock())
    limiter.check("key-aaaaaaaa", "mystery")
    with pytest.raises(RateLimitExceededError):
        limiter.check("key-aaaaaaaa", "mystery")


def test_reset_clears_history():
    limiter = TieredRateLimiter(default_max=1, tier_limits={}, window_seconds=60, clock=FakeClock())
    limiter.check("k")
    limiter.reset()
    limiter.check("k")


def test_idle_keys_are_forgotten():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(max_requests=5, window_seconds=60, clock=clock)
    for i in range(1000):
        limiter.hit(f"client-{i}")
    assert len(limiter._hits) == 1000

    clock.now += 61
    assert limiter.hit("client-0") is True

    assert list(limiter._hits) == ["client-0"]


def test_active_keys_survive_sweep():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(max_requests=2, window_seconds=60, clock=clock)
    limiter.hit("idle")
    clock.now += 50
    limiter.hit("busy")
    limiter.hit("busy")
    clock.now += 20

    assert limiter.hit("other") is True
    assert "idle" not in limiter._hits
    assert limiter.hit("busy") is False
