"""Tests for the fixed-window limiter."""

from zabaan.core.rate_limit import FixedWindowLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_limit_then_blocks():
    clock = FakeClock()
    limiter = FixedWindowLimiter(clock)
    assert [limiter.check("ip", 3, 60)[0] for _ in range(4)] == [True, True, True, False]


def test_retry_after_counts_down():
    clock = FakeClock()
    limiter = FixedWindowLimiter(clock)
    limiter.check("ip", 1, 60)
    clock.now += 45
    allowed, retry_after = limiter.check("ip", 1, 60)
    assert not allowed
    assert retry_after == 15


def test_window_resets():
    clock = FakeClock()
    limiter = FixedWindowLimiter(clock)
    limiter.check("ip", 1, 60)
    clock.now += 60
    assert limiter.check("ip", 1, 60)[0]


def test_keys_are_independent():
    limiter = FixedWindowLimiter(FakeClock())
    limiter.check("a", 1, 60)
    assert limiter.check("b", 1, 60)[0]
    assert not limiter.check("a", 1, 60)[0]
