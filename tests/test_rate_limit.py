import pytest

from hrms.core.exceptions import RateLimitExceededError
from hrms.core.rate_limit import RateLimiter, RateLimitRule


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_limit_is_enforced_per_window():
    clock = FakeClock()
    limiter = RateLimiter(clock=clock)
    rule = RateLimitRule(limit=2, window_seconds=60)

    assert limiter.hit("write:/leave", "10.0.0.1", rule) == 1
    assert limiter.hit("write:/leave", "10.0.0.1", rule) == 0
    clock.now += 15
    with pytest.raises(RateLimitExceededError) as exc_info:
        limiter.hit("write:/leave", "10.0.0.1", rule)
    assert exc_info.value.retry_after == 45

    # other clients and buckets are counted separately
    assert limiter.hit("write:/leave", "10.0.0.2", rule) == 1
    assert limiter.hit("write:/roles", "10.0.0.1", rule) == 1


def test_window_expires():
    clock = FakeClock()
    limiter = RateLimiter(clock=clock)
    rule = RateLimitRule(limit=1, window_seconds=10)

    limiter.hit("b", "c", rule)
    clock.now += 10
    assert limiter.hit("b", "c", rule) == 0


def test_oldest_windows_evicted_when_full():
    clock = FakeClock()
    limiter = RateLimiter(clock=clock, max_keys=2)
    rule = RateLimitRule(limit=1, window_seconds=60)

    limiter.hit("b", "first", rule)
    clock.now += 1
    limiter.hit("b", "second", rule)
    clock.now += 1
    limiter.hit("b", "third", rule)

    # "first" was dropped, so it starts a fresh window
    assert limiter.hit("b", "first", rule) == 0
