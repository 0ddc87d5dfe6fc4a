import pytest

from app.services.rate_limiter import SlidingWindowRateLimiter


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_blocks_after_max_requests_in_window():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=3, window_seconds=60, clock=clock)

    assert [limiter.is_allowed("a") for _ in range(4)] == [True, True, True, False]
    assert limiter.remaining("a") == 0
    # Other clients have their own window
    assert limiter.is_allowed("b")


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)
    limiter.is_allowed("a")
    clock.now += 30
    limiter.is_allowed("a")
    assert not limiter.is_allowed("a")

    clock.now += 31
    assert limiter.remaining("a") == 1
    assert limiter.is_allowed("a")
    assert not limiter.is_allowed("a")


def test_rejected_requests_are_not_counted():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=10, clock=clock)
    assert limiter.is_allowed("a")
    clock.now += 5
    assert not limiter.is_allowed("a")
    clock.now += 6
    assert limiter.is_allowed("a")


def test_reset():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    limiter.is_allowed("a")
    limiter.is_allowed("b")
    limiter.reset("a")
    assert limiter.is_allowed("a")
    assert not limiter.is_allowed("b")
    limiter.reset()
    assert limiter.is_allowed("b")


@pytest.mark.parametrize("kwargs", [{"max_requests": 0}, {"window_seconds": 0}])
def test_rejects_bad_configuration(kwargs):
    with pytest.raises(ValueError):
        SlidingWindowRateLimiter(**kwargs)


def test_idle_clients_are_forgotten():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)
    for i in range(100):
        limiter.is_allowed(f"client-{i}")
    assert len(limiter) == 100

    clock.now += 61
    limiter.is_allowed("late")
    assert len(limiter) == 1


def test_reset_after_counts_down_from_oldest_request():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)
    assert limiter.reset_after("a") == 0.0

    limiter.is_allowed("a")
    clock.now += 20
    limiter.is_allowed("a")
    assert limiter.reset_after("a") == 40.0

    clock.now += 40
    assert limiter.reset_after("a") == 0.0
