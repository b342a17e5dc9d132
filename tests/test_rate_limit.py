from guruji.core.rate_limit import FixedWindowRateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestFixedWindowRateLimiter:
    def test_allows_up_to_max(self):
        limiter = FixedWindowRateLimiter(max_requests=3, window_seconds=60, clock=FakeClock())

        results = [limiter.hit("1.2.3.4")[0] for _ in range(4)]

        assert results == [True, True, True, False]

    def test_remaining_and_reset(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=60, clock=clock)

        assert limiter.hit("a") == (True, 1, 60)
        clock.now += 15
        assert limiter.hit("a") == (True, 0, 45)

    def test_window_resets(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=clock)

        assert limiter.hit("a")[0] is True
        assert limiter.hit("a")[0] is False
        clock.now += 60
        assert limiter.hit("a")[0] is True

    def test_clients_counted_separately(self):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())

        assert limiter.hit("a")[0] is True
        assert limiter.hit("b")[0] is True
        assert limiter.hit("a")[0] is False
