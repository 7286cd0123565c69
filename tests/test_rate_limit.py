from paperpilot.api.rate_limit import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_limit_applies_per_window():
    clock = FakeClock()
    limiter = RateLimiter(limit=3, window=60, clock=clock)

    assert [limiter.hit("10.0.0.1") for _ in range(4)] == [True, True, True, False]
    clock.now = 1059.5
    assert limiter.hit("10.0.0.1") is False
    clock.now = 1060.0
    assert limiter.hit("10.0.0.1") is True


def test_clients_are_counted_separately():
    limiter = RateLimiter(limit=1, window=60, clock=FakeClock())
    assert limiter.hit("a") is True
    assert limiter.hit("b") is True
    assert limiter.hit("a") is False


def test_expired_windows_are_swept():
    clock = FakeClock()
    limiter = RateLimiter(limit=1, window=10, clock=clock)
    limiter.SWEEP_AT = 3
    limiter.hit("a")
    limiter.hit("b")
    clock.now += 11
    limiter.hit("c")
    limiter.hit("d")
    assert set(limiter._windows) == {"c", "d"}
