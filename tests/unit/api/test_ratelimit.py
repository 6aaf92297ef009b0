"""Tests for the fixed-window rate limiter."""


class FakeMonotonic:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestFixedWindowRateLimiter:
    """Test window accounting per key."""

    def test_allows_up_to_the_limit(self):
        from applytrack.api.ratelimit import FixedWindowRateLimiter

        limiter = FixedWindowRateLimiter(3, 60, clock=FakeMonotonic())

        assert [limiter.hit("1.2.3.4") for _ in range(4)] == [True, True, True, False]

    def test_keys_are_independent(self):
        from applytrack.api.ratelimit import FixedWindowRateLimiter

        limiter = FixedWindowRateLimiter(1, 60, clock=FakeMonotonic())

        assert limiter.hit("a")
        assert limiter.hit("b")
        assert not limiter.hit("a")

    def test_window_resets_after_it_elapses(self):
        from applytrack.api.ratelimit import FixedWindowRateLimiter

        clock = FakeMonotonic()
        limiter = FixedWindowRateLimiter(1, 60, clock=clock)
        assert limiter.hit("a")
        assert not limiter.hit("a")

        clock.now = 60.0

        assert limiter.hit("a")
