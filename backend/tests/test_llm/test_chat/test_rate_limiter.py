"""Tests for the fixed-window rate limiter."""

from constitution_chat.llm.chat import rate_limiter as rate_limiter_module
from constitution_chat.llm.chat.rate_limiter import (
    MAX_REQUESTS_PER_WINDOW,
    RATE_LIMIT_WINDOW_SECONDS,
    RateLimiter,
    get_rate_limiter,
)


class TestRateLimiter:
    """Tests for RateLimiter."""

    def test_fixed_limits(self):
        assert MAX_REQUESTS_PER_WINDOW == 30
        assert RATE_LIMIT_WINDOW_SECONDS == 60.0

    def test_accepts_up_to_ceiling(self, rate_limiter):
        results = [rate_limiter.try_acquire() for _ in range(MAX_REQUESTS_PER_WINDOW)]
        assert all(results)
        assert rate_limiter.request_count == MAX_REQUESTS_PER_WINDOW

    def test_rejects_over_ceiling(self, rate_limiter):
        for _ in range(MAX_REQUESTS_PER_WINDOW):
            rate_limiter.try_acquire()

        assert rate_limiter.try_acquire() is False
        # Rejections are not counted
        assert rate_limiter.request_count == MAX_REQUESTS_PER_WINDOW

    def test_window_not_expired_at_boundary(self, rate_limiter, clock):
        for _ in range(MAX_REQUESTS_PER_WINDOW):
            rate_limiter.try_acquire()

        clock.advance(RATE_LIMIT_WINDOW_SECONDS)
        assert rate_limiter.try_acquire() is False

    def test_resets_after_window(self, rate_limiter, clock):
        for _ in range(MAX_REQUESTS_PER_WINDOW):
            rate_limiter.try_acquire()

        clock.advance(RATE_LIMIT_WINDOW_SECONDS + 1)

        assert rate_limiter.try_acquire() is True
        assert rate_limiter.request_count == 1
        assert rate_limiter.window_start == clock.now

    def test_window_starts_at_construction(self, clock):
        limiter = RateLimiter(clock=clock)
        assert limiter.window_start == clock.now
        assert limiter.request_count == 0


class TestSharedLimiter:
    """Tests for the process-wide limiter."""

    def test_singleton(self, monkeypatch):
        monkeypatch.setattr(rate_limiter_module, "_shared_limiter", None)
        first = get_rate_limiter()
        assert get_rate_limiter() is first


class TestRequestsInWindow:
    """Tests for the expiry-aware count."""

    def test_counts_live_window(self, rate_limiter, clock):
        rate_limiter.try_acquire()
        rate_limiter.try_acquire()
        clock.advance(RATE_LIMIT_WINDOW_SECONDS)

        assert rate_limiter.requests_in_window == 2

    def test_zero_after_idle_window(self, rate_limiter, clock):
        rate_limiter.try_acquire()
        clock.advance(RATE_LIMIT_WINDOW_SECONDS + 1)

        assert rate_limiter.requests_in_window == 0
        # Reading does not restart the window
        assert rate_limiter.request_count == 1
