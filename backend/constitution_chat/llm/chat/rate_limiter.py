"""Fixed-window request limiter for outbound generation calls."""

import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

RATE_LIMIT_WINDOW_SECONDS = 60.0
MAX_REQUESTS_PER_WINDOW = 30

# Shared limiter instance (lazy initialization)
_shared_limiter: "RateLimiter | None" = None


class RateLimiter:
    """Counts requests inside a fixed 60 second window.

    The window restarts on the first check made after it has expired, so an
    idle limiter always accepts the next request.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """Initialize the limiter.

        Args:
            clock: Returns the current time in seconds. Injected by tests.
        """
        self._clock = clock
        self._request_count = 0
        self._window_start = clock()

    @property
    def request_count(self) -> int:
        """Requests accepted since the window last restarted."""
        return self._request_count

    @property
    def window_start(self) -> float:
        """Clock reading at which the current window began."""
        return self._window_start

    @property
    def requests_in_window(self) -> int:
        """Requests counted against the window in effect right now.

        Unlike request_count this reads 0 once the window has expired, even
        if no request has restarted it yet.
        """
        if self._clock() - self._window_start > RATE_LIMIT_WINDOW_SECONDS:
            return 0
        return self._request_count

    def try_acquire(self) -> bool:
        """Record a request if the window has room for it.

        Returns:
            True if the request was counted, False if the ceiling is reached.
        """
        now = self._clock()

        if now - self._window_start > RATE_LIMIT_WINDOW_SECONDS:
            self._request_count = 0
            self._window_start = now

        if self._request_count >= MAX_REQUESTS_PER_WINDOW:
            return False

        self._request_count += 1
        return True


def get_rate_limiter() -> RateLimiter:
    """Get or create the process-wide limiter shared by default sessions."""
    global _shared_limiter
    if _shared_limiter is None:
        _shared_limiter = RateLimiter()
    return _shared_limiter
