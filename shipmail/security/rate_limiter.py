"""
Sliding-window rate limiter for inference calls.

Admission is bounded two ways: at most max_requests inside any window,
and at least min_interval between consecutive admissions. The limiter is
shared by every pipeline invocation in the process, so all state lives
behind one lock.
"""

import asyncio
import logging
import threading
import time
from collections import deque
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Optional

from shipmail.exceptions import RateLimitExceeded
from shipmail.models.security import RateLimiterStats

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 60
DEFAULT_WINDOW = 60.0
DEFAULT_MIN_INTERVAL = 1.0


class RateLimiter:
    """
    Time-windowed admission control.

    Args:
        max_requests: Admissions allowed inside one window
        window: Window length in seconds
        min_interval: Minimum spacing between admissions in seconds
        clock: Monotonic clock returning seconds
    """

    def __init__(
        self,
        max_requests: int,
        window: float,
        min_interval: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")

        self.max_requests = max_requests
        self.window = window
        self.min_interval = min_interval
        self._clock = clock
        self._lock = threading.Lock()
        self._requests: deque[float] = deque(maxlen=max_requests)
        self._last_request: Optional[float] = None
        self._last_request_at: Optional[datetime] = None

    def allow(self) -> tuple[bool, float]:
        """
        Try to admit one request.

        Returns:
            (True, 0.0) when admitted, else (False, seconds to wait)
        """
        with self._lock:
            now = self._clock()
            self._prune(now)

            if self._last_request is not None:
                since_last = now - self._last_request
                if since_last < self.min_interval:
                    return False, self.min_interval - since_last

            if len(self._requests) >= self.max_requests:
                oldest = self._requests[0]
                return False, max(oldest + self.window - now, 0.0)

            self._requests.append(now)
            self._last_request = now
            self._last_request_at = datetime.now(timezone.utc)
            return True, 0.0

    def wait(
        self,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Block until admitted.

        Raises:
            RateLimitExceeded: If cancel_event is set or timeout elapses first
        """
        deadline = self._clock() + timeout if timeout is not None else None

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise RateLimitExceeded("rate limiter wait cancelled")

            allowed, wait_time = self.allow()
            if allowed:
                return

            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0 or wait_time > remaining:
                    raise RateLimitExceeded(
                        f"rate limit wait of {wait_time:.2f}s exceeds deadline"
                    )

            logger.debug("Rate limited, waiting %.2fs", wait_time)
            if cancel_event is not None:
                if cancel_event.wait(wait_time):
                    raise RateLimitExceeded("rate limiter wait cancelled")
            else:
                time.sleep(wait_time)

    async def wait_async(self) -> None:
        """Await admission. Task cancellation propagates as CancelledError."""
        while True:
            allowed, wait_time = self.allow()
            if allowed:
                return
            logger.debug("Rate limited, waiting %.2fs", wait_time)
            await asyncio.sleep(wait_time)

    def get_stats(self) -> RateLimiterStats:
        with self._lock:
            self._prune(self._clock())
            return RateLimiterStats(
                current_requests=len(self._requests),
                max_requests=self.max_requests,
                window=self.window,
                min_interval=self.min_interval,
                last_request=self._last_request_at,
            )

    def _prune(self, now: float) -> None:
        while self._requests and now - self._requests[0] >= self.window:
            self._requests.popleft()


@lru_cache(maxsize=1)
def default_llm_rate_limiter() -> RateLimiter:
    """Process-wide limiter for inference calls (60 per minute, 1s spacing)."""
    return RateLimiter(
        max_requests=DEFAULT_MAX_REQUESTS,
        window=DEFAULT_WINDOW,
        min_interval=DEFAULT_MIN_INTERVAL,
    )
