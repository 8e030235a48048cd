"""
Sliding-window rate limiter.

A single limiter instance is shared by every fetch in a batch, so all sites
draw from one request budget.
"""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Deque

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiter."""
    # Maximum requests allowed in any rolling window
    max_requests: int = 20

    # Length of the rolling window (seconds)
    window_seconds: float = 60.0

    # Minimum spacing between two consecutive requests (seconds)
    min_interval: float = 1.0


@dataclass
class RateLimiterMetrics:
    """Snapshot of limiter usage."""
    requests_in_window: int
    last_request_time: datetime | None
    total_requests: int
    total_wait_time: float


class SlidingWindowRateLimiter:
    """
    Caps requests to max_requests per rolling window.

    Features:
    - Rolling window of request timestamps
    - Minimum spacing between consecutive requests
    - Usage metrics
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize rate limiter.

        Args:
            config: Rate limit configuration
            clock: Monotonic time source (seconds)
            sleep: Coroutine used to wait
        """
        self.config = config or RateLimitConfig()
        if self.config.max_requests < 1:
            raise ValueError("max_requests must be at least 1")

        self._clock = clock
        self._sleep = sleep
        self._timestamps: Deque[float] = deque()
        self._lock = asyncio.Lock()

        # Statistics
        self._last_request_wall: float | None = None
        self._total_requests = 0
        self._total_wait_time = 0.0

    async def acquire(self) -> float:
        """
        Wait until a request may be sent, then record it.

        Returns:
            Actual time waited (seconds)
        """
        async with self._lock:
            waited = 0.0

            while True:
                now = self._clock()
                self._evict(now)
                wait_time = self._required_wait(now)
                if wait_time <= 0:
                    break

                logger.debug(f"Rate limiter: waiting {wait_time:.2f}s")
                await self._sleep(wait_time)
                waited += wait_time

            self._timestamps.append(self._clock())
            self._last_request_wall = time.time()
            self._total_requests += 1
            self._total_wait_time += waited
            return waited

    def _evict(self, now: float) -> None:
        """Drop timestamps that have left the window."""
        window_start = now - self.config.window_seconds
        while self._timestamps and self._timestamps[0] <= window_start:
            self._timestamps.popleft()

    def _required_wait(self, now: float) -> float:
        wait = 0.0

        if self._timestamps:
            since_last = now - self._timestamps[-1]
            wait = max(wait, self.config.min_interval - since_last)

        if len(self._timestamps) >= self.config.max_requests:
            # Oldest entry must leave the window first
            wait = max(wait, self._timestamps[0] + self.config.window_seconds - now)

        return wait

    def get_metrics(self) -> RateLimiterMetrics:
        """
        Get current usage metrics.

        Returns:
            RateLimiterMetrics snapshot
        """
        self._evict(self._clock())
        return RateLimiterMetrics(
            requests_in_window=len(self._timestamps),
            last_request_time=datetime.fromtimestamp(self._last_request_wall)
                if self._last_request_wall else None,
            total_requests=self._total_requests,
            total_wait_time=self._total_wait_time,
        )

    def reset(self) -> None:
        """Reset rate limiter to initial state."""
        self._timestamps.clear()
        self._last_request_wall = None
        self._total_requests = 0
        self._total_wait_time = 0.0

    @property
    def requests_in_window(self) -> int:
        """Requests counted in the current window."""
        self._evict(self._clock())
        return len(self._timestamps)


class NoopRateLimiter:
    """Limiter that never waits. Used where no budget applies, e.g. tests."""

    def __init__(self):
        self.acquired = 0

    async def acquire(self) -> float:
        self.acquired += 1
        return 0.0

    def reset(self) -> None:
        self.acquired = 0
