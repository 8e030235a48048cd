"""
Infrastructure Package.

Provides the shared rate limiter and the rate-limited HTTP fetcher.
"""

from .rate_limiter import (
    SlidingWindowRateLimiter,
    NoopRateLimiter,
    RateLimitConfig,
    RateLimiterMetrics,
)
from .fetcher import (
    RateLimitedFetcher,
    FetchConfig,
    is_retryable_status,
)

__all__ = [
    # Rate Limiter
    "SlidingWindowRateLimiter",
    "NoopRateLimiter",
    "RateLimitConfig",
    "RateLimiterMetrics",
    # Fetcher
    "RateLimitedFetcher",
    "FetchConfig",
    "is_retryable_status",
]
