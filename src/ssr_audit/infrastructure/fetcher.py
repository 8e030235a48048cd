"""
Rate-limited HTTP fetcher.

Every request waits a random jitter, then draws from the shared rate limiter.
Timeouts, connection failures and 5xx/429 responses are retried with
exponential backoff; once retries are exhausted a NetworkError is raised.
Other request failures (redirect loops, undecodable bodies, invalid URLs)
raise NetworkError after the first attempt.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol

import httpx

from ssr_audit.exceptions import NetworkError

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = 429


def is_retryable_status(status_code: int) -> bool:
    """Any 5xx, or 429."""
    return status_code >= 500 or status_code == TOO_MANY_REQUESTS


class RateLimiter(Protocol):
    async def acquire(self) -> float: ...


@dataclass
class FetchConfig:
    """Configuration for the fetcher."""
    # Upper bound of the random pre-request pause (seconds)
    max_jitter: float = 1.0

    # Retries after the first attempt
    max_retries: int = 3

    # Delay before retry n is backoff_base * 2 ** n (seconds)
    backoff_base: float = 1.0

    timeout: float = 30.0
    user_agent: str = "SSR-Audit-Bot/1.0"


class RateLimitedFetcher:
    """
    HTTP client wrapper sharing one request budget across a batch.

    Use as an async context manager:

        async with RateLimitedFetcher(limiter) as fetcher:
            response = await fetcher.fetch("https://example.com/sitemap.xml")
    """

    def __init__(
        self,
        limiter: RateLimiter,
        config: Optional[FetchConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the fetcher.

        Args:
            limiter: Shared rate limiter
            config: Fetch configuration
            client: Pre-built httpx client (the fetcher then does not own it)
            sleep: Coroutine used for jitter and backoff waits
        """
        self.limiter = limiter
        self.config = config or FetchConfig()
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep

    async def __aenter__(self) -> "RateLimitedFetcher":
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                follow_redirects=True,
                headers={
                    "User-Agent": self.config.user_agent,
                    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                    "Accept-Language": "en-US,en;q=0.9",
                },
            )
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> httpx.Response:
        """
        GET a URL under the rate limit, retrying transient failures.

        Args:
            url: URL to fetch

        Returns:
            Successful httpx.Response

        Raises:
            NetworkError: If the request still fails after all retries, or fails
                in a way retrying cannot fix
        """
        if self._client is None:
            raise RuntimeError(
                "Fetcher is not open. Use RateLimitedFetcher as an async context manager."
            )

        attempts = self.config.max_retries + 1
        last_error: Optional[BaseException] = None

        for attempt in range(attempts):
            if attempt > 0:
                delay = self.config.backoff_base * (2 ** attempt)
                logger.debug(f"Retrying {url} in {delay:.1f}s (attempt {attempt + 1}/{attempts})")
                await self._sleep(delay)

            await self._sleep(random.uniform(0, self.config.max_jitter))
            await self.limiter.acquire()

            try:
                response = await self._client.get(url)
                response.raise_for_status()
                return response

            except httpx.HTTPStatusError as e:
                last_error = e
                if not is_retryable_status(e.response.status_code):
                    logger.debug(f"Not retrying {url}: HTTP {e.response.status_code}")
                    raise NetworkError(url, attempt + 1, e) from e

            except (httpx.TimeoutException, httpx.TransportError) as e:
                last_error = e

            except (httpx.RequestError, httpx.InvalidURL) as e:
                logger.debug(f"Not retrying {url}: {type(e).__name__}")
                raise NetworkError(url, attempt + 1, e) from e

            logger.warning(f"Request to {url} failed (attempt {attempt + 1}/{attempts}): {last_error}")

        raise NetworkError(url, attempts, last_error)
