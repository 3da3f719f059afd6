"""
HTTP client utilities with connection pooling and rate limiting.
"""

import asyncio
import logging
from typing import Dict, Optional
from urllib.parse import urlparse

import httpx
from aiolimiter import AsyncLimiter

from ..config import DEFAULT_API_BASE_URL, get_config

logger = logging.getLogger(__name__)


def make_limiter(rate: float) -> AsyncLimiter:
    """Limiter allowing ``rate`` requests per second, including rates below one."""
    if rate >= 1:
        return AsyncLimiter(rate, 1.0)
    return AsyncLimiter(1, 1.0 / rate)


class RateLimitedHTTPClient:
    """
    HTTP client with rate limiting and connection pooling.

    Features:
    - Connection pooling for efficient resource usage
    - Rate limiting per host to respect API limits
    - Raises for error status codes on every response
    - Configurable timeouts and limits
    """

    def __init__(
        self,
        max_connections: int = 100,
        max_keepalive_connections: int = 20,
        keepalive_expiry: float = 30.0,
        timeout: float = 60.0,
        rate_limits: Optional[Dict[str, float]] = None,
        default_rate_limit: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the rate-limited HTTP client.

        Args:
            max_connections: Maximum number of connections in the pool
            max_keepalive_connections: Maximum number of keep-alive connections
            keepalive_expiry: Time to keep connections alive (seconds)
            timeout: Default timeout for requests (seconds)
            rate_limits: Dict mapping host to requests per second limit
            default_rate_limit: Requests per second for hosts not listed
            transport: Optional httpx transport, e.g. a MockTransport in tests
        """
        self.max_connections = max_connections
        self.max_keepalive_connections = max_keepalive_connections
        self.keepalive_expiry = keepalive_expiry
        self.timeout = timeout
        self.default_rate_limit = default_rate_limit
        self.transport = transport

        default_rate_limits = {
            urlparse(DEFAULT_API_BASE_URL).netloc: 10.0,
        }

        if rate_limits:
            default_rate_limits.update(rate_limits)

        self.rate_limits = default_rate_limits
        self.limiters: Dict[str, AsyncLimiter] = {}
        self._client: Optional[httpx.AsyncClient] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config=None, transport: Optional[httpx.AsyncBaseTransport] = None) -> 'RateLimitedHTTPClient':
        """Build a client from a Config (the global one by default)."""
        config = config or get_config()
        return cls(
            max_connections=config.http.max_connections,
            max_keepalive_connections=config.http.max_keepalive_connections,
            keepalive_expiry=config.http.keepalive_expiry,
            timeout=config.http.timeout,
            rate_limits=config.rate_limits.to_dict(config.api_base_url),
            default_rate_limit=config.rate_limits.default,
            transport=transport,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client with connection pooling."""
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    limits = httpx.Limits(
                        max_connections=self.max_connections,
                        max_keepalive_connections=self.max_keepalive_connections,
                        keepalive_expiry=self.keepalive_expiry
                    )

                    timeout = httpx.Timeout(self.timeout)

                    self._client = httpx.AsyncClient(
                        limits=limits,
                        timeout=timeout,
                        follow_redirects=True,
                        transport=self.transport,
                    )

        return self._client

    def _get_domain(self, url: str) -> str:
        """Extract host from URL for rate limiting."""
        netloc = urlparse(url).netloc.lower()
        return netloc or 'default'

    def _get_limiter(self, domain: str) -> AsyncLimiter:
        """Get or create a limiter for the host."""
        if domain not in self.limiters:
            rate_limit = self.rate_limits.get(domain, self.default_rate_limit)
            self.limiters[domain] = make_limiter(rate_limit)

        return self.limiters[domain]

    async def request(
        self,
        method: str,
        url: str,
        **kwargs
    ) -> httpx.Response:
        """
        Make an HTTP request with rate limiting.

        Args:
            method: HTTP method (GET, POST, DELETE, etc.)
            url: Request URL
            **kwargs: Additional arguments for httpx request

        Returns:
            httpx.Response object

        Raises:
            httpx.HTTPStatusError: For HTTP error status codes
            httpx.TimeoutException: For request timeouts
            httpx.TransportError: For connection errors
        """
        client = await self._get_client()
        limiter = self._get_limiter(self._get_domain(url))

        async with limiter:
            logger.debug(f"{method} {url}")
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
            return response

    async def close(self):
        """Close the HTTP client and clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

        self.limiters.clear()

    async def __aenter__(self) -> 'RateLimitedHTTPClient':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

