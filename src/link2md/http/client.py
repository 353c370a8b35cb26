"""Async HTTP client for single-shot page fetches."""

from __future__ import annotations

import logging
from types import TracebackType

import aiohttp

from ..models.config import DEFAULT_USER_AGENT
from .protocols import HttpResponse

logger = logging.getLogger(__name__)

BROWSER_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"


class ContentTooLargeError(ValueError):
    """Response body exceeded the configured size limit."""


class AsyncHttpClient:
    """
    Async HTTP client sending browser-like requests.

    Features:
    - Browser-like default headers so article sites serve the full page
    - One GET per call, no retries
    - Content size limits to prevent memory exhaustion
    - Total timeout per request

    Example:
        async with AsyncHttpClient(default_timeout=15) as client:
            response = await client.get("https://example.com")
            print(response.status_code)
    """

    MAX_CONTENT_SIZE = 10 * 1024 * 1024  # 10 MB

    def __init__(
        self,
        max_content_size: int = MAX_CONTENT_SIZE,
        user_agent: str | None = None,
        accept_language: str = "zh-CN,zh;q=0.9,en;q=0.8",
        proxy: str | None = None,
        default_timeout: float = 15.0,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            max_content_size: Maximum response size in bytes
            user_agent: Custom User-Agent string
            accept_language: Accept-Language header value
            proxy: Proxy URL (http:// or https://)
            default_timeout: Default request timeout in seconds
        """
        self._max_content_size = max_content_size
        self._proxy = proxy
        self._default_timeout = default_timeout
        self._headers = {
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
            "Accept": BROWSER_ACCEPT,
            "Accept-Language": accept_language,
            "Cache-Control": "no-cache",
            "Upgrade-Insecure-Requests": "1",
        }

        self._session: aiohttp.ClientSession | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Default headers sent with every request."""
        return dict(self._headers)

    async def __aenter__(self) -> AsyncHttpClient:
        """Enter async context and create session."""
        connector = aiohttp.TCPConnector(
            limit=100,  # Total connection limit
            limit_per_host=10,  # Per-host connection limit
            ttl_dns_cache=300,  # DNS cache TTL
        )
        self._session = aiohttp.ClientSession(
            connector=connector,
            headers=self._headers,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close session."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def get(
        self,
        url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """
        Perform an HTTP GET request.

        Non-2xx responses are returned, not raised; the caller decides what
        a status means.

        Args:
            url: The URL to fetch
            timeout: Request timeout in seconds (uses default if None)
            headers: Optional additional headers

        Returns:
            HttpResponse with status, content, and headers

        Raises:
            aiohttp.ClientError: On network errors
            asyncio.TimeoutError: When the total timeout elapses
            ContentTooLargeError: On content size exceeded
        """
        if self._session is None:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        timeout_val = timeout or self._default_timeout

        async with self._session.get(
            url,
            timeout=aiohttp.ClientTimeout(total=timeout_val),
            headers=headers,
            proxy=self._proxy,
            allow_redirects=True,
        ) as response:
            # Check Content-Length if available
            content_length = response.headers.get("Content-Length")
            if content_length and content_length.isdigit() and int(content_length) > self._max_content_size:
                raise ContentTooLargeError(f"Content too large: {content_length} bytes")

            # Read content with size limit
            content = b""
            async for chunk in response.content.iter_chunked(8192):
                content += chunk
                if len(content) > self._max_content_size:
                    raise ContentTooLargeError(f"Content size limit exceeded: >{self._max_content_size} bytes")

            logger.debug(f"GET {url} -> {response.status} ({len(content)} bytes)")

            return HttpResponse(
                status_code=response.status,
                content=content,
                content_type=response.headers.get("Content-Type", ""),
                headers=dict(response.headers),
                url=str(response.url),
            )
