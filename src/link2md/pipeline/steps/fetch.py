"""FetchStep - HTTP fetching pipeline step."""

import asyncio
import logging
from typing import Optional

import aiohttp

from ...exceptions import FetchError
from ...http.client import ContentTooLargeError
from ...http.protocols import HttpClient
from ...models.events import Stage
from ..base import ConversionContext, EventEmitter

logger = logging.getLogger(__name__)


class FetchStep:
    """
    Pipeline step that fetches the page with a single GET.

    Populates:
        ctx.html: Raw page content as bytes
        ctx.status_code: HTTP status code
        ctx.content_type: Content-Type header value

    Raises FetchError for:
        - Timeouts
        - Network errors (DNS, connection refused, TLS)
        - Non-2xx origin responses (origin status kept)
        - Content size exceeded

    Example:
        fetch_step = FetchStep(http_client, timeout=15)
        ctx = await fetch_step.execute(ctx)
        html_content = ctx.html
    """

    name = "fetch"
    stage = Stage.FETCHING

    def __init__(self, http_client: HttpClient, timeout: Optional[float] = None) -> None:
        """
        Initialize the fetch step.

        Args:
            http_client: HTTP client implementing HttpClient protocol
            timeout: Request timeout in seconds (client default if None)
        """
        self._client = http_client
        self._timeout = timeout

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        """
        Execute the fetch step.

        Args:
            ctx: Conversion context with the URL to fetch
            emit: Optional callback to emit events

        Returns:
            ConversionContext with html, status_code, content_type populated
        """
        url = ctx.url

        try:
            response = await self._client.get(url, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise FetchError(f"Request timed out: {url}", context={"url": url}) from e
        except ContentTooLargeError as e:
            raise FetchError(str(e), context={"url": url}) from e
        except aiohttp.ClientError as e:
            raise FetchError(str(e) or f"Request failed: {type(e).__name__}", context={"url": url}) from e

        ctx.status_code = response.status_code
        ctx.content_type = response.content_type

        if not response.ok:
            raise FetchError(
                f"Request failed with status code {response.status_code}",
                origin_status=response.status_code,
                context={"url": url},
            )

        ctx.html = response.content
        logger.debug(f"Fetched {url}: {len(response.content)} bytes")
        return ctx
