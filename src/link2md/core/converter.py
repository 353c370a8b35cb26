"""Main ArticleConverter class."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Callable, Optional, Union

from ..conversion.markdown import MarkdownRenderer
from ..http import AsyncHttpClient, HttpClient
from ..models.config import Link2mdConfig
from ..models.events import StageEvent
from ..models.profiles import PROFILES, SiteProfile
from ..models.results import ConversionResult
from ..pipeline.base import ConversionContext, ConversionPipeline, ConversionStep
from ..pipeline.steps import ExtractStep, FetchStep, ParseStep, RenderStep, SanitizeStep, ValidateStep
from ..security.url_validator import UrlValidator

logger = logging.getLogger(__name__)


class ArticleConverter:
    """
    Converts article URLs into Markdown documents.

    One instance shares a single HTTP session across requests; each request
    otherwise gets its own context and page tree.

    Example:
        async with ArticleConverter(Link2mdConfig()) as converter:
            result = await converter.convert("https://mp.weixin.qq.com/s/abc")
            print(result.title)
            print(result.markdown)
    """

    def __init__(
        self,
        config: Optional[Link2mdConfig] = None,
        profiles: tuple[SiteProfile, ...] = PROFILES,
        http_client: Optional[HttpClient] = None,
    ):
        """
        Initialize the converter.

        Args:
            config: Configuration (defaults to Link2mdConfig())
            profiles: Ordered profile registry
            http_client: HTTP client to use instead of an owned aiohttp
                client (the caller manages its lifecycle)
        """
        self.config = config or Link2mdConfig()
        self.profiles = profiles
        self._http_client: Optional[HttpClient] = http_client
        self._owns_client = http_client is None
        self._renderer = MarkdownRenderer(self.config.render)
        self._url_validator = UrlValidator(block_private_ips=self.config.network.block_private_ips)

    async def __aenter__(self) -> ArticleConverter:
        """Enter async context and open the HTTP session."""
        if self._http_client is None:
            network = self.config.network
            client = AsyncHttpClient(
                max_content_size=network.max_content_size,
                user_agent=network.user_agent,
                accept_language=network.accept_language,
                proxy=network.proxy,
                default_timeout=network.timeout,
            )
            await client.__aenter__()
            self._http_client = client
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context and close the HTTP session if owned."""
        if self._owns_client and isinstance(self._http_client, AsyncHttpClient):
            await self._http_client.__aexit__(exc_type, exc_val, exc_tb)
            self._http_client = None

    def _processing_steps(self) -> list[ConversionStep]:
        return [
            ParseStep(),
            ExtractStep(
                profiles=self.profiles,
                fallback_threshold=self.config.extraction.fallback_threshold,
            ),
            SanitizeStep(),
            RenderStep(self._renderer),
        ]

    async def _run(
        self,
        pipeline: ConversionPipeline,
        ctx: ConversionContext,
        emit: Optional[Callable[[StageEvent], None]],
    ) -> ConversionResult:
        ctx = await pipeline.execute(ctx, emit)
        if ctx.error is not None:
            raise ctx.error
        result = ctx.to_result()
        logger.info(
            f"Converted {result.url} ({result.profile or 'no profile'}"
            f"{', fallback' if result.used_fallback else ''}): {len(result.markdown)} characters"
        )
        return result

    async def convert(
        self,
        url: str,
        emit: Optional[Callable[[StageEvent], None]] = None,
    ) -> ConversionResult:
        """
        Fetch a page and convert it to Markdown.

        Args:
            url: Article URL
            emit: Optional callback receiving stage events

        Returns:
            ConversionResult with the title and Markdown

        Raises:
            InputError: Missing or malformed URL
            FetchError: Timeout, network error or non-2xx origin response
            ExtractionError: No strategy found any content
            ConversionError: Any other failure
        """
        if self._http_client is None:
            raise RuntimeError("Converter not initialized. Use 'async with' context manager.")

        pipeline = ConversionPipeline(
            steps=[
                ValidateStep(self._url_validator),
                FetchStep(self._http_client, timeout=self.config.network.timeout),
                *self._processing_steps(),
            ]
        )
        return await self._run(pipeline, ConversionContext(url=url or ""), emit)

    async def convert_html(
        self,
        html: Union[str, bytes],
        url: str,
        content_type: str = "",
        emit: Optional[Callable[[StageEvent], None]] = None,
    ) -> ConversionResult:
        """
        Convert markup the caller already holds.

        Runs the pipeline from parsing onward; ``url`` only drives profile
        matching. No network access happens, so the converter does not need
        to be entered.

        Args:
            html: Page markup
            url: URL the page was served from
            content_type: Content-Type of the markup, for charset detection
            emit: Optional callback receiving stage events

        Returns:
            ConversionResult with the title and Markdown
        """
        pipeline = ConversionPipeline(steps=self._processing_steps())
        ctx = ConversionContext(url=url, html=html, content_type=content_type)
        return await self._run(pipeline, ctx, emit)


def convert_blocking(
    url: str,
    on_event: Callable[[StageEvent], None] | None = None,
    config: Link2mdConfig | None = None,
    **kwargs: object,
) -> ConversionResult:
    """
    Blocking conversion with optional event callback.

    This is a convenience wrapper for sync code that can't use async/await.
    For async code, use the ArticleConverter class directly.

    WARNING: Do not call from within an existing event loop (e.g., Jupyter,
    asyncio-based frameworks). Use the async ArticleConverter API instead.

    Args:
        url: The article URL
        on_event: Optional callback for stage events
        config: Complete configuration (kwargs are ignored when given)
        **kwargs: Config options passed to Link2mdConfig

    Returns:
        ConversionResult with the title and Markdown

    Example:
        result = convert_blocking(
            "https://juejin.cn/post/123",
            render={"gfm": False},
        )
        print(result.markdown)
    """
    # Detect if we're already in an async context
    try:
        asyncio.get_running_loop()
        raise RuntimeError(
            "convert_blocking() called from async context. Use 'async with ArticleConverter()' instead."
        )
    except RuntimeError as e:
        if "no running event loop" not in str(e).lower():
            raise

    if config is None:
        config = Link2mdConfig(**kwargs)  # type: ignore[arg-type]

    async def _run() -> ConversionResult:
        async with ArticleConverter(config) as converter:
            return await converter.convert(url, emit=on_event)

    return asyncio.run(_run())
