"""ExtractStep - profile match, extraction and fallback check."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional
from urllib.parse import urlparse

from ...conversion.extractor import ContentExtractor
from ...conversion.fallback import FallbackExtractor
from ...conversion.protocols import ArticleExtractor, FallbackStrategy
from ...document import has_visible_content
from ...exceptions import ConversionError, ExtractionError
from ...models.events import EventType, Stage, StageEvent
from ...models.profiles import PROFILES, SiteProfile, resolve
from ...models.results import ExtractionResult
from ..base import ConversionContext, EventEmitter, emit_stage

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_THRESHOLD = 100


class ExtractStep:
    """
    Pipeline step that selects the article from the parsed page.

    Runs three stages in order:
    1. Profile match: first registered profile whose host the URL contains
    2. Extracting: the profile's selectors and repairs
    3. Fallback check: the generic extractor replaces a missing profile or a
       profile result shorter than the threshold

    A result with no text and no image after the fallback check raises
    ExtractionError.

    Example:
        step = ExtractStep(fallback_threshold=200)
        ctx = await step.execute(ctx, emit=callback)
        print(ctx.extraction.title, ctx.extraction.used_fallback)
    """

    name = "extract"
    stage = Stage.PROFILE_MATCH

    def __init__(
        self,
        extractor: Optional[ArticleExtractor] = None,
        fallback: Optional[FallbackStrategy] = None,
        profiles: tuple[SiteProfile, ...] = PROFILES,
        fallback_threshold: int = DEFAULT_FALLBACK_THRESHOLD,
    ):
        """
        Initialize the extract step.

        Args:
            extractor: Profile-driven extractor (uses default if None)
            fallback: Generic extractor (uses default if None)
            profiles: Ordered profile registry
            fallback_threshold: Minimum trimmed content length a profile
                result needs to be kept
        """
        self._extractor = extractor or ContentExtractor()
        self._fallback = fallback or FallbackExtractor()
        self._profiles = profiles
        self._threshold = fallback_threshold

    def _enter(self, ctx: ConversionContext, stage: Stage, emit: Optional[EventEmitter]) -> None:
        ctx.stage = stage
        emit_stage(emit, EventType.STAGE_STARTED, ctx)

    def _fallback_reason(self, extraction: Optional[ExtractionResult]) -> Optional[str]:
        if extraction is None:
            return "no profile matched"
        if extraction.content_length < self._threshold:
            return (
                f"profile {extraction.profile} yielded {extraction.content_length} "
                f"characters (threshold {self._threshold})"
            )
        return None

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        """
        Extract the article.

        Reads ctx.document, writes ctx.profile and ctx.extraction.

        Args:
            ctx: Conversion context with the parsed page
            emit: Optional event emitter

        Returns:
            Updated context with the extraction result

        Raises:
            ExtractionError: If no strategy found any content
        """
        if ctx.document is None:
            raise ConversionError(f"No parsed page to extract from for {ctx.url}")

        hostname = urlparse(ctx.url).hostname or ""
        ctx.profile = resolve(hostname, ctx.url, self._profiles)
        logger.debug(f"Profile for {ctx.url}: {ctx.profile.name if ctx.profile else 'none'}")

        extraction: Optional[ExtractionResult] = None
        if ctx.profile is not None:
            self._enter(ctx, Stage.EXTRACTING, emit)
            extraction = self._extractor.extract(ctx.document, ctx.profile, ctx.url)

        self._enter(ctx, Stage.FALLBACK_CHECK, emit)
        reason = self._fallback_reason(extraction)
        if reason is not None:
            logger.warning(f"Using generic fallback for {ctx.url}: {reason}")
            fallback = self._fallback.extract(ctx.document)
            # A profile title stays authoritative even when its content did not
            if extraction is not None and extraction.title:
                fallback = replace(fallback, title=extraction.title)
            extraction = fallback
            ctx.fallback_reason = reason

            if emit:
                emit(
                    StageEvent(
                        type=EventType.FALLBACK_USED,
                        url=ctx.url,
                        stage=Stage.FALLBACK_CHECK,
                        message=reason,
                    )
                )

        if extraction is None or not has_visible_content(extraction.content_html):
            raise ExtractionError(context={"url": ctx.url})

        ctx.extraction = extraction
        return ctx
