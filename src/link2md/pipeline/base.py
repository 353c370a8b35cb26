"""Base classes for the conversion pipeline."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Protocol, Union, runtime_checkable

from bs4 import BeautifulSoup

from ..exceptions import ConversionError, Link2mdError
from ..models.events import EventType, Stage, StageEvent
from ..models.results import ConversionResult, ExtractionResult

if TYPE_CHECKING:
    from ..models.profiles import SiteProfile

logger = logging.getLogger(__name__)

# Type alias for event emitter function
EventEmitter = Callable[[StageEvent], None]


@dataclass
class ConversionContext:
    """
    Context object passed through pipeline steps.

    Holds all state for converting a single page, accumulated as it moves
    through the pipeline.

    Attributes:
        url: The page URL
        html: Page markup (bytes until decoded by the parse step)
        content_type: Content-Type header of the fetched page
        status_code: Origin response status
        document: Parsed page tree
        profile: Profile matched for the page
        extraction: Extraction result after the fallback check
        sanitized_html: Content fragment with non-content nodes removed
        markdown: Rendered Markdown
        stage: Stage currently running (or the terminal stage)
        error: Structured error if the conversion failed
        fallback_reason: Why the generic fallback replaced the profile result
    """

    url: str

    # Content (accumulated through pipeline)
    html: Optional[Union[bytes, str]] = None
    content_type: str = ""
    status_code: Optional[int] = None
    document: Optional[BeautifulSoup] = None
    profile: Optional["SiteProfile"] = None
    extraction: Optional[ExtractionResult] = None
    sanitized_html: Optional[str] = None
    markdown: Optional[str] = None

    # Status
    stage: Stage = Stage.VALIDATING
    error: Optional[Link2mdError] = None
    fallback_reason: Optional[str] = None

    @property
    def title(self) -> str:
        """Title of the extracted article, or an empty string."""
        return self.extraction.title if self.extraction else ""

    def to_result(self) -> ConversionResult:
        """Build the final result of a completed conversion."""
        if self.markdown is None or self.extraction is None:
            raise ConversionError(f"Conversion of {self.url} did not complete")
        return ConversionResult(
            url=self.url,
            title=self.extraction.title,
            markdown=self.markdown,
            used_fallback=self.extraction.used_fallback,
            profile=self.extraction.profile,
        )


def emit_stage(
    emit: Optional[EventEmitter],
    event_type: EventType,
    ctx: ConversionContext,
    message: Optional[str] = None,
) -> None:
    """Send a stage event for the context's current stage, if anyone listens."""
    if emit:
        emit(StageEvent(type=event_type, url=ctx.url, stage=ctx.stage, message=message))


@runtime_checkable
class ConversionStep(Protocol):
    """
    Protocol for pipeline steps.

    Each step receives a ConversionContext, processes it, and returns the
    (possibly modified) context.

    Error Handling Contract:
    - Expected failures raise a Link2mdError subclass (InputError,
      FetchError, ExtractionError)
    - Anything else that escapes a step is wrapped in ConversionError by
      the pipeline

    Example implementation:
        class ValidateStep:
            name = "validate"
            stage = Stage.VALIDATING

            async def execute(
                self,
                ctx: ConversionContext,
                emit: Optional[EventEmitter] = None
            ) -> ConversionContext:
                if not self.validator.is_valid(ctx.url):
                    raise InputError("Invalid URL")
                return ctx
    """

    name: str
    stage: Stage

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        """
        Execute this pipeline step.

        Args:
            ctx: The conversion context with accumulated state
            emit: Optional callback to emit events

        Returns:
            The (possibly modified) conversion context
        """
        ...


@dataclass
class ConversionPipeline:
    """
    Pipeline converting a single page through ordered steps.

    Steps are executed in order. If a step raises, the error is stored in
    ctx.error as a Link2mdError (unexpected exceptions are wrapped in
    ConversionError), the context moves to the FAILED stage and processing
    stops. There are no retries.

    Example:
        pipeline = ConversionPipeline(steps=[
            ValidateStep(validator),
            FetchStep(http_client),
            ParseStep(),
            ExtractStep(extractor, fallback),
            SanitizeStep(),
            RenderStep(renderer),
        ])

        ctx = await pipeline.execute(ConversionContext(url=url), emit=log_event)
        if ctx.error:
            raise ctx.error
    """

    steps: list[ConversionStep]

    def _as_structured(self, ctx: ConversionContext, error: Exception) -> Link2mdError:
        if isinstance(error, Link2mdError):
            return error
        logger.exception(f"Unexpected error in stage {ctx.stage.value} for {ctx.url}")
        return ConversionError(
            f"Failed to convert page: {error}",
            context={"stage": ctx.stage.value, "exception": type(error).__name__},
        )

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        """
        Run every step over a context.

        Args:
            ctx: Initial context (URL, plus markup when fetching is skipped)
            emit: Optional callback for emitting events

        Returns:
            ConversionContext with final state (check ctx.error for failure)
        """
        for step in self.steps:
            ctx.stage = step.stage
            emit_stage(emit, EventType.STAGE_STARTED, ctx)
            logger.debug(f"Stage {step.stage.value} started for {ctx.url}")

            try:
                ctx = await step.execute(ctx, emit)
            except Exception as e:
                failed_stage = ctx.stage
                ctx.error = self._as_structured(ctx, e)
                ctx.stage = Stage.FAILED
                logger.error(f"Conversion of {ctx.url} failed in stage {failed_stage.value}: {ctx.error.message}")

                if emit:
                    emit(
                        StageEvent(
                            type=EventType.CONVERSION_FAILED,
                            url=ctx.url,
                            stage=failed_stage,
                            error=ctx.error.message,
                            status_code=ctx.error.status_code,
                        )
                    )
                return ctx

            emit_stage(emit, EventType.STAGE_COMPLETED, ctx)

        ctx.stage = Stage.DONE
        emit_stage(emit, EventType.CONVERSION_COMPLETED, ctx, message=ctx.title or None)
        return ctx
