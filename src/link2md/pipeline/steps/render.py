"""RenderStep - Markdown rendering pipeline step."""

import logging
from typing import Optional

from ...conversion.markdown import MarkdownRenderer
from ...conversion.protocols import HtmlRenderer
from ...exceptions import ConversionError
from ...models.events import Stage
from ..base import ConversionContext, EventEmitter

logger = logging.getLogger(__name__)


class RenderStep:
    """
    Pipeline step that renders the sanitized fragment to Markdown.

    Example:
        step = RenderStep(MarkdownRenderer(RenderConfig(gfm=False)))
        ctx = await step.execute(ctx)
        # ctx.markdown now contains the article
    """

    name = "render"
    stage = Stage.RENDERING

    def __init__(self, renderer: Optional[HtmlRenderer] = None):
        """
        Initialize the render step.

        Args:
            renderer: Markdown renderer (uses default rules if None)
        """
        self._renderer = renderer or MarkdownRenderer()

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        """
        Render ctx.sanitized_html into ctx.markdown.

        Args:
            ctx: Conversion context with the sanitized fragment
            emit: Optional event emitter

        Returns:
            Updated context with markdown content
        """
        if ctx.sanitized_html is None:
            raise ConversionError(f"No sanitized content to render for {ctx.url}")

        ctx.markdown = self._renderer.render(ctx.sanitized_html)
        logger.debug(f"Rendered {ctx.url} to {len(ctx.markdown)} characters of Markdown")
        return ctx
