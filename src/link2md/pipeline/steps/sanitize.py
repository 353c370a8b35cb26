"""SanitizeStep - removes non-content nodes before rendering."""

import logging
from typing import Optional

from ...conversion.sanitizer import sanitize
from ...exceptions import ConversionError
from ...models.events import Stage
from ..base import ConversionContext, EventEmitter

logger = logging.getLogger(__name__)


class SanitizeStep:
    """Pipeline step that strips scripts, styles, frames and inline SVG."""

    name = "sanitize"
    stage = Stage.SANITIZING

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        if ctx.extraction is None:
            raise ConversionError(f"Nothing extracted to sanitize for {ctx.url}")

        ctx.sanitized_html = sanitize(ctx.extraction.content_html)
        return ctx
