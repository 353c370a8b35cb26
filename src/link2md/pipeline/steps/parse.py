"""ParseStep - decoding and parsing pipeline step."""

import logging
from typing import Optional

from ...document import parse_document
from ...exceptions import ConversionError
from ...models.events import Stage
from ..base import ConversionContext, EventEmitter

logger = logging.getLogger(__name__)


class ParseStep:
    """
    Pipeline step that turns page markup into a tree.

    Decoding falls back through the declared charsets to detection, and the
    parser recovers from malformed markup, so this step only fails when
    there is nothing to parse.
    """

    name = "parse"
    stage = Stage.PARSING

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        if ctx.html is None:
            raise ConversionError(f"No page content to parse for {ctx.url}")

        ctx.document = parse_document(ctx.html, ctx.content_type)
        logger.debug(f"Parsed {ctx.url}")
        return ctx
