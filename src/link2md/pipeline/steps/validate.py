"""ValidateStep - URL validation pipeline step."""

import logging
from typing import Optional

from ...exceptions import InputError
from ...models.events import Stage
from ...security.url_validator import UrlValidator
from ..base import ConversionContext, EventEmitter

logger = logging.getLogger(__name__)


class ValidateStep:
    """
    Pipeline step that rejects bad input before any network call.

    Raises InputError if the URL is empty, not http(s), has no host, or
    points at a local target while private addresses are blocked.

    Example:
        validate_step = ValidateStep(UrlValidator(block_private_ips=True))
        ctx = await validate_step.execute(ctx)
    """

    name = "validate"
    stage = Stage.VALIDATING

    def __init__(self, url_validator: Optional[UrlValidator] = None) -> None:
        """
        Initialize the validation step.

        Args:
            url_validator: UrlValidator instance (http/https, no IP blocking if None)
        """
        self._url_validator = url_validator or UrlValidator()

    async def execute(
        self,
        ctx: ConversionContext,
        emit: Optional[EventEmitter] = None,
    ) -> ConversionContext:
        """
        Execute the validation step.

        Args:
            ctx: Conversion context with the URL to validate
            emit: Optional callback to emit events

        Returns:
            ConversionContext with the URL trimmed

        Raises:
            InputError: If the URL is rejected
        """
        result = self._url_validator.validate(ctx.url)
        if not result.is_valid:
            reason = result.rejection_reason or "Invalid URL"
            logger.debug(f"Rejected {ctx.url!r}: {reason}")
            raise InputError(reason, context={"url": ctx.url})

        ctx.url = ctx.url.strip()
        logger.debug(f"Validated {ctx.url}")
        return ctx
