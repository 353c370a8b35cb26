"""Error taxonomy for link2md.

Every failure that leaves the pipeline is one of these. Each carries the
HTTP status the service answers with, so callers never need to inspect
exception types to build a response.
"""

from __future__ import annotations

from typing import Any, Optional


class Link2mdError(Exception):
    """Base exception carrying a user-facing message and response status."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the error.

        Args:
            message: User-facing error message
            status_code: Response status (defaults to the class status)
            context: Optional details for logging and debugging
        """
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize to the failure response body."""
        return {"error": self.message}


class InputError(Link2mdError):
    """Missing or malformed URL, rejected before any network call."""

    status_code = 400


class FetchError(Link2mdError):
    """Timeout, connection failure or non-success origin response."""

    status_code = 500

    def __init__(
        self,
        message: str,
        origin_status: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the fetch error.

        Args:
            message: Error message, passed through to the caller
            origin_status: Status returned by the origin server, if any
            context: Optional details for logging and debugging
        """
        self.origin_status = origin_status
        if origin_status is not None:
            context = {**(context or {}), "origin_status": origin_status}
        super().__init__(message, context=context)


class ExtractionError(Link2mdError):
    """Every extraction strategy came up empty."""

    status_code = 422

    def __init__(
        self,
        message: str = "Could not extract content from this URL",
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, context=context)


class ConversionError(Link2mdError):
    """Unexpected failure while parsing, extracting or rendering."""

    status_code = 500
