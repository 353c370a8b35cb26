"""Pipeline steps for page conversion."""

from .extract import ExtractStep
from .fetch import FetchStep
from .parse import ParseStep
from .render import RenderStep
from .sanitize import SanitizeStep
from .validate import ValidateStep

__all__ = [
    "ExtractStep",
    "FetchStep",
    "ParseStep",
    "RenderStep",
    "SanitizeStep",
    "ValidateStep",
]
