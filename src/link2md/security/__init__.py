"""Input validation for link2md."""

from .url_validator import UrlValidationResult, UrlValidator

__all__ = ["UrlValidationResult", "UrlValidator"]
