"""Core converter API."""

from .converter import ArticleConverter, convert_blocking

__all__ = ["ArticleConverter", "convert_blocking"]
