"""Content conversion for link2md (extraction, sanitizing, Markdown)."""

from .extractor import ContentExtractor
from .fallback import BODY_DENYLIST, FallbackExtractor
from .markdown import ArticleMarkdownConverter, MarkdownRenderer
from .protocols import ArticleExtractor, FallbackStrategy, HtmlRenderer
from .repairs import RepairContext, compose_abstract, promote_lazy_media, remove_nodes
from .sanitizer import sanitize

__all__ = [
    # Protocols
    "ArticleExtractor",
    "FallbackStrategy",
    "HtmlRenderer",
    # Implementations
    "ContentExtractor",
    "FallbackExtractor",
    "MarkdownRenderer",
    "ArticleMarkdownConverter",
    "sanitize",
    # Repairs
    "RepairContext",
    "compose_abstract",
    "promote_lazy_media",
    "remove_nodes",
    "BODY_DENYLIST",
]
