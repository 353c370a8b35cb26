"""Per-request result records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ExtractionResult:
    """
    Outcome of selecting the article from a page.

    ``content_html`` is an HTML fragment that has not been sanitized yet and
    must go through the sanitizer before rendering.
    """

    title: str
    content_html: str
    used_fallback: bool = False
    profile: Optional[str] = None

    @property
    def content_length(self) -> int:
        """Length of the trimmed fragment, as compared to the fallback threshold."""
        return len(self.content_html.strip())


@dataclass(frozen=True)
class ConversionResult:
    """Final Markdown document for a page."""

    url: str
    title: str
    markdown: str
    used_fallback: bool = False
    profile: Optional[str] = None

    def to_dict(self) -> dict[str, str]:
        """Serialize to the success response body."""
        return {"title": self.title, "content": self.markdown}
