"""Protocol definitions for content conversion."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from bs4 import BeautifulSoup

from ..models.results import ExtractionResult

if TYPE_CHECKING:
    from ..models.profiles import SiteProfile


class ArticleExtractor(Protocol):
    """
    Protocol for extracting an article with a site profile.

    Implementations select the title and the content subtree, apply the
    profile's repairs and hand back the content as HTML.
    """

    def extract(self, document: BeautifulSoup, profile: SiteProfile, url: str) -> ExtractionResult:
        """
        Extract the article from a parsed page.

        Args:
            document: Parsed page
            profile: Profile matched for the page
            url: Page URL

        Returns:
            ExtractionResult with the content HTML (cleaned later)
        """
        ...


class FallbackStrategy(Protocol):
    """Protocol for profile-free extraction."""

    def extract(self, document: BeautifulSoup) -> ExtractionResult: ...


class HtmlRenderer(Protocol):
    """
    Protocol for rendering HTML to Markdown.

    Implementations convert a sanitized fragment to Markdown.
    """

    def render(self, html: str) -> str:
        """
        Render an HTML fragment.

        Args:
            html: Sanitized HTML fragment

        Returns:
            Markdown string
        """
        ...
