"""Profile-driven article extraction."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from ..document import document_title, node_text
from ..models.results import ExtractionResult
from .repairs import RepairContext

if TYPE_CHECKING:
    from ..models.profiles import SiteProfile

logger = logging.getLogger(__name__)


class ContentExtractor:
    """
    Extracts the article from a page using a site profile.

    Title and content selectors are tried in order with early exit; the
    profile's repairs then run over the selected subtree in order.

    Example:
        extractor = ContentExtractor()
        result = extractor.extract(document, profile, "https://blog.csdn.net/u/article/1")
        if result.content_length < 100:
            ...
    """

    def _select_title(self, document: BeautifulSoup, profile: SiteProfile) -> str:
        for selector in profile.title_selectors:
            node = document.select_one(selector)
            if node is None:
                continue
            text = node_text(node)
            if text:
                return text
        return document_title(document)

    def _select_content(self, document: BeautifulSoup, profile: SiteProfile) -> Optional[Tag]:
        for selector in profile.content_selectors:
            node = document.select_one(selector)
            if node is not None:
                logger.debug(f"Profile {profile.name} matched content selector {selector!r}")
                return node
        return None

    def _apply_repairs(self, content: Tag, profile: SiteProfile, ctx: RepairContext) -> Tag:
        for repair in profile.repairs:
            name = getattr(repair, "__name__", repr(repair))
            try:
                content = repair(content, ctx)
            except Exception as e:
                logger.warning(f"Repair {name} failed for {ctx.url}: {e}")
        return content

    def extract(self, document: BeautifulSoup, profile: SiteProfile, url: str) -> ExtractionResult:
        """
        Extract the article from a parsed page.

        Args:
            document: Parsed page (repairs edit it in place)
            profile: The profile matched for the page
            url: Page URL

        Returns:
            ExtractionResult; ``content_html`` is empty when no content
            selector matched
        """
        title = self._select_title(document, profile)
        content = self._select_content(document, profile)

        if content is None:
            logger.warning(f"No content selector of profile {profile.name} matched {urlparse(url).netloc}")
            return ExtractionResult(title=title, content_html="", profile=profile.name)

        ctx = RepairContext(document=document, url=url, title=title)
        content = self._apply_repairs(content, profile, ctx)

        return ExtractionResult(
            title=title,
            content_html=content.decode_contents(),
            profile=profile.name,
        )
