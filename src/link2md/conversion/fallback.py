"""Generic extraction for pages no profile handles well."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag

from ..document import document_title
from ..models.results import ExtractionResult

logger = logging.getLogger(__name__)

# Semantic containers tried before falling back to the whole body
SEMANTIC_CONTAINERS = ("article", "main")

# Structural chrome stripped from the body
BODY_DENYLIST = (
    "script",
    "style",
    "noscript",
    "iframe",
    "svg",
    "header",
    "footer",
    "nav",
    "form",
    "aside",
    ".sidebar",
    ".ad",
    ".ads",
    "#header",
    "#footer",
    "#nav",
    "#sidebar",
)

# Document metadata left in the root when the page omits <body>
HEAD_ELEMENTS = ("head", "title", "meta", "link", "base")


class FallbackExtractor:
    """
    Progressively wider search for the article.

    First the page's semantic containers, then the whole body minus known
    chrome. It never narrows below "the body without chrome".

    Example:
        result = FallbackExtractor().extract(document)
        assert result.used_fallback
    """

    def __init__(
        self,
        containers: tuple[str, ...] = SEMANTIC_CONTAINERS,
        denylist: tuple[str, ...] = BODY_DENYLIST,
    ):
        """
        Initialize the fallback extractor.

        Args:
            containers: Selectors tried in order before the body
            denylist: Selectors removed from the body
        """
        self._containers = containers
        self._denylist = denylist

    def _from_containers(self, document: BeautifulSoup) -> str:
        for selector in self._containers:
            node = document.select_one(selector)
            if node is None:
                continue
            inner = node.decode_contents()
            if inner.strip():
                logger.debug(f"Fallback matched semantic container {selector!r}")
                return inner
        return ""

    def _from_body(self, document: BeautifulSoup) -> str:
        body = document.find("body")
        # html.parser adds no <body> when the page omits it
        if isinstance(body, Tag):
            root = body
            selectors = self._denylist
        else:
            root = document
            selectors = HEAD_ELEMENTS + self._denylist
        for selector in selectors:
            for node in root.select(selector):
                if node.decomposed:
                    continue
                node.decompose()
        return root.decode_contents()

    def extract(self, document: BeautifulSoup) -> ExtractionResult:
        """
        Extract the article without a profile.

        Args:
            document: Parsed page (the body tier strips chrome in place)

        Returns:
            ExtractionResult with ``used_fallback`` set
        """
        title = document_title(document)
        content_html = self._from_containers(document)
        if not content_html:
            logger.debug("No semantic container held content, using the page body")
            content_html = self._from_body(document)

        return ExtractionResult(
            title=title,
            content_html=content_html,
            used_fallback=True,
        )
