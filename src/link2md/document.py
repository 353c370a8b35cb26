"""Decoding and tolerant parsing of fetched pages."""

from __future__ import annotations

import logging
import re
from typing import Union

from bs4 import BeautifulSoup, Tag
from charset_normalizer import from_bytes

logger = logging.getLogger(__name__)

PARSER = "html.parser"

_META_CHARSET_RE = re.compile(rb'charset=["\']?([^"\'\s/>;]+)', re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


def _header_charset(content_type: str) -> str | None:
    for part in content_type.split(";"):
        part = part.strip()
        if part.lower().startswith("charset="):
            return part.split("=", 1)[1].strip().strip("\"'") or None
    return None


def decode_html(content: bytes, content_type: str = "") -> str:
    """
    Decode page bytes with intelligent encoding detection.

    Fallback chain:
    1. Content-Type header charset
    2. <meta charset> declared in the first 2 KB
    3. charset-normalizer detection
    4. UTF-8 with replacement

    Args:
        content: Raw response body
        content_type: Content-Type header value

    Returns:
        Decoded markup
    """
    declared = [_header_charset(content_type)]
    meta_match = _META_CHARSET_RE.search(content[:2048])
    if meta_match:
        declared.append(meta_match.group(1).decode("ascii", errors="ignore"))

    for encoding in declared:
        if not encoding:
            continue
        try:
            return content.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.debug(f"Failed to decode with declared encoding: {encoding}")

    best_match = from_bytes(content).best()
    if best_match is not None:
        logger.debug(f"Detected encoding: {best_match.encoding}")
        return str(best_match)

    return content.decode("utf-8", errors="replace")


def parse_document(html: Union[str, bytes], content_type: str = "") -> BeautifulSoup:
    """
    Build a traversable tree from page markup.

    Parsing never fails on malformed markup; the parser recovers what it can.
    """
    if isinstance(html, bytes):
        html = decode_html(html, content_type)
    return BeautifulSoup(html, PARSER)


def parse_fragment(fragment: str) -> BeautifulSoup:
    """Parse an HTML fragment into its own tree."""
    return BeautifulSoup(fragment, PARSER)


def document_title(document: BeautifulSoup) -> str:
    """Return the trimmed text of the page's <title>, or an empty string."""
    title = document.find("title")
    if not isinstance(title, Tag):
        return ""
    return node_text(title)


def node_text(node: Tag) -> str:
    """Plain text of a node with whitespace runs collapsed."""
    return _WHITESPACE_RE.sub(" ", node.get_text()).strip()


def has_visible_content(fragment: str) -> bool:
    """Check whether a fragment holds any text or image worth rendering."""
    if not fragment.strip():
        return False
    soup = parse_fragment(fragment)
    for hidden in soup.find_all(("script", "style", "noscript", "template")):
        if not hidden.decomposed:
            hidden.decompose()
    if soup.get_text(strip=True):
        return True
    return soup.find("img") is not None
