"""Structural repairs applied to a selected article subtree.

A repair receives the subtree chosen by a profile's content selectors and
returns the subtree extraction should continue with. Most repairs edit the
subtree in place and return it; document composition returns a new one.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlparse

from bs4 import BeautifulSoup, NavigableString, Tag

from ..document import node_text

logger = logging.getLogger(__name__)

LAZY_SRC_ATTR = "data-src"
LAZY_MEDIA_TAGS = ("img", "video", "audio", "source")

# Inline style forced onto images that lazy loaders keep hidden
VISIBLE_STYLE = (("visibility", "visible"), ("opacity", "1"))

_TRAILING_ID_RE = re.compile(r"/(\d+)/?$")


@dataclass(frozen=True)
class RepairContext:
    """
    Per-request state a repair may read.

    Attributes:
        document: The whole parsed page (repairs may pull other regions from it)
        url: The page URL
        title: The title resolved for this page
    """

    document: BeautifulSoup
    url: str
    title: str


Repair = Callable[[Tag, RepairContext], Tag]


def _override_style(tag: Tag, overrides: tuple[tuple[str, str], ...]) -> None:
    """Replace the given declarations in a tag's inline style."""
    names = {name for name, _ in overrides}
    declarations = []
    for declaration in (tag.get("style") or "").split(";"):
        name, sep, value = declaration.partition(":")
        name = name.strip().lower()
        if not sep or not name or name in names:
            continue
        declarations.append(f"{name}: {value.strip()}")
    declarations.extend(f"{name}: {value}" for name, value in overrides)
    tag["style"] = "; ".join(declarations) + ";"


def promote_lazy_media(content: Tag, ctx: RepairContext) -> Tag:
    """
    Move lazy-load placeholders into the real source attribute.

    Every media element carrying ``data-src`` gets it copied into ``src``
    and the placeholder removed. Images are then forced visible, since lazy
    loaders hide them until a script swaps the source in.
    """
    promoted = 0
    for element in content.find_all(LAZY_MEDIA_TAGS):
        lazy_src = element.get(LAZY_SRC_ATTR)
        if lazy_src:
            element["src"] = lazy_src
            del element[LAZY_SRC_ATTR]
            promoted += 1

    for image in content.find_all("img"):
        _override_style(image, VISIBLE_STYLE)

    logger.debug(f"Promoted {promoted} lazy media sources for {ctx.url}")
    return content


def remove_nodes(*selectors: str) -> Repair:
    """
    Build a repair deleting every node that matches one of ``selectors``.

    Example:
        strip_ads = remove_nodes(".recommend-box", "pre .hljs-button")
    """

    def repair(content: Tag, ctx: RepairContext) -> Tag:
        for selector in selectors:
            for node in content.select(selector):
                # Already gone with a removed ancestor
                if node.decomposed:
                    continue
                node.decompose()
        return content

    repair.__name__ = f"remove_nodes({', '.join(selectors)})"
    return repair


def _labelled_paragraph(document: BeautifulSoup, label: str, value: str) -> Tag:
    paragraph = document.new_tag("p")
    strong = document.new_tag("strong")
    strong.string = f"{label}:"
    paragraph.append(strong)
    paragraph.append(NavigableString(f" {value}"))
    return paragraph


def _heading(document: BeautifulSoup, level: int, text: str) -> Tag:
    heading = document.new_tag(f"h{level}")
    heading.string = text
    return heading


def _move_children(source: Tag, target: Tag) -> None:
    for child in list(source.contents):
        target.append(child.extract())


def _mark_abstract_sections(document: BeautifulSoup, abstract: Tag) -> None:
    """Put an <h4> before every structured subsection of the abstract."""
    for label in abstract.select(".abstract-label"):
        text = node_text(label).rstrip(":：").strip()
        parent = label.parent
        anchor = parent if isinstance(parent, Tag) and parent.name == "p" and parent is not abstract else label
        if text:
            anchor.insert_before(_heading(document, 4, text))
        label.decompose()


def compose_abstract(content: Tag, ctx: RepairContext) -> Tag:
    """
    Assemble an abstract page from its disjoint regions.

    The regions are laid out in a fixed order: title, authors, source, PMID,
    abstract, conflict of interest and the trailing copyright notice. Any
    region missing from the page is left out.
    """
    document = ctx.document
    composed = document.new_tag("div")

    if ctx.title:
        composed.append(_heading(document, 2, ctx.title))

    authors = document.select_one(".authors-list")
    if authors is not None and node_text(authors):
        composed.append(_labelled_paragraph(document, "Authors", node_text(authors)))

    source = document.select_one(".article-source")
    if source is not None and node_text(source):
        composed.append(_labelled_paragraph(document, "Source", node_text(source)))

    current_id = document.select_one(".current-id")
    pmid = node_text(current_id) if current_id is not None else ""
    if not pmid:
        match = _TRAILING_ID_RE.search(urlparse(ctx.url).path)
        pmid = match.group(1) if match else ""
    if pmid:
        composed.append(_labelled_paragraph(document, "PMID", pmid))

    abstract = document.select_one("#abstract")
    if abstract is not None:
        _mark_abstract_sections(document, abstract)
        composed.append(_heading(document, 3, "Abstract"))
        _move_children(abstract, composed)

    conflict = document.select_one("#conflict-of-interest")
    if conflict is not None:
        composed.append(_heading(document, 3, "Conflict of Interest"))
        _move_children(conflict, composed)

    copyright_notice = document.select_one(".copyright")
    if copyright_notice is not None:
        _move_children(copyright_notice, composed)

    return composed
