"""HTML to Markdown rendering."""

from __future__ import annotations

import logging
import re
from typing import Optional

from bs4 import Tag
from markdownify import BACKSLASH, UNDERLINED, MarkdownConverter

from ..models.config import RenderConfig

logger = logging.getLogger(__name__)

# Images are kept only when they point at an absolute web URL
IMAGE_SRC_RE = re.compile(r"^https?://[^\s/]+", re.IGNORECASE)

_CLASS_LANG_RE = re.compile(r"(?:language|lang|brush)[:\s-]+([a-z0-9+#_-]+)")

# Task marker at the start of a list item and the whitespace after it
_TASK_MARKER_RE = re.compile(r"^(\[[ x]\])\s*")


def detect_code_language(pre: Tag) -> str:
    """
    Find the language hint of a code block.

    Looks at the ``pre`` element and then its ``code`` child, checking
    ``language-*``/``lang-*``/``brush-*`` classes and the ``data-lang`` and
    ``lang`` attributes.
    """
    candidates = [pre]
    code = pre.find("code")
    if isinstance(code, Tag):
        candidates.append(code)

    for element in candidates:
        classes = element.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        match = _CLASS_LANG_RE.search(" ".join(classes).lower())
        if match:
            return match.group(1)
        for attr in ("data-lang", "lang"):
            value = (element.get(attr) or "").strip().lower()
            if value:
                return value
    return ""


class ArticleMarkdownConverter(MarkdownConverter):
    """
    markdownify converter with the article rendering rules.

    Adds three options on top of markdownify's: ``code_fence``,
    ``horizontal_rule`` and ``gfm``.
    """

    class Options(MarkdownConverter.DefaultOptions):
        code_fence = "```"
        horizontal_rule = "---"
        gfm = True

    def convert_img(self, el, text, parent_tags):
        src = (el.get("src") or "").strip()
        if not IMAGE_SRC_RE.match(src):
            return ""

        alt = el.get("alt") or ""
        title = el.get("title") or ""
        title_part = ' "%s"' % title.replace('"', r"\"") if title else ""
        image = f"![{alt}]({src}{title_part})"

        # Tables and headings must stay on one line
        if "_inline" in parent_tags:
            return image
        return f"\n{image}\n"

    def convert_pre(self, el, text, parent_tags):
        if not text:
            return ""
        fence = self.options["code_fence"]
        language = detect_code_language(el)
        code = text.strip("\n")
        return f"\n\n{fence}{language}\n{code}\n{fence}\n\n"

    def convert_hr(self, el, text, parent_tags):
        return f"\n\n{self.options['horizontal_rule']}\n\n"

    def convert_input(self, el, text, parent_tags):
        if not self.options["gfm"]:
            return ""
        if (el.get("type") or "").lower() != "checkbox" or "li" not in parent_tags:
            return ""
        return "[x] " if el.has_attr("checked") else "[ ] "

    def convert_li(self, el, text, parent_tags):
        if self.options["gfm"] and el.find("input", attrs={"type": "checkbox"}, recursive=False) is not None:
            text = _TASK_MARKER_RE.sub(r"\1 ", (text or "").lstrip(), count=1)
        return super().convert_li(el, text, parent_tags)

    def convert_table(self, el, text, parent_tags):
        if self.options["gfm"]:
            return super().convert_table(el, text, parent_tags)
        return "\n\n" + text.strip("\n") + "\n\n"

    def convert_tr(self, el, text, parent_tags):
        if self.options["gfm"]:
            return super().convert_tr(el, text, parent_tags)
        line = " ".join(text.split())
        return line + "\n" if line else ""

    def convert_td(self, el, text, parent_tags):
        if self.options["gfm"]:
            return super().convert_td(el, text, parent_tags)
        return " " + text.strip() + " "

    def convert_th(self, el, text, parent_tags):
        if self.options["gfm"]:
            return super().convert_th(el, text, parent_tags)
        return " " + text.strip() + " "


class MarkdownRenderer:
    """
    Renders a sanitized HTML fragment to Markdown.

    Rendering is deterministic: the same fragment and rules always give the
    same output.

    Example:
        renderer = MarkdownRenderer(RenderConfig(heading_style="setext"))
        markdown = renderer.render("<h1>Title</h1><p>Body</p>")
    """

    def __init__(self, rules: Optional[RenderConfig] = None):
        """
        Initialize the renderer.

        Args:
            rules: Rendering rules (defaults to RenderConfig())
        """
        self.rules = rules or RenderConfig()
        self._converter = ArticleMarkdownConverter(
            heading_style=UNDERLINED if self.rules.heading_style == "setext" else "atx",
            bullets=self.rules.bullet_list_marker,
            strong_em_symbol=self.rules.em_delimiter,
            newline_style=BACKSLASH,
            wrap=False,
            code_fence=self.rules.code_fence,
            horizontal_rule=self.rules.horizontal_rule,
            gfm=self.rules.gfm,
        )

    def _clean_output(self, markdown: str) -> str:
        """Collapse blank runs and trim trailing spaces outside code fences."""
        fence = self.rules.code_fence
        lines: list[str] = []
        in_fence = False

        for raw in markdown.split("\n"):
            line = raw.rstrip()
            if line.lstrip().startswith(fence):
                in_fence = not in_fence
            elif in_fence:
                line = raw
            elif not line and lines and not lines[-1]:
                continue
            lines.append(line)

        return "\n".join(lines).strip()

    def render(self, html: str) -> str:
        """
        Render an HTML fragment.

        Args:
            html: Sanitized HTML fragment

        Returns:
            Markdown string without leading or trailing blank lines
        """
        markdown = self._converter.convert(html)
        return self._clean_output(markdown)
