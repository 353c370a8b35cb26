"""Tests for Markdown rendering."""

import re

from link2md.conversion.markdown import MarkdownRenderer, detect_code_language
from link2md.document import parse_fragment
from link2md.models.config import RenderConfig


class TestMarkdownRenderer:
    """Tests for MarkdownRenderer."""

    def test_basic_document(self):
        """Test heading and inline formatting."""
        renderer = MarkdownRenderer()
        assert renderer.render("<h1>T</h1><p>Hello <b>world</b></p>") == "# T\n\nHello **world**"

    def test_setext_headings(self):
        """Test underlined headings when configured."""
        renderer = MarkdownRenderer(RenderConfig(heading_style="setext"))
        assert renderer.render("<h1>Title</h1>") == "Title\n====="

    def test_bullet_marker(self):
        """Test the configured unordered list marker."""
        markdown = MarkdownRenderer(RenderConfig(bullet_list_marker="*")).render("<ul><li>a</li><li>b</li></ul>")
        assert "* a" in markdown
        assert "* b" in markdown

    def test_emphasis_delimiter(self):
        """Test the configured emphasis delimiter."""
        markdown = MarkdownRenderer(RenderConfig(em_delimiter="_")).render("<p><em>x</em></p>")
        assert markdown == "_x_"

    def test_horizontal_rule(self):
        """Test the configured horizontal rule token."""
        markdown = MarkdownRenderer(RenderConfig(horizontal_rule="***")).render("<p>a</p><hr><p>b</p>")
        assert markdown == "a\n\n***\n\nb"

    def test_line_break(self):
        """Test that <br> renders as a backslash line break."""
        assert MarkdownRenderer().render("<p>a<br>b</p>") == "a\\\nb"

    def test_deterministic(self):
        """Test that the same input always renders the same output."""
        renderer = MarkdownRenderer()
        html = "<h2>x</h2><ul><li>a</li></ul><pre><code>y</code></pre>"
        assert renderer.render(html) == renderer.render(html)

    def test_empty_fragment(self):
        """Test rendering an empty fragment."""
        assert MarkdownRenderer().render("") == ""


class TestImageRule:
    """Tests for image emission."""

    def test_absolute_image(self):
        """Test that absolute http(s) images are emitted."""
        markdown = MarkdownRenderer().render('<p><img src="https://x.com/a.png" alt="A"></p>')
        assert markdown == "![A](https://x.com/a.png)"

    def test_image_with_title(self):
        """Test the title clause."""
        markdown = MarkdownRenderer().render('<img src="http://x.com/a.png" alt="A" title="Cap">')
        assert markdown == '![A](http://x.com/a.png "Cap")'

    def test_non_web_sources_dropped(self):
        """Test that relative, data and script sources are dropped."""
        renderer = MarkdownRenderer()
        for src in ("/relative.png", "data:image/png;base64,AAAA", "javascript:alert(1)", "ftp://x.com/a.png", ""):
            markdown = renderer.render(f'<p>text<img src="{src}" alt="A"></p>')
            assert "![" not in markdown
            assert markdown == "text"

    def test_image_framed_by_line_breaks(self):
        """Test that a block-level image sits on its own line."""
        markdown = MarkdownRenderer().render('<p>before<img src="https://x.com/a.png" alt="A">after</p>')
        assert markdown.split("\n") == ["before", "![A](https://x.com/a.png)", "after"]

    def test_image_inline_in_table_cell(self):
        """Test that an image inside a table cell keeps the row intact."""
        markdown = MarkdownRenderer().render(
            '<table><tr><th>H</th></tr><tr><td><img src="https://x.com/a.png" alt="A"></td></tr></table>'
        )
        assert "| ![A](https://x.com/a.png) |" in markdown

    def test_image_inline_in_heading(self):
        """Test that an image inside a heading stays on the heading line."""
        markdown = MarkdownRenderer().render('<h2>Logo <img src="https://x.com/l.png" alt="L"></h2>')
        assert markdown == "## Logo ![L](https://x.com/l.png)"


class TestCodeBlocks:
    """Tests for fenced code blocks."""

    def test_language_from_class(self):
        """Test the language hint from a language-* class on <code>."""
        markdown = MarkdownRenderer().render('<pre><code class="language-python">print(1)</code></pre>')
        assert markdown == "```python\nprint(1)\n```"

    def test_blank_lines_kept_inside_fence(self):
        """Test that blank runs inside code are not collapsed."""
        markdown = MarkdownRenderer().render("<pre><code>a = 1\n\n\n\nb = 2</code></pre>")
        assert markdown == "```\na = 1\n\n\n\nb = 2\n```"

    def test_trailing_whitespace_kept_inside_fence(self):
        """Test that trailing spaces in code survive output cleaning."""
        markdown = MarkdownRenderer().render("<pre><code>def f():\n    pass  \nx = 1</code></pre>")
        assert markdown == "```\ndef f():\n    pass  \nx = 1\n```"

    def test_clean_output_trims_only_outside_fences(self):
        """Test that trailing spaces are trimmed in prose but not in code."""
        raw = "text   \n```\ncode  \n```\nmore \t"
        assert MarkdownRenderer()._clean_output(raw) == "text\n```\ncode  \n```\nmore"

    def test_code_not_escaped(self):
        """Test that Markdown characters in code are left alone."""
        markdown = MarkdownRenderer().render("<pre><code>x = a_b * c</code></pre>")
        assert "x = a_b * c" in markdown

    def test_tilde_fence(self):
        """Test the configured fence."""
        markdown = MarkdownRenderer(RenderConfig(code_fence="~~~")).render("<pre>x</pre>")
        assert markdown == "~~~\nx\n~~~"

    def test_detect_language_sources(self):
        """Test every place a language hint can come from."""
        cases = {
            '<pre class="lang-go">x</pre>': "go",
            '<pre class="brush: java">x</pre>': "java",
            '<pre data-lang="rust">x</pre>': "rust",
            '<pre><code lang="ruby">x</code></pre>': "ruby",
            '<pre class="hljs">x</pre>': "",
        }
        for html, expected in cases.items():
            assert detect_code_language(parse_fragment(html).find("pre")) == expected


class TestGfm:
    """Tests for the table and task-list layer."""

    TABLE = "<table><tr><th>A</th><th>B</th></tr><tr><td>1</td><td>2</td></tr></table>"
    TASKS = '<ul><li><input type="checkbox" checked> done</li><li><input type="checkbox"> todo</li></ul>'

    def test_pipe_table(self):
        """Test that tables render as pipe tables."""
        markdown = MarkdownRenderer().render(self.TABLE)
        assert "| A | B |" in markdown
        assert "| 1 | 2 |" in markdown

    def test_plain_table(self):
        """Test that tables degrade to text lines without GFM."""
        markdown = MarkdownRenderer(RenderConfig(gfm=False)).render(self.TABLE)
        assert markdown == "A B\n1 2"

    def test_task_list(self):
        """Test that checkboxes in list items render as task markers."""
        markdown = MarkdownRenderer().render(self.TASKS)
        assert re.search(r"^- \[x\] done$", markdown, re.MULTILINE)
        assert re.search(r"^- \[ \] todo$", markdown, re.MULTILINE)

    def test_task_marker_without_label_space(self):
        """Test that a label right after the checkbox is separated by one space."""
        markdown = MarkdownRenderer().render('<ul><li><input type="checkbox" checked>done</li></ul>')
        assert markdown == "- [x] done"

    def test_task_list_without_gfm(self):
        """Test that checkboxes are dropped without GFM."""
        markdown = MarkdownRenderer(RenderConfig(gfm=False)).render(self.TASKS)
        assert "[" not in markdown
        assert "- done" in markdown


class TestCleanOutput:
    """Tests for output cleaning."""

    def test_collapses_blank_runs_outside_fences(self):
        """Test that blank runs collapse only outside fences."""
        renderer = MarkdownRenderer()
        raw = "\n\na\n\n\n\nb   \n```\n\n\n\n```\n\n\n\nc\n\n"
        assert renderer._clean_output(raw) == "a\n\nb\n```\n\n\n\n```\n\nc"
