"""Tests for pipeline steps and the converter."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from link2md.core.converter import ArticleConverter
from link2md.document import parse_document
from link2md.exceptions import ConversionError, ExtractionError, FetchError, InputError
from link2md.http.client import ContentTooLargeError
from link2md.http.protocols import HttpResponse
from link2md.models.config import ExtractionConfig, Link2mdConfig
from link2md.models.events import EventType, Stage
from link2md.pipeline.base import ConversionContext, ConversionPipeline
from link2md.pipeline.steps import ExtractStep, FetchStep, ParseStep, ValidateStep

LONG_TEXT = "Plenty of article text. " * 10

WECHAT_PAGE = f"""
<html><head><title>WeChat</title></head><body>
  <h2 id="activity-name"> Weekly Notes </h2>
  <div id="js_content">
    <p>{LONG_TEXT}</p>
    <img data-src="https://x.com/b.png">
  </div>
</body></html>
"""


def _csdn_page(content_views: str) -> str:
    return (
        "<html><head><title>Page</title></head><body>"
        '<h1 id="articleContentId">CSDN Title</h1>'
        f'<div id="content_views">{content_views}</div>'
        f"<article><p>{LONG_TEXT}</p></article>"
        "</body></html>"
    )


def _response(content: bytes, status_code: int = 200) -> HttpResponse:
    return HttpResponse(
        status_code=status_code,
        content=content,
        content_type="text/html; charset=utf-8",
        headers={},
        url="https://mp.weixin.qq.com/s/abc",
    )


class TestConversionContext:
    """Tests for ConversionContext dataclass."""

    def test_create_context(self):
        """Test creating a conversion context."""
        ctx = ConversionContext(url="https://example.com/page")
        assert ctx.url == "https://example.com/page"
        assert ctx.html is None
        assert ctx.markdown is None
        assert ctx.error is None
        assert ctx.stage == Stage.VALIDATING
        assert ctx.title == ""

    def test_incomplete_context_has_no_result(self):
        """Test that an unfinished context cannot produce a result."""
        with pytest.raises(ConversionError):
            ConversionContext(url="https://example.com").to_result()


class TestValidateStep:
    """Tests for ValidateStep."""

    @pytest.mark.asyncio
    async def test_valid_url_passes(self):
        """Test that a valid URL passes and is trimmed."""
        ctx = await ValidateStep().execute(ConversionContext(url="  https://example.com/a  "))
        assert ctx.url == "https://example.com/a"

    @pytest.mark.asyncio
    async def test_invalid_url_rejected(self):
        """Test that a non-http URL raises InputError."""
        with pytest.raises(InputError) as exc_info:
            await ValidateStep().execute(ConversionContext(url="ftp://example.com/a"))
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_url_rejected(self):
        """Test that an empty URL is reported as missing."""
        with pytest.raises(InputError, match="URL is required"):
            await ValidateStep().execute(ConversionContext(url=""))

    @pytest.mark.asyncio
    async def test_uses_given_validator(self):
        """Test that the injected validator decides."""
        validator = MagicMock()
        result = MagicMock()
        result.is_valid = False
        result.rejection_reason = "Nope"
        validator.validate.return_value = result

        with pytest.raises(InputError, match="Nope"):
            await ValidateStep(validator).execute(ConversionContext(url="https://example.com"))
        validator.validate.assert_called_with("https://example.com")


class TestFetchStep:
    """Tests for FetchStep."""

    @pytest.fixture
    def mock_client(self):
        """Create mock HTTP client."""
        client = AsyncMock()
        client.get.return_value = _response(b"<html><body>Test</body></html>")
        return client

    @pytest.mark.asyncio
    async def test_successful_fetch(self, mock_client):
        """Test successful fetch stores content."""
        step = FetchStep(http_client=mock_client, timeout=5)
        ctx = await step.execute(ConversionContext(url="https://example.com/page"))

        assert ctx.html == b"<html><body>Test</body></html>"
        assert ctx.status_code == 200
        assert ctx.content_type == "text/html; charset=utf-8"
        mock_client.get.assert_awaited_once_with("https://example.com/page", timeout=5)

    @pytest.mark.asyncio
    async def test_error_status(self, mock_client):
        """Test that a non-2xx response raises FetchError with the origin status."""
        mock_client.get.return_value = _response(b"Not Found", status_code=404)

        with pytest.raises(FetchError) as exc_info:
            await FetchStep(mock_client).execute(ConversionContext(url="https://example.com/missing"))

        assert exc_info.value.message == "Request failed with status code 404"
        assert exc_info.value.origin_status == 404
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            asyncio.TimeoutError(),
            aiohttp.ClientConnectionError("Cannot connect to host example.com"),
            ContentTooLargeError("Content too large: 999999999 bytes"),
        ],
    )
    async def test_network_errors(self, mock_client, error):
        """Test that timeouts, network errors and oversized bodies raise FetchError."""
        mock_client.get.side_effect = error

        with pytest.raises(FetchError) as exc_info:
            await FetchStep(mock_client).execute(ConversionContext(url="https://example.com/"))

        assert exc_info.value.origin_status is None
        assert exc_info.value.message


class TestExtractStep:
    """Tests for ExtractStep and the fallback check."""

    async def _extract(self, html: str, url: str, **kwargs) -> ConversionContext:
        ctx = ConversionContext(url=url, document=parse_document(html))
        return await ExtractStep(**kwargs).execute(ctx)

    @pytest.mark.asyncio
    async def test_profile_result_kept(self):
        """Test that a long enough profile result is kept."""
        ctx = await self._extract(_csdn_page(f"<p>{LONG_TEXT}</p>"), "https://blog.csdn.net/u/article/details/1")

        assert ctx.profile.name == "csdn"
        assert ctx.extraction.used_fallback is False
        assert ctx.extraction.profile == "csdn"
        assert ctx.extraction.title == "CSDN Title"

    @pytest.mark.asyncio
    async def test_short_profile_result_falls_back(self):
        """Test that a short profile result is replaced by the fallback."""
        events = []
        ctx = ConversionContext(
            url="https://blog.csdn.net/u/article/details/1",
            document=parse_document(_csdn_page("<p>short</p>")),
        )

        ctx = await ExtractStep().execute(ctx, events.append)

        assert ctx.extraction.used_fallback is True
        assert LONG_TEXT.strip() in ctx.extraction.content_html
        # The profile's title survives the fallback
        assert ctx.extraction.title == "CSDN Title"
        assert ctx.fallback_reason
        assert [e.type for e in events].count(EventType.FALLBACK_USED) == 1

    @pytest.mark.asyncio
    async def test_threshold_boundary(self):
        """Test that exactly the threshold keeps the profile and one less falls back."""
        url = "https://blog.csdn.net/u/article/details/1"
        # "<p>" + n characters + "</p>" is n + 7 characters long
        at_threshold = await self._extract(_csdn_page("<p>" + "x" * 93 + "</p>"), url)
        below_threshold = await self._extract(_csdn_page("<p>" + "x" * 92 + "</p>"), url)

        assert at_threshold.extraction.used_fallback is False
        assert below_threshold.extraction.used_fallback is True

    @pytest.mark.asyncio
    async def test_configurable_threshold(self):
        """Test that a zero threshold never falls back for a matched profile."""
        ctx = await self._extract(
            _csdn_page("<p>short</p>"),
            "https://blog.csdn.net/u/article/details/1",
            fallback_threshold=0,
        )
        assert ctx.extraction.used_fallback is False

    @pytest.mark.asyncio
    async def test_unknown_domain_uses_fallback(self):
        """Test that pages without a profile go straight to the fallback."""
        ctx = await self._extract("<article><p>Hello</p></article>", "https://example.com/post")

        assert ctx.profile is None
        assert ctx.extraction.used_fallback is True
        assert ctx.extraction.content_html == "<p>Hello</p>"

    @pytest.mark.asyncio
    async def test_chrome_only_page_raises(self):
        """Test that a page of navigation, ads and scripts has nothing to extract."""
        html = (
            "<html><body><nav><a href='/'>Home</a></nav><div class='ads'>Buy now</div>"
            "<script>track()</script></body></html>"
        )
        with pytest.raises(ExtractionError) as exc_info:
            await self._extract(html, "https://unknown.example.org/x")

        assert exc_info.value.status_code == 422
        assert exc_info.value.message == "Could not extract content from this URL"

    @pytest.mark.asyncio
    async def test_chrome_only_page_without_body_raises(self):
        """Test that head metadata is not taken as content when <body> is omitted."""
        html = (
            "<!DOCTYPE html><html><head><title>Site Title</title>"
            "<meta charset='utf-8'><link rel='stylesheet' href='/s.css'></head>"
            "<nav><a href='/'>Home</a></nav><div class='ads'>buy</div><script>x()</script></html>"
        )
        with pytest.raises(ExtractionError):
            await self._extract(html, "https://unknown.example/x")

    @pytest.mark.asyncio
    async def test_fallback_without_body_keeps_title(self):
        """Test that a page without <body> keeps its title but not its head in the content."""
        html = f"<html><head><title>Site Title</title></head><div><p>{LONG_TEXT}</p></div></html>"
        ctx = await self._extract(html, "https://unknown.example/x")

        assert ctx.extraction.title == "Site Title"
        assert "Site Title" not in ctx.extraction.content_html
        assert LONG_TEXT.strip() in ctx.extraction.content_html

    @pytest.mark.asyncio
    async def test_pubmed_page_without_body_composed(self):
        """Test that the abstract is composed even when the page omits <body>."""
        html = (
            "<!DOCTYPE html><html><head><title>PT</title></head>"
            '<h1 class="heading-title">Paper</h1>'
            '<div class="authors-list">A B</div>'
            f'<div id="abstract"><p>{LONG_TEXT}</p></div>'
            "</html>"
        )
        ctx = await self._extract(html, "https://pubmed.ncbi.nlm.nih.gov/12345/")

        assert ctx.profile.name == "pubmed"
        assert ctx.extraction.used_fallback is False
        assert ctx.extraction.title == "Paper"
        assert "Authors" in ctx.extraction.content_html
        assert "Abstract" in ctx.extraction.content_html
        assert "PT" not in ctx.extraction.content_html


class TestConversionPipeline:
    """Tests for ConversionPipeline error handling."""

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self):
        """Test that unexpected step errors become ConversionError."""
        failing = MagicMock()
        failing.name = "failing"
        failing.stage = Stage.PARSING
        failing.execute = AsyncMock(side_effect=ValueError("broken"))
        events = []

        ctx = await ConversionPipeline(steps=[failing]).execute(ConversionContext(url="https://x.com"), events.append)

        assert isinstance(ctx.error, ConversionError)
        assert ctx.stage == Stage.FAILED
        assert events[-1].type == EventType.CONVERSION_FAILED
        assert events[-1].stage == Stage.PARSING
        assert events[-1].status_code == 500

    @pytest.mark.asyncio
    async def test_typed_error_kept(self):
        """Test that structured errors pass through unchanged."""
        ctx = await ConversionPipeline(steps=[ValidateStep(), ParseStep()]).execute(ConversionContext(url="nope"))

        assert isinstance(ctx.error, InputError)

    @pytest.mark.asyncio
    async def test_remaining_steps_skipped(self):
        """Test that steps after a failure do not run."""
        later = MagicMock()
        later.name = "later"
        later.stage = Stage.RENDERING
        later.execute = AsyncMock()

        await ConversionPipeline(steps=[ValidateStep(), later]).execute(ConversionContext(url=""))

        later.execute.assert_not_called()


class TestArticleConverter:
    """Tests for ArticleConverter."""

    @pytest.fixture
    def mock_client(self):
        """Create mock HTTP client serving a WeChat article."""
        client = AsyncMock()
        client.get.return_value = _response(WECHAT_PAGE.encode("utf-8"))
        return client

    @pytest.mark.asyncio
    async def test_convert_profile_page(self, mock_client):
        """Test a full conversion through a site profile."""
        converter = ArticleConverter(http_client=mock_client)
        result = await converter.convert("https://mp.weixin.qq.com/s/abc")

        assert result.title == "Weekly Notes"
        assert result.profile == "wechat"
        assert result.used_fallback is False
        assert "![](https://x.com/b.png)" in result.markdown
        assert result.to_dict() == {"title": "Weekly Notes", "content": result.markdown}

    @pytest.mark.asyncio
    async def test_events_emitted_in_order(self, mock_client):
        """Test that stage events follow the pipeline order."""
        events = []
        converter = ArticleConverter(http_client=mock_client)
        await converter.convert("https://mp.weixin.qq.com/s/abc", emit=events.append)

        started = [e.stage for e in events if e.type == EventType.STAGE_STARTED]
        assert started == [
            Stage.VALIDATING,
            Stage.FETCHING,
            Stage.PARSING,
            Stage.PROFILE_MATCH,
            Stage.EXTRACTING,
            Stage.FALLBACK_CHECK,
            Stage.SANITIZING,
            Stage.RENDERING,
        ]
        assert events[-1].type == EventType.CONVERSION_COMPLETED
        assert events[-1].stage == Stage.DONE

    @pytest.mark.asyncio
    async def test_invalid_url_never_fetched(self, mock_client):
        """Test that input errors are raised before any network call."""
        converter = ArticleConverter(http_client=mock_client)

        with pytest.raises(InputError):
            await converter.convert("not a url")
        mock_client.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_private_addresses_blocked(self, mock_client):
        """Test that private targets are refused when configured."""
        config = Link2mdConfig(network={"block_private_ips": True})
        converter = ArticleConverter(config, http_client=mock_client)

        with pytest.raises(InputError):
            await converter.convert("http://127.0.0.1:8080/admin")
        mock_client.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetch_error_raised(self, mock_client):
        """Test that origin failures surface as FetchError."""
        mock_client.get.return_value = _response(b"", status_code=503)
        converter = ArticleConverter(http_client=mock_client)

        with pytest.raises(FetchError, match="503"):
            await converter.convert("https://mp.weixin.qq.com/s/abc")

    @pytest.mark.asyncio
    async def test_convert_html_end_to_end(self):
        """Test converting markup the caller already has."""
        converter = ArticleConverter()
        result = await converter.convert_html(
            "<article><h1>T</h1><p>Hello <b>world</b></p></article>",
            "https://example.com/post",
        )

        assert result.markdown == "# T\n\nHello **world**"
        assert result.used_fallback is True

    @pytest.mark.asyncio
    async def test_threshold_from_config(self):
        """Test that the configured threshold reaches the extract step."""
        html = _csdn_page("<p>short</p>")
        url = "https://blog.csdn.net/u/article/details/1"

        default = await ArticleConverter().convert_html(html, url)
        relaxed = await ArticleConverter(Link2mdConfig(extraction=ExtractionConfig(fallback_threshold=0))).convert_html(
            html, url
        )

        assert default.used_fallback is True
        assert relaxed.used_fallback is False
        assert relaxed.markdown == "short"

    @pytest.mark.asyncio
    async def test_convert_requires_context(self):
        """Test that convert() needs an HTTP client."""
        with pytest.raises(RuntimeError):
            await ArticleConverter().convert("https://example.com")

    @pytest.mark.asyncio
    async def test_context_manager_opens_client(self):
        """Test that entering the converter creates its own client."""
        async with ArticleConverter() as converter:
            assert converter._http_client is not None
        assert converter._http_client is None
