"""Tests for the lightweight HTTP fetch strategy."""

import httpx
import pytest

from pagescope.services.http_fetcher import HttpPageFetcher
from pagescope.services.scrape_errors import (
    HttpServerError,
    HttpStatusError,
    HttpTimeoutError,
    HttpTransportError,
    JavascriptRenderedError,
)

URL = "https://example.com/page"


class TestFetchHtml:
    """Test HttpPageFetcher.fetch_html()."""

    @pytest.mark.asyncio
    async def test_returns_body(self, respx_mock):
        respx_mock.get(URL).mock(return_value=httpx.Response(200, text="<p>ok</p>"))

        html = await HttpPageFetcher().fetch_html(URL)

        assert html == "<p>ok</p>"

    @pytest.mark.asyncio
    async def test_sends_browser_like_headers(self, respx_mock):
        route = respx_mock.get(URL).mock(return_value=httpx.Response(200, text=""))

        await HttpPageFetcher().fetch_html(URL)

        request = route.calls.last.request
        assert "Chrome/" in request.headers["User-Agent"]
        assert request.headers["Accept"].startswith("text/html")
        assert request.headers["Accept-Language"] == "en-US,en;q=0.5"

    @pytest.mark.asyncio
    async def test_custom_headers(self, respx_mock):
        route = respx_mock.get(URL).mock(return_value=httpx.Response(200, text=""))

        await HttpPageFetcher(headers={"User-Agent": "custom-agent"}).fetch_html(URL)

        assert route.calls.last.request.headers["User-Agent"] == "custom-agent"

    @pytest.mark.asyncio
    async def test_follows_redirects(self, respx_mock):
        respx_mock.get(URL).mock(
            return_value=httpx.Response(301, headers={"Location": "https://example.com/moved"})
        )
        respx_mock.get("https://example.com/moved").mock(
            return_value=httpx.Response(200, text="moved here")
        )

        assert await HttpPageFetcher().fetch_html(URL) == "moved here"

    @pytest.mark.asyncio
    async def test_client_error_status(self, respx_mock):
        respx_mock.get(URL).mock(return_value=httpx.Response(403, text="Forbidden"))

        with pytest.raises(HttpStatusError) as exc_info:
            await HttpPageFetcher().fetch_html(URL)

        assert not isinstance(exc_info.value, HttpServerError)
        assert exc_info.value.status_code == 403
        assert str(exc_info.value) == "HTTP_ERROR_403"

    @pytest.mark.asyncio
    async def test_server_error_status(self, respx_mock):
        respx_mock.get(URL).mock(return_value=httpx.Response(503, text="Unavailable"))

        with pytest.raises(HttpServerError) as exc_info:
            await HttpPageFetcher().fetch_html(URL)

        assert str(exc_info.value) == "HTTP_SERVER_ERROR_503"

    @pytest.mark.asyncio
    async def test_timeout(self, respx_mock):
        respx_mock.get(URL).mock(side_effect=httpx.ReadTimeout("Request timed out"))

        with pytest.raises(HttpTimeoutError) as exc_info:
            await HttpPageFetcher().fetch_html(URL)

        assert "TIMEOUT" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_error(self, respx_mock):
        respx_mock.get(URL).mock(side_effect=httpx.ConnectError("Connection refused"))

        with pytest.raises(HttpTransportError) as exc_info:
            await HttpPageFetcher().fetch_html(URL)

        assert str(exc_info.value) == "HTTP_TRANSPORT_ERROR: Connection refused"


class TestFetch:
    """Test HttpPageFetcher.fetch()."""

    @pytest.mark.asyncio
    async def test_content_page_is_extracted(self, respx_mock, article_html):
        respx_mock.get(URL).mock(return_value=httpx.Response(200, text=article_html))

        document = await HttpPageFetcher().fetch(URL)

        assert document.title == "Field Notes on Urban Gardening"
        assert len(document.paragraphs) == 3
        assert document.raw_html == article_html

    @pytest.mark.asyncio
    async def test_javascript_shell_is_rejected(self, respx_mock, spa_shell_html):
        respx_mock.get(URL).mock(return_value=httpx.Response(200, text=spa_shell_html))

        with pytest.raises(JavascriptRenderedError) as exc_info:
            await HttpPageFetcher().fetch(URL)

        assert str(exc_info.value) == "JAVASCRIPT_RENDERED"

    @pytest.mark.asyncio
    async def test_bot_wall_is_rejected(self, respx_mock, bot_wall_html, logfire_capture):
        respx_mock.get(URL).mock(return_value=httpx.Response(200, text=bot_wall_html))

        with pytest.raises(JavascriptRenderedError):
            await HttpPageFetcher().fetch(URL)

        rejected = [kwargs for level, args, kwargs in logfire_capture if "rejected" in args[0]]
        assert rejected
        assert rejected[0]["challenge_marker"] == "attention required + cloudflare"
