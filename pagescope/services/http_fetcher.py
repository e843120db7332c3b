"""Lightweight fetch strategy: one plain HTTP GET, no JavaScript.

The result is only trusted when the classifier says the page does not look
like a JS shell or a bot wall; otherwise ``JavascriptRenderedError`` tells the
orchestrator to escalate to a real browser. This fetcher never retries.
"""

import time

import httpx
import logfire

from pagescope.constants import (
    ACCEPT_HTML,
    DESKTOP_USER_AGENT,
    HTTP_MAX_REDIRECTS,
    HTTP_REQUEST_TIMEOUT_SECONDS,
)
from pagescope.models.scrape_models import ExtractedDocument
from pagescope.services.classifier import (
    looks_blocked_or_js_required,
    matched_challenge_marker,
)
from pagescope.services.html_extractor import extract_document
from pagescope.services.scrape_errors import (
    HttpServerError,
    HttpStatusError,
    HttpTimeoutError,
    HttpTransportError,
    JavascriptRenderedError,
)


class HttpPageFetcher:
    """Fetch and extract a page with httpx and desktop-browser headers."""

    # Default headers to mimic a real browser
    DEFAULT_HEADERS = {
        "User-Agent": DESKTOP_USER_AGENT,
        "Accept": ACCEPT_HTML,
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
    }

    def __init__(
        self,
        timeout: float = HTTP_REQUEST_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
        max_redirects: int = HTTP_MAX_REDIRECTS,
    ):
        """Initialize the page fetcher.

        Args:
            timeout: Network timeout in seconds
            headers: Optional custom headers (defaults to browser-like headers)
            max_redirects: Redirects followed before giving up
        """
        self._timeout = timeout
        self._headers = headers or self.DEFAULT_HEADERS.copy()
        self._max_redirects = max_redirects

    async def fetch_html(self, url: str) -> str:
        """GET ``url`` and return the body text.

        Raises:
            HttpStatusError: On a 4xx response
            HttpServerError: On a 5xx response
            HttpTimeoutError: If the network timeout expires
            HttpTransportError: On connection, protocol or redirect failures
        """
        start_time = time.time()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                max_redirects=self._max_redirects,
                headers=self._headers,
            ) as client:
                response = await client.get(url)
        except httpx.TimeoutException as e:
            raise HttpTimeoutError(str(e) or type(e).__name__) from e
        except httpx.HTTPError as e:
            raise HttpTransportError(str(e) or type(e).__name__) from e

        elapsed = time.time() - start_time
        logfire.info(
            "Page fetched (httpx)",
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content_length=len(response.content),
            response_time_ms=elapsed * 1000,
        )

        if response.status_code >= 500:
            raise HttpServerError(response.status_code)
        if response.status_code >= 400:
            raise HttpStatusError(response.status_code)
        return response.text

    async def fetch(self, url: str) -> ExtractedDocument:
        """Fetch ``url`` and extract it, refusing pages that need a browser.

        Args:
            url: Validated absolute URL

        Returns:
            ExtractedDocument for the page

        Raises:
            JavascriptRenderedError: If the page looks JS-rendered or blocked
            FetchError: Any error raised by ``fetch_html``
        """
        html = await self.fetch_html(url)
        document = extract_document(html, url)

        if looks_blocked_or_js_required(html, document):
            marker = matched_challenge_marker(html)
            logfire.info(
                "Page needs a browser (httpx result rejected)",
                url=url,
                body_text_length=document.body_text_length,
                challenge_marker=" + ".join(marker) if marker else None,
            )
            raise JavascriptRenderedError()

        return document
