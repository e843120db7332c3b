"""Rendered fetch strategy: a headless Chromium driven by Playwright.

Each call launches its own isolated browser, blocks heavy resources, waits
for the DOM to become meaningful and then runs a bounded extract/scroll/retry
loop until the classifier accepts the rendered page. The browser is closed on
every exit path.
"""

import asyncio
import os
import shutil
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncContextManager

import logfire
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Playwright, Route, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pagescope.config import RuntimeEnvironment
from pagescope.constants import (
    ACCEPT_HTML,
    BLOCKED_RESOURCE_TYPES,
    BROWSER_DEFAULT_TIMEOUT_MS,
    BROWSER_LAUNCH_TIMEOUT_MS,
    BROWSER_MAX_ATTEMPTS,
    BROWSER_MEANINGFUL_TEXT_CHARS,
    BROWSER_MEANINGFUL_TEXT_TIMEOUT_MS,
    BROWSER_NAVIGATION_TIMEOUT_MS,
    DESKTOP_USER_AGENT,
    MIN_SCROLL_DISTANCE_PX,
    NETWORK_IDLE_TIMEOUT_MS,
    NETWORK_IDLE_WINDOW_MS,
    SCROLL_DELAY_BASE_MS,
    SCROLL_DELAY_STEP_MS,
)
from pagescope.models.scrape_models import ExtractedDocument
from pagescope.services.classifier import (
    looks_blocked_or_js_required,
    looks_empty_extraction,
)
from pagescope.services.html_extractor import extract_document
from pagescope.services.scrape_errors import (
    BlockedOrEmptyError,
    BrowserError,
    BrowserExecutableNotFoundError,
    BrowserNavigationTimeoutError,
    LocalBrowserExecutableNotConfiguredError,
)

LOCAL_CHROMIUM_ARGS = ("--no-sandbox", "--disable-setuid-sandbox")

# Flags for constrained serverless containers
SERVERLESS_CHROMIUM_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-zygote",
    "--single-process",
)

WINDOWS_CHROME_PATH = r"C:\Program Files\Google\Chrome\Application\chrome.exe"
MACOS_CHROME_PATH = "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"
LINUX_BROWSER_COMMANDS = ("google-chrome", "chromium", "chromium-browser")

MEANINGFUL_TEXT_JS = """
(minChars) => {
    const text = (document && document.body && document.body.innerText) || "";
    return text.replace(/\\s+/g, " ").trim().length > minChars;
}
"""

SCROLL_JS = """
(minDistance) => {
    window.scrollBy(0, Math.max(window.innerHeight, minDistance));
}
"""


class RouteDecision(str, Enum):
    ALLOW = "allow"
    ABORT = "abort"


@dataclass(frozen=True)
class RequestFilterPolicy:
    """Decides which sub-resource requests a rendered page may make."""

    blocked_resource_types: frozenset[str] = BLOCKED_RESOURCE_TYPES

    def decide(self, resource_type: str) -> RouteDecision:
        if resource_type in self.blocked_resource_types:
            return RouteDecision.ABORT
        return RouteDecision.ALLOW

    async def handle_route(self, route: Route) -> None:
        """Playwright route handler applying ``decide``."""
        if self.decide(route.request.resource_type) is RouteDecision.ABORT:
            await route.abort()
        else:
            await route.continue_()


class NetworkIdleTracker:
    """Counts in-flight requests of a page to detect network idle windows.

    Playwright's own ``networkidle`` state uses a fixed window; this tracker
    lets the idle window and the overall cap be chosen per call.
    """

    def __init__(self, page: Page, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._inflight = 0
        self._last_activity = clock()
        page.on("request", self._on_request_started)
        page.on("requestfinished", self._on_request_settled)
        page.on("requestfailed", self._on_request_settled)

    @property
    def inflight(self) -> int:
        return self._inflight

    def _on_request_started(self, _request: Any) -> None:
        self._inflight += 1
        self._last_activity = self._clock()

    def _on_request_settled(self, _request: Any) -> None:
        self._inflight = max(0, self._inflight - 1)
        self._last_activity = self._clock()

    async def wait(self, idle_ms: int, timeout_ms: int, poll_ms: int = 50) -> bool:
        """Wait until no request has been in flight for ``idle_ms``.

        Returns:
            True if the network went idle, False if ``timeout_ms`` expired first
        """
        deadline = self._clock() + timeout_ms / 1000
        while True:
            now = self._clock()
            if self._inflight == 0 and (now - self._last_activity) * 1000 >= idle_ms:
                return True
            if now >= deadline:
                return False
            await asyncio.sleep(poll_ms / 1000)


def guess_local_executable(
    platform: str = sys.platform,
    which: Callable[[str], str | None] = shutil.which,
) -> str | None:
    """Best-effort default browser location for a developer machine."""
    if platform == "win32":
        return WINDOWS_CHROME_PATH
    if platform == "darwin":
        return MACOS_CHROME_PATH
    for command in LINUX_BROWSER_COMMANDS:
        path = which(command)
        if path:
            return path
    return None


@dataclass
class BrowserFetchOptions:
    """Tunables of the rendered fetch; defaults come from constants."""

    max_attempts: int = BROWSER_MAX_ATTEMPTS
    launch_timeout_ms: int = BROWSER_LAUNCH_TIMEOUT_MS
    navigation_timeout_ms: int = BROWSER_NAVIGATION_TIMEOUT_MS
    default_timeout_ms: int = BROWSER_DEFAULT_TIMEOUT_MS
    meaningful_text_chars: int = BROWSER_MEANINGFUL_TEXT_CHARS
    meaningful_text_timeout_ms: int = BROWSER_MEANINGFUL_TEXT_TIMEOUT_MS
    network_idle_ms: int = NETWORK_IDLE_WINDOW_MS
    network_idle_timeout_ms: int = NETWORK_IDLE_TIMEOUT_MS
    scroll_delay_base_ms: int = SCROLL_DELAY_BASE_MS
    scroll_delay_step_ms: int = SCROLL_DELAY_STEP_MS
    user_agent: str = DESKTOP_USER_AGENT
    extra_headers: dict[str, str] = field(
        default_factory=lambda: {
            "Accept": ACCEPT_HTML,
            "Accept-Language": "en-US,en;q=0.9",
        }
    )


class BrowserPageFetcher:
    """Fetch and extract a page through a real, headless Chromium."""

    def __init__(
        self,
        runtime_environment: RuntimeEnvironment = RuntimeEnvironment.LOCAL,
        executable_path: str | None = None,
        options: BrowserFetchOptions | None = None,
        request_filter: RequestFilterPolicy | None = None,
        playwright_factory: Callable[[], AsyncContextManager[Playwright]] = async_playwright,
    ):
        """Initialize the browser fetcher.

        Args:
            runtime_environment: Decides how the Chromium executable is found
            executable_path: Explicit local browser path (ignored when serverless)
            options: Timeouts, retry budget and headers
            request_filter: Policy for aborting sub-resource requests
            playwright_factory: Source of the Playwright driver (for testing)
        """
        self._runtime_environment = runtime_environment
        self._executable_path = executable_path
        self._options = options or BrowserFetchOptions()
        self._request_filter = request_filter or RequestFilterPolicy()
        self._playwright_factory = playwright_factory

    def _launch_options(self, playwright: Playwright) -> dict[str, Any]:
        """Resolve the executable and launch flags for this runtime.

        Raises:
            BrowserExecutableNotFoundError: Bundled Chromium missing (serverless)
            LocalBrowserExecutableNotConfiguredError: No local browser found
        """
        if self._runtime_environment is RuntimeEnvironment.SERVERLESS:
            executable = playwright.chromium.executable_path
            if not executable or not os.path.exists(executable):
                raise BrowserExecutableNotFoundError()
            args = SERVERLESS_CHROMIUM_ARGS
        else:
            executable = self._executable_path or guess_local_executable()
            if not executable:
                raise LocalBrowserExecutableNotConfiguredError()
            args = LOCAL_CHROMIUM_ARGS

        return {
            "executable_path": executable,
            "args": list(args),
            "headless": True,
            "timeout": self._options.launch_timeout_ms,
        }

    async def fetch(self, url: str) -> ExtractedDocument:
        """Render ``url`` and return the first acceptable extraction.

        Args:
            url: Validated absolute URL

        Returns:
            ExtractedDocument of the rendered DOM

        Raises:
            BrowserConfigurationError: If no browser executable can be resolved
            BrowserNavigationTimeoutError: If navigation does not reach DOM ready
            BlockedOrEmptyError: If every attempt still looked blocked or empty
            BrowserError: For any other browser failure
        """
        start_time = time.time()
        try:
            async with self._playwright_factory() as playwright:
                launch_options = self._launch_options(playwright)
                logfire.info(
                    "Launching headless browser",
                    url=url,
                    runtime_environment=self._runtime_environment.value,
                    executable_path=launch_options["executable_path"],
                )
                browser = await playwright.chromium.launch(**launch_options)
                try:
                    page = await browser.new_page(
                        user_agent=self._options.user_agent,
                        extra_http_headers=self._options.extra_headers,
                    )
                    document = await self._render_and_extract(page, url)
                finally:
                    await browser.close()
        except PlaywrightError as e:
            raise BrowserError(str(e)) from e

        logfire.info(
            "Page fetched via browser",
            url=url,
            body_text_length=document.body_text_length,
            paragraph_count=len(document.paragraphs),
            response_time_ms=(time.time() - start_time) * 1000,
        )
        return document

    async def _render_and_extract(self, page: Page, url: str) -> ExtractedDocument:
        options = self._options
        page.set_default_navigation_timeout(options.navigation_timeout_ms)
        page.set_default_timeout(options.default_timeout_ms)
        await page.route("**/*", self._request_filter.handle_route)
        idle_tracker = NetworkIdleTracker(page)

        try:
            await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=options.navigation_timeout_ms,
            )
        except PlaywrightTimeoutError as e:
            raise BrowserNavigationTimeoutError(str(e)) from e

        # Many SPAs first show a shell; give the DOM a chance to fill in
        try:
            await page.wait_for_function(
                MEANINGFUL_TEXT_JS,
                arg=options.meaningful_text_chars,
                timeout=options.meaningful_text_timeout_ms,
            )
        except PlaywrightError:
            logfire.info("DOM text still short after readiness wait", url=url)

        for attempt in range(options.max_attempts):
            went_idle = await idle_tracker.wait(
                options.network_idle_ms, options.network_idle_timeout_ms
            )

            html = await page.content()
            document = extract_document(html, url)
            blocked = looks_blocked_or_js_required(html, document)
            empty = looks_empty_extraction(document)

            logfire.info(
                "Browser extraction attempt",
                url=url,
                attempt=attempt + 1,
                max_attempts=options.max_attempts,
                network_idle=went_idle,
                body_text_length=document.body_text_length,
                looks_blocked=blocked,
                looks_empty=empty,
            )
            if not blocked and not empty:
                return document

            # Scroll to trigger lazy-loaded content before the next attempt
            try:
                await page.evaluate(SCROLL_JS, MIN_SCROLL_DISTANCE_PX)
                await page.wait_for_timeout(
                    options.scroll_delay_base_ms + options.scroll_delay_step_ms * attempt
                )
            except PlaywrightError as e:
                logfire.debug("Scroll between attempts failed", url=url, error=str(e))

        raise BlockedOrEmptyError()
