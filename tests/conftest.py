"""Shared pytest fixtures and configuration.

Fixture Categories:
1. HTML samples: article_html, example_domain_html, bot_wall_html, spa_shell_html
2. Fakes: fake_playwright (a scripted stand-in for the Playwright driver)
3. Infrastructure: respx_mock, mock_settings, mock_logfire, logfire_capture,
   test_client
"""

import os
from contextlib import asynccontextmanager, contextmanager
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest

# Suppress "logfire not configured" warnings in tests
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

import logfire
import respx

from pagescope.config import Settings


# =============================================================================
# HTML Samples
# =============================================================================


@pytest.fixture
def article_html():
    """A content-rich static page that the lightweight fetch should accept."""
    return """
    <html>
    <head>
        <title>Field Notes on Urban Gardening</title>
        <meta name="description" content="Practical notes for growing food in small city spaces.">
    </head>
    <body>
        <header><nav><a href="/">Home</a> <a href="/about">About</a></nav></header>
        <main>
            <h1>Urban Gardening</h1>
            <p>Container gardens make it possible to grow herbs and greens on a narrow balcony.</p>
            <p>Choose pots with drainage holes and a light potting mix that does not compact.</p>
            <p>Most leafy vegetables need at least four hours of direct sunlight every day.</p>
            <table>
                <caption>Planting calendar</caption>
                <thead><tr><th>Crop</th><th>Sow</th><th>Harvest</th></tr></thead>
                <tbody>
                    <tr><td>Basil</td><td>April</td><td>June</td></tr>
                    <tr><td>Lettuce</td><td>March</td><td>May</td></tr>
                </tbody>
            </table>
            <ul><li>Basil</li><li>Mint</li><li>Chives</li></ul>
            <ol><li>Fill the pot</li><li>Sow the seeds</li></ol>
            <img src="/images/balcony.jpg" alt="Balcony garden">
            <a href="https://example.org/guide">Full guide</a>
            <a href="#top">Back to top</a>
            <a href="javascript:void(0)">Menu</a>
            <form><input type="email" name="email" placeholder="Your email"><button>Subscribe</button></form>
        </main>
        <footer>Copyright Garden Co.</footer>
    </body>
    </html>
    """


@pytest.fixture
def example_domain_html():
    """Markup of the IANA example.com page."""
    return """<!doctype html>
<html>
<head>
    <title>Example Domain</title>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
</head>
<body>
<div>
    <h1>Example Domain</h1>
    <p>This domain is for use in illustrative examples in documents. You may use this
    domain in literature without prior coordination or asking for permission.</p>
    <p><a href="https://www.iana.org/domains/example">More information...</a></p>
</div>
</body>
</html>
"""


@pytest.fixture
def bot_wall_html():
    """A Cloudflare style interstitial."""
    return """
    <html>
    <head><title>Attention Required! | Cloudflare</title></head>
    <body>
        <h1>Sorry, you have been blocked</h1>
        <p>This website is using a security service to protect itself from online attacks.
        The action you just performed triggered the security solution.</p>
        <script src="/cdn-cgi/challenge-platform/h/b/orchestrate/jsch/v1"></script>
    </body>
    </html>
    """


@pytest.fixture
def spa_shell_html():
    """A JavaScript application shell with no server-rendered content."""
    return """
    <html>
    <head><title>App</title><script src="/static/js/main.js"></script></head>
    <body><div id="root"></div><noscript>You need to enable JavaScript to run this app.</noscript></body>
    </html>
    """


# =============================================================================
# Playwright Fake
# =============================================================================


class FakePlaywright:
    """Scripted stand-in for the object yielded by ``async_playwright()``.

    ``pages`` is the sequence of HTML documents successive ``page.content()``
    calls return (the last one repeats).
    """

    def __init__(self, pages, executable_path="/opt/chromium/chrome"):
        self.page = MagicMock(name="page")
        self.page.goto = AsyncMock()
        self.page.wait_for_function = AsyncMock()
        self.page.evaluate = AsyncMock()
        self.page.wait_for_timeout = AsyncMock()
        self.page.route = AsyncMock()
        self.page.on = Mock()
        self.page.set_default_navigation_timeout = Mock()
        self.page.set_default_timeout = Mock()

        contents = list(pages)

        async def content():
            return contents.pop(0) if len(contents) > 1 else contents[0]

        self.page.content = AsyncMock(side_effect=content)

        self.browser = MagicMock(name="browser")
        self.browser.new_page = AsyncMock(return_value=self.page)
        self.browser.close = AsyncMock()

        self.chromium = MagicMock(name="chromium")
        self.chromium.executable_path = executable_path
        self.chromium.launch = AsyncMock(return_value=self.browser)

        self.entered = False
        self.exited = False

    def factory(self):
        """Drop-in replacement for ``async_playwright``."""

        @asynccontextmanager
        async def _context():
            self.entered = True
            try:
                yield self
            finally:
                self.exited = True

        return _context()


@pytest.fixture
def fake_playwright():
    """Build a FakePlaywright for a sequence of rendered HTML documents."""
    return FakePlaywright


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def respx_mock():
    """Respx mock fixture for HTTP mocking."""
    with respx.mock:
        yield respx


@pytest.fixture
def mock_settings(monkeypatch):
    """Application settings with deterministic values."""
    settings = Settings(
        env="local",
        runtime_environment="local",
        browser_executable_path="/usr/bin/chromium",
        summarizer_url="https://summarizer.test/",
        include_raw_html=False,
        logfire_token=None,
        sentry_dsn=None,
    )

    monkeypatch.setattr("pagescope.config.get_settings", lambda: settings)
    # Patch where get_settings is imported so handlers see the mock
    monkeypatch.setattr("pagescope.main.get_settings", lambda: settings)
    monkeypatch.setattr("pagescope.api.scrape.get_settings", lambda: settings)
    monkeypatch.setattr("pagescope.cli.scrape_cli.get_settings", lambda: settings)
    monkeypatch.setattr("pagescope.logging_config.get_settings", lambda: settings)
    monkeypatch.setattr(
        "pagescope.services.scrape_orchestrator.get_settings", lambda: settings
    )
    return settings


@pytest.fixture
def logfire_capture():
    """
    Capture Logfire logs for testing.

    This fixture patches Logfire to capture log calls for assertion.
    """
    captured_logs = []

    def capture(level):
        def _capture(*args, **kwargs):
            captured_logs.append((level, args, kwargs))

        return _capture

    with (
        patch("logfire.info", side_effect=capture("info")),
        patch("logfire.warn", side_effect=capture("warn")),
        patch("logfire.error", side_effect=capture("error")),
        patch("logfire.debug", side_effect=capture("debug")),
    ):
        yield captured_logs


@pytest.fixture
def mock_logfire(monkeypatch):
    """
    Mock Logfire for tests that configure the application.

    Replaces configuration and instrumentation calls so no exporter or
    instrumentation is installed during tests.
    """

    @contextmanager
    def mock_span(*args, **kwargs):
        yield {}

    mock_logfire_module = MagicMock()
    mock_logfire_module.span = mock_span

    for attr in (
        "configure",
        "instrument_fastapi",
        "instrument_pydantic",
    ):
        monkeypatch.setattr(logfire, attr, getattr(mock_logfire_module, attr))
    monkeypatch.setattr("pagescope.middleware.correlation_id.logfire.span", mock_span)

    return mock_logfire_module


@pytest.fixture
def test_client(mock_settings, mock_logfire):
    """FastAPI TestClient for E2E tests."""
    from fastapi.testclient import TestClient

    from pagescope.main import app

    with TestClient(app) as client:
        yield client
    app.state.orchestrator = None
