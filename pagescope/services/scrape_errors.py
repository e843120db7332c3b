"""Scrape error taxonomy.

Internal failures raised by the validator and fetchers all derive from
``ScrapeError`` and carry a stable ``code``. The orchestrator turns the
terminal ones into a ``ScrapeFailure`` holding the public payload and the
HTTP status to answer with.
"""

from datetime import datetime, timezone
from enum import Enum

from pagescope.models.scrape_models import ErrorPayload


class ScrapeError(Exception):
    """Base exception for all scrape pipeline errors."""

    code = "SCRAPE_ERROR"

    def __init__(self, detail: str | None = None):
        self.detail = detail
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.detail:
            return f"{self.code}: {self.detail}"
        return self.code


# =============================================================================
# Input validation
# =============================================================================


class UrlValidationError(ScrapeError):
    """Raised when the input URL cannot be scraped at all."""

    code = "INVALID_URL"


class UrlRequiredError(UrlValidationError):
    code = "URL_REQUIRED"


class InvalidUrlError(UrlValidationError):
    code = "INVALID_URL"


class InvalidSchemeError(UrlValidationError):
    code = "INVALID_URL_PROTOCOL"


# =============================================================================
# Lightweight fetch (always recovered by escalating)
# =============================================================================


class FetchError(ScrapeError):
    code = "FETCH_ERROR"


class HttpStatusError(FetchError):
    """Client error status (4xx) from the target server."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__()

    @property
    def code(self) -> str:  # type: ignore[override]
        return f"HTTP_ERROR_{self.status_code}"


class HttpServerError(HttpStatusError):
    """Server error status (5xx) from the target server."""

    @property
    def code(self) -> str:  # type: ignore[override]
        return f"HTTP_SERVER_ERROR_{self.status_code}"


class HttpTransportError(FetchError):
    code = "HTTP_TRANSPORT_ERROR"


class HttpTimeoutError(FetchError):
    code = "HTTP_TIMEOUT"


class JavascriptRenderedError(FetchError):
    """The page looks like a JS shell or a bot wall; needs a real browser."""

    code = "JAVASCRIPT_RENDERED"


# =============================================================================
# Rendered fetch (terminal)
# =============================================================================


class BrowserError(FetchError):
    code = "BROWSER_ERROR"


class BrowserTimeoutError(BrowserError):
    code = "BROWSER_TIMEOUT"


class BrowserNavigationTimeoutError(BrowserTimeoutError):
    code = "BROWSER_NAVIGATION_TIMEOUT"


class BrowserConfigurationError(BrowserError):
    """No usable browser executable; fatal and never retried."""

    code = "BROWSER_UNAVAILABLE"


class BrowserExecutableNotFoundError(BrowserConfigurationError):
    code = "BROWSER_EXECUTABLE_NOT_FOUND"


class LocalBrowserExecutableNotConfiguredError(BrowserConfigurationError):
    code = "LOCAL_BROWSER_EXECUTABLE_NOT_CONFIGURED"


class BlockedOrEmptyError(BrowserError):
    """Every render attempt still looked blocked or empty."""

    code = "BLOCKED_OR_EMPTY"


class LoginOrBlockedError(BrowserError):
    """Login wall. Reserved: no fetcher detects login walls yet."""

    code = "LOGIN_OR_BLOCKED"


# =============================================================================
# Public classification
# =============================================================================


class ErrorType(str, Enum):
    """Public ``errorType`` codes."""

    URL_REQUIRED = "URL_REQUIRED"
    INVALID_URL = "INVALID_URL"
    INVALID_URL_PROTOCOL = "INVALID_URL_PROTOCOL"
    TIMEOUT = "TIMEOUT"
    LOGIN_REQUIRED = "LOGIN_REQUIRED"
    BLOCKED = "BLOCKED"
    SCRAPE_ERROR = "SCRAPE_ERROR"


PUBLIC_MESSAGES = {
    ErrorType.URL_REQUIRED: "URL is required",
    ErrorType.INVALID_URL: "Invalid URL format",
    ErrorType.INVALID_URL_PROTOCOL: "Only http(s) URLs are allowed.",
    ErrorType.TIMEOUT: (
        "⚠️ Scraping timed out on the server. This often happens on "
        "serverless hosts for heavy pages."
    ),
    ErrorType.LOGIN_REQUIRED: (
        "⚠️ This page likely requires login or restricts automated access "
        "(common on social platforms like Instagram). For reliable results, "
        "use the platform's official API or scrape only content you're "
        "authorized to access."
    ),
    ErrorType.BLOCKED: (
        "⚠️ This site appears to block scraping from server IPs "
        "(bot protection/captcha)."
    ),
    ErrorType.SCRAPE_ERROR: (
        "⚠️ Unable to scrape this site. It may be blocking automation or "
        "requires interaction/login."
    ),
}

INTERNAL_ERROR_MESSAGE = (
    "An unexpected error occurred while processing your request."
)


def internal_error_payload() -> ErrorPayload:
    """Generic error body that reveals nothing about the underlying failure."""
    return ErrorPayload(
        error="Internal server error",
        message=INTERNAL_ERROR_MESSAGE,
        timestamp=datetime.now(timezone.utc),
    )


def classify_failure(http_error: str | None, browser_error: str | None) -> ErrorType:
    """Map the retained HTTP and browser failure messages to one public type."""
    if "TIMEOUT" in (http_error or "") or "TIMEOUT" in (browser_error or ""):
        return ErrorType.TIMEOUT
    if browser_error == LoginOrBlockedError.code:
        return ErrorType.LOGIN_REQUIRED
    if browser_error == BlockedOrEmptyError.code:
        return ErrorType.BLOCKED
    return ErrorType.SCRAPE_ERROR


class ScrapeFailure(Exception):
    """Terminal failure of one invocation, ready to render to the caller."""

    def __init__(self, status_code: int, payload: ErrorPayload):
        self.status_code = status_code
        self.payload = payload
        super().__init__(payload.error_type or payload.error)
