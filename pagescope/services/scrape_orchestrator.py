"""Scrape orchestration service.

Runs the two fetch strategies in order and turns their outcome into either a
``ScrapeResult`` or a ``ScrapeFailure``:

1. Validate the input URL (400 on failure)
2. Lightweight HTTP fetch under its own deadline; any failure is retained
   and the request escalates
3. Rendered browser fetch under its own deadline; failure here is terminal
   and is classified from both retained errors (422)
4. Optional AI summary of a plain-text digest (never fatal)

The orchestrator keeps no per-request state, so one instance can serve
concurrent invocations.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Protocol

import logfire

from pagescope.config import Settings, get_settings, resolve_runtime_environment
from pagescope.constants import (
    BROWSER_PHASE_TIMEOUT_SECONDS,
    HTTP_PHASE_TIMEOUT_SECONDS,
)
from pagescope.models.scrape_models import (
    ErrorDetails,
    ErrorPayload,
    ExtractedDocument,
    MethodUsed,
    ScrapeRequest,
    ScrapeResult,
)
from pagescope.services.browser_fetcher import BrowserPageFetcher
from pagescope.services.digest import build_digest
from pagescope.services.http_fetcher import HttpPageFetcher
from pagescope.services.scrape_errors import (
    PUBLIC_MESSAGES,
    BrowserConfigurationError,
    BrowserTimeoutError,
    ErrorType,
    HttpTimeoutError,
    ScrapeFailure,
    UrlRequiredError,
    UrlValidationError,
    classify_failure,
)
from pagescope.services.summarizer import SummarizerService
from pagescope.services.url_validator import validate_scrape_url


class PageFetcher(Protocol):
    """Protocol shared by both fetch strategies."""

    async def fetch(self, url: str) -> ExtractedDocument:
        """Fetch ``url`` and return its extraction.

        Raises:
            ScrapeError: If the strategy could not produce an acceptable page
        """
        ...


class Summarizer(Protocol):
    async def summarize(self, prompt: str, digest: str) -> str: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScrapeOrchestrator:
    """Coordinate validation, fetch strategies, escalation and summarization."""

    def __init__(
        self,
        http_fetcher: PageFetcher | None = None,
        browser_fetcher: PageFetcher | None = None,
        summarizer: Summarizer | None = None,
        http_timeout: float = HTTP_PHASE_TIMEOUT_SECONDS,
        browser_timeout: float = BROWSER_PHASE_TIMEOUT_SECONDS,
    ):
        """Initialize the orchestrator.

        Args:
            http_fetcher: Lightweight strategy (defaults to HttpPageFetcher)
            browser_fetcher: Rendered strategy (defaults to a local BrowserPageFetcher)
            summarizer: Summarization collaborator (defaults to SummarizerService)
            http_timeout: Deadline for the lightweight strategy in seconds
            browser_timeout: Deadline for the rendered strategy in seconds
        """
        self._http_fetcher = http_fetcher or HttpPageFetcher()
        self._browser_fetcher = browser_fetcher or BrowserPageFetcher()
        self._summarizer = summarizer or SummarizerService()
        self._http_timeout = http_timeout
        self._browser_timeout = browser_timeout

    async def scrape_input(self, payload: dict[str, Any]) -> ScrapeResult:
        """Scrape from a raw input record (``{"url": ..., "prompt": ...}``)."""
        return await self.scrape(ScrapeRequest.model_validate(payload))

    async def scrape(self, request: ScrapeRequest) -> ScrapeResult:
        """Run one scrape invocation.

        Args:
            request: URL to scrape and optional summary prompt

        Returns:
            ScrapeResult built from whichever strategy succeeded

        Raises:
            ScrapeFailure: With status 400 for invalid input, 422 when both
                strategies failed
        """
        start_time = time.time()
        url = self._validate(request)
        logfire.info("Scraping", url=url, mode="auto", has_prompt=bool(request.prompt))

        document, method_used = await self._fetch_with_fallback(url)

        summary = ""
        if request.prompt:
            summary = await self._summarizer.summarize(
                request.prompt, build_digest(document, url)
            )

        result = ScrapeResult.from_document(
            document,
            url=url,
            method_used=method_used,
            summary=summary,
            scraped_at=_utcnow(),
        )
        logfire.info(
            "Scrape completed",
            url=url,
            method_used=method_used.value,
            paragraph_count=len(result.paragraphs),
            table_count=len(result.tables),
            list_count=len(result.lists),
            summarized=bool(request.prompt),
            total_time_ms=(time.time() - start_time) * 1000,
        )
        return result

    def _validate(self, request: ScrapeRequest) -> str:
        try:
            if not request.url:
                raise UrlRequiredError()
            return validate_scrape_url(request.url)
        except UrlValidationError as e:
            error_type = ErrorType(e.code)
            logfire.info("Rejected scrape input", url=request.url, error_type=e.code)
            raise ScrapeFailure(
                400,
                ErrorPayload(
                    error="URL is required" if isinstance(e, UrlRequiredError) else "Invalid URL",
                    error_type=error_type.value,
                    message=PUBLIC_MESSAGES[error_type],
                    url=request.url,
                    timestamp=_utcnow(),
                ),
            ) from e

    async def _fetch_with_fallback(self, url: str) -> tuple[ExtractedDocument, MethodUsed]:
        http_error: str | None = None
        try:
            document = await asyncio.wait_for(
                self._http_fetcher.fetch(url), timeout=self._http_timeout
            )
            return document, MethodUsed.HTTP
        except asyncio.TimeoutError:
            http_error = str(HttpTimeoutError())
        except Exception as e:
            http_error = str(e)
        logfire.warn("HTTP scraping failed, escalating to browser", url=url, error=http_error)

        try:
            document = await asyncio.wait_for(
                self._browser_fetcher.fetch(url), timeout=self._browser_timeout
            )
            return document, MethodUsed.BROWSER
        except asyncio.TimeoutError:
            browser_error = str(BrowserTimeoutError())
        except BrowserConfigurationError as e:
            logfire.error("Browser is not available", url=url, error=str(e))
            browser_error = BrowserConfigurationError.code
        except Exception as e:
            browser_error = str(e)
        logfire.error(
            "Browser scraping failed",
            url=url,
            http_error=http_error,
            browser_error=browser_error,
        )

        error_type = classify_failure(http_error, browser_error)
        raise ScrapeFailure(
            422,
            ErrorPayload(
                error="Scraping failed",
                error_type=error_type.value,
                message=PUBLIC_MESSAGES[error_type],
                url=url,
                details=ErrorDetails(http_error=http_error, browser_error=browser_error),
                timestamp=_utcnow(),
            ),
        )


def build_scrape_orchestrator(settings: Settings | None = None) -> ScrapeOrchestrator:
    """Wire an orchestrator from settings; the runtime is resolved once here."""
    settings = settings or get_settings()
    return ScrapeOrchestrator(
        http_fetcher=HttpPageFetcher(timeout=settings.http_request_timeout_seconds),
        browser_fetcher=BrowserPageFetcher(
            runtime_environment=resolve_runtime_environment(settings),
            executable_path=settings.browser_executable_path,
        ),
        summarizer=SummarizerService(
            base_url=settings.summarizer_url,
            model=settings.summarizer_model,
            timeout=settings.summarizer_timeout_seconds,
        ),
        http_timeout=settings.http_phase_timeout_seconds,
        browser_timeout=settings.browser_phase_timeout_seconds,
    )
