"""Client for the external AI summarization service.

Summaries are best-effort: any failure degrades to a fixed fallback string
(rate-limit specific for HTTP 429) instead of failing the scrape.
"""

import asyncio
import time

import httpx
import logfire

from pagescope.constants import (
    DEFAULT_SUMMARIZER_MODEL,
    DEFAULT_SUMMARIZER_URL,
    SUMMARIZER_TIMEOUT_SECONDS,
    SUMMARY_RATE_LIMITED_MESSAGE,
    SUMMARY_UNAVAILABLE_MESSAGE,
)


def build_summary_prompt(prompt: str, digest: str) -> str:
    return f"{prompt}:\n\n{digest}"


class SummarizerService:
    """Ask a text-generation endpoint to summarize a page digest."""

    def __init__(
        self,
        base_url: str = DEFAULT_SUMMARIZER_URL,
        model: str = DEFAULT_SUMMARIZER_MODEL,
        timeout: float = SUMMARIZER_TIMEOUT_SECONDS,
    ):
        """
        Initialize summarizer service.

        Args:
            base_url: Endpoint receiving the chat-style POST
            model: Model name forwarded to the endpoint
            timeout: Deadline for the whole call in seconds
        """
        self.base_url = base_url
        self.model = model
        self.timeout = timeout

    async def _request_summary(self, content: str) -> str:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.base_url,
                json={
                    "messages": [{"role": "user", "content": content}],
                    "model": self.model,
                    "private": True,
                },
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            return response.text

    async def summarize(self, prompt: str, digest: str) -> str:
        """
        Summarize ``digest`` following the user's ``prompt``.

        Args:
            prompt: User instruction
            digest: Plain-text digest of the scraped page

        Returns:
            The service's response body verbatim, or a fallback message
        """
        start_time = time.time()
        content = build_summary_prompt(prompt, digest)
        try:
            summary = await asyncio.wait_for(
                self._request_summary(content), timeout=self.timeout
            )
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logfire.error(
                "Summarizer returned an error status",
                status_code=status_code,
                error=e.response.text[:500],
                response_time_ms=(time.time() - start_time) * 1000,
            )
            if status_code == 429:
                return SUMMARY_RATE_LIMITED_MESSAGE
            return SUMMARY_UNAVAILABLE_MESSAGE
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            logfire.error(
                "Summarizer request failed",
                error=str(e),
                error_type=type(e).__name__,
                response_time_ms=(time.time() - start_time) * 1000,
            )
            return SUMMARY_UNAVAILABLE_MESSAGE
        except Exception as e:
            logfire.error(
                "Unexpected summarizer error",
                error=str(e),
                error_type=type(e).__name__,
                response_time_ms=(time.time() - start_time) * 1000,
            )
            return SUMMARY_UNAVAILABLE_MESSAGE

        logfire.info(
            "Summary generated",
            prompt_length=len(prompt),
            digest_length=len(digest),
            summary_length=len(summary),
            response_time_ms=(time.time() - start_time) * 1000,
        )
        return summary
