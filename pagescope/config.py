"""Application configuration using Pydantic BaseSettings."""

import os
from collections.abc import Mapping
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagescope.constants import (
    BROWSER_PHASE_TIMEOUT_SECONDS,
    DEFAULT_SUMMARIZER_MODEL,
    DEFAULT_SUMMARIZER_URL,
    HTTP_PHASE_TIMEOUT_SECONDS,
    HTTP_REQUEST_TIMEOUT_SECONDS,
    SUMMARIZER_TIMEOUT_SECONDS,
)


class RuntimeEnvironment(str, Enum):
    """Where the service runs; decides how the browser executable is found."""

    LOCAL = "local"
    SERVERLESS = "serverless"


# Environment variables set by managed/serverless platforms
SERVERLESS_MARKERS = (
    "VERCEL",
    "NETLIFY",
    "NETLIFY_LOCAL",
    "AWS_LAMBDA_FUNCTION_VERSION",
    "APIFY_ACTOR_RUN_ID",
    "APIFY_IS_AT_HOME",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["local", "staging", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Browser Configuration
    runtime_environment: RuntimeEnvironment | None = Field(
        default=None,
        description="local or serverless; detected from platform markers when unset",
    )
    browser_executable_path: str | None = Field(
        default=None,
        description="Chrome/Chromium executable used outside serverless runtimes",
    )

    # ==========================================================================
    # Timeout Configuration
    # ==========================================================================
    # Defaults are sourced from pagescope/constants.py.

    http_request_timeout_seconds: float = Field(
        default=HTTP_REQUEST_TIMEOUT_SECONDS,
        description="Network timeout for the lightweight GET (seconds)",
    )
    http_phase_timeout_seconds: float = Field(
        default=HTTP_PHASE_TIMEOUT_SECONDS,
        description="Overall deadline for the lightweight fetch (seconds)",
    )
    browser_phase_timeout_seconds: float = Field(
        default=BROWSER_PHASE_TIMEOUT_SECONDS,
        description="Overall deadline for the rendered fetch (seconds)",
    )
    summarizer_timeout_seconds: float = Field(
        default=SUMMARIZER_TIMEOUT_SECONDS,
        description="Deadline for the summarization call (seconds)",
    )

    # Summarization collaborator
    summarizer_url: str = Field(
        default=DEFAULT_SUMMARIZER_URL, description="Summarization endpoint URL"
    )
    summarizer_model: str = Field(
        default=DEFAULT_SUMMARIZER_MODEL, description="Model name sent to the summarizer"
    )

    # Output
    include_raw_html: bool = Field(
        default=False, description="Include the fetched HTML as rawHtml in results"
    )

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )


def detect_runtime_environment(environ: Mapping[str, str] | None = None) -> RuntimeEnvironment:
    """Guess the runtime from well-known platform environment variables."""
    environ = os.environ if environ is None else environ
    if any(environ.get(marker) for marker in SERVERLESS_MARKERS):
        return RuntimeEnvironment.SERVERLESS
    return RuntimeEnvironment.LOCAL


def resolve_runtime_environment(
    settings: Settings, environ: Mapping[str, str] | None = None
) -> RuntimeEnvironment:
    """Explicit setting wins; otherwise fall back to platform detection."""
    if settings.runtime_environment is not None:
        return settings.runtime_environment
    return detect_runtime_environment(environ)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
