"""Centralized logging configuration with Pydantic Logfire integration."""

import logging
from typing import Any

import logfire
from fastapi import FastAPI

from pagescope.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure Logfire and stdlib logging without a web app.

    Used directly by the CLI and, through ``setup_logfire``, by the API.
    """
    settings = settings or get_settings()

    logfire_config: dict[str, Any] = {
        "environment": settings.env,
        "service_name": "pagescope",
    }
    if settings.logfire_token:
        # Cloud logging only when a token is provided
        logfire_config["token"] = settings.logfire_token
    else:
        logfire_config["send_to_logfire"] = False

    logfire.configure(**logfire_config)
    logfire.instrument_pydantic()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    if settings.env == "local":
        # Local: Console formatting for development
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        # Production: Logfire handles structured formatting
        logging.basicConfig(level=log_level, format="%(message)s")


def setup_logfire(app: FastAPI) -> None:
    """
    Initialize and configure Pydantic Logfire for observability.

    Sets up:
    - Environment-aware Logfire configuration
    - FastAPI instrumentation (request/response tracing)
    - Pydantic instrumentation (model validation logging)
    - Console or bare-message stdlib logging depending on environment
    """
    configure_logging()
    logfire.instrument_fastapi(app)
