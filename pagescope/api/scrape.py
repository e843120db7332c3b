"""Scrape endpoint.

Accepts the input record as a JSON body, runs one scrape invocation and
renders either the result, the mapped public error payload, or a generic 500
that leaks no internal detail.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from pagescope.config import get_settings
from pagescope.services.scrape_errors import ScrapeFailure, internal_error_payload
from pagescope.services.scrape_orchestrator import (
    ScrapeOrchestrator,
    build_scrape_orchestrator,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def get_orchestrator(request: Request) -> ScrapeOrchestrator:
    """Orchestrator stored on app state at startup, built lazily otherwise."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        orchestrator = build_scrape_orchestrator()
        request.app.state.orchestrator = orchestrator
    return orchestrator


def internal_error_response() -> JSONResponse:
    return JSONResponse(internal_error_payload().to_record(), status_code=500)


@router.post("")
async def scrape(request: Request):
    """Scrape one page and optionally summarize it."""
    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            raise ValueError("Request body must be a JSON object")
        result = await get_orchestrator(request).scrape_input(payload)
    except ScrapeFailure as failure:
        return JSONResponse(failure.payload.to_record(), status_code=failure.status_code)
    except Exception as e:
        logger.error("Scrape error: %s", e, exc_info=True)
        return internal_error_response()

    return JSONResponse(result.to_record(include_raw_html=get_settings().include_raw_html))
