"""FastAPI application initialization."""

import os
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration

from pagescope.api import health, scrape
from pagescope.config import get_settings, resolve_runtime_environment
from pagescope.constants import SERVICE_NAME, SERVICE_VERSION
from pagescope.logging_config import setup_logfire
from pagescope.middleware.correlation_id import CorrelationIDMiddleware
from pagescope.services.scrape_orchestrator import build_scrape_orchestrator


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: observability and the shared orchestrator."""
    settings = get_settings()

    # Initialize Logfire for observability
    setup_logfire(app)

    # Initialize Sentry if DSN is provided
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            environment=settings.env,
            integrations=[FastApiIntegration()],
        )

    # The orchestrator is stateless; one instance serves every request
    app.state.orchestrator = build_scrape_orchestrator(settings)

    logfire.info(
        "Application startup complete",
        environment=settings.env,
        runtime_environment=resolve_runtime_environment(settings).value,
    )

    yield

    logfire.info("Application shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="pagescope",
    description="Single-page scraping with browser fallback and optional AI summary",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)

# Correlation ID middleware (must be first for request tracing)
app.add_middleware(CorrelationIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health.router, tags=["health"])
app.include_router(scrape.router, prefix="/scrape", tags=["scrape"])


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": SERVICE_NAME, "version": SERVICE_VERSION}


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "pagescope.main:app", host="0.0.0.0", port=port, reload=os.getenv("ENV") == "local"
    )
