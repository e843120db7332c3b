"""Typer-based command line entry point."""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from pagescope.config import get_settings
from pagescope.logging_config import configure_logging
from pagescope.services.scrape_errors import (
    ScrapeFailure,
    UrlValidationError,
    internal_error_payload,
)
from pagescope.services.scrape_orchestrator import build_scrape_orchestrator
from pagescope.services.url_validator import validate_scrape_url

_project_root = Path(__file__).resolve().parent.parent.parent
load_dotenv(_project_root / ".env")
load_dotenv(_project_root / ".env.local")

logger = logging.getLogger(__name__)

app = typer.Typer(help="Scrape a single web page into structured JSON.")


def _emit(record: dict, output: Path | None) -> None:
    text = json.dumps(record, indent=2, ensure_ascii=False)
    typer.echo(text)
    if output is not None:
        output.write_text(text + "\n", encoding="utf-8")


@app.command()
def scrape(
    url: str = typer.Argument(..., help="Page to scrape (http or https)"),
    prompt: Optional[str] = typer.Option(
        None, "--prompt", "-p", help="Ask the AI service to summarize with this instruction"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Also write the JSON record to this file"
    ),
):
    """Scrape URL and print the result (or the error payload) as JSON."""
    settings = get_settings()
    configure_logging(settings)
    orchestrator = build_scrape_orchestrator(settings)

    try:
        result = asyncio.run(orchestrator.scrape_input({"url": url, "prompt": prompt}))
    except ScrapeFailure as failure:
        _emit(failure.payload.to_record(), output)
        raise typer.Exit(code=1)
    except Exception as e:
        logger.error("Scrape error: %s", e, exc_info=True)
        _emit(internal_error_payload().to_record(), output)
        raise typer.Exit(code=1)

    _emit(result.to_record(include_raw_html=settings.include_raw_html), output)


@app.command("validate-url")
def validate_url(url: str = typer.Argument(..., help="URL to check")):
    """Print the normalized form of URL, or its validation error code."""
    try:
        typer.echo(validate_scrape_url(url))
    except UrlValidationError as e:
        typer.echo(e.code, err=True)
        raise typer.Exit(code=2)


if __name__ == "__main__":
    app()
