from __future__ import annotations

import logging

import typer
import uvicorn
from dotenv import load_dotenv
from rich.logging import RichHandler

from .breakdown import border_breakdown
from .client import FeedError, FlowFeedClient
from .config import ConfigError, ExportSettings, get_settings
from .model import net_export

app = typer.Typer(add_completion=False, help="Net cross-border power export monitor")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_time=True, show_level=True)],
    )


def _load_env() -> None:
    load_dotenv(override=False)


def _settings() -> ExportSettings:
    try:
        return get_settings()
    except ConfigError as exc:
        logging.getLogger("gridexport").error(str(exc))
        raise typer.Exit(code=1) from exc


@app.callback()
def _init(
    verbose: bool = typer.Option(False, "--verbose", help="Verbose logging"),
) -> None:
    _setup_logging(verbose)
    _load_env()


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Listen address"),
    port: int | None = typer.Option(None, "--port", min=1, max=65535),
) -> None:
    settings = _settings()
    uvicorn.run(
        "gridexportapi.main:app",
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )


@app.command()
def sample(
    country: str | None = typer.Option(None, "--country", help="Country code prefix, e.g. SE"),
    url: str | None = typer.Option(None, "--url", help="Flow feed URL"),
) -> None:
    log = logging.getLogger("gridexport")
    settings = _settings()
    country = (country or settings.country).strip().upper()
    client = FlowFeedClient(
        url=url or settings.source_url,
        connect_timeout=settings.connect_timeout,
        request_timeout=settings.request_timeout,
    )
    try:
        records = client.fetch_records()
    except FeedError as exc:
        log.error("Fetch failed: %s", exc)
        raise typer.Exit(code=1) from exc
    finally:
        client.close()

    table = border_breakdown(records, country)
    log.info("Net export %s: %.1f MW", country, net_export(records, country))
    if not table.empty:
        log.info("Per border:\n%s", table.to_string(index=False))


def main() -> None:
    app()
