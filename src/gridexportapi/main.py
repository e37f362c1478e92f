from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.responses import FileResponse, HTMLResponse

from gridexport.cache import ExportCache
from gridexport.client import FlowFeedClient
from gridexport.config import ExportSettings, get_settings
from gridexport.sampler import Sampler

from .models import ExportReading

log = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@lru_cache(maxsize=1)
def get_cache() -> ExportCache:
    return ExportCache()


def build_sampler(settings: ExportSettings, cache: ExportCache) -> Sampler:
    client = FlowFeedClient(
        url=settings.source_url,
        connect_timeout=settings.connect_timeout,
        request_timeout=settings.request_timeout,
    )
    return Sampler(
        source=client,
        cache=cache,
        country=settings.country,
        interval_seconds=settings.refresh_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    sampler = build_sampler(get_settings(), get_cache())
    sampler.start()
    try:
        yield
    finally:
        # The thread is a daemon; do not wait out an in-flight fetch.
        sampler.stop(timeout=1.0)
        log.info("Sampler stopped")


app = FastAPI(title="Grid Export API", version="0.1.0", lifespan=lifespan)


def _icon(name: str) -> FileResponse:
    return FileResponse(STATIC_DIR / name, media_type="image/png")


@app.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
    return HTMLResponse((STATIC_DIR / "index.html").read_text(encoding="utf-8"))


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/data.json", response_model=ExportReading)
def read_data(cache: ExportCache = Depends(get_cache)) -> ExportReading:
    reading = cache.read_snapshot()
    return ExportReading(curr_export=reading.value, last_update=reading.elapsed_seconds)


@app.get("/ebba-gr0n.png", response_class=FileResponse)
def icon_green() -> FileResponse:
    return _icon("ebba-gr0n.png")


@app.get("/ebba-r0d.png", response_class=FileResponse)
def icon_red() -> FileResponse:
    return _icon("ebba-r0d.png")
