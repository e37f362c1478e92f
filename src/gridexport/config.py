from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_SOURCE_URL = "http://driftsdata.statnett.no/restapi/PhysicalFlowMap/GetFlow"


class ConfigError(RuntimeError):
    pass


def _get_env(name: str, default: str | None = None, required: bool = False) -> str | None:
    value = os.getenv(name, default)
    if required and not value:
        raise ConfigError(f"Missing required environment variable: {name}")
    return value


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid int for {name}: {raw}") from exc


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid float for {name}: {raw}") from exc


@dataclass(frozen=True)
class ExportSettings:
    source_url: str = DEFAULT_SOURCE_URL
    country: str = "SE"
    refresh_seconds: int = 60
    connect_timeout: float = 15.0
    request_timeout: float = 30.0
    host: str = "0.0.0.0"
    port: int = 3000

    def __post_init__(self) -> None:
        country = self.country.strip().upper()
        if not country:
            raise ConfigError("Country code must be non-empty.")
        object.__setattr__(self, "country", country)
        if self.refresh_seconds < 1:
            raise ConfigError(f"Refresh interval must be >= 1 second, got {self.refresh_seconds}")
        if self.connect_timeout <= 0 or self.request_timeout <= 0:
            raise ConfigError("Timeouts must be positive.")
        if self.connect_timeout >= self.request_timeout:
            raise ConfigError(
                f"Connect timeout ({self.connect_timeout}s) must be shorter than "
                f"request timeout ({self.request_timeout}s)."
            )
        if not 1 <= self.port <= 65535:
            raise ConfigError(f"Invalid port: {self.port}")

    @classmethod
    def from_env(cls) -> "ExportSettings":
        return cls(
            source_url=_get_env("GRIDEXPORT_SOURCE_URL", DEFAULT_SOURCE_URL, required=True),
            country=_get_env("GRIDEXPORT_COUNTRY", "SE", required=True),
            refresh_seconds=_get_int("GRIDEXPORT_REFRESH_SECONDS", 60),
            connect_timeout=_get_float("GRIDEXPORT_CONNECT_TIMEOUT", 15.0),
            request_timeout=_get_float("GRIDEXPORT_REQUEST_TIMEOUT", 30.0),
            host=_get_env("GRIDEXPORT_HOST", "0.0.0.0", required=True),
            port=_get_int("GRIDEXPORT_PORT", 3000),
        )


@lru_cache(maxsize=1)
def get_settings() -> ExportSettings:
    project_root = Path(__file__).resolve().parents[2]
    path = project_root / ".env"
    if path.exists():
        load_dotenv(path, override=False)
    return ExportSettings.from_env()
