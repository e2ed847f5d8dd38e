"""Configuration loaded from environment variables / .env file."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from stenella.feeds import DEFAULT_SOURCES
from stenella.registry import is_absolute_url


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass
class Settings:
    host: str = "127.0.0.1"
    port: int = 8080

    # Per-feed fetch timeout; a hung upstream never stalls a request longer than this
    fetch_timeout_s: float = 10.0

    default_sources: list[str] = field(default_factory=lambda: list(DEFAULT_SOURCES))

    # UI polling interval for /api/feeds
    refresh_ms: int = 120_000

    log_level: str = "INFO"


def _number(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    # float("nan") and float("inf") parse fine but make no sense as timeouts
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _sources(raw: str | None) -> list[str]:
    if not raw:
        return list(DEFAULT_SOURCES)
    sources = [s.strip() for s in raw.split(",") if s.strip()]
    for url in sources:
        if not is_absolute_url(url):
            raise ConfigError(f"STENELLA_DEFAULT_SOURCES entry is not an absolute URL: {url!r}")
    return sources


def load_settings() -> Settings:
    load_dotenv()

    return Settings(
        host=os.environ.get("STENELLA_HOST", "127.0.0.1"),
        port=_number("STENELLA_PORT", "8080", int),
        fetch_timeout_s=_number("STENELLA_FETCH_TIMEOUT_S", "10", float),
        default_sources=_sources(os.environ.get("STENELLA_DEFAULT_SOURCES")),
        refresh_ms=_number("STENELLA_REFRESH_MS", "120000", int),
        log_level=os.environ.get("STENELLA_LOG_LEVEL", "INFO"),
    )
