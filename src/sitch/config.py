"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from sitch.sources.store import default_sources_path

DEFAULT_MAX_WORKERS = 16


@dataclass(frozen=True)
class Config:
    """Application configuration. All values sourced from environment variables."""

    sources_path: str

    # Optional — Checking
    max_workers: int = DEFAULT_MAX_WORKERS
    request_timeout_seconds: int = 30
    bandcamp_max_albums: int = 10

    # Optional — Application
    log_level: str = "WARNING"
    log_format: str = "text"


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value


def load_config(env_path: str | Path | None = None) -> Config:
    """Load configuration from environment variables.

    Loads a .env file if present, then reads every setting with its default.
    Raises ValueError if a numeric setting isn't a positive integer.
    """
    load_dotenv(dotenv_path=env_path)

    return Config(
        sources_path=os.environ.get("SITCH_CONFIG_PATH") or str(default_sources_path()),
        # Optional — Checking
        max_workers=_int_env("MAX_WORKERS", DEFAULT_MAX_WORKERS),
        request_timeout_seconds=_int_env("REQUEST_TIMEOUT_SECONDS", 30),
        bandcamp_max_albums=_int_env("BANDCAMP_MAX_ALBUMS", 10),
        # Optional — Application
        log_level=os.environ.get("LOG_LEVEL", "WARNING"),
        log_format=os.environ.get("LOG_FORMAT", "text"),
    )
