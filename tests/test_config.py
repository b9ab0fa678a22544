"""Tests for sitch.config."""

import pytest

from sitch.config import load_config

CONFIG_ENV = (
    "SITCH_CONFIG_PATH",
    "MAX_WORKERS",
    "REQUEST_TIMEOUT_SECONDS",
    "BANDCAMP_MAX_ALBUMS",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Remove all config-related env vars before each test."""
    for key in CONFIG_ENV:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    # Prevent .env file from re-setting variables during tests
    monkeypatch.setattr("sitch.config.load_dotenv", lambda *a, **kw: None)


def test_defaults(tmp_path):
    """Config loads with no environment at all, with correct defaults."""
    config = load_config()

    assert config.sources_path == str(tmp_path / "sitch" / "config.json")
    assert config.max_workers == 16
    assert config.request_timeout_seconds == 30
    assert config.bandcamp_max_albums == 10
    assert config.log_level == "WARNING"
    assert config.log_format == "text"


def test_overrides(monkeypatch):
    monkeypatch.setenv("SITCH_CONFIG_PATH", "/tmp/sources.json")
    monkeypatch.setenv("MAX_WORKERS", "4")
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("LOG_FORMAT", "json")

    config = load_config()

    assert config.sources_path == "/tmp/sources.json"
    assert config.max_workers == 4
    assert config.request_timeout_seconds == 5
    assert config.log_format == "json"


def test_non_integer_raises(monkeypatch):
    """Error message names the offending variable."""
    monkeypatch.setenv("MAX_WORKERS", "lots")
    with pytest.raises(ValueError, match="MAX_WORKERS"):
        load_config()


def test_non_positive_raises(monkeypatch):
    monkeypatch.setenv("BANDCAMP_MAX_ALBUMS", "0")
    with pytest.raises(ValueError, match="BANDCAMP_MAX_ALBUMS"):
        load_config()


def test_config_is_frozen():
    """Config is immutable after creation."""
    config = load_config()

    with pytest.raises(AttributeError):
        config.max_workers = 1
