"""The sources file — followed items, their checkpoints and the global checkpoint.

File format: a JSON object with an optional ``last_checked`` timestamp and one
section per platform. Each platform section is parsed separately and a
missing section yields an empty platform, so files written before a
platform existed keep working. Unknown top-level fields are carried through
untouched on save.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from sitch.checkpoint import format_timestamp, parse_timestamp
from sitch.errors import ConfigError
from sitch.sources import PLATFORM_CLASSES, PlatformChecker

logger = logging.getLogger(__name__)


def default_sources_path() -> Path:
    """``$XDG_CONFIG_HOME/sitch/config.json``, falling back to ``~/.config``."""
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "sitch" / "config.json"


class Sources:
    """Every platform's items plus the time sitch last found an update."""

    def __init__(
        self,
        last_checked: datetime | None = None,
        platforms: list[PlatformChecker] | None = None,
        extra: dict | None = None,
    ) -> None:
        self.last_checked = last_checked
        by_key = {p.key: p for p in platforms or []}
        self._platforms = [by_key.get(cls.key) or cls() for cls in PLATFORM_CLASSES]
        self._extra = dict(extra or {})

    def platforms(self) -> list[PlatformChecker]:
        return list(self._platforms)

    def platform(self, key: str) -> PlatformChecker:
        for platform in self._platforms:
            if platform.key == key:
                return platform
        raise KeyError(key)

    @classmethod
    def load(cls, path: str | Path) -> Sources:
        """Load the sources file, creating an empty one if it doesn't exist.

        Raises ConfigError if the file can't be read, written or parsed.
        """
        path = Path(path)
        if not path.exists():
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text("{}\n", encoding="utf-8")
            except OSError as exc:
                raise ConfigError(f"Couldn't write to config file at {path}.") from exc
            logger.info("Created empty sources file at %s", path)
            return cls()

        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Couldn't read config file at {path}.") from exc
        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as exc:
            raise ConfigError(
                "Couldn't parse config contents. Please check that the config "
                f"file at {path} is properly formatted JSON."
            ) from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file at {path} must contain a JSON object.")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> Sources:
        try:
            last_checked = parse_timestamp(data.get("last_checked"))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Couldn't parse last_checked from config.json: {exc}") from exc

        platforms = []
        for platform_cls in PLATFORM_CLASSES:
            try:
                platforms.append(platform_cls.from_config(data.get(platform_cls.key)))
            except ConfigError as exc:
                raise ConfigError(
                    f"Couldn't parse {platform_cls.key} from config.json: {exc}"
                ) from exc

        known = {"last_checked", *(p.key for p in PLATFORM_CLASSES)}
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(last_checked, platforms, extra)

    def to_dict(self) -> dict:
        data = dict(self._extra)
        data["last_checked"] = format_timestamp(self.last_checked)
        for platform in self._platforms:
            data[platform.key] = platform.to_config()
        return data

    def save(self, path: str | Path) -> None:
        """Atomically write the sources file as pretty-printed JSON."""
        path = Path(path)
        payload = json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
        tmp_path = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", dir=str(path.parent), delete=False, encoding="utf-8", suffix=".tmp"
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(payload + "\n")
            tmp_path.replace(path)
        except OSError as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise ConfigError(f"Could not write to config.json file at {path}.") from exc
