"""Source platforms — the fixed set of platforms sitch knows how to check."""

from __future__ import annotations

from sitch.sources.anime import AnimePlatform
from sitch.sources.bandcamp import BandcampPlatform
from sitch.sources.manga import MangaPlatform
from sitch.sources.platform import CheckResult, Item, PlatformChecker, Update
from sitch.sources.rss import RssPlatform
from sitch.sources.youtube import YouTubePlatform

# Also the order platforms are stored in the sources file.
PLATFORM_CLASSES: tuple[type[PlatformChecker], ...] = (
    RssPlatform,
    YouTubePlatform,
    AnimePlatform,
    MangaPlatform,
    BandcampPlatform,
)


def get_platform_class(key: str) -> type[PlatformChecker] | None:
    """Look up a platform class by its sources-file key. Returns None if unknown."""
    for cls in PLATFORM_CLASSES:
        if cls.key == key:
            return cls
    return None


__all__ = [
    "PLATFORM_CLASSES",
    "CheckResult",
    "Item",
    "PlatformChecker",
    "Update",
    "get_platform_class",
]
