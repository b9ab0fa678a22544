"""Manga platform — released chapters from the Manga Eden catalog API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from sitch.errors import MissingField
from sitch.sources.http import fetch_json
from sitch.sources.platform import Item, PlatformChecker, Update

_MANGA_URL = "https://www.mangaeden.com/api/manga/{}/"


@dataclass
class Manga(Item):
    id: str


def _chapter_number(raw) -> str | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if float(raw).is_integer():
        return str(int(raw))
    return str(raw)


class MangaPlatform(PlatformChecker):
    """Checks manga for newly released chapters."""

    key = "manga"
    item_class = Manga

    @classmethod
    def platform_name(cls) -> str:
        return "Manga"

    def check_item(self, item: Manga, since: datetime | None) -> list[Update]:
        data = fetch_json(_MANGA_URL.format(item.id), timeout=self._timeout)
        chapters = data.get("chapters") if isinstance(data, dict) else None
        if not isinstance(chapters, list):
            raise MissingField("Could not find chapters in received JSON")
        base_url = data.get("url")

        # each chapter is [number, epoch timestamp, title, id]
        updates: list[Update] = []
        for chapter in chapters:
            if not isinstance(chapter, list) or len(chapter) < 3:
                continue
            number = _chapter_number(chapter[0])
            timestamp = chapter[1]
            title = chapter[2]
            if number is None or not isinstance(timestamp, (int, float)) or not isinstance(title, str):
                continue
            published_at = datetime.fromtimestamp(timestamp, tz=timezone.utc)
            if since is not None and published_at <= since:
                continue
            updates.append(
                Update(
                    title=f"Chapter {number} - {title}",
                    link=f"{base_url}/{number}" if isinstance(base_url, str) else "<no link>",
                    published_at=published_at,
                )
            )
        return updates
