"""Anime platform — aired episodes from MyAnimeList via the Jikan API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sitch.checkpoint import parse_timestamp
from sitch.errors import MissingField
from sitch.sources.http import fetch_json
from sitch.sources.platform import Item, PlatformChecker, Update

_EPISODES_URL = "https://api.jikan.moe/v4/anime/{}/episodes"


@dataclass
class Anime(Item):
    id: str


def _parse_episodes(episodes: list, since: datetime | None) -> list[Update]:
    updates: list[Update] = []
    for episode in episodes:
        if not isinstance(episode, dict):
            continue
        try:
            aired = parse_timestamp(episode.get("aired"))
        except ValueError:
            continue
        if aired is None or (since is not None and aired <= since):
            continue
        number = episode.get("mal_id")
        title = episode.get("title")
        link = episode.get("url")
        if number is None or not title or not link:
            continue
        updates.append(
            Update(title=f"Episode {number} - {title}", link=link, published_at=aired)
        )
    return updates


class AnimePlatform(PlatformChecker):
    """Checks anime for newly aired episodes."""

    key = "anime"
    item_class = Anime

    @classmethod
    def platform_name(cls) -> str:
        return "Anime"

    def check_item(self, item: Anime, since: datetime | None) -> list[Update]:
        url = _EPISODES_URL.format(item.id)
        data = fetch_json(url, timeout=self._timeout)
        episodes = data.get("data") if isinstance(data, dict) else None
        if not isinstance(episodes, list):
            raise MissingField("Could not find episodes in received JSON")

        # Episodes are paged oldest first; the newest ones live on the last page
        last_page = (data.get("pagination") or {}).get("last_visible_page") or 1
        if last_page > 1:
            page = fetch_json(url, params={"page": last_page}, timeout=self._timeout)
            more = page.get("data") if isinstance(page, dict) else None
            if not isinstance(more, list):
                raise MissingField(f"Could not find episodes on page {last_page}")
            episodes = episodes + more

        return _parse_episodes(episodes, since)
