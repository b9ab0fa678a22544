"""YouTube platform — new uploads via the Data API v3. Requires an API key."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sitch.checkpoint import parse_timestamp
from sitch.errors import ConfigError, MalformedResponse
from sitch.sources.http import fetch_json
from sitch.sources.platform import Item, PlatformChecker, Update

logger = logging.getLogger(__name__)

_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
_VIDEO_URL = "https://www.youtube.com/watch?v={}"
_EPOCH = "1970-01-01T00:00:00Z"
_MAX_RESULTS = 25


@dataclass
class YouTubeChannel(Item):
    channel_id: str


class YouTubePlatform(PlatformChecker):
    """Checks YouTube channels for new videos."""

    key = "youtube"
    item_class = YouTubeChannel
    credential_required = True

    def __init__(self, items: list[Item] | None = None, api_key: str | None = None) -> None:
        super().__init__(items)
        self.api_key = api_key

    @classmethod
    def platform_name(cls) -> str:
        return "YouTube"

    def has_credential(self) -> bool:
        return bool(self.api_key)

    def check_item(self, item: YouTubeChannel, since: datetime | None) -> list[Update]:
        params = {
            "part": "snippet",
            "channelId": item.channel_id,
            "maxResults": _MAX_RESULTS,
            "order": "date",
            "type": "video",
            "key": self.api_key,
            "publishedAfter": since.isoformat(timespec="seconds") if since else _EPOCH,
        }
        data = fetch_json(_SEARCH_URL, params=params, timeout=self._timeout)
        videos = data.get("items") if isinstance(data, dict) else None
        if not isinstance(videos, list):
            raise MalformedResponse("YouTube API JSON data wasn't an object with items")

        updates: list[Update] = []
        for video in videos:
            snippet = video.get("snippet") or {}
            try:
                published_at = parse_timestamp(snippet.get("publishedAt"))
            except ValueError:
                published_at = None
            if published_at is None:
                continue
            # publishedAfter is only second-precise
            if since is not None and published_at <= since:
                continue
            video_id = (video.get("id") or {}).get("videoId")
            updates.append(
                Update(
                    title=snippet.get("title") or "<unnamed>",
                    link=_VIDEO_URL.format(video_id) if video_id else "<no link>",
                    published_at=published_at,
                )
            )
        return updates

    # --- sources file ---

    @classmethod
    def from_config(cls, section) -> YouTubePlatform:
        if section is None:
            return cls()
        if not isinstance(section, dict):
            raise ConfigError("Expected the youtube section to be an object")
        api_key = section.get("api_key")
        if api_key is not None and not isinstance(api_key, str):
            raise ConfigError("youtube.api_key must be a string")
        return cls(cls.items_from_config(section.get("channels")), api_key=api_key)

    def to_config(self) -> dict:
        return {"api_key": self.api_key, "channels": self.items_to_config()}
