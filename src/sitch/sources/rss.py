"""RSS/Atom feed platform."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

import feedparser

from sitch.errors import MalformedResponse
from sitch.sources.http import fetch_text
from sitch.sources.platform import Item, PlatformChecker, Update

logger = logging.getLogger(__name__)


@dataclass
class RssFeed(Item):
    feed: str


def _parse_pub_date(entry: dict) -> datetime | None:
    """Extract the publication date from a feed entry as an aware datetime."""
    raw = entry.get("published") or entry.get("updated")
    if raw:
        try:
            dt = parsedate_to_datetime(raw)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt
        except (ValueError, TypeError):
            pass
    # feedparser normalizes RFC 3339 and friends into a UTC struct_time
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if parsed:
        try:
            return datetime(*parsed[:6], tzinfo=timezone.utc)
        except (ValueError, TypeError):
            pass
    return None


class RssPlatform(PlatformChecker):
    """Checks RSS and Atom feeds."""

    key = "rss"
    item_class = RssFeed

    @classmethod
    def platform_name(cls) -> str:
        return "RSS"

    def check_item(self, item: RssFeed, since: datetime | None) -> list[Update]:
        text = fetch_text(item.feed, timeout=self._timeout)
        feed = feedparser.parse(text)
        if feed.bozo and not feed.entries:
            raise MalformedResponse(
                f"Couldn't parse RSS feed from {item.feed}: {feed.get('bozo_exception')}"
            )

        updates: list[Update] = []
        for entry in feed.entries:
            published_at = _parse_pub_date(entry)
            if published_at is None:
                logger.debug("Skipping undated entry in %s: %s", item.feed, entry.get("link"))
                continue
            if since is not None and published_at <= since:
                continue
            updates.append(
                Update(
                    title=(entry.get("title") or "").strip() or "<unnamed>",
                    link=entry.get("link") or "<no link>",
                    published_at=published_at,
                )
            )
        logger.info("Found %d new entries in %s", len(updates), item.name)
        return updates
