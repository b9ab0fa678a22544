"""Bandcamp platform — new releases scraped from an artist's page.

Bandcamp no longer offers a public API for other artists' releases, so the
artist page is scraped for album links and each album page is fetched for
its title, artist and release date.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from sitch.errors import MissingField
from sitch.sources.http import fetch_text
from sitch.sources.platform import Item, PlatformChecker, Update

if TYPE_CHECKING:
    from sitch.config import Config

logger = logging.getLogger(__name__)

DEFAULT_MAX_ALBUMS = 10


@dataclass
class BandcampArtist(Item):
    url: str


def album_links(html: str, base_url: str, limit: int = DEFAULT_MAX_ALBUMS) -> list[str]:
    """Extract absolute album links from an artist page, newest first."""
    soup = BeautifulSoup(html, "html.parser")
    anchors = [
        li.find("a", href=True) for li in soup.select("li.music-grid-item")
    ]
    if not any(anchors):
        # older page layout
        anchors = soup.select("#discography .trackTitle a[href]")
    links = [urljoin(base_url, a["href"]) for a in anchors if a is not None]
    return links[:limit]


def parse_album(html: str, link: str) -> Update:
    """Parse an album page into an Update. Raises MissingField without a release date."""
    soup = BeautifulSoup(html, "html.parser")

    title_el = soup.select_one(".trackTitle")
    album_name = title_el.get_text(strip=True) if title_el else "<no album name>"
    artist_el = soup.select_one('[itemprop="byArtist"] a')
    artist = artist_el.get_text(strip=True) if artist_el else "<no artist>"

    # <meta itemprop="datePublished" content="20190426">
    date_el = soup.select_one('[itemprop="datePublished"]')
    raw_date = date_el.get("content") if date_el else None
    try:
        published_at = datetime.strptime(raw_date or "", "%Y%m%d").astimezone()
    except ValueError:
        raise MissingField(f"No published date on album at {link}") from None

    return Update(title=f"{album_name} by {artist}", link=link, published_at=published_at)


class BandcampPlatform(PlatformChecker):
    """Checks Bandcamp artists for new albums."""

    key = "bandcamp"
    item_class = BandcampArtist

    def __init__(self, items: list[Item] | None = None) -> None:
        super().__init__(items)
        self._max_albums = DEFAULT_MAX_ALBUMS

    @classmethod
    def platform_name(cls) -> str:
        return "Bandcamp"

    def configure(self, config: Config) -> None:
        super().configure(config)
        self._max_albums = config.bandcamp_max_albums

    def check_item(self, item: BandcampArtist, since: datetime | None) -> list[Update]:
        links = album_links(
            fetch_text(item.url, timeout=self._timeout), item.url, self._max_albums
        )
        if not links:
            logger.info("No albums found on %s", item.url)
            return []

        # any album that fails to load fails the whole artist
        with ThreadPoolExecutor(max_workers=len(links)) as pool:
            albums = list(pool.map(self._fetch_album, links))

        return [
            album for album in albums
            if since is None or album.published_at > since
        ]

    def _fetch_album(self, link: str) -> Update:
        return parse_album(fetch_text(link, timeout=self._timeout), link)
