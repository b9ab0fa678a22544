"""HTTP helpers shared by the adapters — map transport and payload failures to SourceErrors."""

from __future__ import annotations

import httpx

from sitch.errors import MalformedResponse, NetworkUnavailable

_USER_AGENT = "sitch/0.3 (+update checker)"


def fetch(url: str, *, params: dict | None = None, timeout: float = 30.0) -> httpx.Response:
    """GET a URL, raising NetworkUnavailable on any transport or HTTP status failure."""
    try:
        response = httpx.get(
            url,
            params=params,
            headers={"User-Agent": _USER_AGENT},
            timeout=timeout,
            follow_redirects=True,
        )
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise NetworkUnavailable(f"Couldn't access {url}: {exc}") from exc
    return response


def fetch_json(url: str, *, params: dict | None = None, timeout: float = 30.0):
    """GET a URL and decode its body as JSON."""
    response = fetch(url, params=params, timeout=timeout)
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponse(f"Couldn't parse response from {url} as JSON") from exc


def fetch_text(url: str, *, timeout: float = 30.0) -> str:
    return fetch(url, timeout=timeout).text
