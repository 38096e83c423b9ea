"""
Spotify Web API calls with the session's bearer token.
fetch_all walks a cursor-linked collection ("next" URL per page) sequentially.
"""
import logging
from typing import Any

import httpx

from playlist_web import config
from playlist_web.errors import UpstreamApiError

logger = logging.getLogger(__name__)


def api_get(url: str, access_token: str, params: dict[str, Any] | None = None) -> dict:
    """
    GET one resource. Returns the decoded JSON object.
    Raises UpstreamApiError on transport failure, non-2xx, or a non-JSON body.
    """
    try:
        r = httpx.get(
            url,
            params=params,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
            timeout=config.HTTP_TIMEOUT,
        )
    except httpx.HTTPError as e:
        raise UpstreamApiError(f"Request to {url} failed: {e}") from e

    if not r.is_success:
        raise UpstreamApiError(f"GET {url} returned {r.status_code}", status_code=r.status_code, body=r.text)

    try:
        data = r.json()
    except ValueError as e:
        raise UpstreamApiError(f"GET {url} returned non-JSON body", status_code=r.status_code, body=r.text) from e
    if not isinstance(data, dict):
        raise UpstreamApiError(f"GET {url} returned unexpected JSON", status_code=r.status_code, body=r.text)
    return data


def fetch_all(url: str, access_token: str) -> list:
    """
    Follow "next" from the first page until it is null, collecting "items" in server order.
    Pages are requested one at a time; any failed page propagates and nothing is returned.
    """
    items: list = []
    next_url: str | None = url
    pages = 0
    while next_url:
        page = api_get(next_url, access_token)
        items.extend(page.get("items") or [])
        pages += 1
        next_url = page.get("next")
    logger.debug("Fetched %d items in %d page(s) from %s", len(items), pages, url)
    return items


def get_playlist(playlist_id: str, access_token: str) -> dict:
    return api_get(f"{config.API_BASE_URL}/playlists/{playlist_id}", access_token)


def fetch_playlist_tracks(playlist_id: str, access_token: str) -> list:
    """All playlist track items (the API pages them 100 at a time)."""
    return fetch_all(f"{config.API_BASE_URL}/playlists/{playlist_id}/tracks", access_token)
