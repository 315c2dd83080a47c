"""
YouTube Data API v3 adapter for tunequiz.

This module is the only place that talks to the network. It reads
playlist listings (playlistItems) and checks playlist existence
(playlists), translating every transport or payload problem into a
ProviderError so the fetcher can switch to fallback data.

Endpoints:
    GET {base_url}/playlistItems?part=snippet&maxResults=N&playlistId=ID&key=KEY[&pageToken=T]
    GET {base_url}/playlists?part=snippet&id=ID&key=KEY

Raw items are returned untouched; validation against the PlaylistItem
schema happens in the fetcher so skipped items can be counted there.

Usage:
    provider = YouTubePlaylistProvider.from_config(config.provider)
    items = provider.list_playlist_items("PLxQODuHe4E5MPk6anBwqCgyfIa00KhK0c", 50)
"""

import threading
from typing import Any

import requests

from tunequiz.core.config import DEFAULT_BASE_URL, PROVIDER_MAX_PAGE_SIZE, ProviderConfig
from tunequiz.core.exceptions import FetchCancelledError, ProviderError
from tunequiz.core.logger import get_logger

logger = get_logger(__name__)


USER_AGENT = "tunequiz/1.0"


class YouTubePlaylistProvider:
    """
    Thin client for the two YouTube Data API endpoints the pipeline needs.

    Attributes:
        api_key: API key sent with every request. May be None, in which
                 case every listing call raises ProviderError.
        base_url: API root without trailing slash.
        timeout: Per-request timeout in seconds.
        session: requests.Session used for all calls (injectable for tests).
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 8.0,
        session: requests.Session | None = None
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": USER_AGENT})
        self.session = session

    @classmethod
    def from_config(
        cls,
        config: ProviderConfig,
        session: requests.Session | None = None
    ) -> "YouTubePlaylistProvider":
        """Create a provider from the provider configuration section."""
        return cls(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            session=session
        )

    def list_playlist_items(
        self,
        playlist_id: str,
        max_results: int,
        page_size: int = PROVIDER_MAX_PAGE_SIZE,
        max_pages: int = 1,
        cancel_event: threading.Event | None = None
    ) -> list[Any]:
        """
        Read up to max_results raw items from a playlist.

        Args:
            playlist_id: YouTube playlist id.
            max_results: Upper bound on returned items.
            page_size: Items requested per page (capped at 50).
            max_pages: Pages to follow via nextPageToken. The default of 1
                       keeps a fetch to a single request.
            cancel_event: Checked before each page after the first.

        Returns:
            Raw 'items' entries in playlist order. May be empty.

        Raises:
            ProviderError: If the API key is missing, the request fails or
                           times out, the status is not 2xx, or the payload
                           is not the expected JSON shape.
            FetchCancelledError: If cancel_event is set between pages.
        """
        if not self.api_key:
            raise ProviderError(
                "YouTube API key not configured",
                details={"playlist_id": playlist_id}
            )

        page_size = max(1, min(page_size, PROVIDER_MAX_PAGE_SIZE))
        items: list[Any] = []
        page_token: str | None = None

        for page in range(max_pages):
            remaining = max_results - len(items)
            if remaining <= 0:
                break
            if page and cancel_event is not None and cancel_event.is_set():
                raise FetchCancelledError(
                    f"Listing of playlist {playlist_id} was cancelled after {page} pages",
                    details={"playlist_id": playlist_id, "items": len(items)}
                )

            params = {
                "part": "snippet",
                "maxResults": min(page_size, remaining),
                "playlistId": playlist_id,
                "key": self.api_key,
            }
            if page_token:
                params["pageToken"] = page_token

            data = self._get_json("playlistItems", params, playlist_id)

            page_items = data.get("items", [])
            if not isinstance(page_items, list):
                raise ProviderError(
                    "Malformed playlistItems response: 'items' is not a list",
                    details={"playlist_id": playlist_id, "page": page}
                )

            items.extend(page_items[:remaining])
            logger.debug(f"Playlist {playlist_id} page {page + 1}: {len(page_items)} items")

            page_token = data.get("nextPageToken")
            if not page_items or not page_token:
                break

        return items

    def playlist_exists(self, playlist_id: str) -> tuple[bool, str | None]:
        """
        Check whether a playlist exists and is readable with the API key.

        Returns:
            (True, None) if the playlist is accessible, otherwise
            (False, reason). Never raises.
        """
        if not self.api_key:
            return False, "No API key provided"

        params = {"part": "snippet", "id": playlist_id, "key": self.api_key}

        try:
            data = self._get_json("playlists", params, playlist_id)
        except ProviderError as e:
            if e.status_code is not None:
                return False, f"API error: {e.status_code}"
            return False, f"Validation error: {e.message}"

        items = data.get("items")
        if isinstance(items, list) and items:
            return True, None
        return False, "Playlist not found or not accessible"

    def _get_json(self, endpoint: str, params: dict[str, Any], playlist_id: str) -> dict[str, Any]:
        """
        Perform a GET request and decode the JSON object body.

        Raises:
            ProviderError: On timeout, connection failure, non-2xx status,
                           or a body that is not a JSON object.
        """
        url = f"{self.base_url}/{endpoint}"

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise ProviderError(
                f"Request timed out after {self.timeout}s",
                details={"playlist_id": playlist_id, "endpoint": endpoint},
                is_timeout=True
            ) from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise ProviderError(
                f"YouTube API error: {status}",
                details={"playlist_id": playlist_id, "endpoint": endpoint, "original_error": str(e)},
                status_code=status
            ) from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(
                f"YouTube API request failed: {e}",
                details={"playlist_id": playlist_id, "endpoint": endpoint}
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                "YouTube API returned invalid JSON",
                details={"playlist_id": playlist_id, "endpoint": endpoint},
                status_code=response.status_code
            ) from e

        if not isinstance(data, dict):
            raise ProviderError(
                "YouTube API returned an unexpected payload",
                details={"playlist_id": playlist_id, "endpoint": endpoint},
                status_code=response.status_code
            )
        return data
