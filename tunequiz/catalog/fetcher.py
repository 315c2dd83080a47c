"""
Catalog fetching for tunequiz.

This module turns a category key into a list of normalized tracks,
reporting where they came from.

Fetch Workflow:
    1. Resolve the category to a playlist id (ConfigurationError if the
       category is unmapped or still holds the placeholder id)
    2. Serve from the cache when allowed and live          -> "cache"
    3. Otherwise read one provider page, validate each item against the
       PlaylistItem schema, clean title and artist, pick a playback window
    4. At least one track: write through the cache          -> "fresh"
    5. No tracks or ProviderError: serve the fallback bundle -> "fallback"
       or raise NoContentError when there is none

Cancellation:
    A threading.Event may be passed. The provider checks it between pages,
    and the fetcher checks it again once the provider call returns. A set
    event raises FetchCancelledError and nothing is cached.

Usage:
    fetcher = CatalogFetcher(provider, CacheStore(), config)
    result = fetcher.fetch_category("kpop", max_results=20)
    print(result.provenance, len(result.tracks))
"""

import random
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Sequence, TypeVar

from tunequiz.catalog.cache import CacheStore
from tunequiz.catalog.fallback import FallbackBundle
from tunequiz.catalog.models import FetchResult, PlaybackWindow, PlaylistItem, Provenance, Track
from tunequiz.catalog.normalizer import clean_title, extract_artist
from tunequiz.catalog.provider import YouTubePlaylistProvider
from tunequiz.catalog.timing import is_lyrics_video, select_window
from tunequiz.core.config import PLACEHOLDER_COLLECTION_ID, Config
from tunequiz.core.exceptions import (
    ConfigurationError,
    FetchCancelledError,
    NoContentError,
    ProviderError,
)
from tunequiz.core.logger import get_logger, log_provider_failure

logger = get_logger(__name__)

T = TypeVar("T")


def shuffle_and_limit(
    items: Sequence[T],
    max_results: int,
    shuffle: bool,
    rng: random.Random
) -> tuple[T, ...]:
    """
    Optionally shuffle a copy of items, then keep the first max_results.

    The input sequence is never modified.
    """
    result = list(items)
    if shuffle:
        rng.shuffle(result)
    return tuple(result[:max_results])


def fit_windows(tracks: Sequence[Track], clip_duration: int) -> tuple[Track, ...]:
    """
    Return tracks whose windows keep their start but last clip_duration.

    Used for fallback tracks, whose timing comes from a static file.
    """
    return tuple(
        t if t.playback_window.duration == clip_duration
        else replace(
            t,
            playback_window=PlaybackWindow(
                start=t.playback_window.start,
                end=t.playback_window.start + clip_duration
            )
        )
        for t in tracks
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CatalogFetcher:
    """
    Fetches, normalizes and caches the tracks of each category.

    Attributes:
        provider: Playlist provider adapter.
        cache: Cache shared by every fetch of this fetcher.
        config: Pipeline configuration (categories and tunables).
        fallback: Static tracks served when the provider fails.
    """

    def __init__(
        self,
        provider: YouTubePlaylistProvider,
        cache: CacheStore,
        config: Config,
        fallback: FallbackBundle | None = None,
        rng: random.Random | None = None
    ) -> None:
        self.provider = provider
        self.cache = cache
        self.config = config
        self.fallback = fallback if fallback is not None else FallbackBundle()
        self._rng = rng or random.Random()

    def resolve_collection_id(self, category_key: str) -> str:
        """
        Map a category key to its playlist id.

        Raises:
            ConfigurationError: If the category is not configured or its
                                id is the placeholder value.
        """
        collection_id = self.config.categories.get(category_key)
        if not collection_id:
            raise ConfigurationError(
                f"Category '{category_key}' not found",
                details={"category": category_key, "available": sorted(self.config.categories)}
            )
        if PLACEHOLDER_COLLECTION_ID in collection_id:
            raise ConfigurationError(
                f"Please set an actual playlist id for category '{category_key}'",
                details={"category": category_key, "collection_id": collection_id}
            )
        return collection_id

    def fetch_category(
        self,
        category_key: str,
        max_results: int | None = None,
        use_cache: bool = True,
        fallback_enabled: bool = True,
        cancel_event: threading.Event | None = None
    ) -> FetchResult:
        """
        Return tracks for a category along with their provenance.

        Args:
            category_key: Configured category key, e.g. "kpop".
            max_results: Maximum tracks returned. Defaults to
                         catalog.max_results from the config.
            use_cache: Serve a live cache entry if there is one.
            fallback_enabled: Serve fallback data when the provider fails.
            cancel_event: Set by the caller to abandon the fetch.

        Returns:
            FetchResult. Fallback results carry an error message.

        Raises:
            ConfigurationError: Unmapped or placeholder category.
            NoContentError: Provider and fallback both yielded nothing.
            FetchCancelledError: cancel_event was set during the fetch.
            ValueError: If max_results is less than 1.
        """
        category_key = category_key.strip().lower()
        catalog = self.config.catalog
        limit = catalog.max_results if max_results is None else max_results
        if limit < 1:
            raise ValueError(f"max_results must be >= 1, got {limit}")

        collection_id = self.resolve_collection_id(category_key)

        if use_cache:
            entry = self.cache.get(category_key)
            if entry is not None:
                logger.debug(f"Cache hit for {category_key} ({len(entry.data)} tracks)")
                return FetchResult(
                    category=category_key,
                    tracks=shuffle_and_limit(entry.data, limit, catalog.shuffle_on_read, self._rng),
                    provenance=Provenance.CACHE,
                    total_count=len(entry.data),
                    last_updated=datetime.fromtimestamp(entry.created_at, timezone.utc),
                    collection_id=entry.collection_id,
                )

        _check_cancelled(cancel_event, category_key)

        failure: str | None = None
        tracks: list[Track] = []
        skipped = 0

        try:
            raw_items = self.provider.list_playlist_items(
                collection_id,
                limit,
                page_size=catalog.page_size,
                max_pages=catalog.max_pages,
                cancel_event=cancel_event
            )
        except ProviderError as e:
            failure = e.message
        else:
            tracks, skipped = self._build_tracks(raw_items, category_key)

        # Checked again after the blocking provider call
        _check_cancelled(cancel_event, category_key)

        if tracks:
            self.cache.set(category_key, tracks, catalog.cache_ttl, collection_id=collection_id)
            if skipped:
                logger.info(f"{category_key}: skipped {skipped} unusable playlist items")
            return FetchResult(
                category=category_key,
                tracks=shuffle_and_limit(tracks, limit, catalog.shuffle_on_read, self._rng),
                provenance=Provenance.FRESH,
                total_count=len(tracks),
                last_updated=_utcnow(),
                collection_id=collection_id,
                skipped=skipped,
            )

        if failure is None:
            failure = "No songs found from playlist"

        fallback_tracks = (
            fit_windows(self.fallback.tracks_for(category_key), catalog.clip_duration)
            if fallback_enabled else ()
        )
        log_provider_failure(
            logger,
            category=category_key,
            collection_id=collection_id,
            reason=failure,
            used_fallback=bool(fallback_tracks)
        )

        if fallback_tracks:
            return FetchResult(
                category=category_key,
                tracks=shuffle_and_limit(fallback_tracks, limit, catalog.shuffle_on_read, self._rng),
                provenance=Provenance.FALLBACK,
                total_count=len(fallback_tracks),
                last_updated=_utcnow(),
                error=f"{failure}, using fallback",
                skipped=skipped,
            )

        raise NoContentError(
            f"No songs found for category '{category_key}'",
            details={"category": category_key, "collection_id": collection_id, "reason": failure}
        )

    def refresh_category(self, category_key: str, max_results: int | None = None) -> FetchResult:
        """Fetch a category from the provider, bypassing any cached entry."""
        return self.fetch_category(category_key, max_results=max_results, use_cache=False)

    def _build_tracks(self, raw_items: list[Any], category_key: str) -> tuple[list[Track], int]:
        """
        Validate and normalize raw provider items.

        Returns:
            (tracks in provider order, number of skipped items). Items are
            skipped when malformed, deleted/private, duplicated, or when
            their title cleans to nothing.
        """
        tracks: list[Track] = []
        seen: set[str] = set()
        skipped = 0
        clip_duration = self.config.catalog.clip_duration

        for index, raw in enumerate(raw_items, start=1):
            item = PlaylistItem.from_api_item(raw)
            if item is None or item.video_id in seen:
                skipped += 1
                continue

            title = clean_title(item.title)
            if not title:
                skipped += 1
                continue

            seen.add(item.video_id)
            tracks.append(Track(
                id=item.video_id,
                title=title,
                artist=extract_artist(item.title, item.channel_name),
                category_key=category_key,
                playback_window=select_window(item.title, clip_duration),
                thumbnail_url=item.thumbnail_url,
                original_title=item.title,
                is_lyrics_video=is_lyrics_video(item.title),
                position=index,
            ))

        return tracks, skipped


def _check_cancelled(cancel_event: threading.Event | None, category_key: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise FetchCancelledError(
            f"Fetch for '{category_key}' was cancelled",
            details={"category": category_key}
        )
