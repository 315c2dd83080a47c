"""
Catalog module for tunequiz.

Turns a category's YouTube playlist into normalized, cached tracks.

Components:
    - models: Track, PlaybackWindow, PlaylistItem, FetchResult
    - normalizer: clean_title(), extract_artist()
    - timing: select_window(), jittered_window()
    - cache: CacheStore (per-category TTL cache)
    - provider: YouTubePlaylistProvider (YouTube Data API v3)
    - fallback: Bundled tracks served when the provider fails
    - fetcher: CatalogFetcher tying it all together
"""

from tunequiz.catalog.models import (
    FetchResult,
    PlaybackWindow,
    PlaylistItem,
    Provenance,
    Track,
    UNKNOWN_ARTIST,
)
from tunequiz.catalog.cache import CacheEntry, CacheStats, CacheStore
from tunequiz.catalog.normalizer import clean_title, extract_artist
from tunequiz.catalog.timing import (
    DEFAULT_PROFILE,
    SIMPLE_PROFILE,
    WindowProfile,
    jittered_window,
    select_window,
)
from tunequiz.catalog.provider import YouTubePlaylistProvider
from tunequiz.catalog.fallback import FallbackBundle, load_fallback_bundle
from tunequiz.catalog.fetcher import CatalogFetcher, fit_windows, shuffle_and_limit

__all__ = [
    # Models
    "Track",
    "PlaybackWindow",
    "PlaylistItem",
    "FetchResult",
    "Provenance",
    "UNKNOWN_ARTIST",
    # Cache
    "CacheStore",
    "CacheEntry",
    "CacheStats",
    # Normalization
    "clean_title",
    "extract_artist",
    "select_window",
    "jittered_window",
    "WindowProfile",
    "DEFAULT_PROFILE",
    "SIMPLE_PROFILE",
    # Fetching
    "YouTubePlaylistProvider",
    "FallbackBundle",
    "load_fallback_bundle",
    "CatalogFetcher",
    "shuffle_and_limit",
    "fit_windows",
]
