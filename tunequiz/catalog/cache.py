"""
Thread-safe in-memory TTL cache for category track lists.

One entry per category key. Expiry is evaluated when an entry is read;
there is no background eviction. The store is an ordinary object so
each fetcher (and each test) can own its own instance and clock.

Usage:
    cache = CacheStore()
    cache.set("kpop", tracks, ttl=3600, collection_id="PL...")

    entry = cache.get("kpop")
    if entry is not None:
        tracks = entry.data
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from tunequiz.catalog.models import Track
from tunequiz.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """
    Cached tracks for one category.

    Attributes:
        key: Category key.
        data: Tracks in provider order.
        created_at: Clock reading when the entry was stored.
        expires_at: created_at + ttl. The entry is valid while now < expires_at.
        collection_id: Playlist id the tracks were fetched from.
    """
    key: str
    data: tuple[Track, ...]
    created_at: float
    expires_at: float
    collection_id: str | None = None


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of the cache for diagnostics."""
    size: int
    keys: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"size": self.size, "keys": list(self.keys)}


class CacheStore:
    """
    Per-category TTL cache guarded by a single lock.

    All public methods acquire self._lock. Entries are immutable, so a
    reader can keep using an entry after the lock is released even if
    another request overwrites the key.

    Attributes:
        _entries: Category key -> CacheEntry.
        _clock: Callable returning the current time in seconds.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> CacheEntry | None:
        """
        Return the live entry for key, or None.

        An expired entry is removed as a side effect.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if self._clock() >= entry.expires_at:
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None

            return entry

    def set(
        self,
        key: str,
        tracks: Iterable[Track],
        ttl: float,
        collection_id: str | None = None
    ) -> CacheEntry:
        """
        Store tracks under key, replacing any existing entry.

        Args:
            key: Category key.
            tracks: Tracks in provider order (copied into a tuple).
            ttl: Lifetime in seconds. Must be positive.
            collection_id: Playlist id the tracks came from.

        Returns:
            The stored CacheEntry.

        Raises:
            ValueError: If ttl is not positive.
        """
        if ttl <= 0:
            raise ValueError(f"Cache TTL must be positive, got {ttl}")

        data = tuple(tracks)
        with self._lock:
            now = self._clock()
            entry = CacheEntry(
                key=key,
                data=data,
                created_at=now,
                expires_at=now + ttl,
                collection_id=collection_id
            )
            self._entries[key] = entry

        logger.debug(f"Cached {len(data)} tracks for {key} (ttl {ttl}s)")
        return entry

    def invalidate(self, key: str) -> bool:
        """Remove one entry. Returns True if an entry was removed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Cache cleared ({count} entries removed)")

    def stats(self) -> CacheStats:
        """
        Report the number of stored entries and their keys.

        Expired entries that have not been read yet are still counted.
        """
        with self._lock:
            return CacheStats(size=len(self._entries), keys=tuple(self._entries))
