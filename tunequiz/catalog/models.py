"""
Data models for catalog entities.

This module defines immutable dataclasses for tracks, playback windows,
raw provider items and fetch results. They are passed between the
fetcher, the cache and the question generator.

Design Decisions:
    - All dataclasses are frozen (immutable); cached snapshots can be
      shared between requests without copying each track
    - PlaylistItem is the strict schema at the provider boundary:
      malformed items become None and are skipped, never half-filled
    - Track is independent of the provider's response format

Usage:
    from tunequiz.catalog.models import Track, PlaybackWindow

    track = Track(
        id="gdZLi9oWNZg",
        title="Dynamite",
        artist="BTS",
        category_key="kpop",
        playback_window=PlaybackWindow(start=30, end=60),
    )
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


UNKNOWN_ARTIST = "Unknown Artist"

# Titles YouTube substitutes for entries that can no longer be played
UNAVAILABLE_TITLES = frozenset({"Deleted video", "Private video"})


class Provenance(str, Enum):
    """Where the tracks of a FetchResult came from."""
    FRESH = "fresh"
    CACHE = "cache"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class PlaybackWindow:
    """
    Clip window within a track, in whole seconds.

    Attributes:
        start: Offset where playback starts. Never negative.
        end: Offset where playback stops. Always greater than start.

    Raises:
        ValueError: On construction with start < 0 or end <= start.
    """
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"Playback window start must be >= 0, got {self.start}")
        if self.end <= self.start:
            raise ValueError(
                f"Playback window end ({self.end}) must be greater than start ({self.start})"
            )

    @property
    def duration(self) -> int:
        """Length of the clip in seconds."""
        return self.end - self.start

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class Track:
    """
    Immutable representation of a normalized, playable track.

    Attributes:
        id: Provider video id, stable across fetches.
            Example: "gdZLi9oWNZg"

        title: Canonical song title derived by clean_title(). Never empty.
               Used for display and as the pool for distractors.
               Example: "Dynamite"

        artist: Canonical artist name, or "Unknown Artist".
                Example: "BTS"

        category_key: Category the track was fetched for.
                      Example: "kpop"

        playback_window: Clip to play during the question.

        thumbnail_url: Preview image URL, if the provider had one.

        original_title: Raw provider title before cleaning. Kept for
                        diagnostics and for re-running the heuristics.
                        Example: "BTS (방탄소년단) 'Dynamite' Official MV"

        is_lyrics_video: True when the raw title marks a lyrics video.

        position: 1-based position in the provider listing, if known.

    Class Methods:
        from_dict: Create from a fallback bundle entry.
    """

    id: str
    title: str
    artist: str
    category_key: str
    playback_window: PlaybackWindow

    thumbnail_url: str | None = None
    original_title: str = ""
    is_lyrics_video: bool = False
    position: int | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Track id must not be empty")
        if not self.title or not self.title.strip():
            raise ValueError(f"Track {self.id} has an empty title")

    @classmethod
    def from_dict(cls, data: dict[str, Any], category_key: str) -> "Track":
        """
        Create a Track from a fallback bundle entry.

        Args:
            data: Mapping with 'id', 'title' and optionally 'artist',
                  'thumbnail_url', 'start', 'end'.
            category_key: Category the entry is served for.

        Returns:
            Track built from the entry. Missing timing defaults to 30-60;
            the fetcher refits the end to the configured clip duration.

        Raises:
            ValueError: If id or title is missing or the window is invalid.
        """
        video_id = str(data.get("id") or "").strip()
        title = str(data.get("title") or "").strip()
        start = int(data.get("start", 30))
        end = int(data.get("end", start + 30))

        return cls(
            id=video_id,
            title=title,
            artist=str(data.get("artist") or UNKNOWN_ARTIST).strip(),
            category_key=category_key,
            playback_window=PlaybackWindow(start=start, end=end),
            thumbnail_url=data.get("thumbnail_url")
                or f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg",
            original_title=title,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "category": self.category_key,
            "playback_window": self.playback_window.to_dict(),
            "thumbnail_url": self.thumbnail_url,
            "original_title": self.original_title,
            "is_lyrics_video": self.is_lyrics_video,
            "position": self.position,
        }


@dataclass(frozen=True)
class PlaylistItem:
    """
    One entry of a provider playlist listing, validated.

    Attributes:
        video_id: Stable id of the playable video.
        title: Raw title as uploaded.
        channel_name: Uploader channel name (empty if unknown).
        thumbnail_url: Medium or default thumbnail, if present.
        position: 0-based position reported by the provider, if present.
    """

    video_id: str
    title: str
    channel_name: str = ""
    thumbnail_url: str | None = None
    position: int | None = None

    @classmethod
    def from_api_item(cls, item: Any) -> "PlaylistItem | None":
        """
        Validate a YouTube playlistItems resource.

        Args:
            item: One element of the response's 'items' array.

        Returns:
            PlaylistItem, or None if the item is malformed, has no video
            id or title, or is a deleted/private placeholder.

        Schema:
            snippet.resourceId.videoId  required, non-empty string
            snippet.title               required, non-empty string
            snippet.videoOwnerChannelTitle | snippet.channelTitle  optional
            snippet.thumbnails.medium.url | .default.url            optional
            snippet.position            optional int
        """
        if not isinstance(item, dict):
            return None

        snippet = item.get("snippet")
        if not isinstance(snippet, dict):
            return None

        resource = snippet.get("resourceId")
        video_id = resource.get("videoId") if isinstance(resource, dict) else None
        title = snippet.get("title")

        if not isinstance(video_id, str) or not video_id.strip():
            return None
        if not isinstance(title, str) or not title.strip():
            return None
        if title.strip() in UNAVAILABLE_TITLES:
            return None

        # The uploader, not the playlist owner, is the better artist hint
        channel = snippet.get("videoOwnerChannelTitle") or snippet.get("channelTitle") or ""
        if not isinstance(channel, str):
            channel = ""

        thumbnail_url = None
        thumbnails = snippet.get("thumbnails")
        if isinstance(thumbnails, dict):
            for size in ("medium", "default"):
                thumb = thumbnails.get(size)
                if isinstance(thumb, dict) and isinstance(thumb.get("url"), str):
                    thumbnail_url = thumb["url"]
                    break

        position = snippet.get("position")
        if isinstance(position, bool) or not isinstance(position, int):
            position = None

        return cls(
            video_id=video_id.strip(),
            title=title.strip(),
            channel_name=channel.strip(),
            thumbnail_url=thumbnail_url,
            position=position,
        )


@dataclass(frozen=True)
class FetchResult:
    """
    Tracks for one category, with where they came from.

    Attributes:
        category: Category key that was requested.
        tracks: Tracks after shuffling/limiting to max_results.
        provenance: FRESH, CACHE or FALLBACK.
        total_count: Size of the pool before limiting.
        last_updated: When the underlying data was fetched (UTC).
        collection_id: Provider playlist id, None for fallback data.
        error: Why fallback data was served, None otherwise.
        skipped: Provider items dropped by validation (fresh fetches only).
    """

    category: str
    tracks: tuple[Track, ...]
    provenance: Provenance
    total_count: int
    last_updated: datetime
    collection_id: str | None = None
    error: str | None = None
    skipped: int = field(default=0, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "category": self.category,
            "tracks": [t.to_dict() for t in self.tracks],
            "provenance": self.provenance.value,
            "total_count": self.total_count,
            "last_updated": self.last_updated.isoformat(),
            "collection_id": self.collection_id,
            "error": self.error,
        }
