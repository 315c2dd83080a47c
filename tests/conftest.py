"""Test configuration and fixtures"""

import random
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from tunequiz.catalog.cache import CacheStore
from tunequiz.catalog.models import PlaybackWindow, Track
from tunequiz.core.config import CatalogConfig, Config, ProviderConfig


class FakeClock:
    """Manually advanced clock for cache expiry tests"""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def clock():
    """Fake clock starting at t=1000"""
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Cache store driven by the fake clock"""
    return CacheStore(clock=clock)


@pytest.fixture
def rng():
    """Seeded random source"""
    return random.Random(1234)


@pytest.fixture
def make_track():
    """Factory building tracks with sensible defaults"""
    def _make(
        track_id: str = "vid001",
        title: str = "Test Song",
        artist: str = "Test Artist",
        category: str = "kpop",
        start: int = 30,
        end: int = 60,
    ) -> Track:
        return Track(
            id=track_id,
            title=title,
            artist=artist,
            category_key=category,
            playback_window=PlaybackWindow(start=start, end=end),
            thumbnail_url=f"https://i.ytimg.com/vi/{track_id}/mqdefault.jpg",
            original_title=title,
        )
    return _make


@pytest.fixture
def make_tracks(make_track):
    """Factory building n tracks with distinct ids, titles and artists"""
    def _make(n: int, artists: int | None = None, category: str = "kpop") -> list[Track]:
        artists = artists or n
        return [
            make_track(
                track_id=f"vid{i:03d}",
                title=f"Song {i}",
                artist=f"Artist {i % artists}",
                category=category,
            )
            for i in range(n)
        ]
    return _make


@pytest.fixture
def config():
    """Configuration with an API key and two categories"""
    return Config(
        provider=ProviderConfig(api_key="test-key", timeout=5.0),
        catalog=CatalogConfig(cache_ttl=3600, max_results=100, clip_duration=30),
        categories={
            "kpop": "PLxQODuHe4E5MPk6anBwqCgyfIa00KhK0c",
            "jpop": "PLj3yHoINc17ve9DMQpyU_clEGETrKSrbD",
            "broken": "PLxxxxxxxxxxxxxxxxxxxxxx",
        },
    )


@pytest.fixture
def mock_provider():
    """Provider mock with an empty listing by default"""
    provider = Mock()
    provider.list_playlist_items.return_value = []
    provider.playlist_exists.return_value = (True, None)
    return provider


def api_item(video_id: str, title: str, channel: str = "Some Channel", position: int = 0) -> dict:
    """Build a playlistItems resource as returned by the YouTube Data API"""
    return {
        "kind": "youtube#playlistItem",
        "snippet": {
            "title": title,
            "position": position,
            "channelTitle": "Playlist Owner",
            "videoOwnerChannelTitle": channel,
            "resourceId": {"kind": "youtube#video", "videoId": video_id},
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                "medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"},
            },
        },
    }


@pytest.fixture
def make_api_item():
    """Factory for raw playlistItems resources"""
    return api_item
