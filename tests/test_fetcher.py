"""Test catalog fetching, caching and fallback"""

import random
import threading
from dataclasses import replace

import pytest

from tunequiz.catalog.fallback import FallbackBundle, load_fallback_bundle
from tunequiz.catalog.fetcher import CatalogFetcher, fit_windows, shuffle_and_limit
from tunequiz.catalog.models import Provenance
from tunequiz.core.exceptions import (
    ConfigurationError,
    FetchCancelledError,
    NoContentError,
    ProviderError,
)


KPOP_ID = "PLxQODuHe4E5MPk6anBwqCgyfIa00KhK0c"


@pytest.fixture
def raw_items(make_api_item):
    return [
        make_api_item("gdZLi9oWNZg", "BTS - Dynamite (Official MV)", "HYBE LABELS", 0),
        make_api_item("ioNng23DkIM", "BLACKPINK - 'How You Like That' M/V", "BLACKPINK", 1),
        make_api_item("js1CtxSY38I", "Ditto (Lyrics)", "NewJeans - Topic", 2),
    ]


@pytest.fixture
def fetcher(mock_provider, cache, config):
    return CatalogFetcher(mock_provider, cache, config, rng=random.Random(0))


class TestFetchCategory:
    """Test CatalogFetcher.fetch_category()"""

    def test_fresh_fetch(self, fetcher, mock_provider, cache, raw_items):
        """Test a provider fetch is normalized and cached"""
        mock_provider.list_playlist_items.return_value = raw_items

        result = fetcher.fetch_category("kpop")

        assert result.provenance == Provenance.FRESH
        assert result.collection_id == KPOP_ID
        assert result.total_count == 3
        assert result.error is None
        mock_provider.list_playlist_items.assert_called_once_with(
            KPOP_ID, 100, page_size=50, max_pages=1, cancel_event=None
        )

        by_id = {t.id: t for t in result.tracks}
        assert by_id["gdZLi9oWNZg"].title == "Dynamite"
        assert by_id["gdZLi9oWNZg"].artist == "BTS"
        assert by_id["gdZLi9oWNZg"].original_title == "BTS - Dynamite (Official MV)"
        assert by_id["ioNng23DkIM"].title == "How You Like That"
        assert by_id["js1CtxSY38I"].artist == "NewJeans"
        assert by_id["js1CtxSY38I"].is_lyrics_video is True
        assert by_id["js1CtxSY38I"].playback_window.start == 5

        entry = cache.get("kpop")
        assert entry is not None
        assert [t.id for t in entry.data] == ["gdZLi9oWNZg", "ioNng23DkIM", "js1CtxSY38I"]
        assert [t.position for t in entry.data] == [1, 2, 3]

    def test_window_uses_clip_duration(self, mock_provider, cache, config, raw_items):
        """Test the configured clip duration sets the window length"""
        config = replace(config, catalog=replace(config.catalog, clip_duration=20))
        mock_provider.list_playlist_items.return_value = raw_items

        result = CatalogFetcher(mock_provider, cache, config).fetch_category("kpop")

        assert all(t.playback_window.duration == 20 for t in result.tracks)

    def test_cache_hit(self, fetcher, mock_provider, raw_items):
        """Test the second fetch is served from the cache"""
        mock_provider.list_playlist_items.return_value = raw_items

        fetcher.fetch_category("kpop")
        result = fetcher.fetch_category("kpop")

        assert result.provenance == Provenance.CACHE
        assert result.total_count == 3
        assert len(result.tracks) == 3
        assert mock_provider.list_playlist_items.call_count == 1

    def test_cache_bypass(self, fetcher, mock_provider, raw_items):
        """Test use_cache=False and refresh_category() go to the provider"""
        mock_provider.list_playlist_items.return_value = raw_items

        fetcher.fetch_category("kpop")
        assert fetcher.fetch_category("kpop", use_cache=False).provenance == Provenance.FRESH
        assert fetcher.refresh_category("kpop").provenance == Provenance.FRESH
        assert mock_provider.list_playlist_items.call_count == 3

    def test_cache_expiry_refetches(self, fetcher, mock_provider, clock, raw_items):
        """Test an expired entry triggers a new provider call"""
        mock_provider.list_playlist_items.return_value = raw_items

        fetcher.fetch_category("kpop")
        clock.advance(3601)

        assert fetcher.fetch_category("kpop").provenance == Provenance.FRESH
        assert mock_provider.list_playlist_items.call_count == 2

    def test_max_results_limits_output(self, fetcher, mock_provider, cache, make_api_item):
        """Test truncation to max_results keeps the full pool cached"""
        mock_provider.list_playlist_items.return_value = [
            make_api_item(f"vid{i}", f"Artist {i} - Song {i}") for i in range(5)
        ]

        result = fetcher.fetch_category("kpop", max_results=2)

        assert len(result.tracks) == 2
        assert result.total_count == 5
        assert len(cache.get("kpop").data) == 5

    def test_no_shuffle_keeps_provider_order(self, mock_provider, cache, config, raw_items):
        """Test shuffle_on_read=False"""
        config = replace(config, catalog=replace(config.catalog, shuffle_on_read=False))
        mock_provider.list_playlist_items.return_value = raw_items

        result = CatalogFetcher(mock_provider, cache, config).fetch_category("kpop")

        assert [t.id for t in result.tracks] == ["gdZLi9oWNZg", "ioNng23DkIM", "js1CtxSY38I"]

    def test_skips_unusable_items(self, fetcher, mock_provider, raw_items, make_api_item):
        """Test malformed, deleted, private and duplicate items are skipped"""
        mock_provider.list_playlist_items.return_value = raw_items + [
            {},
            {"snippet": {"title": "No id"}},
            make_api_item("x1", "Deleted video"),
            make_api_item("x2", "Private video"),
            make_api_item("gdZLi9oWNZg", "BTS - Dynamite (Official MV)"),
        ]

        result = fetcher.fetch_category("kpop")

        assert result.total_count == 3
        assert result.skipped == 5

    def test_category_key_is_case_insensitive(self, fetcher, mock_provider, raw_items):
        """Test keys are normalized"""
        mock_provider.list_playlist_items.return_value = raw_items
        assert fetcher.fetch_category(" KPOP ").category == "kpop"

    def test_placeholder_collection_id(self, fetcher, mock_provider, cache):
        """Test the placeholder id is a configuration error and the cache is untouched"""
        with pytest.raises(ConfigurationError):
            fetcher.fetch_category("broken")

        mock_provider.list_playlist_items.assert_not_called()
        assert cache.stats().size == 0

    def test_unmapped_category(self, fetcher):
        """Test unknown categories"""
        with pytest.raises(ConfigurationError) as exc_info:
            fetcher.fetch_category("rock")
        assert exc_info.value.details["category"] == "rock"

    def test_invalid_max_results(self, fetcher):
        """Test max_results below 1"""
        with pytest.raises(ValueError):
            fetcher.fetch_category("kpop", max_results=0)


class TestFallback:
    """Test the fallback path"""

    def test_timeout_serves_fallback(self, mock_provider, cache, config, make_tracks):
        """Test a provider timeout with a 10-track bundle"""
        bundle_tracks = tuple(make_tracks(10))
        fallback = FallbackBundle(tracks={"kpop": bundle_tracks})
        mock_provider.list_playlist_items.side_effect = ProviderError(
            "Request timed out after 5.0s", is_timeout=True
        )
        fetcher = CatalogFetcher(mock_provider, cache, config, fallback=fallback)

        result = fetcher.fetch_category("kpop")

        assert result.provenance == Provenance.FALLBACK
        assert set(result.tracks) == set(bundle_tracks)
        assert len(result.tracks) == 10
        assert "timed out" in result.error
        assert cache.stats().size == 0

    def test_empty_listing_serves_fallback(self, mock_provider, cache, config, make_tracks):
        """Test a successful but empty listing"""
        fallback = FallbackBundle(tracks={"default": tuple(make_tracks(3, category="default"))})
        fetcher = CatalogFetcher(mock_provider, cache, config, fallback=fallback)

        result = fetcher.fetch_category("jpop")

        assert result.provenance == Provenance.FALLBACK
        assert result.error == "No songs found from playlist, using fallback"
        assert all(t.category_key == "jpop" for t in result.tracks)

    def test_fallback_windows_follow_clip_duration(self, mock_provider, cache, config):
        """Test bundled timing is stretched or cut to the configured clip length"""
        config = replace(config, catalog=replace(config.catalog, clip_duration=10))
        mock_provider.list_playlist_items.side_effect = ProviderError("YouTube API key not configured")
        fetcher = CatalogFetcher(mock_provider, cache, config, fallback=load_fallback_bundle())

        result = fetcher.fetch_category("kpop")

        assert result.provenance == Provenance.FALLBACK
        assert len(result.tracks) >= 15
        for track in result.tracks:
            assert track.playback_window.duration == 10
            assert track.playback_window.start >= 0

    def test_fit_windows_keeps_matching_tracks(self, make_track):
        """Test tracks already at the clip length are returned unchanged"""
        short = make_track(track_id="a", start=5, end=15)
        exact = make_track(track_id="b", start=40, end=50)

        fitted = fit_windows([short, exact], 10)

        assert fitted[1] is exact
        assert fitted[0].playback_window.to_dict() == {"start": 5, "end": 15}

        stretched = fit_windows([exact], 30)[0]
        assert stretched.playback_window.to_dict() == {"start": 40, "end": 70}
        assert stretched.id == "b"

    def test_provider_error_without_fallback(self, fetcher, mock_provider):
        """Test NoContentError when there is nothing to fall back to"""
        mock_provider.list_playlist_items.side_effect = ProviderError("boom")

        with pytest.raises(NoContentError):
            fetcher.fetch_category("kpop")

    def test_fallback_disabled(self, mock_provider, cache, config, make_tracks):
        """Test fallback_enabled=False"""
        fallback = FallbackBundle(tracks={"kpop": tuple(make_tracks(3))})
        fetcher = CatalogFetcher(mock_provider, cache, config, fallback=fallback)

        with pytest.raises(NoContentError):
            fetcher.fetch_category("kpop", fallback_enabled=False)

    def test_failure_is_logged(self, mock_provider, cache, config, make_tracks, caplog):
        """Test the provider failure record carries the report fields"""
        fallback = FallbackBundle(tracks={"kpop": tuple(make_tracks(3))})
        mock_provider.list_playlist_items.side_effect = ProviderError("quota exceeded")
        fetcher = CatalogFetcher(mock_provider, cache, config, fallback=fallback)

        with caplog.at_level("WARNING"):
            fetcher.fetch_category("kpop")

        records = [r for r in caplog.records if hasattr(r, "provider_failed_category")]
        assert len(records) == 1
        assert records[0].provider_failed_collection_id == KPOP_ID
        assert records[0].provider_failed_fallback is True


class TestCancellation:
    """Test cooperative cancellation"""

    def test_cancel_during_provider_call(self, fetcher, mock_provider, cache, raw_items):
        """Test no cache write happens for a cancelled fetch"""
        cancel = threading.Event()

        def slow_listing(*args, **kwargs):
            cancel.set()
            return raw_items

        mock_provider.list_playlist_items.side_effect = slow_listing

        with pytest.raises(FetchCancelledError):
            fetcher.fetch_category("kpop", cancel_event=cancel)
        assert cache.stats().size == 0

    def test_cancel_before_start(self, fetcher, mock_provider):
        """Test an already cancelled request never reaches the provider"""
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(FetchCancelledError):
            fetcher.fetch_category("kpop", cancel_event=cancel)
        mock_provider.list_playlist_items.assert_not_called()


class TestShuffleAndLimit:
    """Test shuffle_and_limit()"""

    def test_limit_without_shuffle(self):
        """Test order is kept without shuffling"""
        assert shuffle_and_limit([1, 2, 3, 4], 2, False, random.Random(0)) == (1, 2)

    def test_shuffle_does_not_mutate_input(self):
        """Test the input is copied"""
        items = list(range(20))
        result = shuffle_and_limit(items, 20, True, random.Random(0))
        assert items == list(range(20))
        assert sorted(result) == items
