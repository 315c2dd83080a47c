"""Test the in-memory TTL cache"""

import threading

import pytest


class TestCacheStore:
    """Test CacheStore"""

    def test_hit_before_expiry(self, cache, clock, make_tracks):
        """Test an entry is served at created_at + ttl - 1"""
        tracks = make_tracks(3)
        cache.set("kpop", tracks, ttl=10, collection_id="PL1")

        clock.advance(9)
        entry = cache.get("kpop")

        assert entry is not None
        assert entry.data == tuple(tracks)
        assert entry.collection_id == "PL1"
        assert entry.expires_at == entry.created_at + 10

    def test_miss_after_expiry(self, cache, clock, make_tracks):
        """Test an entry is gone at created_at + ttl + 1 and removed"""
        cache.set("kpop", make_tracks(3), ttl=10)

        clock.advance(11)

        assert cache.get("kpop") is None
        assert cache.stats().size == 0

    def test_expires_exactly_at_ttl(self, cache, clock, make_tracks):
        """Test the entry is no longer valid at now == expires_at"""
        cache.set("kpop", make_tracks(1), ttl=10)
        clock.advance(10)
        assert cache.get("kpop") is None

    def test_miss_for_unknown_key(self, cache):
        """Test a miss is not an error"""
        assert cache.get("jpop") is None

    def test_set_overwrites(self, cache, make_tracks):
        """Test the last write wins"""
        cache.set("kpop", make_tracks(3), ttl=10)
        cache.set("kpop", make_tracks(1), ttl=10)
        assert len(cache.get("kpop").data) == 1

    def test_data_is_a_snapshot(self, cache, make_tracks):
        """Test later changes to the caller's list do not leak into the cache"""
        tracks = make_tracks(2)
        cache.set("kpop", tracks, ttl=10)
        tracks.clear()
        assert len(cache.get("kpop").data) == 2

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_invalid_ttl(self, cache, make_tracks, ttl):
        """Test non-positive TTLs are rejected"""
        with pytest.raises(ValueError):
            cache.set("kpop", make_tracks(1), ttl=ttl)

    def test_invalidate(self, cache, make_tracks):
        """Test removing a single key"""
        cache.set("kpop", make_tracks(1), ttl=10)
        cache.set("jpop", make_tracks(1), ttl=10)

        assert cache.invalidate("kpop") is True
        assert cache.invalidate("kpop") is False
        assert cache.stats().keys == ("jpop",)

    def test_clear_and_stats(self, cache, make_tracks):
        """Test clear() empties the store"""
        cache.set("kpop", make_tracks(1), ttl=10)
        cache.set("jpop", make_tracks(1), ttl=10)
        assert cache.stats().size == 2
        assert set(cache.stats().keys) == {"kpop", "jpop"}

        cache.clear()

        assert cache.stats().size == 0
        assert cache.stats().to_dict() == {"size": 0, "keys": []}

    def test_concurrent_access(self, cache, make_tracks):
        """Test parallel writers and readers leave consistent entries"""
        tracks = make_tracks(5)
        errors = []

        def worker(n):
            try:
                for i in range(200):
                    key = f"cat{(n + i) % 4}"
                    cache.set(key, tracks, ttl=100)
                    entry = cache.get(key)
                    if entry is not None:
                        assert len(entry.data) == 5
            except AssertionError as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert cache.stats().size == 4
