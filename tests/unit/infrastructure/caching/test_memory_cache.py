"""Tests for MemoryCache."""

from __future__ import annotations

from fhir_model_engine.infrastructure.caching.memory_cache import CacheEntry, MemoryCache


class TestCacheEntry:
    """Tests for CacheEntry stamps."""

    def test_unstamped_entry(self):
        """An entry stored without a stamp matches only an unstamped lookup."""
        entry = CacheEntry("x")

        assert entry.is_current(None)
        assert not entry.is_current(1)

    def test_stamp_comparison(self):
        """Stamps compare by equality."""
        entry = CacheEntry("x", stamp=(10, 20))

        assert entry.is_current((10, 20))
        assert not entry.is_current((10, 21))


class TestMemoryCache:
    """Tests for MemoryCache."""

    def test_set_and_get(self):
        """Values are returned for the stamp they were stored with."""
        cache: MemoryCache[int] = MemoryCache()
        cache.set("a", 1, stamp=100)

        assert cache.get("a", 100) == 1
        assert "a" in cache
        assert cache.get("b") is None

    def test_stale_stamp_drops_entry(self):
        """A lookup with a different stamp is a miss and evicts the entry."""
        cache: MemoryCache[int] = MemoryCache()
        cache.set("a", 1, stamp=100)

        assert cache.get("a", 101) is None
        assert "a" not in cache
        assert len(cache) == 0

    def test_get_or_load(self):
        """The loader runs only on a miss."""
        cache: MemoryCache[list[int]] = MemoryCache()
        calls: list[int] = []

        def loader() -> list[int]:
            calls.append(1)
            return [len(calls)]

        first = cache.get_or_load("k", loader, stamp=1)
        second = cache.get_or_load("k", loader, stamp=1)

        assert first is second
        assert len(calls) == 1

        third = cache.get_or_load("k", loader, stamp=2)
        assert third == [2]
        assert len(calls) == 2

    def test_clear(self):
        """clear() empties the cache."""
        cache: MemoryCache[int] = MemoryCache()
        cache.set("a", 1)
        cache.clear()

        assert len(cache) == 0
