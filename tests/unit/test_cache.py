"""Tests for the optional browse cache."""

from evernote_repository.cache import MemoryCacheStore, RequestCache, cache_key
from evernote_repository.models.listing import CachedListing


def test_cache_key_combines_segment_and_page() -> None:
    assert cache_key("notebooks:", 1) == "notebooks:@1"
    assert cache_key("notebooks:", 2) != cache_key("notebooks:", 1)


def test_cache_without_store_always_misses() -> None:
    cache = RequestCache()
    cache.set("k", CachedListing(pages=2))
    assert cache.get("k") is None
    cache.purge()


def test_cache_with_store_round_trip_and_purge() -> None:
    cache = RequestCache(MemoryCacheStore())
    value = CachedListing(pages=2)
    cache.set("k", value)
    assert cache.get("k") is value
    cache.purge()
    assert cache.get("k") is None
