"""Cache of browse results, backed by the host's cache service."""

from typing import Any

from loguru import logger

from evernote_repository.models.listing import CachedListing
from evernote_repository.protocols import CacheStoreProtocol


def cache_key(segment: str, page: int) -> str:
    """Key of the listing of one path segment at one page."""
    return f"{segment}@{page}"


class RequestCache:
    """Thin wrapper making the cache optional.

    Without a store every lookup misses and writes are dropped.
    """

    def __init__(self, store: CacheStoreProtocol | None = None) -> None:
        self.store = store

    def get(self, key: str) -> CachedListing | None:
        if self.store is None:
            return None
        value = self.store.get(key)
        if value is not None:
            logger.debug("Filled from cache: {!r}", key)
        return value

    def set(self, key: str, listing: CachedListing) -> None:
        if self.store is not None:
            self.store.set(key, listing)

    def purge(self) -> None:
        if self.store is not None:
            self.store.purge()


class MemoryCacheStore:
    """In-process cache store, living as long as the process."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def purge(self) -> None:
        self._data.clear()
