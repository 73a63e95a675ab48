"""TTL caches for derived context data."""

from .store import CacheEntry, CacheStore, JsonFileCache, MemoryCache

__all__ = ["CacheEntry", "CacheStore", "JsonFileCache", "MemoryCache"]
