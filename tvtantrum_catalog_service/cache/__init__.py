"""In-memory caching"""

from tvtantrum_catalog_service.cache.cache_store import CacheKeys, CacheStore, CacheTTL, make_key

__all__ = [
    "CacheKeys",
    "CacheStore",
    "CacheTTL",
    "make_key",
]
