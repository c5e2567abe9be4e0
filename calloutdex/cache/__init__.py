from calloutdex.cache.base import CacheStore
from calloutdex.cache.incremental import IncrementalUpdater
from calloutdex.cache.local import CACHE_VERSION, LocalCacheStore
from calloutdex.cache.validity import CacheCheck, CacheValidator, DocumentState

__all__ = [
    "CACHE_VERSION",
    "CacheCheck",
    "CacheStore",
    "CacheValidator",
    "DocumentState",
    "IncrementalUpdater",
    "LocalCacheStore",
]
