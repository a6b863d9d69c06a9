"""
Tangle cache for the Explorer Service.

- store: per-network query result store
- read_through: check store, call gateway on miss, keep meaningful results
- sweeper: periodic TTL eviction
- tangle_cache_service / stardust_cache_service / chrysalis_cache_service:
  the cache services consumed by the HTTP layer
"""

from .chrysalis_cache_service import ChrysalisTangleCacheService
from .read_through import QueryPolicy, ReadThroughCache, has_any
from .stardust_cache_service import StardustTangleCacheService
from .store import CacheEntry, CacheStore, query_key
from .sweeper import StalenessSweeper, sweep_store
from .tangle_cache_service import TangleCacheService

__all__ = [
    "CacheEntry",
    "CacheStore",
    "ChrysalisTangleCacheService",
    "QueryPolicy",
    "ReadThroughCache",
    "StalenessSweeper",
    "StardustTangleCacheService",
    "TangleCacheService",
    "has_any",
    "query_key",
    "sweep_store",
]
