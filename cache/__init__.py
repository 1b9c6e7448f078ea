"""
Lectio - Cache Package

Two-tier caching: a hot in-process LRU tier over the durable store, each
value carrying its own ttl.
"""
from cache.memory import CacheStats, LRUCache
from cache.service import CacheService
from cache.tiered import TieredCache

__all__ = [
    "CacheStats",
    "LRUCache",
    "CacheService",
    "TieredCache",
]
