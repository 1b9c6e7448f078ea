"""
Lectio - Durable Store Package

Backends for the persistent key/value namespace behind the cache tiers and
the translation preference.
"""
from config import CacheConfig, StoreBackend
from storage.base import KeyValueStore
from storage.file_store import FileKeyValueStore
from storage.memory import MemoryKeyValueStore


def create_store(config: CacheConfig) -> KeyValueStore:
    """Build the configured backend."""
    if config.backend == StoreBackend.REDIS:
        from storage.redis_store import RedisKeyValueStore

        return RedisKeyValueStore(config.redis_url)
    if config.backend == StoreBackend.MEMORY:
        return MemoryKeyValueStore()
    return FileKeyValueStore(config.store_dir)


__all__ = [
    "KeyValueStore",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    "create_store",
]
