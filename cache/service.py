"""
Lectio - Cache Service

The single object that owns the durable store and the namespaced tiered
caches. Built once per process and passed by reference to the catalog
manager and the fallback coordinator.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from cache.tiered import TieredCache
from config import CacheConfig
from core.errors import StoreError
from core.types import CATALOG_NAMESPACE, CONTENT_NAMESPACE, PREFERENCE_NAMESPACE
from observability.logging import get_logger
from observability.metrics import LectioMetrics
from storage.base import KeyValueStore

logger = get_logger(__name__)


class CacheService:
    """
    Owner of both cache namespaces and the preference keys.

    Usage:
        service = CacheService(store, CacheConfig())
        entry = await service.content.get(chapter_key)
        await service.catalog.clear()
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.time,
        metrics: Optional[LectioMetrics] = None,
    ):
        self.config = config or CacheConfig()
        self.store = store
        self.clock = clock
        self.content = TieredCache(
            CONTENT_NAMESPACE,
            store,
            hot_ttl=self.config.hot_ttl,
            hot_max_entries=self.config.hot_max_entries,
            clock=clock,
            metrics=metrics,
        )
        self.catalog = TieredCache(
            CATALOG_NAMESPACE,
            store,
            hot_ttl=self.config.catalog_hot_ttl,
            hot_max_entries=8,
            clock=clock,
            metrics=metrics,
        )

    @staticmethod
    def _preference_key(name: str) -> str:
        return f"{PREFERENCE_NAMESPACE}:{name}"

    async def get_preference(self, name: str) -> Optional[str]:
        """Read a stored preference; store failures read as unset."""
        try:
            value = await self.store.get(self._preference_key(name))
        except StoreError as e:
            logger.warning("Preference read failed", preference=name, error=str(e))
            return None
        return value if isinstance(value, str) and value else None

    async def set_preference(self, name: str, value: str) -> None:
        await self.store.set(self._preference_key(name), value)

    async def close(self) -> None:
        await self.store.close()
