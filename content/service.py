"""
Lectio - Scripture Service

The interface the reading app talks to. Groups catalog, preference, book
metadata, chapter retrieval and maintenance behind one object, and wires the
engine together once per process.

Usage:
    async with create_service(get_config()) as service:
        await service.initialize()
        verses = await service.get_chapter_content("JHN", 3)
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from cache.service import CacheService
from catalog.manager import PREFERENCE_NAME, TranslationCatalogManager
from config import Config, get_config
from content.coordinator import FallbackCoordinator
from core.books import get_book_catalog, get_book_chapters, get_book_id_from_name
from core.errors import StoreError
from core.types import BookDescriptor, ChapterContent, TranslationDescriptor, VerseRecord
from integrations.provider import ProviderClient
from observability.logging import LogContext, get_logger
from observability.tracing import create_span
from storage import create_store

logger = get_logger(__name__)

WARMUP_BOOK = "GEN"
WARMUP_CHAPTER = 1


class ScriptureService:
    """Facade over the catalog manager and the fallback coordinator."""

    def __init__(
        self,
        cache_service: CacheService,
        provider: ProviderClient,
        catalog: TranslationCatalogManager,
        coordinator: FallbackCoordinator,
    ):
        self.cache_service = cache_service
        self.provider = provider
        self.catalog = catalog
        self.coordinator = coordinator

    async def initialize(self) -> None:
        """
        Repair a stale preference and warm the cache.

        A stored preference that the provider catalog no longer offers is reset
        to the default. When only the built-in list is available the preference
        is left alone. The default translation's first chapter of Genesis is then
        loaded so the first read is served from cache. Failures are logged.
        """
        with create_span("service.initialize"), LogContext(phase="initialize"):
            default = self.catalog.default_translation
            preferred = await self.catalog.get_preferred_translation()
            snapshot = await self.catalog.get_catalog_snapshot()

            if snapshot is None:
                logger.info("Provider catalog unavailable, keeping stored preference", translation=preferred)
            elif preferred not in {descriptor.id for descriptor in snapshot.translations}:
                logger.info("Stored preference no longer offered, resetting", translation=preferred, default=default)
                try:
                    await self.cache_service.set_preference(PREFERENCE_NAME, default)
                except StoreError as e:
                    logger.warning("Preference reset failed", error=str(e))

            content = await self.coordinator.get_chapter(WARMUP_BOOK, WARMUP_CHAPTER, default)
            logger.info(
                "Content engine initialized",
                translation=default,
                warmup_cached=content.from_cache,
                warmup_placeholder=content.placeholder,
            )

    # Catalog and preference

    async def get_available_translations(self) -> List[TranslationDescriptor]:
        return await self.catalog.get_available_translations()

    async def get_preferred_translation(self) -> str:
        return await self.catalog.get_preferred_translation()

    async def set_preferred_translation(self, translation_id: str) -> None:
        await self.catalog.set_preferred_translation(translation_id)

    # Books

    def get_book_catalog(self) -> List[BookDescriptor]:
        return get_book_catalog()

    def get_book_id_from_name(self, name: str) -> Optional[str]:
        return get_book_id_from_name(name)

    def get_book_chapters(self, book_id: str) -> int:
        return get_book_chapters(book_id)

    # Content

    async def get_chapter(
        self,
        book_id: str,
        chapter: int,
        translation_id: Optional[str] = None,
    ) -> ChapterContent:
        return await self.coordinator.get_chapter(book_id, chapter, translation_id)

    async def get_chapter_content(
        self,
        book_id: str,
        chapter: int,
        translation_id: Optional[str] = None,
    ) -> List[VerseRecord]:
        """Ordered verses for a chapter. Never raises."""
        return await self.coordinator.get_chapter_content(book_id, chapter, translation_id)

    async def get_verse_content(
        self,
        book_id: str,
        chapter: int,
        verse: int,
        translation_id: Optional[str] = None,
    ) -> Optional[VerseRecord]:
        """A single verse, or None when the chapter has no such verse."""
        for record in await self.get_chapter_content(book_id, chapter, translation_id):
            if record.number == verse:
                return record
        return None

    # Maintenance

    async def clear_content_cache(self) -> int:
        """Remove chapter content from both tiers; returns durable entries removed."""
        removed = await self.cache_service.content.clear()
        logger.info("Content cache cleared", removed=removed)
        return removed

    async def clear_catalog_cache(self) -> int:
        removed = await self.catalog.clear_catalog_cache()
        logger.info("Catalog cache cleared", removed=removed)
        return removed

    async def close(self) -> None:
        await self.provider.close()
        await self.cache_service.close()


@asynccontextmanager
async def create_service(config: Optional[Config] = None) -> AsyncIterator[ScriptureService]:
    """Build the engine once and close its HTTP client and store on exit."""
    config = config or get_config()

    store = create_store(config.cache)
    cache_service = CacheService(store, config.cache)
    provider = ProviderClient(config.provider)
    catalog = TranslationCatalogManager(cache_service, provider, config.catalog, config.cache)
    coordinator = FallbackCoordinator(cache_service, provider, catalog, config.cache)
    service = ScriptureService(cache_service, provider, catalog, coordinator)

    logger.debug("Scripture service created", store=store.backend_name, **config.to_dict()["catalog"])
    try:
        yield service
    finally:
        await service.close()
