"""
Lectio - Fallback Coordinator

Resolves a chapter request to verses and never fails:

    resolve translation (argument > preference > default)
        -> content cache hit                    -> return
        -> provider fetch ok                    -> cache (content ttl), return
        -> provider failed, not the default     -> one hop to the default
             -> cache hit or fetch ok           -> cache under default key, return
             -> failed again                    -> placeholder
        -> provider failed on the default       -> placeholder

Placeholders are cached under the key that was originally requested with the
short placeholder ttl. The fallback hop is bounded by an explicit
is_fallback_attempt flag; a failed fallback attempt never hops again.

Concurrent requests for the same chapter key share one resolution.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from opentelemetry import trace

from cache.service import CacheService
from catalog.manager import TranslationCatalogManager
from config import CacheConfig
from content.placeholder import build_placeholder
from core.async_utils import RequestCoalescer
from core.books import find_book
from core.errors import ContentRetrievalError
from core.types import (
    BookDescriptor,
    ChapterContent,
    ChapterKey,
    VerseRecord,
    verses_from_payload,
    verses_to_payload,
)
from integrations.provider import ProviderClient
from observability.logging import get_logger
from observability.metrics import LectioMetrics, get_metrics

tracer = trace.get_tracer(__name__)
logger = get_logger(__name__)


def _content_payload(verses: List[VerseRecord], translation_id: str, placeholder: bool) -> Dict[str, Any]:
    return {
        "verses": verses_to_payload(verses),
        "placeholder": placeholder,
        "translation": translation_id,
    }


class FallbackCoordinator:
    """
    Chapter retrieval state machine.

    Usage:
        coordinator = FallbackCoordinator(cache_service, provider, catalog_manager)
        content = await coordinator.get_chapter("JHN", 1, "eng-kjv")
    """

    def __init__(
        self,
        cache_service: CacheService,
        provider: ProviderClient,
        catalog: TranslationCatalogManager,
        cache_config: Optional[CacheConfig] = None,
        metrics: Optional[LectioMetrics] = None,
    ):
        self.cache_service = cache_service
        self.provider = provider
        self.catalog = catalog
        self.cache_config = cache_config or cache_service.config
        self._metrics = metrics or get_metrics()
        self._coalescer: RequestCoalescer[ChapterKey, ChapterContent] = RequestCoalescer()

    @property
    def default_translation(self) -> str:
        return self.catalog.default_translation

    @property
    def in_flight(self) -> int:
        return self._coalescer.in_flight

    async def get_chapter(
        self,
        book_id: str,
        chapter: int,
        translation_id: Optional[str] = None,
    ) -> ChapterContent:
        """Resolve one chapter. Never raises."""
        with tracer.start_as_current_span("content.get_chapter") as span:
            span.set_attribute("book.id", str(book_id))
            span.set_attribute("chapter", chapter)
            try:
                return await self._resolve(book_id, chapter, translation_id)
            except Exception:
                logger.exception(
                    "Chapter resolution failed unexpectedly",
                    book=book_id,
                    chapter=chapter,
                    translation=translation_id,
                )
                book = find_book(book_id)
                key = ChapterKey(
                    translation_id or self.default_translation,
                    book.name if book else str(book_id),
                    chapter,
                )
                return self._placeholder(key)

    async def get_chapter_content(
        self,
        book_id: str,
        chapter: int,
        translation_id: Optional[str] = None,
    ) -> List[VerseRecord]:
        content = await self.get_chapter(book_id, chapter, translation_id)
        return content.verses

    async def _resolve(self, book_id: str, chapter: int, translation_id: Optional[str]) -> ChapterContent:
        effective = translation_id or await self.catalog.get_preferred_translation()
        book = find_book(book_id)

        if book is None or not 1 <= chapter <= book.chapters:
            logger.warning("Chapter not in book catalog", book=book_id, chapter=chapter, translation=effective)
            key = ChapterKey(effective, book.name if book else str(book_id), chapter)
            return self._placeholder(key)

        key = ChapterKey(effective, book.name, chapter)
        trace.get_current_span().set_attribute("translation.id", effective)
        return await self._coalescer.run(key, lambda: self._load(key, book))

    async def _load(
        self,
        key: ChapterKey,
        book: BookDescriptor,
        requested: Optional[ChapterKey] = None,
        is_fallback_attempt: bool = False,
    ) -> ChapterContent:
        requested = requested or key

        entry = await self.cache_service.content.get(key)
        if entry is not None:
            cached = self._from_entry(requested, entry.payload)
            # A placeholder under the default key is a failed fallback, not content
            if cached is not None and not (is_fallback_attempt and cached.placeholder):
                return cached

        try:
            verses = await self.provider.fetch_chapter(key.translation_id, book.id, key.chapter)
        except ContentRetrievalError as e:
            logger.warning(
                "Chapter fetch failed",
                translation=key.translation_id,
                book=book.name,
                chapter=key.chapter,
                error=e.error_code,
                fallback_attempt=is_fallback_attempt,
            )
            if not is_fallback_attempt and key.translation_id != self.default_translation:
                self._metrics.record_fallback(key.translation_id)
                logger.info(
                    "Falling back to default translation",
                    translation=key.translation_id,
                    default=self.default_translation,
                    book=book.name,
                    chapter=key.chapter,
                )
                return await self._load(
                    key.with_translation(self.default_translation),
                    book,
                    requested=requested,
                    is_fallback_attempt=True,
                )
            return await self._store_placeholder(requested)

        await self.cache_service.content.put(
            key,
            _content_payload(verses, key.translation_id, placeholder=False),
            ttl=self.cache_config.content_ttl,
        )
        return ChapterContent(key=requested, verses=verses, served_by=key.translation_id)

    async def _store_placeholder(self, key: ChapterKey) -> ChapterContent:
        content = self._placeholder(key)
        await self.cache_service.content.put(
            key,
            _content_payload(content.verses, key.translation_id, placeholder=True),
            ttl=self.cache_config.placeholder_ttl,
        )
        return content

    def _placeholder(self, key: ChapterKey) -> ChapterContent:
        self._metrics.record_placeholder(key.translation_id)
        logger.info(
            "Serving placeholder chapter",
            translation=key.translation_id,
            book=key.book_name,
            chapter=key.chapter,
        )
        return ChapterContent(
            key=key,
            verses=build_placeholder(key.book_name, key.chapter),
            placeholder=True,
        )

    def _from_entry(self, key: ChapterKey, payload: Any) -> Optional[ChapterContent]:
        try:
            verses = verses_from_payload(payload["verses"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Malformed content entry ignored", key=str(key))
            return None
        placeholder = bool(payload.get("placeholder", False))
        return ChapterContent(
            key=key,
            verses=verses,
            served_by=None if placeholder else payload.get("translation", key.translation_id),
            placeholder=placeholder,
            from_cache=True,
        )
