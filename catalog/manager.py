"""
Lectio - Translation Catalog Manager

Produces the ranked list of translations offered for selection and owns the
reader's translation preference.

Lookup order for the catalog:
    hot tier (5 min) -> durable tier (7 days) -> provider -> built-in list

The provider's catalog is large and uneven, so the raw list is normalized,
filtered to the known-working ids plus an allowlist of languages, capped per
language and ranked before it is cached.
"""
from __future__ import annotations

from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional

from opentelemetry import trace

from cache.service import CacheService
from catalog.defaults import static_translations
from config import CacheConfig, CatalogConfig
from core.async_utils import RequestCoalescer
from core.errors import ContentRetrievalError, ErrorContext, StoreError, UnknownTranslation
from core.types import CatalogSnapshot, TranslationDescriptor
from integrations.provider import ProviderClient
from observability.logging import get_logger
from observability.tracing import create_span

tracer = trace.get_tracer(__name__)
logger = get_logger(__name__)

CATALOG_KEY = "translations"
PREFERENCE_NAME = "translation"


def _first_text(*values: Any) -> Optional[str]:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def normalize_translation(raw: Dict[str, Any]) -> Optional[TranslationDescriptor]:
    """
    Map one raw catalog entry onto a TranslationDescriptor.

    Entries without an id are dropped (None). Field names vary between
    provider revisions:
        name:      englishName > name > shortName > id
        language:  "eng" or {"code": "eng", "name": "English"}
        lang name: languageEnglishName > languageName > language.name > code
    """
    translation_id = _first_text(raw.get("id"))
    if translation_id is None:
        return None

    language = raw.get("language")
    if isinstance(language, dict):
        language_code = _first_text(language.get("code"), language.get("id")) or "und"
        language_object_name = language.get("name")
    else:
        language_code = _first_text(language) or "und"
        language_object_name = None

    short_name = _first_text(raw.get("shortName"))
    return TranslationDescriptor(
        id=translation_id,
        name=_first_text(raw.get("englishName"), raw.get("name"), short_name) or translation_id,
        language=language_code,
        language_name=_first_text(
            raw.get("languageEnglishName"),
            raw.get("languageName"),
            language_object_name,
        ) or language_code,
        short_name=short_name,
        description=_first_text(raw.get("description")),
    )


def select_translations(
    candidates: Iterable[TranslationDescriptor],
    config: CatalogConfig,
) -> List[TranslationDescriptor]:
    """
    Filter, cap and rank normalized descriptors.

    Kept: safelisted ids, plus any translation whose language is allowlisted.
    Cap: at most per_language_cap per language, safelisted ids never dropped.
    Order: primary language, then allowlist order, then other languages by
    code; inside a language, safelisted ids in safelist order, then by name.
    """
    safelist = {translation_id: rank for rank, translation_id in enumerate(config.known_working)}
    allowlist = list(config.language_allowlist)

    by_language: Dict[str, List[TranslationDescriptor]] = OrderedDict()
    seen = set()
    for descriptor in candidates:
        if descriptor.id in seen:
            continue
        if descriptor.id not in safelist and descriptor.language not in allowlist:
            continue
        seen.add(descriptor.id)
        by_language.setdefault(descriptor.language, []).append(descriptor)

    def member_order(descriptor: TranslationDescriptor):
        if descriptor.id in safelist:
            return (0, safelist[descriptor.id], "")
        return (1, 0, descriptor.name.lower())

    def language_order(language: str):
        if language == config.primary_language:
            return (0, 0, language)
        if language in allowlist:
            return (1, allowlist.index(language), language)
        return (2, 0, language)

    selected: List[TranslationDescriptor] = []
    for language in sorted(by_language, key=language_order):
        members = sorted(by_language[language], key=member_order)
        pinned = [d for d in members if d.id in safelist]
        room = max(config.per_language_cap - len(pinned), 0)
        others = [d for d in members if d.id not in safelist][:room]
        selected.extend(pinned + others)
    return selected


class TranslationCatalogManager:
    """
    Catalog and preference access shared by the service facade and the
    fallback coordinator.

    Usage:
        manager = TranslationCatalogManager(cache_service, provider, CatalogConfig())
        translations = await manager.get_available_translations()
        await manager.set_preferred_translation("eng-kjv")
    """

    def __init__(
        self,
        cache_service: CacheService,
        provider: ProviderClient,
        config: Optional[CatalogConfig] = None,
        cache_config: Optional[CacheConfig] = None,
    ):
        self.cache_service = cache_service
        self.provider = provider
        self.config = config or CatalogConfig()
        self.cache_config = cache_config or cache_service.config
        self._coalescer: RequestCoalescer[str, Optional[CatalogSnapshot]] = RequestCoalescer()

    @property
    def default_translation(self) -> str:
        return self.config.default_translation

    async def get_catalog_snapshot(self) -> Optional[CatalogSnapshot]:
        """
        Cached or freshly fetched catalog.

        Returns None when the provider catalog is unavailable, which is the
        case where callers fall back to the built-in list.
        """
        snapshot = await self._cached_snapshot()
        if snapshot is None:
            snapshot = await self._coalescer.run(CATALOG_KEY, self._refresh)
        if snapshot is None or not snapshot.translations:
            return None
        return snapshot

    async def get_available_translations(self) -> List[TranslationDescriptor]:
        """Ranked catalog; falls back to the built-in list, never empty, never raises."""
        with tracer.start_as_current_span("catalog.get_available_translations") as span:
            snapshot = await self.get_catalog_snapshot()
            if snapshot is None:
                span.set_attribute("catalog.source", "static")
                return static_translations()

            span.set_attribute("catalog.size", len(snapshot.translations))
            return list(snapshot.translations)

    async def get_preferred_translation(self) -> str:
        """Stored preference, else the configured default."""
        preferred = await self.cache_service.get_preference(PREFERENCE_NAME)
        return preferred or self.default_translation

    async def set_preferred_translation(self, translation_id: str) -> None:
        """
        Persist the reader's translation choice.

        Raises:
            UnknownTranslation: translation_id is not in the current catalog.
        """
        available = [descriptor.id for descriptor in await self.get_available_translations()]
        if translation_id not in available:
            raise UnknownTranslation(
                translation_id,
                available=available,
                context=ErrorContext(
                    operation="set_preferred_translation",
                    component="catalog",
                    translation_id=translation_id,
                ),
            )
        try:
            await self.cache_service.set_preference(PREFERENCE_NAME, translation_id)
        except StoreError as e:
            logger.warning("Preference write failed", translation=translation_id, error=str(e))
            return
        logger.info("Preferred translation set", translation=translation_id)

    async def clear_catalog_cache(self) -> int:
        """Drop both catalog tiers. Content cache and preference are untouched."""
        return await self.cache_service.catalog.clear()

    async def _cached_snapshot(self) -> Optional[CatalogSnapshot]:
        entry = await self.cache_service.catalog.get(CATALOG_KEY)
        if entry is None:
            return None
        try:
            translations = [TranslationDescriptor.from_dict(item) for item in entry.payload]
        except (KeyError, TypeError):
            logger.warning("Malformed catalog snapshot dropped")
            await self.cache_service.catalog.delete(CATALOG_KEY)
            return None
        return CatalogSnapshot(translations=translations, fetched_at=entry.written_at)

    async def _refresh(self) -> Optional[CatalogSnapshot]:
        with create_span("catalog.refresh") as span:
            try:
                raw_entries = await self.provider.fetch_catalog()
            except ContentRetrievalError as e:
                span.set_attribute("catalog.error", e.error_code)
                logger.warning("Catalog fetch failed, using built-in list", error=str(e))
                return None
            span.set_attribute("catalog.raw_count", len(raw_entries))
        return await self._store_selection(raw_entries)

    async def _store_selection(self, raw_entries: List[Dict[str, Any]]) -> Optional[CatalogSnapshot]:
        normalized = [d for d in (normalize_translation(raw) for raw in raw_entries) if d is not None]
        translations = select_translations(normalized, self.config)
        if not translations:
            logger.warning("Catalog filtering left no translations", raw_count=len(raw_entries))
            return None

        entry = await self.cache_service.catalog.put(
            CATALOG_KEY,
            [descriptor.to_dict() for descriptor in translations],
            ttl=self.cache_config.catalog_ttl,
        )
        logger.info(
            "Catalog refreshed",
            raw_count=len(raw_entries),
            selected=len(translations),
        )
        return CatalogSnapshot(translations=translations, fetched_at=entry.written_at)
