"""
Tests for the fallback coordinator state machine.
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from cache.service import CacheService
from catalog.manager import TranslationCatalogManager
from content.coordinator import FallbackCoordinator
from content.placeholder import is_placeholder_text
from core.errors import UpstreamUnavailable
from core.types import VerseRecord
from storage.redis_store import RedisKeyValueStore
from tests.helpers import RAW_CATALOG, html_response, json_response, segmented_chapter

JOHN_KJV = "content-cache:eng-kjv:John:1"
JOHN_WEB = "content-cache:eng-web:John:1"


class TestHealthyProvider:
    """Direct hits on the requested translation."""

    @pytest.mark.asyncio
    async def test_john_1_in_kjv(self, engine):
        engine.stub.chapter("eng-kjv", "JHN", 1, json_response(segmented_chapter(18, "KJV")))

        content = await engine.coordinator.get_chapter("JHN", 1, "eng-kjv")

        assert [v.number for v in content.verses] == list(range(1, 19))
        assert content.verses[0] == VerseRecord(1, "KJV 1.")
        assert content.served_by == "eng-kjv"
        assert content.placeholder is False
        assert content.from_cache is False
        assert (await engine.store.get(JOHN_KJV))["ttl"] == 30 * 24 * 3600

    @pytest.mark.asyncio
    async def test_repeat_calls_are_identical_and_cached(self, engine):
        engine.stub.chapter("eng-kjv", "JHN", 1, json_response(segmented_chapter(18)))

        first = await engine.coordinator.get_chapter_content("JHN", 1, "eng-kjv")
        second = await engine.coordinator.get_chapter_content("JHN", 1, "eng-kjv")

        assert first == second
        assert len(engine.stub.chapter_requests()) == 1

    @pytest.mark.asyncio
    async def test_book_name_and_code_share_a_key(self, engine):
        engine.stub.chapter("eng-kjv", "JHN", 1, json_response(segmented_chapter(5)))

        await engine.coordinator.get_chapter("john", 1, "eng-kjv")
        content = await engine.coordinator.get_chapter("JHN", 1, "eng-kjv")

        assert content.from_cache is True
        assert len(engine.stub.chapter_requests()) == 1

    @pytest.mark.asyncio
    async def test_expired_entry_is_refetched(self, engine):
        engine.stub.chapter("eng-kjv", "JHN", 1, json_response(segmented_chapter(5)))
        await engine.coordinator.get_chapter("JHN", 1, "eng-kjv")

        engine.clock.advance(30 * 24 * 3600 + 1)
        content = await engine.coordinator.get_chapter("JHN", 1, "eng-kjv")

        assert content.from_cache is False
        assert len(engine.stub.chapter_requests()) == 2

    @pytest.mark.asyncio
    async def test_preference_then_default(self, engine):
        engine.stub.chapter("eng-web", "JHN", 1, json_response(segmented_chapter(3, "WEB")))
        engine.stub.chapter("BSB", "JHN", 1, json_response(segmented_chapter(3, "BSB")))

        assert (await engine.coordinator.get_chapter("JHN", 1)).served_by == "eng-web"

        await engine.cache_service.set_preference("translation", "BSB")
        content = await engine.coordinator.get_chapter("JHN", 1)
        assert content.served_by == "BSB"
        assert content.verses[0].text == "BSB 1."


class TestFallback:
    """One hop to the default translation, then placeholder."""

    @pytest.mark.asyncio
    async def test_missing_translation_falls_back_to_default(self, engine):
        engine.stub.chapter("eng-web", "JHN", 1, json_response(segmented_chapter(51, "WEB")))

        content = await engine.coordinator.get_chapter("JHN", 1, "xyz-missing")

        assert content.served_by == "eng-web"
        assert content.placeholder is False
        assert content.key.translation_id == "xyz-missing"
        assert len(content.verses) == 51
        assert len(engine.stub.chapter_requests()) == 2
        assert await engine.store.get(JOHN_WEB) is not None
        assert await engine.store.get("content-cache:xyz-missing:John:1") is None

    @pytest.mark.asyncio
    async def test_html_body_falls_back(self, engine):
        engine.stub.chapter("eng-kjv", "JHN", 1, html_response())
        engine.stub.chapter("eng-web", "JHN", 1, json_response(segmented_chapter(4, "WEB")))

        content = await engine.coordinator.get_chapter("JHN", 1, "eng-kjv")

        assert content.served_by == "eng-web"
        assert content.verses[0].text == "WEB 1."

    @pytest.mark.asyncio
    async def test_fallback_uses_cached_default(self, engine):
        engine.stub.chapter("eng-web", "JHN", 1, json_response(segmented_chapter(4, "WEB")))
        await engine.coordinator.get_chapter("JHN", 1, "eng-web")

        content = await engine.coordinator.get_chapter("JHN", 1, "xyz-missing")

        assert content.served_by == "eng-web"
        assert content.from_cache is True
        assert len(engine.stub.chapter_requests("eng-web")) == 1

    @pytest.mark.asyncio
    async def test_both_fail_exactly_two_fetches_then_placeholder(self, engine):
        engine.stub.chapter("eng-kjv", "JHN", 1, html_response())
        engine.stub.chapter("eng-web", "JHN", 1, html_response())

        content = await engine.coordinator.get_chapter("JHN", 1, "eng-kjv")

        assert len(engine.stub.chapter_requests()) == 2
        assert content.placeholder is True
        assert content.served_by is None
        assert len(content.verses) == 30
        assert all(is_placeholder_text(v.text) for v in content.verses)
        assert "John chapter 1 verse 1" in content.verses[0].text

    @pytest.mark.asyncio
    async def test_placeholder_cached_under_requested_key_with_short_ttl(self, engine):
        engine.stub.down = True

        await engine.coordinator.get_chapter("JHN", 1, "eng-kjv")

        envelope = await engine.store.get(JOHN_KJV)
        assert envelope["ttl"] == 3600
        assert envelope["payload"]["placeholder"] is True
        assert await engine.store.get(JOHN_WEB) is None

    @pytest.mark.asyncio
    async def test_placeholder_expires_and_is_retried(self, engine):
        engine.stub.down = True
        await engine.coordinator.get_chapter("JHN", 1, "eng-kjv")

        engine.clock.advance(60)
        cached = await engine.coordinator.get_chapter("JHN", 1, "eng-kjv")
        assert cached.placeholder is True
        assert cached.from_cache is True
        assert len(engine.stub.chapter_requests()) == 2

        engine.stub.down = False
        engine.stub.chapter("eng-kjv", "JHN", 1, json_response(segmented_chapter(18)))
        engine.clock.advance(3600)
        content = await engine.coordinator.get_chapter("JHN", 1, "eng-kjv")
        assert content.placeholder is False
        assert len(content.verses) == 18

    @pytest.mark.asyncio
    async def test_default_failure_does_not_hop(self, engine):
        engine.stub.chapter("eng-web", "PSA", 23, json_response({"chapter": {"content": []}}))

        content = await engine.coordinator.get_chapter("PSA", 23, "eng-web")

        assert len(engine.stub.chapter_requests()) == 1
        assert content.placeholder is True
        assert len(content.verses) == 20

    @pytest.mark.asyncio
    async def test_cached_default_placeholder_is_not_content(self, engine):
        engine.stub.down = True
        await engine.coordinator.get_chapter("JHN", 1, "eng-web")

        engine.stub.down = False
        engine.stub.chapter("eng-web", "JHN", 1, json_response(segmented_chapter(3, "WEB")))
        content = await engine.coordinator.get_chapter("JHN", 1, "eng-kjv")

        assert content.placeholder is False
        assert content.served_by == "eng-web"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("translation", ["eng-kjv", "xyz-missing", None])
    @pytest.mark.parametrize("mode", ["up", "down", "malformed"])
    async def test_never_fails(self, engine, translation, mode):
        if mode == "up":
            engine.stub.chapter("eng-kjv", "ROM", 8, json_response(segmented_chapter(39)))
            engine.stub.chapter("eng-web", "ROM", 8, json_response(segmented_chapter(39)))
        elif mode == "down":
            engine.stub.down = True
        else:
            engine.stub.chapter("eng-kjv", "ROM", 8, json_response({"data": "?"}))
            engine.stub.chapter("eng-web", "ROM", 8, html_response())

        verses = await engine.coordinator.get_chapter_content("ROM", 8, translation)

        assert verses
        numbers = [v.number for v in verses]
        assert numbers == sorted(set(numbers))
        assert len(engine.stub.chapter_requests()) <= 2


class TestRequestValidation:
    """Requests that never reach the provider."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("book,chapter", [("XYZ", 1), ("JHN", 0), ("JHN", 22), ("OBA", 2)])
    async def test_unknown_chapter_is_uncached_placeholder(self, engine, book, chapter):
        content = await engine.coordinator.get_chapter(book, chapter, "eng-kjv")

        assert content.placeholder is True
        assert content.verses
        assert engine.stub.chapter_requests() == []
        assert len(engine.store) == 0


class TestConcurrency:
    """Coalescing and cancellation."""

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_fetch(self, engine):
        engine.stub.chapter("eng-kjv", "JHN", 1, json_response(segmented_chapter(18)))

        results = await asyncio.gather(*[
            engine.coordinator.get_chapter_content("JHN", 1, "eng-kjv") for _ in range(5)
        ])

        assert len(engine.stub.chapter_requests()) == 1
        assert all(result == results[0] for result in results)
        assert engine.coordinator.in_flight == 0

    @pytest.mark.asyncio
    async def test_different_translations_are_not_coalesced(self, engine):
        engine.stub.chapter("eng-kjv", "JHN", 1, json_response(segmented_chapter(2)))
        engine.stub.chapter("eng-web", "JHN", 1, json_response(segmented_chapter(2)))

        await asyncio.gather(
            engine.coordinator.get_chapter("JHN", 1, "eng-kjv"),
            engine.coordinator.get_chapter("JHN", 1, "eng-web"),
        )
        assert len(engine.stub.chapter_requests()) == 2

    @pytest.mark.asyncio
    async def test_abandoned_request_still_caches(self, cache_service, engine):
        release = asyncio.Event()
        provider = AsyncMock()

        async def slow_fetch(translation_id, book_id, chapter):
            await release.wait()
            return [VerseRecord(1, "late")]

        provider.fetch_chapter.side_effect = slow_fetch
        coordinator = FallbackCoordinator(cache_service, provider, engine.catalog)

        caller = asyncio.ensure_future(coordinator.get_chapter("JHN", 1, "eng-kjv"))
        await asyncio.sleep(0)
        caller.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller

        release.set()
        for _ in range(5):
            await asyncio.sleep(0)

        content = await coordinator.get_chapter("JHN", 1, "eng-kjv")
        assert content.from_cache is True
        assert content.verses == [VerseRecord(1, "late")]
        provider.fetch_chapter.assert_awaited_once()


class TestUnexpectedErrors:
    """Total-function contract."""

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_placeholder(self, cache_service, engine):
        provider = AsyncMock()
        provider.fetch_chapter.side_effect = RuntimeError("bug")
        coordinator = FallbackCoordinator(cache_service, provider, engine.catalog)

        content = await coordinator.get_chapter("JHN", 1, "eng-kjv")

        assert content.placeholder is True
        assert await cache_service.content.get(content.key) is None

    @pytest.mark.asyncio
    async def test_retrieval_errors_are_absorbed(self, cache_service, engine):
        provider = AsyncMock()
        provider.fetch_chapter.side_effect = UpstreamUnavailable("down", status_code=503)
        coordinator = FallbackCoordinator(cache_service, provider, engine.catalog)

        content = await coordinator.get_chapter("JHN", 1, "eng-kjv")

        assert content.placeholder is True
        assert provider.fetch_chapter.await_count == 2


class TestCorruptDurableStore:
    """Unreadable durable values behave as cache misses."""

    @pytest.fixture
    def redis_engine(self, engine, clock, cache_config, catalog_config):
        client = AsyncMock()
        client.get.return_value = "not json{"
        cache_service = CacheService(RedisKeyValueStore(client=client), cache_config, clock=clock)
        catalog = TranslationCatalogManager(cache_service, engine.provider, catalog_config, cache_config)
        coordinator = FallbackCoordinator(cache_service, engine.provider, catalog, cache_config)
        return catalog, coordinator

    @pytest.mark.asyncio
    async def test_chapter_is_fetched(self, engine, redis_engine):
        _, coordinator = redis_engine
        engine.stub.chapter("eng-web", "JHN", 1, json_response(segmented_chapter(18)))

        content = await coordinator.get_chapter("JHN", 1, "eng-web")

        assert content.placeholder is False
        assert len(content.verses) == 18
        assert len(engine.stub.chapter_requests()) == 1

    @pytest.mark.asyncio
    async def test_catalog_is_fetched(self, engine, redis_engine):
        catalog, _ = redis_engine
        engine.stub.catalog(json_response(RAW_CATALOG))

        translations = await catalog.get_available_translations()

        assert translations[0].id == "eng-web"
        assert len(engine.stub.catalog_requests()) == 1
