"""
Lectio - Test Configuration

Pytest fixtures and configuration for all tests.
"""
from dataclasses import dataclass

import httpx
import pytest

from cache.service import CacheService
from catalog.manager import TranslationCatalogManager
from config import CacheConfig, CatalogConfig, ProviderConfig, StoreBackend
from content.coordinator import FallbackCoordinator
from content.service import ScriptureService
from integrations.provider import ProviderClient
from storage.memory import MemoryKeyValueStore

from tests.helpers import PROVIDER_BASE, FakeClock, ProviderStub


@dataclass
class Engine:
    """Fully wired engine over a memory store and a stubbed provider."""

    clock: FakeClock
    store: MemoryKeyValueStore
    stub: ProviderStub
    cache_service: CacheService
    provider: ProviderClient
    catalog: TranslationCatalogManager
    coordinator: FallbackCoordinator
    service: ScriptureService


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def cache_config(tmp_path) -> CacheConfig:
    return CacheConfig(
        backend=StoreBackend.MEMORY,
        store_dir=tmp_path / "store",
        content_ttl=30 * 24 * 3600,
        placeholder_ttl=3600,
        hot_ttl=3600,
        hot_max_entries=64,
        catalog_hot_ttl=300,
        catalog_ttl=7 * 24 * 3600,
    )


@pytest.fixture
def catalog_config() -> CatalogConfig:
    return CatalogConfig(
        default_translation="eng-web",
        primary_language="eng",
        per_language_cap=3,
        known_working=["eng-web", "eng-kjv", "eng-asv", "eng-bbe", "BSB", "spa-rv1909"],
        language_allowlist=["eng", "spa", "por", "fra", "deu"],
    )


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(base_url=PROVIDER_BASE)


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
async def provider(provider_config, provider_stub):
    client = httpx.AsyncClient(transport=httpx.MockTransport(provider_stub.handler))
    provider = ProviderClient(provider_config, client=client)
    yield provider
    await client.aclose()


@pytest.fixture
def cache_service(memory_store, cache_config, clock) -> CacheService:
    return CacheService(memory_store, cache_config, clock=clock)


@pytest.fixture
def engine(clock, memory_store, provider_stub, cache_service, provider, catalog_config, cache_config) -> Engine:
    catalog = TranslationCatalogManager(cache_service, provider, catalog_config, cache_config)
    coordinator = FallbackCoordinator(cache_service, provider, catalog, cache_config)
    return Engine(
        clock=clock,
        store=memory_store,
        stub=provider_stub,
        cache_service=cache_service,
        provider=provider,
        catalog=catalog,
        coordinator=coordinator,
        service=ScriptureService(cache_service, provider, catalog, coordinator),
    )
