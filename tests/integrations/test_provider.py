"""
Tests for the provider client and its failure classification.
"""
import httpx
import pytest

from core.errors import BadResponseFormat, EmptyContent, UpstreamUnavailable
from core.types import VerseRecord
from integrations.provider import ProviderClient
from tests.helpers import html_response, json_response, segmented_chapter, status_response


class TestFetchChapter:
    """Chapter endpoint."""

    @pytest.mark.asyncio
    async def test_builds_chapter_url(self, provider, provider_stub):
        provider_stub.chapter("eng-kjv", "JHN", 1, json_response(segmented_chapter(3)))

        verses = await provider.fetch_chapter("eng-kjv", "JHN", 1)

        assert [v.number for v in verses] == [1, 2, 3]
        assert str(provider_stub.requests[0].url) == "https://provider.test/api/eng-kjv/JHN/1.json"

    @pytest.mark.asyncio
    async def test_verse_table_payload(self, provider, provider_stub):
        provider_stub.chapter("BSB", "GEN", 1, json_response({"verses": [{"verse": 1, "text": "In the beginning"}]}))
        assert await provider.fetch_chapter("BSB", "GEN", 1) == [VerseRecord(1, "In the beginning")]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 404, 500, 503])
    async def test_non_2xx_is_upstream_unavailable(self, provider, provider_stub, status):
        provider_stub.chapter("xyz-missing", "JHN", 1, status_response(status))

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await provider.fetch_chapter("xyz-missing", "JHN", 1)

        assert exc_info.value.status_code == status
        assert exc_info.value.url.endswith("/xyz-missing/JHN/1.json")

    @pytest.mark.asyncio
    async def test_transport_error_is_upstream_unavailable(self, provider, provider_stub):
        provider_stub.down = True

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await provider.fetch_chapter("eng-web", "JHN", 1)

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_html_page_is_bad_response_format(self, provider, provider_stub):
        provider_stub.chapter("eng-web", "JHN", 1, html_response())

        with pytest.raises(BadResponseFormat) as exc_info:
            await provider.fetch_chapter("eng-web", "JHN", 1)

        assert "text/html" in exc_info.value.content_type
        assert exc_info.value.body_preview.startswith("<!DOCTYPE html>")

    @pytest.mark.asyncio
    async def test_angle_bracket_body_is_bad_response_format(self, provider, provider_stub):
        provider_stub.chapter(
            "eng-web", "JHN", 1,
            lambda request: httpx.Response(200, content=b"  <html>oops</html>", headers={"content-type": "application/json"}),
        )
        with pytest.raises(BadResponseFormat):
            await provider.fetch_chapter("eng-web", "JHN", 1)

    @pytest.mark.asyncio
    async def test_undecodable_json_is_bad_response_format(self, provider, provider_stub):
        provider_stub.chapter(
            "eng-web", "JHN", 1,
            lambda request: httpx.Response(200, content=b"{truncated", headers={"content-type": "application/json"}),
        )
        with pytest.raises(BadResponseFormat):
            await provider.fetch_chapter("eng-web", "JHN", 1)

    @pytest.mark.asyncio
    async def test_unknown_shape_is_bad_response_format(self, provider, provider_stub):
        provider_stub.chapter("eng-web", "JHN", 1, json_response({"data": {"unexpected": True}}))
        with pytest.raises(BadResponseFormat):
            await provider.fetch_chapter("eng-web", "JHN", 1)

    @pytest.mark.asyncio
    async def test_zero_verses_is_empty_content(self, provider, provider_stub):
        provider_stub.chapter("eng-web", "JHN", 1, json_response({"chapter": {"content": []}}))
        with pytest.raises(EmptyContent):
            await provider.fetch_chapter("eng-web", "JHN", 1)


class TestFetchCatalog:
    """Catalog endpoint."""

    @pytest.mark.asyncio
    async def test_wrapped_list(self, provider, provider_stub):
        provider_stub.catalog(json_response({"translations": [{"id": "eng-web"}, "junk"]}))
        assert await provider.fetch_catalog() == [{"id": "eng-web"}]

    @pytest.mark.asyncio
    async def test_bare_list(self, provider, provider_stub):
        provider_stub.catalog(json_response([{"id": "eng-web"}, {"id": "BSB"}]))
        assert [entry["id"] for entry in await provider.fetch_catalog()] == ["eng-web", "BSB"]

    @pytest.mark.asyncio
    async def test_wrong_payload(self, provider, provider_stub):
        provider_stub.catalog(json_response({"items": []}))
        with pytest.raises(BadResponseFormat):
            await provider.fetch_catalog()

    @pytest.mark.asyncio
    async def test_catalog_unavailable(self, provider, provider_stub):
        with pytest.raises(UpstreamUnavailable):
            await provider.fetch_catalog()


class TestClientOwnership:
    """Closing only what the client created."""

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, provider_config):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(204)))

        async with ProviderClient(provider_config, client=client):
            pass
        assert not client.is_closed
        await client.aclose()
