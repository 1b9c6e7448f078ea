"""
Lectio - Remote Content Provider Client

Async HTTP access to the upstream content provider:
- fetch_chapter: one chapter, normalized to the canonical verse list
- fetch_catalog: the raw translation list

Failure classification:
- UpstreamUnavailable: transport error or non-2xx status
- BadResponseFormat: the provider answered with something that is not the
  JSON we expect (an HTML error page served as 200, undecodable JSON, an
  unknown shape)
- EmptyContent: a recognized shape that normalizes to zero verses
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx
from opentelemetry import trace
from opentelemetry.trace import SpanKind

from config import ProviderConfig
from core.errors import BadResponseFormat, EmptyContent, ErrorContext, UpstreamUnavailable
from core.types import VerseRecord
from integrations.parsers import parse_chapter
from observability.logging import get_logger
from observability.metrics import LectioMetrics, get_metrics

tracer = trace.get_tracer(__name__)
logger = get_logger(__name__)

_PREVIEW_CHARS = 120


class ProviderClient:
    """
    Client for the chapter and catalog endpoints.

    Usage:
        async with ProviderClient(ProviderConfig()) as provider:
            verses = await provider.fetch_chapter("eng-web", "JHN", 1)
    """

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        metrics: Optional[LectioMetrics] = None,
    ):
        self.config = config or ProviderConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": self.config.user_agent, "Accept": "application/json"},
            follow_redirects=True,
        )
        self._metrics = metrics or get_metrics()

    async def __aenter__(self) -> "ProviderClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch_chapter(self, translation_id: str, book_id: str, chapter: int) -> List[VerseRecord]:
        """Fetch and normalize one chapter."""
        url = self.config.chapter_url(translation_id, book_id, chapter)

        with tracer.start_as_current_span("provider.fetch_chapter", kind=SpanKind.CLIENT) as span:
            span.set_attribute("translation.id", translation_id)
            span.set_attribute("book.id", book_id)
            span.set_attribute("chapter", chapter)

            try:
                payload = await self._get_json(url, operation="fetch_chapter")
                shape, verses = parse_chapter(payload, url=url)
                span.set_attribute("response.shape", shape.value)
                if not verses:
                    raise EmptyContent(
                        f"No verses in {translation_id} {book_id} {chapter}",
                        url=url,
                        context=ErrorContext(
                            operation="fetch_chapter",
                            component="provider",
                            translation_id=translation_id,
                            book=book_id,
                            chapter=chapter,
                        ),
                    )
            except (UpstreamUnavailable, BadResponseFormat, EmptyContent) as e:
                self._metrics.record_remote_fetch(e.error_code.lower())
                raise

            span.set_attribute("verse.count", len(verses))
            self._metrics.record_remote_fetch("ok")
            logger.debug(
                "Chapter fetched",
                translation=translation_id,
                book=book_id,
                chapter=chapter,
                shape=shape.value,
                verses=len(verses),
            )
            return verses

    async def fetch_catalog(self) -> List[Dict[str, Any]]:
        """Fetch the raw translation list."""
        url = self.config.catalog_url

        with tracer.start_as_current_span("provider.fetch_catalog", kind=SpanKind.CLIENT) as span:
            payload = await self._get_json(url, operation="fetch_catalog")
            if isinstance(payload, dict):
                payload = payload.get("translations")
            if not isinstance(payload, list):
                raise BadResponseFormat("Catalog payload is not a translation list", url=url)
            entries = [entry for entry in payload if isinstance(entry, dict)]
            span.set_attribute("catalog.size", len(entries))
            return entries

    async def _get_json(self, url: str, operation: str) -> Any:
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(
                f"Request to provider failed: {type(e).__name__}",
                url=url,
                cause=e,
                context=ErrorContext(operation=operation, component="provider"),
            ) from e

        if not response.is_success:
            raise UpstreamUnavailable(
                f"Provider returned HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
                context=ErrorContext(operation=operation, component="provider"),
            )

        content_type = response.headers.get("content-type", "")
        body = response.text
        preview = body[:_PREVIEW_CHARS]

        if "html" in content_type.lower() or body.lstrip().startswith("<"):
            raise BadResponseFormat(
                "Provider returned an HTML page instead of JSON",
                url=url,
                content_type=content_type,
                body_preview=preview,
            )

        try:
            return json.loads(body)
        except ValueError as e:
            raise BadResponseFormat(
                "Provider response is not valid JSON",
                url=url,
                content_type=content_type,
                body_preview=preview,
                cause=e,
            ) from e
