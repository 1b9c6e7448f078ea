"""
Shared test helpers: a scripted provider and canned responses.
"""
from typing import Any, Callable, Dict, List, Optional

import httpx

PROVIDER_BASE = "https://provider.test/api"
CATALOG_PATH = "/api/available_translations.json"


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def segmented_chapter(count: int, label: str = "Verse") -> Dict[str, Any]:
    """Chapter payload in the provider's current segmented shape."""
    return {
        "translation": {"id": "test"},
        "chapter": {
            "number": 1,
            "content": [
                {"type": "heading", "content": ["A heading"]},
                *[
                    {"type": "verse", "number": n, "content": [f"{label} {n}."]}
                    for n in range(1, count + 1)
                ],
            ],
        },
    }


def json_response(payload: Any, status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json=payload)


def html_response(status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, html="<!DOCTYPE html><html><body>Error</body></html>")


def status_response(status: int) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json={"error": status})


class ProviderStub:
    """
    Routes provider requests by URL path to canned responses and records
    every request. Unrouted paths answer 404.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []
        self.down = False

    def chapter(
        self,
        translation_id: str,
        book_id: str,
        chapter: int,
        responder: Callable[[httpx.Request], httpx.Response],
    ) -> None:
        self.routes[f"/api/{translation_id}/{book_id}/{chapter}.json"] = responder

    def catalog(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[CATALOG_PATH] = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("provider unreachable", request=request)
        responder = self.routes.get(request.url.path)
        if responder is None:
            return httpx.Response(404, json={"error": "not found"})
        return responder(request)

    def chapter_requests(self, translation_id: Optional[str] = None) -> List[httpx.Request]:
        paths = [r for r in self.requests if r.url.path != CATALOG_PATH]
        if translation_id is None:
            return paths
        return [r for r in paths if r.url.path.startswith(f"/api/{translation_id}/")]

    def catalog_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == CATALOG_PATH]


RAW_CATALOG = {
    "translations": [
        {"id": "eng-web", "name": "World English Bible", "englishName": "World English Bible",
         "shortName": "WEB", "language": "eng", "languageEnglishName": "English"},
        {"id": "eng-kjv", "name": "King James Version", "shortName": "KJV", "language": "eng",
         "languageName": "English"},
        {"id": "BSB", "name": "Berean Standard Bible", "shortName": "BSB", "language": "eng",
         "languageEnglishName": "English"},
        {"id": "eng-zzz", "name": "Zzz Paraphrase", "language": "eng", "languageEnglishName": "English"},
        {"id": "eng-aaa", "name": "Aaa Paraphrase", "language": "eng", "languageEnglishName": "English"},
        {"id": "spa-rv1909", "name": "Reina Valera 1909", "englishName": "Reina Valera 1909",
         "language": {"code": "spa", "name": "Spanish"}},
        {"id": "deu-l1912", "name": "Lutherbibel 1912", "englishName": "Luther Bible 1912",
         "language": "deu", "languageEnglishName": "German"},
        {"id": "grc-tr", "name": "Textus Receptus", "language": "grc", "languageEnglishName": "Greek"},
        {"name": "No id at all", "language": "eng"},
    ]
}
