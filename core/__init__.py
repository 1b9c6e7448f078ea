"""
Lectio - Core Module

Foundational pieces shared by every other package:
- Unified error handling
- Domain types and the static book catalog
- Async utilities (request coalescing)

Nothing in core depends on the cache, catalog, provider or content packages.

Usage:
    from core import ChapterKey, VerseRecord, UpstreamUnavailable, find_book
"""

from core.errors import (
    LectioError,
    LectioConfigError,
    StoreError,
    UnknownTranslation,
    ContentRetrievalError,
    UpstreamUnavailable,
    BadResponseFormat,
    EmptyContent,
    ErrorContext,
    ErrorSeverity,
)
from core.types import (
    CONTENT_NAMESPACE,
    CATALOG_NAMESPACE,
    PREFERENCE_NAMESPACE,
    Testament,
    TranslationDescriptor,
    BookDescriptor,
    ChapterKey,
    VerseRecord,
    CacheEntry,
    CatalogSnapshot,
    ChapterContent,
    verses_to_payload,
    verses_from_payload,
)
from core.books import (
    BOOKS,
    get_book_catalog,
    find_book,
    get_book_id_from_name,
    get_book_chapters,
)
from core.async_utils import RequestCoalescer

__all__ = [
    # Errors
    "LectioError",
    "LectioConfigError",
    "StoreError",
    "UnknownTranslation",
    "ContentRetrievalError",
    "UpstreamUnavailable",
    "BadResponseFormat",
    "EmptyContent",
    "ErrorContext",
    "ErrorSeverity",
    # Types
    "CONTENT_NAMESPACE",
    "CATALOG_NAMESPACE",
    "PREFERENCE_NAMESPACE",
    "Testament",
    "TranslationDescriptor",
    "BookDescriptor",
    "ChapterKey",
    "VerseRecord",
    "CacheEntry",
    "CatalogSnapshot",
    "ChapterContent",
    "verses_to_payload",
    "verses_from_payload",
    # Books
    "BOOKS",
    "get_book_catalog",
    "find_book",
    "get_book_id_from_name",
    "get_book_chapters",
    # Async
    "RequestCoalescer",
]
