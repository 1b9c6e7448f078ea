"""
Lectio - Core Types

Domain records shared by the cache, catalog, provider and coordinator.
All records are immutable; caches replace whole values, never merge.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Dict,
    Generic,
    List,
    Optional,
    Sequence,
    TypeVar,
)

T = TypeVar("T")

CONTENT_NAMESPACE = "content-cache"
CATALOG_NAMESPACE = "catalog"
PREFERENCE_NAMESPACE = "preference"


class Testament(str, Enum):
    """Testament designation."""
    OLD_TESTAMENT = "OT"
    NEW_TESTAMENT = "NT"


@dataclass(frozen=True)
class TranslationDescriptor:
    """An edition offered by the provider. Identity is the id."""

    id: str
    name: str
    language: str
    language_name: str
    short_name: Optional[str] = None
    description: Optional[str] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TranslationDescriptor):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "language": self.language,
            "language_name": self.language_name,
            "short_name": self.short_name,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranslationDescriptor":
        return cls(
            id=data["id"],
            name=data["name"],
            language=data["language"],
            language_name=data["language_name"],
            short_name=data.get("short_name"),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class BookDescriptor:
    """Static book metadata."""

    id: str
    name: str
    testament: Testament
    ordinal: int
    chapters: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "testament": self.testament.value,
            "ordinal": self.ordinal,
            "chapters": self.chapters,
        }


@dataclass(frozen=True)
class ChapterKey:
    """
    Cache address of one chapter.

    Built from the canonical book name so keys survive changes to the
    provider's book-code scheme.
    """

    translation_id: str
    book_name: str
    chapter: int

    def with_translation(self, translation_id: str) -> "ChapterKey":
        return ChapterKey(translation_id, self.book_name, self.chapter)

    def __str__(self) -> str:
        return f"{self.translation_id}:{self.book_name}:{self.chapter}"


@dataclass(frozen=True)
class VerseRecord:
    """One verse of a chapter."""

    number: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"verse": self.number, "text": self.text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerseRecord":
        return cls(number=int(data["verse"]), text=str(data["text"]))


def verses_to_payload(verses: Sequence[VerseRecord]) -> List[Dict[str, Any]]:
    """Serialize a verse list for the durable tier."""
    return [verse.to_dict() for verse in verses]


def verses_from_payload(payload: Sequence[Dict[str, Any]]) -> List[VerseRecord]:
    """Rebuild a verse list from a durable-tier payload."""
    return [VerseRecord.from_dict(item) for item in payload]


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value with the time it was written and its own ttl (seconds)."""

    payload: T
    written_at: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.written_at

    def is_expired(self, now: float) -> bool:
        return self.age(now) > self.ttl

    def to_envelope(self) -> Dict[str, Any]:
        return {"timestamp": self.written_at, "ttl": self.ttl, "payload": self.payload}

    @classmethod
    def from_envelope(cls, envelope: Dict[str, Any]) -> "CacheEntry[Any]":
        return cls(
            payload=envelope["payload"],
            written_at=float(envelope["timestamp"]),
            ttl=float(envelope["ttl"]),
        )


@dataclass(frozen=True)
class CatalogSnapshot:
    """A filtered translation list and when it was fetched."""

    translations: List[TranslationDescriptor]
    fetched_at: float


@dataclass(frozen=True)
class ChapterContent:
    """Resolved chapter plus where it came from."""

    key: ChapterKey
    verses: List[VerseRecord] = field(default_factory=list)
    served_by: Optional[str] = None
    placeholder: bool = False
    from_cache: bool = False
