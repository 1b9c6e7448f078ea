"""
Lectio - Placeholder Chapters

Deterministic stand-in verses returned when no real source can serve a
chapter. The text names the book, chapter and verse so it can never be
mistaken for real content.
"""
from typing import List

from core.types import VerseRecord

PLACEHOLDER_TEMPLATE = (
    "This is a placeholder for {book} chapter {chapter} verse {verse}. "
    "The text of this chapter could not be loaded."
)

_PSALMS_VERSES = 20
_DEFAULT_VERSES = 30


def placeholder_verse_count(book_name: str) -> int:
    return _PSALMS_VERSES if book_name == "Psalms" else _DEFAULT_VERSES


def build_placeholder(book_name: str, chapter: int) -> List[VerseRecord]:
    """Templated verses for one chapter; same input, same output."""
    return [
        VerseRecord(verse, PLACEHOLDER_TEMPLATE.format(book=book_name, chapter=chapter, verse=verse))
        for verse in range(1, placeholder_verse_count(book_name) + 1)
    ]


def is_placeholder_text(text: str) -> bool:
    return text.startswith("This is a placeholder for ") and text.endswith("could not be loaded.")
