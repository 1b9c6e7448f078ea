"""
Lectio - Static Book Catalog

The 66-book Protestant canon in canonical order. Book codes follow the
three-character USFM scheme used by the provider; cache keys use the
canonical names instead.
"""
from typing import Dict, List, Optional, Tuple

from core.types import BookDescriptor, Testament

_OT_COUNT = 39

# (code, canonical name, chapter count)
_BOOK_TABLE: List[Tuple[str, str, int]] = [
    # Old Testament
    ("GEN", "Genesis", 50),
    ("EXO", "Exodus", 40),
    ("LEV", "Leviticus", 27),
    ("NUM", "Numbers", 36),
    ("DEU", "Deuteronomy", 34),
    ("JOS", "Joshua", 24),
    ("JDG", "Judges", 21),
    ("RUT", "Ruth", 4),
    ("1SA", "1 Samuel", 31),
    ("2SA", "2 Samuel", 24),
    ("1KI", "1 Kings", 22),
    ("2KI", "2 Kings", 25),
    ("1CH", "1 Chronicles", 29),
    ("2CH", "2 Chronicles", 36),
    ("EZR", "Ezra", 10),
    ("NEH", "Nehemiah", 13),
    ("EST", "Esther", 10),
    ("JOB", "Job", 42),
    ("PSA", "Psalms", 150),
    ("PRO", "Proverbs", 31),
    ("ECC", "Ecclesiastes", 12),
    ("SNG", "Song of Solomon", 8),
    ("ISA", "Isaiah", 66),
    ("JER", "Jeremiah", 52),
    ("LAM", "Lamentations", 5),
    ("EZK", "Ezekiel", 48),
    ("DAN", "Daniel", 12),
    ("HOS", "Hosea", 14),
    ("JOL", "Joel", 3),
    ("AMO", "Amos", 9),
    ("OBA", "Obadiah", 1),
    ("JON", "Jonah", 4),
    ("MIC", "Micah", 7),
    ("NAM", "Nahum", 3),
    ("HAB", "Habakkuk", 3),
    ("ZEP", "Zephaniah", 3),
    ("HAG", "Haggai", 2),
    ("ZEC", "Zechariah", 14),
    ("MAL", "Malachi", 4),

    # New Testament
    ("MAT", "Matthew", 28),
    ("MRK", "Mark", 16),
    ("LUK", "Luke", 24),
    ("JHN", "John", 21),
    ("ACT", "Acts", 28),
    ("ROM", "Romans", 16),
    ("1CO", "1 Corinthians", 16),
    ("2CO", "2 Corinthians", 13),
    ("GAL", "Galatians", 6),
    ("EPH", "Ephesians", 6),
    ("PHP", "Philippians", 4),
    ("COL", "Colossians", 4),
    ("1TH", "1 Thessalonians", 5),
    ("2TH", "2 Thessalonians", 3),
    ("1TI", "1 Timothy", 6),
    ("2TI", "2 Timothy", 4),
    ("TIT", "Titus", 3),
    ("PHM", "Philemon", 1),
    ("HEB", "Hebrews", 13),
    ("JAS", "James", 5),
    ("1PE", "1 Peter", 5),
    ("2PE", "2 Peter", 3),
    ("1JN", "1 John", 5),
    ("2JN", "2 John", 1),
    ("3JN", "3 John", 1),
    ("JUD", "Jude", 1),
    ("REV", "Revelation", 22),
]

BOOKS: List[BookDescriptor] = [
    BookDescriptor(
        id=code,
        name=name,
        testament=Testament.OLD_TESTAMENT if index < _OT_COUNT else Testament.NEW_TESTAMENT,
        ordinal=index + 1,
        chapters=chapters,
    )
    for index, (code, name, chapters) in enumerate(_BOOK_TABLE)
]

_BY_ID: Dict[str, BookDescriptor] = {book.id: book for book in BOOKS}
_BY_NAME: Dict[str, BookDescriptor] = {book.name.lower(): book for book in BOOKS}


def get_book_catalog() -> List[BookDescriptor]:
    """Return the static book list in canonical order."""
    return list(BOOKS)


def find_book(book: str) -> Optional[BookDescriptor]:
    """Resolve a book code ("JHN") or canonical name ("John"), case-insensitively."""
    if not book:
        return None
    cleaned = " ".join(book.split())
    return _BY_ID.get(cleaned.upper()) or _BY_NAME.get(cleaned.lower())


def get_book_id_from_name(name: str) -> Optional[str]:
    book = _BY_NAME.get(" ".join(name.split()).lower()) if name else None
    return book.id if book else None


def get_book_chapters(book_id: str) -> int:
    """Chapter count for a book code, 0 when unknown."""
    book = _BY_ID.get(book_id.upper()) if book_id else None
    return book.chapters if book else 0
