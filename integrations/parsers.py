"""
Lectio - Chapter Response Parsers

The provider has answered chapter requests in several shapes over its
revisions. Each known shape is one parser strategy; all of them produce the
same canonical verse list.

Shapes:
    SEGMENTED    {"chapter": {"content": [{"type": "verse", "number": 1,
                  "content": ["text", {"text": "...", "wordsOfJesus": true},
                  {"noteId": 0}]}]}}
    VERSE_TABLE  {"verses": [{"verse": 1, "text": "..."}]}
    TEXT_BLOCK   {"text": "line one\\nline two"}

Canonical output: ascending verse numbers, no duplicates, no empty text,
whitespace collapsed. Repeated numbers are merged in arrival order.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from core.errors import BadResponseFormat
from core.types import VerseRecord

_WHITESPACE = re.compile(r"\s+")


class ResponseShape(str, Enum):
    """Known chapter payload shapes, in detection order."""
    SEGMENTED = "segmented"
    VERSE_TABLE = "verse_table"
    TEXT_BLOCK = "text_block"


def _clean(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def canonicalize(pairs: Iterable[Tuple[int, str]]) -> List[VerseRecord]:
    """Order, merge and clean raw (number, text) pairs."""
    merged: Dict[int, List[str]] = {}
    for number, text in pairs:
        cleaned = _clean(text)
        if number < 1 or not cleaned:
            continue
        merged.setdefault(number, []).append(cleaned)
    return [VerseRecord(number, " ".join(parts)) for number, parts in sorted(merged.items())]


def _segment_text(segment: Any) -> str:
    """Plain strings pass through; annotation objects contribute their text only."""
    if isinstance(segment, str):
        return segment
    if isinstance(segment, dict):
        text = segment.get("text")
        if isinstance(text, str):
            return text
        if segment.get("lineBreak"):
            return " "
    # Footnote references, headings inside a verse
    return ""


def _segmented_items(payload: Dict[str, Any]) -> Optional[List[Any]]:
    chapter = payload.get("chapter")
    if isinstance(chapter, dict) and isinstance(chapter.get("content"), list):
        return chapter["content"]
    if isinstance(payload.get("content"), list):
        return payload["content"]
    return None


def parse_segmented(payload: Dict[str, Any]) -> List[VerseRecord]:
    items = _segmented_items(payload) or []
    pairs = []
    for item in items:
        if not isinstance(item, dict) or item.get("type", "verse") != "verse":
            continue
        number = item.get("number")
        content = item.get("content")
        if not isinstance(number, int) or isinstance(number, bool):
            continue
        if isinstance(content, str):
            content = [content]
        if not isinstance(content, list):
            continue
        pairs.append((number, "".join(_segment_text(segment) for segment in content)))
    return canonicalize(pairs)


def parse_verse_table(payload: Dict[str, Any]) -> List[VerseRecord]:
    pairs = []
    for row in payload.get("verses") or []:
        if not isinstance(row, dict):
            continue
        try:
            number = int(row.get("verse", row.get("number")))
        except (TypeError, ValueError):
            continue
        text = row.get("text")
        if isinstance(text, str):
            pairs.append((number, text))
    return canonicalize(pairs)


def parse_text_block(payload: Dict[str, Any]) -> List[VerseRecord]:
    lines = [line for line in payload["text"].strip().split("\n") if line.strip()]
    return canonicalize((index + 1, line) for index, line in enumerate(lines))


PARSERS: Dict[ResponseShape, Callable[[Dict[str, Any]], List[VerseRecord]]] = {
    ResponseShape.SEGMENTED: parse_segmented,
    ResponseShape.VERSE_TABLE: parse_verse_table,
    ResponseShape.TEXT_BLOCK: parse_text_block,
}


def detect_shape(payload: Any) -> Optional[ResponseShape]:
    """Identify which known shape a decoded payload has."""
    if not isinstance(payload, dict):
        return None
    if _segmented_items(payload) is not None:
        return ResponseShape.SEGMENTED
    if isinstance(payload.get("verses"), list):
        return ResponseShape.VERSE_TABLE
    if isinstance(payload.get("text"), str):
        return ResponseShape.TEXT_BLOCK
    return None


def parse_chapter(payload: Any, url: Optional[str] = None) -> Tuple[ResponseShape, List[VerseRecord]]:
    """
    Normalize a decoded chapter payload.

    Raises:
        BadResponseFormat: payload matches no known shape.
    """
    shape = detect_shape(payload)
    if shape is None:
        keys = sorted(payload.keys())[:10] if isinstance(payload, dict) else type(payload).__name__
        raise BadResponseFormat(f"Unrecognized chapter payload: {keys}", url=url)
    return shape, PARSERS[shape](payload)
