"""
Lectio - Content Package

Chapter retrieval with bounded fallback, placeholder synthesis and the
service facade used by the reading app.
"""
from content.coordinator import FallbackCoordinator
from content.placeholder import (
    PLACEHOLDER_TEMPLATE,
    build_placeholder,
    is_placeholder_text,
    placeholder_verse_count,
)
from content.service import ScriptureService, create_service

__all__ = [
    "FallbackCoordinator",
    "PLACEHOLDER_TEMPLATE",
    "build_placeholder",
    "is_placeholder_text",
    "placeholder_verse_count",
    "ScriptureService",
    "create_service",
]
