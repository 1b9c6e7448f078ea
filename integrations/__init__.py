"""
Lectio - Integrations Package

Access to the external content provider and normalization of its responses.
"""
from integrations.parsers import (
    PARSERS,
    ResponseShape,
    canonicalize,
    detect_shape,
    parse_chapter,
)
from integrations.provider import ProviderClient

__all__ = [
    "PARSERS",
    "ResponseShape",
    "canonicalize",
    "detect_shape",
    "parse_chapter",
    "ProviderClient",
]
