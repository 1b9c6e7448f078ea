"""
Lectio - Catalog Package

Translation catalog selection and the reader's translation preference.
"""
from catalog.defaults import STATIC_TRANSLATIONS, static_translations
from catalog.manager import (
    TranslationCatalogManager,
    normalize_translation,
    select_translations,
)

__all__ = [
    "STATIC_TRANSLATIONS",
    "static_translations",
    "TranslationCatalogManager",
    "normalize_translation",
    "select_translations",
]
