"""
Lectio - Built-in Translation List

Served when the provider's catalog cannot be fetched, or when filtering
leaves nothing. Never written to either cache tier.
"""
from typing import List

from core.types import TranslationDescriptor

STATIC_TRANSLATIONS: List[TranslationDescriptor] = [
    TranslationDescriptor(
        id="eng-web",
        name="World English Bible",
        language="eng",
        language_name="English",
        short_name="WEB",
        description="WEB - World English Bible (Public Domain)",
    ),
    TranslationDescriptor(
        id="eng-kjv",
        name="King James Version",
        language="eng",
        language_name="English",
        short_name="KJV",
        description="KJV - King James Version (Public Domain)",
    ),
    TranslationDescriptor(
        id="eng-asv",
        name="American Standard Version",
        language="eng",
        language_name="English",
        short_name="ASV",
        description="ASV - American Standard Version (Public Domain)",
    ),
    TranslationDescriptor(
        id="eng-bbe",
        name="Bible in Basic English",
        language="eng",
        language_name="English",
        short_name="BBE",
        description="BBE - Bible in Basic English (Public Domain)",
    ),
]


def static_translations() -> List[TranslationDescriptor]:
    return list(STATIC_TRANSLATIONS)
