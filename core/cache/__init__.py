"""Translation cache package.

Provides the in-memory phrase cache, the common-phrase dictionary and in-flight request coalescing.
"""

from __future__ import annotations

from core.cache.inflight_manager import InFlightManager
from core.cache.manager import TranslationCacheManager
from core.cache.phrase_dictionary import COMMON_PHRASES, PhraseDictionary, PhraseDictionaryError

__all__: list[str] = [
    "COMMON_PHRASES",
    "InFlightManager",
    "PhraseDictionary",
    "PhraseDictionaryError",
    "TranslationCacheManager",
]
