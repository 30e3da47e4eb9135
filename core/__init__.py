"""Core services for the universal translator.

This package contains the translation cache service, the phrase cache and dictionary,
and the upstream translation engines.
"""

from core.trans.manager import TranslationCacheService
from core.version import VERSION

__all__: list[str] = [
    "VERSION",
    "TranslationCacheService",
]
