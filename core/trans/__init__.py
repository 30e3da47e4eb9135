"""Translation package.

Provides the provider interface, the bundled provider engines and the translation cache service
that ties the phrase dictionary, the cache and the providers together.
"""

from __future__ import annotations

from core.trans.interface import (
    AllProvidersFailedError,
    EngineAttributes,
    NotSupportedLanguagesError,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
)
from core.trans.manager import TranslationCacheService

__all__: list[str] = [
    "AllProvidersFailedError",
    "EngineAttributes",
    "NotSupportedLanguagesError",
    "Result",
    "TransInterface",
    "TranslateExceptionError",
    "TranslationCacheService",
    "TranslationRateLimitError",
]
