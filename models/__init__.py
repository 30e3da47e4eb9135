"""Data models for the universal translator.

This package contains dataclass definitions for configuration, cache entries and statistics,
translation requests/results, provider request payloads and regional endpoint metadata.
"""

from __future__ import annotations

from models.cache_models import CacheEntry, CacheStatistics
from models.config_models import Config
from models.provider_models import GeminiContent, GeminiGenerationConfig, GeminiPart, GeminiRequest, RelayRequest
from models.region_models import DEFAULT_REGION, REGIONAL_CONFIGS, RegionalConfig, RegionName
from models.translation_models import (
    COMMON_CONFIDENCE,
    FALLBACK_CONFIDENCE,
    TranslationRequest,
    TranslationResult,
    TranslationSource,
)

__all__: list[str] = [
    "COMMON_CONFIDENCE",
    "DEFAULT_REGION",
    "FALLBACK_CONFIDENCE",
    "REGIONAL_CONFIGS",
    "CacheEntry",
    "CacheStatistics",
    "Config",
    "GeminiContent",
    "GeminiGenerationConfig",
    "GeminiPart",
    "GeminiRequest",
    "RegionName",
    "RegionalConfig",
    "RelayRequest",
    "TranslationRequest",
    "TranslationResult",
    "TranslationSource",
]
