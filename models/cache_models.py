"""Models for translation cache data.

Defines the in-memory cache entry and the diagnostics snapshot returned by the service.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__: list[str] = [
    "CacheEntry",
    "CacheStatistics",
]


@dataclass
class CacheEntry:
    """Translation cache entry.

    Attributes:
        cache_key (str): Fingerprint of (text, source language, target language).
        source_text (str): Text as it was requested.
        source_lang (str): Source language code.
        target_lang (str): Target language code.
        translated_text (str): Translation served on a hit.
        confidence (float): Provider confidence in [0.0, 1.0].
        engine (str): Name of the provider that produced the translation.
        created_at (float): Creation timestamp in seconds, used for TTL expiry.
        last_used_at (float): Timestamp of the last hit, used for LRU eviction.
        hit_count (int): Number of hits served from this entry.
    """

    cache_key: str
    source_text: str
    source_lang: str
    target_lang: str
    translated_text: str
    confidence: float
    engine: str
    created_at: float
    last_used_at: float
    hit_count: int = 0

    def __post_init__(self) -> None:
        self.confidence = min(max(float(self.confidence), 0.0), 1.0)


@dataclass
class CacheStatistics:
    """Cache usage statistics.

    Attributes:
        cache_size (int): Number of stored entries, expired ones included.
        cache_hits (int): Sum of ``hit_count`` across all entries.
        common_phrases_loaded (int): Number of canonical phrases in the phrase dictionary.
        avg_confidence (float | None): Simple mean confidence of stored entries. None when the cache is empty.
        capacity (int): Maximum number of entries (0 means unbounded).
        engine_distribution (dict[str, int]): Entries per provider engine.
        oldest_entry (float | None): Creation timestamp of the oldest entry.
        newest_entry (float | None): Creation timestamp of the newest entry.
        region (str): Configured region name.
        region_latency_ms (int): Expected round trip to the region, for diagnostics.
    """

    cache_size: int = 0
    cache_hits: int = 0
    common_phrases_loaded: int = 0
    avg_confidence: float | None = None
    capacity: int = 0
    engine_distribution: dict[str, int] = field(default_factory=dict)
    oldest_entry: float | None = None
    newest_entry: float | None = None
    region: str = ""
    region_latency_ms: int = 0
