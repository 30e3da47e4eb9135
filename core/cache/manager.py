"""Translation cache manager.

Keeps translated phrases in memory, keyed by the fingerprint of (text, source language,
target language). Entries expire after a fixed TTL and, when a capacity is set, the least
recently used entry is evicted to make room for a new one.
"""

from __future__ import annotations

import time
from collections import Counter, OrderedDict
from typing import TYPE_CHECKING, ClassVar, Final

from models.cache_models import CacheEntry, CacheStatistics
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from models.config_models import Config

__all__: list[str] = ["TranslationCacheManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_TTL_SEC: Final[float] = 3600.0
DEFAULT_MAX_ENTRIES: Final[int] = 1000


class TranslationCacheManager:
    """In-memory store of translation results.

    All methods are synchronous and must be called from the event loop thread; with no awaits
    inside, each call is atomic with respect to other coroutines. Concurrent writers for the
    same fingerprint overwrite each other (last writer wins).

    Args:
        ttl_sec (float): Age at which an entry stops being served.
        max_entries (int): Capacity. 0 or negative means unbounded.
        clock (Callable[[], float]): Time source in seconds. Replaceable in tests.

    Attributes:
        LOG_KEY_LENGTH (ClassVar[int]): Number of fingerprint characters shown in logs.
    """

    LOG_KEY_LENGTH: ClassVar[int] = 16

    def __init__(
        self,
        *,
        ttl_sec: float = DEFAULT_TTL_SEC,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_sec: float = ttl_sec
        self.max_entries: int = max(max_entries, 0)
        self._clock: Callable[[], float] = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        logger.debug("TranslationCacheManager created (ttl=%ss, capacity=%s)", ttl_sec, self.max_entries or "unbounded")

    @classmethod
    def from_config(cls, config: Config) -> TranslationCacheManager:
        return cls(ttl_sec=config.CACHE.TTL_SEC, max_entries=config.CACHE.MAX_ENTRIES)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, cache_key: object) -> bool:
        return cache_key in self._entries

    def now(self) -> float:
        return self._clock()

    def is_expired(self, entry: CacheEntry, now: float | None = None) -> bool:
        """Check whether an entry has reached the TTL."""
        current: float = self.now() if now is None else now
        return current - entry.created_at >= self.ttl_sec

    def get_entry(self, cache_key: str) -> CacheEntry | None:
        """Return the stored entry for a fingerprint without touching hit counters or recency."""
        return self._entries.get(cache_key)

    def search(self, source_text: str, source_lang: str, target_lang: str) -> CacheEntry | None:
        """Look up a fresh entry and count the hit.

        Args:
            source_text (str): Requested text.
            source_lang (str): Source language code.
            target_lang (str): Target language code.

        Returns:
            CacheEntry | None: The entry with its hit counter incremented, or None on a miss or
            when the stored entry is expired.
        """
        cache_key: str = StringUtils.generate_fingerprint(source_text, source_lang, target_lang)
        entry: CacheEntry | None = self._entries.get(cache_key)
        if entry is None:
            return None

        now: float = self.now()
        if self.is_expired(entry, now):
            # Left in place; it is overwritten on refresh or dropped by purge/eviction.
            logger.debug("Cache entry expired for key: %s", cache_key[: self.LOG_KEY_LENGTH])
            return None

        return self._touch(cache_key, entry, now)

    def record_hit(self, cache_key: str) -> CacheEntry | None:
        """Count a hit served from an entry that was shared without a lookup.

        Returns:
            CacheEntry | None: The updated entry, or None when it is no longer stored.
        """
        entry: CacheEntry | None = self._entries.get(cache_key)
        if entry is None:
            return None
        return self._touch(cache_key, entry, self.now())

    def _touch(self, cache_key: str, entry: CacheEntry, now: float) -> CacheEntry:
        entry.hit_count += 1
        entry.last_used_at = now
        self._entries.move_to_end(cache_key)
        logger.debug("Cache hit for key: %s (hits=%d)", cache_key[: self.LOG_KEY_LENGTH], entry.hit_count)
        return entry

    def register(
        self,
        *,
        source_text: str,
        source_lang: str,
        target_lang: str,
        translated_text: str,
        confidence: float,
        engine: str = "",
    ) -> CacheEntry:
        """Store a translation, replacing any entry with the same fingerprint.

        Returns:
            CacheEntry: The stored entry.
        """
        cache_key: str = StringUtils.generate_fingerprint(source_text, source_lang, target_lang)
        now: float = self.now()
        entry = CacheEntry(
            cache_key=cache_key,
            source_text=source_text,
            source_lang=source_lang,
            target_lang=target_lang,
            translated_text=translated_text,
            confidence=confidence,
            engine=engine,
            created_at=now,
            last_used_at=now,
        )

        self._entries.pop(cache_key, None)
        self._entries[cache_key] = entry
        self._enforce_capacity()
        logger.debug("Registered cache entry for key: %s (engine=%s)", cache_key[: self.LOG_KEY_LENGTH], engine)
        return entry

    def _enforce_capacity(self) -> None:
        if self.max_entries <= 0:
            return
        while len(self._entries) > self.max_entries:
            evicted_key, _ = self._entries.popitem(last=False)
            logger.debug("Evicted least recently used key: %s", evicted_key[: self.LOG_KEY_LENGTH])

    def purge_expired(self) -> int:
        """Remove every expired entry.

        Returns:
            int: Number of entries removed.
        """
        now: float = self.now()
        expired: list[str] = [key for key, entry in self._entries.items() if self.is_expired(entry, now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Deleted %d expired translation cache entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Translation cache cleared")

    def get_statistics(self) -> CacheStatistics:
        """Build a statistics snapshot of the stored entries.

        ``avg_confidence`` is the simple (unweighted) mean over all stored entries, expired ones
        included, and None when the cache is empty.
        """
        entries: list[CacheEntry] = list(self._entries.values())
        if not entries:
            return CacheStatistics(capacity=self.max_entries)

        return CacheStatistics(
            cache_size=len(entries),
            cache_hits=sum(entry.hit_count for entry in entries),
            avg_confidence=sum(entry.confidence for entry in entries) / len(entries),
            capacity=self.max_entries,
            engine_distribution=dict(Counter(entry.engine for entry in entries)),
            oldest_entry=min(entry.created_at for entry in entries),
            newest_entry=max(entry.created_at for entry in entries),
        )
