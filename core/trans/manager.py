from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, ClassVar

import core.trans.engines  # noqa: F401  Registers the bundled engines.
from core.cache.inflight_manager import InFlightManager
from core.cache.manager import TranslationCacheManager
from core.cache.phrase_dictionary import PhraseDictionary
from core.trans.interface import AllProvidersFailedError, Result, TransInterface, TranslateExceptionError
from models.region_models import DEFAULT_REGION, REGIONAL_CONFIGS, RegionalConfig
from models.translation_models import (
    COMMON_CONFIDENCE,
    FALLBACK_CONFIDENCE,
    TranslationRequest,
    TranslationResult,
    TranslationSource,
)
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable

    from models.cache_models import CacheEntry, CacheStatistics
    from models.config_models import Config


__all__: list[str] = ["TranslationCacheService"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class TranslationCacheService:
    """Resolves translations from the phrase dictionary, the cache or the fastest provider.

    Resolution order for `translate` (first match wins):
        1. Exact phrase dictionary hit (``source="common"``, confidence 1.0).
        2. Fresh cache entry (``source="cache"``, stored confidence).
        3. First successful provider in a concurrent race (``source="ai"``); the result is cached.
        4. Approximate phrase match or the untranslated input (``source="cache"``, confidence 0.5).

    Provider failures never escape `translate`; a degraded result is the error signal.

    Args:
        config (Config): Application configuration.
        region (str | None): Region override for diagnostics. Defaults to ``TRANSLATION.REGION``.
        engines (list[TransInterface] | None): Ready-to-use engines. When None, `initialize`
            builds them from ``TRANSLATION.ENGINE``.
        cache_manager (TranslationCacheManager | None): Cache to use instead of a new one.
        inflight_manager (InFlightManager | None): In-flight coordinator to use instead of a new one.
        phrase_dictionary (PhraseDictionary | None): Dictionary to use instead of the built-in one.

    Attributes:
        LOG_TEXT_LENGTH (ClassVar[int]): Number of characters of input text shown in logs.
    """

    LOG_TEXT_LENGTH: ClassVar[int] = 50

    def __init__(
        self,
        config: Config,
        *,
        region: str | None = None,
        engines: list[TransInterface] | None = None,
        cache_manager: TranslationCacheManager | None = None,
        inflight_manager: InFlightManager | None = None,
        phrase_dictionary: PhraseDictionary | None = None,
    ) -> None:
        self.config: Config = config
        self.region: RegionalConfig = self._resolve_region(region or config.TRANSLATION.REGION)
        # Collaborators define __len__, so an empty injected instance is falsy; compare with None.
        self.phrase_dictionary: PhraseDictionary = (
            phrase_dictionary
            if phrase_dictionary is not None
            else PhraseDictionary(extension_path=config.DICTIONARY.PATH or None)
        )
        self.cache_manager: TranslationCacheManager = (
            cache_manager if cache_manager is not None else TranslationCacheManager.from_config(config)
        )
        self.inflight_manager: InFlightManager = (
            inflight_manager if inflight_manager is not None else InFlightManager(config.CACHE.INFLIGHT_TIMEOUT)
        )
        self._engines: list[TransInterface] = list(engines) if engines is not None else []
        self._build_engines: bool = engines is None
        logger.info(
            "TranslationCacheService created (region=%s, expected latency=%dms)",
            self.region.name,
            self.region.latency_ms,
        )

    @staticmethod
    def _resolve_region(region: str) -> RegionalConfig:
        try:
            return REGIONAL_CONFIGS[region]
        except KeyError:
            logger.warning("Unknown region '%s'; using '%s'", region, DEFAULT_REGION)
            return REGIONAL_CONFIGS[DEFAULT_REGION]

    @property
    def engines(self) -> list[TransInterface]:
        return self._engines

    async def initialize(self) -> None:
        """Build the configured provider engines.

        Engines that fail to initialize are logged and skipped; the service still answers from
        the dictionary, the cache and the fallback path without them.
        """
        if not self._build_engines:
            return

        logger.info("Translation engine initialization started")
        self._engines = []
        for name in self.config.TRANSLATION.ENGINE:
            engine_cls: type[TransInterface] | None = TransInterface.registered.get(name)
            if engine_cls is None:
                logger.critical("Translation class not found: '%s'", name)
                continue
            try:
                built: list[TransInterface] = engine_cls.from_config(self.config)
            except TranslateExceptionError as err:
                logger.critical("Exception in '%s' translation setup: %s", name, err)
                continue
            self._engines.extend(built)
            logger.info("Translation engine initialized: %s", [engine.engine_name for engine in built])
        self._build_engines = False

        if not self._engines:
            logger.error("No translation engines available; only dictionary, cache and fallback answers remain")

    async def close(self) -> None:
        """Cancel in-flight waiters and close every engine."""
        self.inflight_manager.cancel_all()
        for engine in self._engines:
            try:
                await engine.close()
            except Exception as err:  # noqa: BLE001
                logger.error("Error closing translation engine '%s': %s", engine.engine_name, err)
        logger.info("TranslationCacheService closed")

    def _build_result(
        self, text: str, started: float, source: TranslationSource, confidence: float
    ) -> TranslationResult:
        latency_ms: float = (time.perf_counter() - started) * 1000
        return TranslationResult(translated_text=text, latency_ms=latency_ms, source=source, confidence=confidence)

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        """Translate a finalized transcript.

        Args:
            text (str): Text to translate.
            source_lang (str): Source language code.
            target_lang (str): Target language code.

        Returns:
            TranslationResult: Always a result; never raises for provider failures.
        """
        started: float = time.perf_counter()
        preview: str = text[: self.LOG_TEXT_LENGTH]

        common: str | None = self.phrase_dictionary.lookup(text, target_lang)
        if common is not None:
            logger.debug("Common phrase hit: '%s' -> '%s'", preview, common)
            return self._build_result(common, started, "common", COMMON_CONFIDENCE)

        cached: CacheEntry | None = self.cache_manager.search(text, source_lang, target_lang)
        if cached is not None:
            return self._build_result(cached.translated_text, started, "cache", cached.confidence)

        cache_key: str = StringUtils.generate_fingerprint(text, source_lang, target_lang)
        leader_future: asyncio.Future[CacheEntry] | None = self.inflight_manager.claim(cache_key)
        if leader_future is not None:
            try:
                shared: CacheEntry = await self.inflight_manager.wait(cache_key, leader_future)
            except (TimeoutError, TranslateExceptionError) as err:
                logger.warning("Shared translation failed for '%s': %s", preview, err)
                return self._fallback(text, target_lang, started)
            # Served from the leader's stored result, so it counts as a cache hit.
            self.cache_manager.record_hit(cache_key)
            return self._build_result(shared.translated_text, started, "cache", shared.confidence)

        try:
            winner_name, winner = await self._race_providers(text, source_lang, target_lang)
        except TranslateExceptionError as err:
            self.inflight_manager.fail(cache_key, err)
            logger.warning("Translation failed for '%s': %s", preview, err)
            return self._fallback(text, target_lang, started)
        except asyncio.CancelledError as err:
            self.inflight_manager.fail(cache_key, err)
            raise

        confidence: float = (
            winner.confidence if winner.confidence is not None else self.config.TRANSLATION.DEFAULT_CONFIDENCE
        )
        entry: CacheEntry = self.cache_manager.register(
            source_text=text,
            source_lang=source_lang,
            target_lang=target_lang,
            translated_text=StringUtils.ensure_str(winner.text),
            confidence=confidence,
            engine=winner_name,
        )
        self.inflight_manager.resolve(cache_key, entry)
        logger.debug("Provider '%s' won for '%s'", winner_name, preview)
        return self._build_result(entry.translated_text, started, "ai", entry.confidence)

    def _fallback(self, text: str, target_lang: str, started: float) -> TranslationResult:
        approximate: str | None = self.phrase_dictionary.find_approximate(text, target_lang)
        fallback_text: str = approximate if approximate is not None else text
        return self._build_result(fallback_text, started, "cache", FALLBACK_CONFIDENCE)

    async def _call_provider(self, engine: TransInterface, text: str, source_lang: str, target_lang: str) -> Result:
        async with asyncio.timeout(self.config.TRANSLATION.PROVIDER_TIMEOUT):
            result: Result = await engine.translation(text, target_lang, source_lang)
        if not result.text:
            msg: str = f"Engine '{engine.engine_name}' returned an empty translation"
            raise TranslateExceptionError(msg)
        return result

    async def _race_providers(self, text: str, source_lang: str, target_lang: str) -> tuple[str, Result]:
        """Run every available engine concurrently and return the first success.

        Losing calls are cancelled and awaited once a winner is known.

        Returns:
            tuple[str, Result]: Name of the winning engine and its result.

        Raises:
            AllProvidersFailedError: If there is no available engine or every engine failed.
        """
        engines: list[TransInterface] = [engine for engine in self._engines if engine.is_available]
        if not engines:
            raise AllProvidersFailedError({})

        tasks: dict[asyncio.Task[Result], TransInterface] = {
            asyncio.create_task(
                self._call_provider(engine, text, source_lang, target_lang), name=f"translate:{engine.engine_name}"
            ): engine
            for engine in engines
        }
        order: list[asyncio.Task[Result]] = list(tasks)
        errors: dict[str, BaseException] = {}
        pending: set[asyncio.Task[Result]] = set(tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                # Tasks finishing in the same loop iteration are ranked by engine order.
                for task in sorted(done, key=order.index):
                    engine: TransInterface = tasks[task]
                    err: BaseException | None = task.exception()
                    if err is None:
                        return engine.engine_name, task.result()
                    if isinstance(err, TimeoutError):
                        err = TranslateExceptionError(f"Engine '{engine.engine_name}' timed out")
                    logger.warning("Translation engine '%s' failed: %s", engine.engine_name, err)
                    errors[engine.engine_name] = err
            raise AllProvidersFailedError(errors)
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

    async def translate_batch(self, requests: Iterable[TranslationRequest]) -> list[TranslationResult]:
        """Translate several requests concurrently, preserving their order."""
        return list(
            await asyncio.gather(
                *(self.translate(request.text, request.source_lang, request.target_lang) for request in requests)
            )
        )

    async def detect_language(self, text: str) -> str:
        """Detect the language of ``text`` with the first engine that supports detection.

        Returns:
            str: ISO 639-1 code, or ``TRANSLATION.DEFAULT_SOURCE_LANGUAGE`` when no engine can tell.
        """
        default_lang: str = self.config.TRANSLATION.DEFAULT_SOURCE_LANGUAGE
        for engine in self._engines:
            if not (engine.is_available and engine.has_dedicated_detection_api):
                continue
            try:
                async with asyncio.timeout(self.config.TRANSLATION.PROVIDER_TIMEOUT):
                    result: Result = await engine.detect_language(text)
            except (TranslateExceptionError, TimeoutError) as err:
                logger.warning("Language detection with '%s' failed: %s", engine.engine_name, err)
                continue
            if result.detected_source_lang:
                return result.detected_source_lang
        logger.debug("Language detection unavailable; assuming '%s'", default_lang)
        return default_lang

    def get_cache_stats(self) -> CacheStatistics:
        """Return cache diagnostics, including the region and the phrase dictionary size."""
        stats: CacheStatistics = self.cache_manager.get_statistics()
        stats.common_phrases_loaded = len(self.phrase_dictionary)
        stats.region = self.region.name
        stats.region_latency_ms = self.region.latency_ms
        return stats

    def purge_expired(self) -> int:
        return self.cache_manager.purge_expired()

    def clear_cache(self) -> None:
        self.cache_manager.clear()
