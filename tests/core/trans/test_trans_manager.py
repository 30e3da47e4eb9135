"""Unit tests for core.trans.manager module."""

from __future__ import annotations

import asyncio
import math
from typing import TYPE_CHECKING

import pytest

from core.cache.inflight_manager import InFlightManager
from core.cache.manager import TranslationCacheManager
from core.cache.phrase_dictionary import PhraseDictionary
from core.trans.interface import EngineAttributes, Result, TransInterface, TranslateExceptionError
from core.trans.manager import TranslationCacheService
from models.config_models import Config
from models.translation_models import TranslationRequest
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    from models.cache_models import CacheStatistics
    from models.translation_models import TranslationResult


class FakeClock:
    """Manually advanced time source for TTL tests."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now: float = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEngine(TransInterface):
    """Provider double with a configurable delay, answer and failure."""

    def __init__(
        self,
        label: str,
        *,
        text: str = "translated",
        delay: float = 0.0,
        error: Exception | None = None,
        confidence: float | None = 0.8,
        detected: str | None = None,
    ) -> None:
        super().__init__()
        self.engine_attributes = EngineAttributes(name=label, supports_dedicated_detection_api=detected is not None)
        self.text: str = text
        self.delay: float = delay
        self.error: Exception | None = error
        self.confidence: float | None = confidence
        self.detected: str | None = detected
        self.calls: int = 0
        self.completed: int = 0
        self.cancelled: int = 0
        self.closed: bool = False

    @property
    def is_available(self) -> bool:
        return True

    @staticmethod
    def fetch_engine_name() -> str:
        return ""

    def initialize(self, config) -> None:
        _ = config

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        _ = content, tgt_lang, src_lang
        self.calls += 1
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        if self.error is not None:
            raise self.error
        self.completed += 1
        return Result(text=self.text, confidence=self.confidence)

    async def detect_language(self, content: str) -> Result:
        _ = content
        if self.detected is None:
            return await super().detect_language(content)
        return Result(detected_source_lang=self.detected)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def config() -> Config:
    config = Config()
    config.TRANSLATION.PROVIDER_TIMEOUT = 1.0
    config.CACHE.INFLIGHT_TIMEOUT = 2.0
    return config


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_service(
    config: Config, engines: list[TransInterface], clock: FakeClock | None = None
) -> TranslationCacheService:
    cache = TranslationCacheManager(ttl_sec=3600.0, max_entries=100, clock=clock or FakeClock())
    return TranslationCacheService(config, engines=engines, cache_manager=cache)


@pytest.mark.asyncio
async def test_common_phrase_skips_cache_and_providers(config: Config) -> None:
    engine = FakeEngine("a")
    service = make_service(config, [engine])

    result: TranslationResult = await service.translate("Thank you", "en", "ja")

    assert result.translated_text == "ありがとう"
    assert result.source == "common"
    assert result.confidence == 1.0
    assert result.latency_ms < 50
    assert engine.calls == 0
    assert len(service.cache_manager) == 0


@pytest.mark.asyncio
async def test_common_phrase_without_target_language_falls_through(config: Config) -> None:
    engine = FakeEngine("a", text="Hello!")
    service = make_service(config, [engine])

    result: TranslationResult = await service.translate("Hello", "en", "ru")

    assert result.source == "ai"
    assert result.translated_text == "Hello!"
    assert engine.calls == 1


@pytest.mark.asyncio
async def test_provider_result_is_cached_and_second_call_is_a_hit(config: Config) -> None:
    engine = FakeEngine("a", text="Buenos días a todos", confidence=0.9)
    service = make_service(config, [engine])

    first: TranslationResult = await service.translate("Good morning everyone", "en", "es")
    second: TranslationResult = await service.translate("Good morning everyone", "en", "es")

    assert first.source == "ai"
    assert first.confidence == pytest.approx(0.9)
    assert second.source == "cache"
    assert second.translated_text == first.translated_text
    assert second.confidence == pytest.approx(0.9)
    assert engine.calls == 1

    entry = service.cache_manager.get_entry(StringUtils.generate_fingerprint("Good morning everyone", "en", "es"))
    assert entry is not None
    assert entry.hit_count == 1


@pytest.mark.asyncio
async def test_each_hit_increments_hit_count_by_one(config: Config) -> None:
    service = make_service(config, [FakeEngine("a")])
    await service.translate("See you tomorrow", "en", "fr")

    for expected in (1, 2, 3):
        await service.translate("See you tomorrow", "en", "fr")
        assert service.get_cache_stats().cache_hits == expected


@pytest.mark.asyncio
async def test_expired_entry_triggers_new_provider_call(config: Config, clock: FakeClock) -> None:
    engine = FakeEngine("a", text="first")
    service = make_service(config, [engine], clock)
    await service.translate("The slides are ready", "en", "de")

    clock.advance(3600.0 + 1)
    engine.text = "second"
    result: TranslationResult = await service.translate("The slides are ready", "en", "de")

    assert result.source == "ai"
    assert result.translated_text == "second"
    assert engine.calls == 2
    assert len(service.cache_manager) == 1


def test_injected_empty_collaborators_are_kept(config: Config, clock: FakeClock) -> None:
    cache = TranslationCacheManager(ttl_sec=60.0, max_entries=5, clock=clock)
    inflight = InFlightManager(0.5)
    phrases = PhraseDictionary({})

    service = TranslationCacheService(
        config, engines=[], cache_manager=cache, inflight_manager=inflight, phrase_dictionary=phrases
    )

    assert service.cache_manager is cache
    assert service.inflight_manager is inflight
    assert service.phrase_dictionary is phrases
    assert service.cache_manager.now() == clock.now
    assert service.get_cache_stats().common_phrases_loaded == 0


@pytest.mark.asyncio
async def test_entry_just_before_ttl_is_still_served(config: Config, clock: FakeClock) -> None:
    engine = FakeEngine("a")
    service = make_service(config, [engine], clock)
    await service.translate("The slides are ready", "en", "de")

    clock.advance(3599.0)
    result: TranslationResult = await service.translate("The slides are ready", "en", "de")

    assert result.source == "cache"
    assert engine.calls == 1


@pytest.mark.asyncio
async def test_fastest_provider_wins_and_loser_is_discarded(config: Config) -> None:
    fast = FakeEngine("fast", text="X", delay=0.01)
    slow = FakeEngine("slow", text="Y", delay=0.05)
    service = make_service(config, [slow, fast])

    result: TranslationResult = await service.translate("Where are the documents?", "en", "es")
    await asyncio.sleep(0.08)

    assert result.translated_text == "X"
    assert result.source == "ai"
    assert slow.cancelled == 1
    assert slow.completed == 0
    cached = service.cache_manager.search("Where are the documents?", "en", "es")
    assert cached is not None
    assert cached.translated_text == "X"
    assert cached.engine == "fast"


@pytest.mark.asyncio
async def test_failed_provider_does_not_lose_the_race(config: Config) -> None:
    broken = FakeEngine("broken", error=TranslateExceptionError("boom"))
    working = FakeEngine("working", text="Y", delay=0.02)
    service = make_service(config, [broken, working])

    result: TranslationResult = await service.translate("Where are the documents?", "en", "es")

    assert result.translated_text == "Y"
    assert result.source == "ai"


@pytest.mark.asyncio
async def test_unexpected_provider_exception_is_absorbed(config: Config) -> None:
    service = make_service(config, [FakeEngine("buggy", error=RuntimeError("bug"))])

    result: TranslationResult = await service.translate("Completely unknown sentence", "en", "es")

    assert result.translated_text == "Completely unknown sentence"
    assert result.confidence == 0.5


@pytest.mark.asyncio
async def test_slow_provider_times_out_into_fallback(config: Config) -> None:
    config.TRANSLATION.PROVIDER_TIMEOUT = 0.05
    engine = FakeEngine("stuck", delay=5.0)
    service = make_service(config, [engine])

    result: TranslationResult = await service.translate("Quarterly numbers", "en", "es")

    assert result.source == "cache"
    assert result.confidence == 0.5
    assert result.translated_text == "Quarterly numbers"
    assert engine.cancelled == 1


@pytest.mark.asyncio
async def test_provider_without_confidence_uses_default(config: Config) -> None:
    config.TRANSLATION.DEFAULT_CONFIDENCE = 0.7
    service = make_service(config, [FakeEngine("a", confidence=None)])

    result: TranslationResult = await service.translate("Budget review", "en", "es")

    assert result.confidence == pytest.approx(0.7)


@pytest.mark.asyncio
async def test_empty_provider_text_counts_as_failure(config: Config) -> None:
    service = make_service(config, [FakeEngine("a", text="")])

    result: TranslationResult = await service.translate("Budget review", "en", "es")

    assert result.source == "cache"
    assert result.confidence == 0.5


@pytest.mark.asyncio
async def test_total_failure_uses_approximate_phrase(config: Config) -> None:
    engines: list[TransInterface] = [
        FakeEngine("a", error=TranslateExceptionError("down")),
        FakeEngine("b", error=TranslateExceptionError("down")),
    ]
    service = make_service(config, engines)

    # Shares "thank" with "Thank you".
    result: TranslationResult = await service.translate("thank everyone for coming", "en", "fr")

    assert result.translated_text == "Merci"
    assert result.source == "cache"
    assert result.confidence == 0.5
    assert len(service.cache_manager) == 0


@pytest.mark.asyncio
async def test_total_failure_without_shared_word_echoes_input(config: Config) -> None:
    engines: list[TransInterface] = [
        FakeEngine("a", error=TranslateExceptionError("down")),
        FakeEngine("b", error=TranslateExceptionError("down")),
    ]
    service = make_service(config, engines)

    result: TranslationResult = await service.translate("Quarterly revenue grew", "en", "fr")

    assert result.translated_text == "Quarterly revenue grew"
    assert result.source == "cache"
    assert result.confidence == 0.5
    assert result.is_degraded


@pytest.mark.asyncio
async def test_no_engines_degrades_without_raising(config: Config) -> None:
    service = make_service(config, [])

    result: TranslationResult = await service.translate("Quarterly revenue grew", "en", "fr")

    assert result.translated_text == "Quarterly revenue grew"
    assert result.confidence == 0.5


@pytest.mark.asyncio
async def test_concurrent_identical_misses_share_one_race(config: Config) -> None:
    engine = FakeEngine("a", text="shared", delay=0.02)
    service = make_service(config, [engine])

    results: list[TranslationResult] = await asyncio.gather(
        *(service.translate("Agenda for today", "en", "ko") for _ in range(3))
    )

    assert engine.calls == 1
    assert [r.translated_text for r in results] == ["shared"] * 3
    assert sorted(r.source for r in results) == ["ai", "cache", "cache"]
    assert service.get_cache_stats().cache_hits == 2

    entry = service.cache_manager.get_entry(StringUtils.generate_fingerprint("Agenda for today", "en", "ko"))
    assert entry is not None
    assert entry.hit_count == 2


@pytest.mark.asyncio
async def test_followers_fall_back_when_shared_race_fails(config: Config) -> None:
    engine = FakeEngine("a", delay=0.02, error=TranslateExceptionError("down"))
    service = make_service(config, [engine])

    results: list[TranslationResult] = await asyncio.gather(
        service.translate("Agenda for today", "en", "ko"),
        service.translate("Agenda for today", "en", "ko"),
    )

    assert engine.calls == 1
    assert all(r.confidence == 0.5 for r in results)


@pytest.mark.asyncio
async def test_translate_batch_preserves_order(config: Config) -> None:
    service = make_service(config, [FakeEngine("a", text="ai text")])
    requests: list[TranslationRequest] = [
        TranslationRequest("Hello", "en", "de"),
        TranslationRequest("Some new sentence", "en", "de"),
    ]

    results: list[TranslationResult] = await service.translate_batch(requests)

    assert [r.translated_text for r in results] == ["Hallo", "ai text"]
    assert [r.source for r in results] == ["common", "ai"]


@pytest.mark.asyncio
async def test_cache_stats_on_empty_cache_report_no_data(config: Config) -> None:
    service = make_service(config, [])

    stats: CacheStatistics = service.get_cache_stats()

    assert stats.cache_size == 0
    assert stats.cache_hits == 0
    assert stats.avg_confidence is None
    assert stats.common_phrases_loaded == 18
    assert stats.region == "us-east"
    assert stats.region_latency_ms == 50


@pytest.mark.asyncio
async def test_cache_stats_average_is_unweighted(config: Config) -> None:
    # Mean confidence ignores hit counts; a hit-weighted mean was never specified.
    engine = FakeEngine("a", confidence=0.6)
    service = make_service(config, [engine])
    await service.translate("first sentence here", "en", "es")
    engine.confidence = 1.0
    await service.translate("second sentence here", "en", "es")
    for _ in range(5):
        await service.translate("second sentence here", "en", "es")

    stats: CacheStatistics = service.get_cache_stats()

    assert stats.cache_size == 2
    assert stats.cache_hits == 5
    assert stats.avg_confidence is not None
    assert math.isclose(stats.avg_confidence, 0.8)
    assert stats.engine_distribution == {"a": 2}


def test_unknown_region_falls_back_to_us_east(config: Config) -> None:
    service = TranslationCacheService(config, region="mars-north", engines=[])

    assert service.region.name == "us-east"


def test_region_override_changes_diagnostics_only(config: Config) -> None:
    service = TranslationCacheService(config, region="eu-west", engines=[])

    stats: CacheStatistics = service.get_cache_stats()

    assert stats.region == "eu-west"
    assert stats.region_latency_ms == 30


@pytest.mark.asyncio
async def test_custom_phrase_dictionary_is_used(config: Config) -> None:
    dictionary = PhraseDictionary({"Good luck": {"es": "Buena suerte"}})
    service = TranslationCacheService(config, engines=[], phrase_dictionary=dictionary)

    result: TranslationResult = await service.translate("Good luck", "en", "es")

    assert result.translated_text == "Buena suerte"
    assert service.get_cache_stats().common_phrases_loaded == 1


@pytest.mark.asyncio
async def test_detect_language_uses_detection_engine(config: Config) -> None:
    service = make_service(config, [FakeEngine("plain"), FakeEngine("detector", detected="fr")])

    assert await service.detect_language("Bonjour à tous") == "fr"


@pytest.mark.asyncio
async def test_detect_language_defaults_without_detection_engine(config: Config) -> None:
    service = make_service(config, [FakeEngine("plain")])

    assert await service.detect_language("Bonjour à tous") == "en"


@pytest.mark.asyncio
async def test_initialize_builds_registered_engines(config: Config, monkeypatch: pytest.MonkeyPatch) -> None:
    built = FakeEngine("registered")

    class RegisteredEngine(FakeEngine):
        @classmethod
        def from_config(cls, config: Config) -> list[TransInterface]:
            _ = config
            return [built]

    class BrokenEngine(FakeEngine):
        @classmethod
        def from_config(cls, config: Config) -> list[TransInterface]:
            _ = config
            msg = "no key"
            raise TranslateExceptionError(msg)

    monkeypatch.setattr(TransInterface, "registered", {"ok": RegisteredEngine, "broken": BrokenEngine})
    config.TRANSLATION.ENGINE = ["ok", "broken", "missing"]
    service = TranslationCacheService(config)

    await service.initialize()

    assert service.engines == [built]


@pytest.mark.asyncio
async def test_close_closes_engines_and_cancels_waiters(config: Config) -> None:
    engine = FakeEngine("a")
    inflight = InFlightManager(1.0)
    service = TranslationCacheService(config, engines=[engine], inflight_manager=inflight)
    fut = inflight.claim("pending-key")
    assert fut is None

    await service.close()

    assert engine.closed is True
    assert len(inflight) == 0


@pytest.mark.asyncio
async def test_purge_and_clear(config: Config, clock: FakeClock) -> None:
    service = make_service(config, [FakeEngine("a")], clock)
    await service.translate("one sentence", "en", "es")
    clock.advance(4000.0)
    await service.translate("another sentence", "en", "es")

    assert service.purge_expired() == 1
    assert len(service.cache_manager) == 1

    service.clear_cache()
    assert service.get_cache_stats().cache_size == 0
