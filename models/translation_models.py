"""Models for translation requests and results.

Defines the request triple and the result returned by the translation service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal, TypeAlias

__all__: list[str] = [
    "COMMON_CONFIDENCE",
    "FALLBACK_CONFIDENCE",
    "TranslationRequest",
    "TranslationResult",
    "TranslationSource",
]

# "common": phrase dictionary, "cache": phrase cache or degraded fallback, "ai": upstream provider.
TranslationSource: TypeAlias = Literal["common", "cache", "ai"]

COMMON_CONFIDENCE: Final[float] = 1.0
FALLBACK_CONFIDENCE: Final[float] = 0.5


@dataclass(frozen=True)
class TranslationRequest:
    """One finalized transcript to translate.

    Attributes:
        text (str): Text to translate.
        source_lang (str): Source language code.
        target_lang (str): Target language code.
    """

    text: str
    source_lang: str
    target_lang: str


@dataclass
class TranslationResult:
    """Outcome of a translation request.

    A result with ``source == "cache"`` and ``confidence == 0.5`` came from the fallback path,
    either an approximate phrase match or the untranslated input.

    Attributes:
        translated_text (str): Translated text.
        latency_ms (float): Wall-clock time spent resolving the request.
        source (TranslationSource): Resolution step that produced the text.
        confidence (float): Confidence score in [0.0, 1.0].
    """

    translated_text: str
    latency_ms: float
    source: TranslationSource
    confidence: float

    @property
    def is_degraded(self) -> bool:
        return self.source == "cache" and self.confidence == FALLBACK_CONFIDENCE

    def __str__(self) -> str:
        return self.translated_text
