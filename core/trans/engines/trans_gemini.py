"""Google Gemini translation engine.

Translates by prompting a Gemini model through the Generative Language REST API
(``models/<model>:generateContent``). The API key is read from ``GEMINI_API_OAUTH`` or,
failing that, ``GOOGLE_GEMINI_API_KEY``.
"""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING, Any, Final

from core.trans.engines.const_languages import LANGUAGES, language_name
from core.trans.interface import (
    EngineAttributes,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
)
from handlers.async_comm import AsyncCommError, AsyncHttp
from models.provider_models import GeminiGenerationConfig, GeminiRequest
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config, Gemini

__all__: list[str] = ["GeminiTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

FALLBACK_API_KEY_ENV: Final[str] = "GOOGLE_GEMINI_API_KEY"
GEMINI_CONFIDENCE: Final[float] = 0.95
HTTP_TOO_MANY_REQUESTS: Final[int] = 429
TRANSLATION_PREFIX_PATTERN: Final[re.Pattern[str]] = re.compile(r"^translation:\s*", re.IGNORECASE)
LANGUAGE_CODE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\b([a-z]{2})\b")


class GeminiTranslation(TransInterface):
    """Translation engine backed by a Gemini model.

    Attributes:
        _http (AsyncHttp): HTTP client, opened lazily on the first request.
        _settings (Gemini | None): Model and generation parameters from the configuration.
    """

    def __init__(self) -> None:
        super().__init__()
        self._http: AsyncHttp = AsyncHttp()
        self._settings: Gemini | None = None
        self._api_key: str = ""
        self._timeout: float = 10.0

    @property
    def is_available(self) -> bool:
        return bool(self._api_key) and self._settings is not None

    @staticmethod
    def fetch_engine_name() -> str:
        return "gemini"

    def initialize(self, config: Config) -> None:
        """Read the model settings and the API key.

        Raises:
            TranslateExceptionError: If no API key is configured.
        """
        self.engine_attributes = EngineAttributes(name="gemini", supports_dedicated_detection_api=True)
        self._settings = config.GEMINI
        self._timeout = config.TRANSLATION.PROVIDER_TIMEOUT
        self._api_key = self.get_authentication_key() or os.getenv(FALLBACK_API_KEY_ENV, "")
        if not self._api_key:
            msg = f"Gemini API key not set. Set {self.fetch_engine_name().upper()}_API_OAUTH or {FALLBACK_API_KEY_ENV}"
            raise TranslateExceptionError(msg)
        logger.debug("Gemini engine configured with model '%s'", self._settings.MODEL)

    @property
    def endpoint(self) -> str:
        if self._settings is None:
            msg = "The Gemini engine is not initialised"
            raise TranslateExceptionError(msg)
        return f"{self._settings.BASE_URL.rstrip('/')}/{self._settings.MODEL}:generateContent"

    def _build_payload(self, prompt: str, *, max_output_tokens: int | None = None) -> dict[str, Any]:
        settings: Gemini | None = self._settings
        if settings is None:
            msg = "The Gemini engine is not initialised"
            raise TranslateExceptionError(msg)
        generation_config = GeminiGenerationConfig(
            temperature=settings.TEMPERATURE,
            top_k=settings.TOP_K,
            top_p=settings.TOP_P,
            max_output_tokens=max_output_tokens or settings.MAX_OUTPUT_TOKENS,
        )
        return GeminiRequest.from_prompt(prompt, generation_config).to_dict()

    @staticmethod
    def build_translation_prompt(content: str, tgt_lang: str, src_lang: str | None) -> str:
        source: str = language_name(src_lang) if src_lang else "the detected language"
        return (
            f"Translate the following text from {source} to {language_name(tgt_lang)}.\n"
            "Only return the translated text, nothing else.\n"
            "Maintain the original tone and context.\n\n"
            f'Text to translate: "{content}"'
        )

    @staticmethod
    def extract_text(response: Any) -> str:
        """Pull the first candidate text out of a generateContent response.

        Raises:
            TranslateExceptionError: If the response does not contain any text.
        """
        try:
            text: Any = response["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as err:
            msg = "No text received from Gemini API"
            raise TranslateExceptionError(msg) from err
        if not isinstance(text, str) or not text.strip():
            msg = "No text received from Gemini API"
            raise TranslateExceptionError(msg)
        return text.strip()

    @staticmethod
    def clean_translation(text: str) -> str:
        """Remove a leading ``Translation:`` label and wrapping quotes from model output.

        Quotes may wrap the whole answer or only the text after the label.
        """
        text = TRANSLATION_PREFIX_PATTERN.sub("", StringUtils.strip_quotes(text))
        return StringUtils.strip_quotes(text)

    async def _generate(self, payload: dict[str, Any]) -> Any:
        try:
            return await self._http.post_json(
                url=self.endpoint,
                params={"key": self._api_key},
                payload=payload,
                total_timeout=self._timeout,
            )
        except AsyncCommError as err:
            if err.status == HTTP_TOO_MANY_REQUESTS:
                msg: str = f"Gemini API rate limit: {err}"
                raise TranslationRateLimitError(msg) from err
            msg = f"Gemini API error: {err}"
            raise TranslateExceptionError(msg) from err

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        if not content.strip():
            msg = "Empty text provided"
            raise TranslateExceptionError(msg)

        if src_lang is not None and src_lang.lower() == tgt_lang.lower():
            return Result(text=content, detected_source_lang=src_lang, confidence=1.0)

        prompt: str = self.build_translation_prompt(content, tgt_lang, src_lang)
        response: Any = await self._generate(self._build_payload(prompt))
        translated: str = self.clean_translation(self.extract_text(response))
        if not translated:
            msg = "Gemini API returned an empty translation"
            raise TranslateExceptionError(msg)

        logger.debug("Gemini translation: '%s' -> '%s'", content, translated)
        return Result(
            text=translated,
            detected_source_lang=src_lang,
            confidence=GEMINI_CONFIDENCE,
            metadata={"engine": self.engine_name},
        )

    async def detect_language(self, content: str) -> Result:
        prompt: str = (
            "Detect the language of the following text and return only the ISO 639-1 language code "
            f'(e.g., "en", "zh", "es"). Text: "{content}"'
        )
        response: Any = await self._generate(self._build_payload(prompt, max_output_tokens=10))
        answer: str = self.extract_text(response).lower()
        match: re.Match[str] | None = LANGUAGE_CODE_PATTERN.search(answer)
        if match is None:
            msg: str = f"Unrecognised language code from Gemini API: '{answer}'"
            raise TranslateExceptionError(msg)

        code: str = match.group(1)
        if code not in LANGUAGES:
            logger.info("Detected language '%s' is outside the supported set", code)
        return Result(detected_source_lang=code, metadata={"engine": self.engine_name})

    async def close(self) -> None:
        await self._http.close()
