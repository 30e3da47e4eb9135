"""This module defines the abstract base class for translation providers and related exceptions.
It includes the Result data class for provider responses, and exceptions for unsupported languages,
rate limiting and total provider failure.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config

__all__: list[str] = [
    "AllProvidersFailedError",
    "EngineAttributes",
    "NotSupportedLanguagesError",
    "Result",
    "TransInterface",
    "TranslateExceptionError",
    "TranslationRateLimitError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


@dataclass
class EngineAttributes:
    """Engine-specific capabilities.

    Attributes:
        name (str): Name of the engine instance, used in logs and cache diagnostics.
        supports_dedicated_detection_api (bool): Whether the engine can detect languages.
    """

    name: str
    supports_dedicated_detection_api: bool = False


@dataclass
class Result:
    """Data class for provider responses.

    Attributes:
        text (str | None): Translated text. None if translation fails.
        detected_source_lang (str | None): Detected source language code.
        confidence (float | None): Provider-reported confidence, None when the provider reports none.
        metadata (dict[str, str] | None): Engine-specific metadata.
    """

    text: str | None = None
    detected_source_lang: str | None = None
    confidence: float | None = None
    metadata: dict[str, str] | None = None

    def __str__(self) -> str:
        if self.text is None:
            return ""
        return self.text


class TranslateExceptionError(Exception):
    """An error occurred during the translation process."""


class NotSupportedLanguagesError(TranslateExceptionError):
    """An unsupported language code was specified."""


class TranslationRateLimitError(TranslateExceptionError):
    """The translation request was rate-limited by the API."""


class AllProvidersFailedError(TranslateExceptionError):
    """Every provider taking part in a race failed.

    Attributes:
        errors (dict[str, BaseException]): Failure per engine name.
    """

    def __init__(self, errors: dict[str, BaseException]) -> None:
        self.errors: dict[str, BaseException] = errors
        if errors:
            detail: str = ", ".join(f"{name}: {err}" for name, err in errors.items())
            msg: str = f"All translation providers failed ({detail})"
        else:
            msg = "No translation providers available"
        super().__init__(msg)


class TransInterface(ABC):
    """Abstract base class for translation providers.

    Concrete engines register themselves by their distinguished name when the subclass is created,
    so the service can build them from the engine list in the configuration.

    Attributes:
        registered (ClassVar[dict[str, type[TransInterface]]]): Registered engine classes keyed by name.
    """

    registered: ClassVar[dict[str, type[TransInterface]]] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        name: str = cls.fetch_engine_name()
        if not isinstance(name, str) or name == "":
            return  # Anonymous engines (test doubles, ad hoc providers) are usable but not registered.

        if name in cls.registered:
            msg: str = f"A translation engine with the name '{name}' is already registered."
            raise ValueError(msg)

        cls.registered[name] = cls

    def __init__(self) -> None:
        self._engine_attributes: EngineAttributes | None = None

    @classmethod
    def from_config(cls, config: Config) -> list[TransInterface]:
        """Build the engine instances this class contributes for a configuration.

        Most engines contribute a single instance; engines that front several endpoints
        override this to contribute one instance per endpoint.

        Raises:
            TranslateExceptionError: If the engine cannot be set up.
        """
        instance: TransInterface = cls()
        instance.initialize(config)
        return [instance]

    @property
    def engine_attributes(self) -> EngineAttributes:
        if self._engine_attributes is None:
            msg = "Engine attributes have not been set."
            raise RuntimeError(msg)
        return self._engine_attributes

    @engine_attributes.setter
    def engine_attributes(self, attributes: EngineAttributes) -> None:
        if self._engine_attributes is not None:
            msg = "Engine attributes can only be set once during initialization."
            raise RuntimeError(msg)
        self._engine_attributes = attributes

    @property
    def engine_name(self) -> str:
        return self.engine_attributes.name

    @property
    def has_dedicated_detection_api(self) -> bool:
        return self.engine_attributes.supports_dedicated_detection_api

    def is_rate_limit_error(self, err: Exception) -> bool:
        """Check if the given exception indicates rate limiting."""
        return isinstance(err, TranslationRateLimitError)

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if the engine can currently take requests."""
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def fetch_engine_name() -> str:
        """Fetch the distinguished name of the engine.

        Called from ``__init_subclass__``, so it must work at class-definition time.
        """
        raise NotImplementedError

    @abstractmethod
    def initialize(self, config: Config) -> None:
        """Initialize the engine with the given configuration.

        Raises:
            TranslateExceptionError: If credentials or settings are missing.
        """
        raise NotImplementedError

    @abstractmethod
    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        """Translate input text to the target language.

        Args:
            content (str): Text to be translated.
            tgt_lang (str): Target language code.
            src_lang (str | None): Source language code. If None, the provider detects it.

        Returns:
            Result: Result with ``text`` populated.

        Raises:
            NotSupportedLanguagesError: If a language is not supported.
            TranslationRateLimitError: If the request is rate-limited.
            TranslateExceptionError: If translation fails for any other reason.
        """
        raise NotImplementedError

    async def detect_language(self, content: str) -> Result:
        """Detect the language of the input text.

        Raises:
            TranslateExceptionError: If the engine cannot detect languages or detection fails.
        """
        _ = content
        msg: str = f"Engine '{self.engine_name}' does not support language detection"
        raise TranslateExceptionError(msg)

    @abstractmethod
    async def close(self) -> None:
        """Release network resources held by the engine."""
        raise NotImplementedError

    def get_authentication_key(self) -> str:
        """Retrieve the API key from ``<ENGINE NAME>_API_OAUTH``, or an empty string."""
        return os.getenv(f"{self.fetch_engine_name().upper()}_API_OAUTH", "")
