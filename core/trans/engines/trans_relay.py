"""Relay translation engine.

Forwards requests to translation endpoints that speak the simple relay protocol:
``POST {"text", "sourceLang", "targetLang"}`` answered by a JSON object carrying
``translatedText`` and, optionally, ``confidence`` and ``error``.
One engine instance is created for every entry of ``[RELAY] ENDPOINTS``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from core.trans.interface import (
    EngineAttributes,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationRateLimitError,
)
from handlers.async_comm import AsyncCommError, AsyncHttp
from models.provider_models import RelayRequest
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config

__all__: list[str] = ["RelayTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTP_TOO_MANY_REQUESTS: Final[int] = 429


class RelayTranslation(TransInterface):
    """Translation engine for one relay endpoint.

    Attributes:
        label (str): Endpoint label from the configuration (e.g. ``gemini`` or ``azure``).
        url (str): Endpoint URL.
    """

    def __init__(self, label: str = "", url: str = "") -> None:
        super().__init__()
        self.label: str = label
        self.url: str = url
        self._http: AsyncHttp = AsyncHttp()
        self._timeout: float = 10.0

    @property
    def is_available(self) -> bool:
        return bool(self.url)

    @staticmethod
    def fetch_engine_name() -> str:
        return "relay"

    @classmethod
    def from_config(cls, config: Config) -> list[TransInterface]:
        endpoints: dict[str, str] = config.RELAY.ENDPOINTS
        if not endpoints:
            msg = "No relay endpoints configured in [RELAY] ENDPOINTS"
            raise TranslateExceptionError(msg)

        engines: list[TransInterface] = []
        for label, url in endpoints.items():
            engine = cls(label=label, url=url)
            engine.initialize(config)
            engines.append(engine)
        return engines

    def initialize(self, config: Config) -> None:
        if not self.url:
            msg = "Relay endpoint URL is empty"
            raise TranslateExceptionError(msg)
        name: str = f"{self.fetch_engine_name()}:{self.label}" if self.label else self.fetch_engine_name()
        self.engine_attributes = EngineAttributes(name=name)
        self._timeout = config.TRANSLATION.PROVIDER_TIMEOUT
        logger.debug("Relay engine '%s' -> %s", name, self.url)

    @staticmethod
    def parse_response(body: Any) -> Result:
        """Validate a relay response body.

        Raises:
            TranslateExceptionError: If the body is not an object with a usable ``translatedText``
                or it reports an error.
        """
        if not isinstance(body, dict):
            msg: str = f"Malformed relay response: {type(body).__name__}"
            raise TranslateExceptionError(msg)
        if body.get("error"):
            msg = f"Relay endpoint reported an error: {body['error']}"
            raise TranslateExceptionError(msg)

        text: Any = body.get("translatedText")
        if not isinstance(text, str) or not text.strip():
            msg = "Relay response has no translatedText"
            raise TranslateExceptionError(msg)

        raw_confidence: Any = body.get("confidence")
        confidence: float | None = None
        # bool is an int subclass; reject it explicitly.
        if isinstance(raw_confidence, (int, float)) and not isinstance(raw_confidence, bool):
            confidence = min(max(float(raw_confidence), 0.0), 1.0)

        return Result(text=text, confidence=confidence)

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        payload: dict[str, Any] = RelayRequest(text=content, target_lang=tgt_lang, source_lang=src_lang).to_dict()

        try:
            body: Any = await self._http.post_json(url=self.url, payload=payload, total_timeout=self._timeout)
        except AsyncCommError as err:
            if err.status == HTTP_TOO_MANY_REQUESTS:
                msg: str = f"Relay '{self.engine_name}' rate limit: {err}"
                raise TranslationRateLimitError(msg) from err
            msg = f"Relay '{self.engine_name}' request failed: {err}"
            raise TranslateExceptionError(msg) from err

        result: Result = self.parse_response(body)
        result.detected_source_lang = src_lang
        result.metadata = {"engine": self.engine_name}
        return result

    async def close(self) -> None:
        await self._http.close()
