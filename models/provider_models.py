"""Data models for upstream provider request payloads."""

from __future__ import annotations

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin, LetterCase, config, dataclass_json

__all__: list[str] = ["GeminiContent", "GeminiGenerationConfig", "GeminiPart", "GeminiRequest", "RelayRequest"]


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class RelayRequest(DataClassJsonMixin):
    """Body of a relay endpoint request: ``{"text", "targetLang", "sourceLang"}``.

    ``sourceLang`` is omitted when the source language is unknown.
    """

    text: str
    target_lang: str
    source_lang: str | None = field(default=None, metadata=config(exclude=lambda value: value is None))


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class GeminiPart(DataClassJsonMixin):
    text: str


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class GeminiContent(DataClassJsonMixin):
    parts: list[GeminiPart]


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class GeminiGenerationConfig(DataClassJsonMixin):
    """Sampling parameters sent as ``generationConfig``."""

    temperature: float
    top_k: int
    top_p: float
    max_output_tokens: int


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class GeminiRequest(DataClassJsonMixin):
    """Body of a ``generateContent`` request with a single text prompt."""

    contents: list[GeminiContent]
    generation_config: GeminiGenerationConfig

    @classmethod
    def from_prompt(cls, prompt: str, generation_config: GeminiGenerationConfig) -> GeminiRequest:
        return cls(contents=[GeminiContent(parts=[GeminiPart(text=prompt)])], generation_config=generation_config)
