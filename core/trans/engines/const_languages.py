from __future__ import annotations

from typing import Final

__all__: list[str] = ["LANGUAGES", "language_name"]

# ISO 639-1 code -> name used in LLM prompts.
LANGUAGES: Final[dict[str, str]] = {
    "en": "English",
    "zh": "Chinese (Mandarin)",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "ja": "Japanese",
    "ko": "Korean",
    "ar": "Arabic",
    "hi": "Hindi",
    "pt": "Portuguese",
}


def language_name(code: str) -> str:
    """Return the prompt name of a language code, or the code itself when unknown."""
    return LANGUAGES.get(code.lower(), code)
