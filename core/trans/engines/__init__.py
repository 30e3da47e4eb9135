"""Translation engine implementations.

This package contains concrete implementations of the TransInterface for the upstream providers.
Importing it registers every engine under its distinguished name.

Modules:
- GeminiTranslation: Prompts a Gemini model through the Generative Language REST API.
- RelayTranslation: Forwards requests to relay endpoints speaking the ``{text, sourceLang, targetLang}`` protocol.
"""

from core.trans.engines.const_languages import LANGUAGES, language_name
from core.trans.engines.trans_gemini import GeminiTranslation
from core.trans.engines.trans_relay import RelayTranslation

__all__: list[str] = [
    "LANGUAGES",
    "GeminiTranslation",
    "RelayTranslation",
    "language_name",
]
