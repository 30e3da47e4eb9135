from __future__ import annotations

import hashlib
import re
import unicodedata
from typing import Final

__all__: list[str] = ["StringUtils"]

WORD_PATTERN: Final[re.Pattern[str]] = re.compile(r"\w+", re.UNICODE)
SURROUNDING_QUOTES: Final[str] = "\"'“”「」"


class StringUtils:
    """String helpers shared by the cache and the translation engines."""

    @staticmethod
    def ensure_str(value: str | None) -> str:
        """Return the value as a string, or an empty string for None.

        Whitespace is preserved.
        """
        if not isinstance(value, str):
            value = str(value) if value is not None else ""
        return value

    @staticmethod
    def compress_blanks(value: str) -> str:
        """Collapse runs of whitespace into single spaces and strip both ends."""
        return " ".join(StringUtils.ensure_str(value).split())

    @staticmethod
    def normalize_text(text: str) -> str:
        """Apply Unicode NFC normalization so equivalent inputs share a fingerprint."""
        return unicodedata.normalize("NFC", text)

    @staticmethod
    def generate_fingerprint(source_text: str, source_lang: str, target_lang: str) -> str:
        """Generate the cache fingerprint for a translation request.

        Args:
            source_text (str): Text to be translated.
            source_lang (str): Source language code.
            target_lang (str): Target language code.

        Returns:
            str: SHA-256 hex digest of the normalized triple.
        """
        normalized_source: str = StringUtils.normalize_text(StringUtils.ensure_str(source_text))
        key_data: str = f"{normalized_source}|{source_lang.lower()}|{target_lang.lower()}"
        return hashlib.sha256(key_data.encode("utf-8")).hexdigest()

    @staticmethod
    def split_words(value: str) -> set[str]:
        """Return the case-folded words of a string, ignoring punctuation."""
        return {word.casefold() for word in WORD_PATTERN.findall(StringUtils.ensure_str(value))}

    @staticmethod
    def strip_quotes(value: str) -> str:
        """Remove one pair of quotes wrapping the whole string, if any."""
        value = value.strip()
        if len(value) >= 2 and value[0] in SURROUNDING_QUOTES and value[-1] in SURROUNDING_QUOTES:
            return value[1:-1].strip()
        return value
