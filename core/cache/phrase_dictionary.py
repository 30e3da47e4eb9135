"""Static dictionary of common phrases.

Business and conference phrases that come up constantly in live conversation are pre-translated
so they can be answered without touching the cache or any provider. Lookups are exact and
case-sensitive; the approximate matcher used by the fallback path is deliberately loose.
"""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterator, Mapping

__all__: list[str] = ["COMMON_PHRASES", "PhraseDictionary", "PhraseDictionaryError"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

# Canonical English phrase -> target language -> translation.
COMMON_PHRASES: Final[dict[str, dict[str, str]]] = {
    "Hello": {
        "zh": "你好", "es": "Hola", "fr": "Bonjour", "de": "Hallo", "ja": "こんにちは",
        "ko": "안녕하세요", "ar": "مرحبا", "hi": "नमस्ते", "pt": "Olá",
    },
    "Thank you": {
        "zh": "谢谢", "es": "Gracias", "fr": "Merci", "de": "Danke", "ja": "ありがとう",
        "ko": "감사합니다", "ar": "شكرا لك", "hi": "धन्यवाद", "pt": "Obrigado",
    },
    "Please": {
        "zh": "请", "es": "Por favor", "fr": "S'il vous plaît", "de": "Bitte", "ja": "お願いします",
        "ko": "부탁합니다", "ar": "من فضلك", "hi": "कृपया", "pt": "Por favor",
    },
    "Yes": {
        "zh": "是", "es": "Sí", "fr": "Oui", "de": "Ja", "ja": "はい",
        "ko": "네", "ar": "نعم", "hi": "हाँ", "pt": "Sim",
    },
    "No": {
        "zh": "不", "es": "No", "fr": "Non", "de": "Nein", "ja": "いいえ",
        "ko": "아니요", "ar": "لا", "hi": "नहीं", "pt": "Não",
    },
    "Excuse me": {
        "zh": "打扰一下", "es": "Disculpe", "fr": "Excusez-moi", "de": "Entschuldigung", "ja": "すみません",
        "ko": "실례합니다", "ar": "عفوا", "hi": "माफ़ कीजिए", "pt": "Com licença",
    },
    "How are you?": {
        "zh": "你好吗？", "es": "¿Cómo estás?", "fr": "Comment allez-vous?", "de": "Wie geht es Ihnen?",
        "ja": "元気ですか？", "ko": "어떻게 지내세요?", "ar": "كيف حالك؟", "hi": "आप कैसे हैं?", "pt": "Como está?",
    },
    "Nice to meet you": {
        "zh": "很高兴认识你", "es": "Mucho gusto", "fr": "Enchanté", "de": "Freut mich, Sie kennenzulernen",
        "ja": "はじめまして", "ko": "만나서 반갑습니다", "ar": "تشرفت بمعرفتك", "hi": "आपसे मिलकर खुशी हुई",
        "pt": "Prazer em conhecê-lo",
    },
    "I understand": {
        "zh": "我明白", "es": "Entiendo", "fr": "Je comprends", "de": "Ich verstehe", "ja": "わかりました",
        "ko": "이해합니다", "ar": "أنا أفهم", "hi": "मैं समझता हूँ", "pt": "Eu entendo",
    },
    "Could you repeat that?": {
        "zh": "你能再说一遍吗？", "es": "¿Podría repetir eso?", "fr": "Pourriez-vous répéter?",
        "de": "Könnten Sie das wiederholen?", "ja": "もう一度言っていただけますか？", "ko": "다시 말씀해 주시겠어요?",
        "ar": "هل يمكنك تكرار ذلك؟", "hi": "क्या आप इसे दोहरा सकते हैं?", "pt": "Você poderia repetir isso?",
    },
    "What is your name?": {
        "zh": "你叫什么名字？", "es": "¿Cómo se llama?", "fr": "Comment vous appelez-vous?",
        "de": "Wie heißen Sie?", "ja": "お名前は何ですか？", "ko": "성함이 어떻게 되세요?",
        "ar": "ما اسمك؟", "hi": "आपका नाम क्या है?", "pt": "Qual é o seu nome?",
    },
    "Where is the bathroom?": {
        "zh": "洗手间在哪里？", "es": "¿Dónde está el baño?", "fr": "Où sont les toilettes?",
        "de": "Wo ist die Toilette?", "ja": "トイレはどこですか？", "ko": "화장실이 어디에요?",
        "ar": "أين الحمام؟", "hi": "शौचालय कहाँ है?", "pt": "Onde fica o banheiro?",
    },
    "How much does it cost?": {
        "zh": "这个多少钱？", "es": "¿Cuánto cuesta?", "fr": "Combien ça coûte?", "de": "Wie viel kostet das?",
        "ja": "いくらですか？", "ko": "얼마예요?", "ar": "كم يكلف؟", "hi": "इसकी कीमत कितनी है?",
        "pt": "Quanto custa?",
    },
    "I would like to order": {
        "zh": "我想点餐", "es": "Me gustaría pedir", "fr": "Je voudrais commander", "de": "Ich möchte bestellen",
        "ja": "注文したいです", "ko": "주문하고 싶습니다", "ar": "أود أن أطلب", "hi": "मैं ऑर्डर करना चाहूँगा",
        "pt": "Eu gostaria de pedir",
    },
    "The meeting is starting": {
        "zh": "会议开始了", "es": "La reunión está comenzando", "fr": "La réunion commence",
        "de": "Das Meeting beginnt", "ja": "会議が始まります", "ko": "회의가 시작됩니다",
        "ar": "الاجتماع يبدأ", "hi": "बैठक शुरू हो रही है", "pt": "A reunião está começando",
    },
    "Let me think about it": {
        "zh": "让我想一想", "es": "Déjame pensarlo", "fr": "Laissez-moi y réfléchir", "de": "Lassen Sie mich darüber nachdenken",
        "ja": "考えさせてください", "ko": "생각해 볼게요", "ar": "دعني أفكر في الأمر", "hi": "मुझे इसके बारे में सोचने दीजिए",
        "pt": "Deixe-me pensar sobre isso",
    },
    "I agree": {
        "zh": "我同意", "es": "Estoy de acuerdo", "fr": "Je suis d'accord", "de": "Ich stimme zu",
        "ja": "賛成です", "ko": "동의합니다", "ar": "أنا موافق", "hi": "मैं सहमत हूँ", "pt": "Eu concordo",
    },
    "I disagree": {
        "zh": "我不同意", "es": "No estoy de acuerdo", "fr": "Je ne suis pas d'accord", "de": "Ich stimme nicht zu",
        "ja": "反対です", "ko": "동의하지 않습니다", "ar": "أنا لا أوافق", "hi": "मैं असहमत हूँ", "pt": "Eu discordo",
    },
}  # fmt: skip


class PhraseDictionaryError(Exception):
    """The phrase dictionary extension file could not be loaded."""


class PhraseDictionary:
    """Read-only mapping of canonical phrases to their translations.

    Args:
        phrases (Mapping[str, Mapping[str, str]] | None): Phrase table. Defaults to `COMMON_PHRASES`.
        extension_path (str | Path | None): Optional JSON file with more phrases in the same shape.
            Entries in the file extend or override the built-in table per language.

    Raises:
        PhraseDictionaryError: If the extension file cannot be read or has the wrong shape.
    """

    def __init__(
        self,
        phrases: Mapping[str, Mapping[str, str]] | None = None,
        *,
        extension_path: str | Path | None = None,
    ) -> None:
        table: Mapping[str, Mapping[str, str]] = COMMON_PHRASES if phrases is None else phrases
        merged: dict[str, dict[str, str]] = {phrase: dict(translations) for phrase, translations in table.items()}
        if extension_path:
            for phrase, translations in self._load_extension(Path(extension_path)).items():
                merged.setdefault(phrase, {}).update(translations)

        self._phrases: Mapping[str, Mapping[str, str]] = MappingProxyType(
            {phrase: MappingProxyType(translations) for phrase, translations in merged.items()}
        )
        self._phrase_words: dict[str, set[str]] = {phrase: StringUtils.split_words(phrase) for phrase in merged}
        logger.info("Phrase dictionary loaded with %d phrases", len(self._phrases))

    @staticmethod
    def _load_extension(path: Path) -> dict[str, dict[str, str]]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as err:
            msg: str = f"Cannot load phrase dictionary '{path}': {err}"
            raise PhraseDictionaryError(msg) from err

        valid: bool = isinstance(data, dict) and all(
            isinstance(translations, dict)
            and all(isinstance(lang, str) and isinstance(text, str) for lang, text in translations.items())
            for translations in data.values()
        )
        if not valid:
            msg = f"Phrase dictionary '{path}' must map phrases to {{language: translation}} objects"
            raise PhraseDictionaryError(msg)

        logger.debug("Loaded %d phrases from '%s'", len(data), path)
        return data

    @property
    def phrases(self) -> Mapping[str, Mapping[str, str]]:
        return self._phrases

    def __len__(self) -> int:
        return len(self._phrases)

    def __contains__(self, phrase: object) -> bool:
        return phrase in self._phrases

    def __iter__(self) -> Iterator[str]:
        return iter(self._phrases)

    def lookup(self, text: str, target_lang: str) -> str | None:
        """Return the translation of an exact canonical phrase, or None."""
        translations: Mapping[str, str] | None = self._phrases.get(text)
        if translations is None:
            return None
        return translations.get(target_lang)

    def find_approximate(self, text: str, target_lang: str) -> str | None:
        """Best-effort match for the fallback path.

        Returns the translation of the first phrase (in table order) sharing at least one word with
        ``text``, ignoring case and punctuation. When that phrase has no translation for
        ``target_lang`` the original text is returned. None means no phrase shares a word.
        The result is not semantically validated.
        """
        words: set[str] = StringUtils.split_words(text)
        if not words:
            return None

        for phrase, phrase_words in self._phrase_words.items():
            if words & phrase_words:
                logger.debug("Approximate phrase match: '%s' ~ '%s'", text, phrase)
                return self._phrases[phrase].get(target_lang, text)
        return None
