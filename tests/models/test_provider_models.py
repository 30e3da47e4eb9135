from __future__ import annotations

from models.provider_models import GeminiGenerationConfig, GeminiRequest, RelayRequest


def test_relay_request_uses_camel_case_keys() -> None:
    request = RelayRequest(text="Hello", target_lang="es", source_lang="en")

    assert request.to_dict() == {"text": "Hello", "targetLang": "es", "sourceLang": "en"}


def test_relay_request_omits_unknown_source_language() -> None:
    assert RelayRequest(text="Hello", target_lang="es").to_dict() == {"text": "Hello", "targetLang": "es"}


def test_gemini_request_from_prompt() -> None:
    generation_config = GeminiGenerationConfig(temperature=0.1, top_k=1, top_p=0.8, max_output_tokens=1000)

    payload = GeminiRequest.from_prompt("Translate this", generation_config).to_dict()

    assert payload == {
        "contents": [{"parts": [{"text": "Translate this"}]}],
        "generationConfig": {"temperature": 0.1, "topK": 1, "topP": 0.8, "maxOutputTokens": 1000},
    }
