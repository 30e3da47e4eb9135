from __future__ import annotations

import io
from textwrap import dedent
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest

import universal_translator
from models.cache_models import CacheStatistics
from models.translation_models import TranslationResult
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    LoggerUtils.reset()


@pytest.fixture
def ini_path(tmp_path: Path) -> Path:
    path: Path = tmp_path / "universal_translator.ini"
    path.write_text(
        dedent(
            """
            [TRANSLATION]
            ENGINE = ["gemini"]
            SOURCE_LANGUAGE = "en"
            TARGET_LANGUAGE = "fr"
            """
        ),
        encoding="utf-8",
    )
    return path


def _service_mock(text: str = "Bonjour") -> MagicMock:
    service = MagicMock()
    service.translate = AsyncMock(
        return_value=TranslationResult(translated_text=text, latency_ms=1.2, source="common", confidence=1.0)
    )
    return service


def test_parse_arguments_defaults() -> None:
    args = universal_translator.parse_arguments([])

    assert args.text == []
    assert args.config == "universal_translator.ini"
    assert args.source_lang is None
    assert args.engine is None
    assert args.stats is False


def test_parse_arguments_options() -> None:
    args = universal_translator.parse_arguments(
        ["--from", "ja", "--to", "en", "--engine", "gemini", "--engine", "relay", "--region", "eu-west", "Hi", "there"]
    )

    assert args.source_lang == "ja"
    assert args.target_lang == "en"
    assert args.engine == ["gemini", "relay"]
    assert args.region == "eu-west"
    assert args.text == ["Hi", "there"]


def test_parse_arguments_rejects_unknown_language() -> None:
    with pytest.raises(SystemExit) as exc_info:
        universal_translator.parse_arguments(["--to", "xx"])

    assert exc_info.value.code == 2


def test_load_config_applies_overrides(ini_path: Path) -> None:
    args = universal_translator.parse_arguments(["--config", str(ini_path), "--region", "asia-pacific", "--debug"])

    config = universal_translator.load_config(args)

    assert config.TRANSLATION.REGION == "asia-pacific"
    assert config.TRANSLATION.TARGET_LANGUAGE == "fr"
    assert config.GENERAL.LOG_LEVEL == "DEBUG"
    assert config.GENERAL.VERSION == universal_translator.VERSION


def test_format_result() -> None:
    result = TranslationResult(translated_text="Hola", latency_ms=12.4, source="ai", confidence=0.9)

    assert universal_translator.format_result(result) == "Hola\t[ai 0.90 12ms]"


def test_format_stats_without_entries() -> None:
    stats = CacheStatistics(common_phrases_loaded=18, region="us-east", region_latency_ms=50)

    text: str = universal_translator.format_stats(stats)

    assert "avg_confidence=no data" in text
    assert "common_phrases=18" in text


@pytest.mark.asyncio
async def test_run_translates_arguments() -> None:
    service: MagicMock = _service_mock()
    stdout = io.StringIO()

    count: int = await universal_translator.run(service, ["Hello"], "en", "fr", stdout=stdout)

    assert count == 1
    service.translate.assert_awaited_once_with("Hello", "en", "fr")
    assert stdout.getvalue().startswith("Bonjour\t[common 1.00")


@pytest.mark.asyncio
async def test_run_reads_stdin_lines_and_skips_blank_ones() -> None:
    service: MagicMock = _service_mock()
    stdin = io.StringIO("Hello\n\n   \nThank you\n")
    stdout = io.StringIO()

    count: int = await universal_translator.run(service, [], "en", "fr", stdin=stdin, stdout=stdout)

    assert count == 2
    assert [call.args[0] for call in service.translate.await_args_list] == ["Hello", "Thank you"]
    assert len(stdout.getvalue().splitlines()) == 2


def test_main_reports_missing_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code: int = universal_translator.main(["--config", str(tmp_path / "missing.ini"), "Hello"])

    assert exit_code == 1
    assert "Configuration error" in capsys.readouterr().err


def test_main_translates_common_phrase_offline(
    ini_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("GEMINI_API_OAUTH", raising=False)
    monkeypatch.delenv("GOOGLE_GEMINI_API_KEY", raising=False)

    exit_code: int = universal_translator.main(["--config", str(ini_path), "--stats", "Thank", "you"])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert captured.out.startswith("Merci\t[common 1.00")
    assert "common_phrases=18" in captured.err


@pytest.mark.asyncio
async def test_run_writes_to_stdout_current_at_call_time(capsys: pytest.CaptureFixture[str]) -> None:
    service: MagicMock = _service_mock("Hola")

    count: int = await universal_translator.run(service, ["Hello"], "en", "es")

    assert count == 1
    assert capsys.readouterr().out.startswith("Hola\t[common 1.00")
