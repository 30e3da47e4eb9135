"""Universal translator console.

Feeds finalized speech-to-text transcripts to the translation cache service and prints the
translations for the text-to-speech side. Positional arguments are joined with spaces and
translated as one transcript; without arguments one transcript is read per line from standard
input until EOF.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn, TextIO

from config.loader import ConfigLoader, ConfigLoaderError
from core.cache.phrase_dictionary import PhraseDictionaryError
from core.trans.engines.const_languages import LANGUAGES
from core.trans.manager import TranslationCacheService
from core.version import VERSION
from models.region_models import REGIONAL_CONFIGS
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.cache_models import CacheStatistics
    from models.config_models import Config
    from models.translation_models import TranslationResult

CFG_FILE: Final[str] = "universal_translator.ini"

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = _ArgumentParser(
        description="Translate finalized speech transcripts",
        epilog='Example: python universal_translator.py --from en --to ja "Thank you"',
    )
    parser.add_argument("text", nargs="*", help="Text to translate. Reads stdin lines when omitted")
    parser.add_argument("--config", default=CFG_FILE, metavar="FILE", help="Configuration file")
    parser.add_argument("--from", dest="source_lang", choices=sorted(LANGUAGES), help="Source language")
    parser.add_argument("--to", dest="target_lang", choices=sorted(LANGUAGES), help="Target language")
    parser.add_argument("--region", choices=list(REGIONAL_CONFIGS), help="Override the deployment region")
    parser.add_argument("--engine", action="append", metavar="NAME", help="Engine to race (repeatable)")
    parser.add_argument("--stats", action="store_true", help="Print cache statistics before exiting")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load the configuration file and apply command-line overrides.

    Raises:
        ConfigLoaderError: If the configuration file cannot be loaded.
    """
    script_name: str = Path(sys.argv[0]).name
    config: Config = ConfigLoader(
        config_filename=args.config,
        script_name=script_name,
        region=args.region,
        engine=args.engine,
        debug=args.debug,
    ).config
    config.GENERAL.VERSION = VERSION
    return config


def format_result(result: TranslationResult) -> str:
    return f"{result.translated_text}\t[{result.source} {result.confidence:.2f} {result.latency_ms:.0f}ms]"


def format_stats(stats: CacheStatistics) -> str:
    avg: str = "no data" if stats.avg_confidence is None else f"{stats.avg_confidence:.2f}"
    return (
        f"region={stats.region} ({stats.region_latency_ms}ms) "
        f"cache_size={stats.cache_size} cache_hits={stats.cache_hits} "
        f"common_phrases={stats.common_phrases_loaded} avg_confidence={avg}"
    )


async def run(
    service: TranslationCacheService,
    texts: list[str],
    source_lang: str,
    target_lang: str,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Translate the given texts, or stdin lines when there are none.

    ``stdin`` and ``stdout`` default to the streams current at call time.

    Returns:
        int: Number of translations printed.
    """
    input_stream: TextIO = sys.stdin if stdin is None else stdin
    output_stream: TextIO = sys.stdout if stdout is None else stdout
    count: int = 0

    async def _emit(text: str) -> None:
        nonlocal count
        text = text.strip()
        if not text:
            return
        result: TranslationResult = await service.translate(text, source_lang, target_lang)
        print(format_result(result), file=output_stream, flush=True)
        count += 1

    if texts:
        for text in texts:
            await _emit(text)
        return count

    while True:
        line: str = await asyncio.to_thread(input_stream.readline)
        if not line:
            break
        await _emit(line)
    return count


async def main_async(args: argparse.Namespace, config: Config) -> None:
    service = TranslationCacheService(config)
    await service.initialize()
    try:
        await run(
            service,
            [" ".join(args.text)] if args.text else [],
            args.source_lang or config.TRANSLATION.SOURCE_LANGUAGE,
            args.target_lang or config.TRANSLATION.TARGET_LANGUAGE,
        )
        if args.stats:
            print(format_stats(service.get_cache_stats()), file=sys.stderr)
    finally:
        await service.close()


def main(argv: list[str] | None = None) -> int:
    args: argparse.Namespace = parse_arguments(argv)
    try:
        config: Config = load_config(args)
    except ConfigLoaderError as err:
        print(f"Configuration error: {err}", file=sys.stderr)
        return 1

    LoggerUtils.configure(config.GENERAL.LOG_FILE, level=config.GENERAL.LOG_LEVEL)  # type: ignore[arg-type]
    logger.info("Universal translator %s starting", VERSION)
    try:
        asyncio.run(main_async(args, config))
    except PhraseDictionaryError as err:
        print(f"Dictionary error: {err}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
