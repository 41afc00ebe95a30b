"""Command line front end for TransRouter.

Translates text, detects languages, lists providers and synthesizes speech using the providers
configured in transrouter.ini. Provider credentials are read from <PROVIDER>_API_KEY and
<PROVIDER>_API_SECRET environment variables.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn, cast

from config.loader import ConfigLoader, ConfigLoaderError
from core.trans.interface import TranslateExceptionError
from core.trans.manager import TransManager
from core.tts.interface import SpeechExceptionError
from core.tts.manager import SpeechManager
from core.version import VERSION
from models.speech_models import SynthesisRequest
from models.translation_models import AUTO_DETECT, TranslationOptions, TranslationRequest
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from models.translation_models import LanguageDetectionResult, ProviderInfo, TranslationResponse
    from utils.logger_utils import LevelType

CFG_FILE: Final[str] = "transrouter.ini"


def check_python_version() -> None:
    """Check if Python version is 3.12 or later.

    Raises:
        RuntimeError: If Python version is below 3.12.
    """
    if sys.version_info < (3, 12):
        msg = "Python 3.12 or later is required"
        raise RuntimeError(msg)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        description="Translate text across multiple providers with caching and fallback",
        epilog='Example: python translate_cli.py translate "hello" --to zh-CN',
    )
    parser.add_argument("--config", default=CFG_FILE, metavar="FILE", help="Configuration file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    commands = parser.add_subparsers(dest="command", required=True)

    translate = commands.add_parser("translate", help="Translate text")
    translate.add_argument("text", help="Text to translate")
    translate.add_argument("--to", dest="target", required=True, metavar="LANG", help="Target language")
    translate.add_argument("--from", dest="source", default=AUTO_DETECT, metavar="LANG", help="Source language")
    translate.add_argument("--provider", metavar="ID", help="Preferred provider id")
    translate.add_argument("--formality", choices=["default", "formal", "informal"], default="default")
    translate.add_argument("--compare", nargs="+", metavar="ID", help="Translate with several providers at once")
    translate.add_argument("--stats", action="store_true", help="Print usage statistics afterwards")

    detect = commands.add_parser("detect", help="Detect the language of text")
    detect.add_argument("text", help="Text to inspect")
    detect.add_argument("--provider", metavar="ID", help="Provider id, the primary provider by default")

    providers = commands.add_parser("providers", help="List available providers")
    providers.add_argument("--category", choices=["traditional", "ai", "local"], help="Filter by category")

    speak = commands.add_parser("speak", help="Synthesize speech")
    speak.add_argument("text", help="Text to speak")
    speak.add_argument("--output", type=Path, required=True, metavar="FILE", help="Audio output file")
    speak.add_argument("--voice", metavar="NAME", help="Voice name")
    return parser


def print_providers(providers: list[ProviderInfo]) -> None:
    for info in providers:
        credentials: str = "key+secret" if info.requires_api_secret else "key" if info.requires_api_key else "none"
        print(f"{info.id:<10} {info.category:<12} {credentials:<11} {info.display_name}")


def print_response(response: TranslationResponse) -> None:
    suffix: str = " (cached)" if response.cached else ""
    print(f"[{response.provider}]{suffix} {response.translated_text}")
    if response.detected_source_language:
        print(f"  detected source: {response.detected_source_language}")


async def run_translation(loader: ConfigLoader, args: argparse.Namespace) -> int:
    manager = TransManager(cache_max_size=loader.config.CACHE.MAX_SIZE, cache_ttl=loader.config.CACHE.TTL)
    try:
        if args.command == "providers":
            providers: list[ProviderInfo] = (
                manager.get_providers_by_category(args.category)
                if args.category
                else manager.get_available_providers()
            )
            print_providers(providers)
            return 0

        await manager.initialize(loader.build_manager_config())
        if not manager.working_providers:
            print("\nError: No translation provider could be initialized.", file=sys.stderr)
            return 1

        if args.command == "detect":
            result: LanguageDetectionResult = await manager.detect_language(args.text, args.provider)
            print(f"{result.language} (confidence {result.confidence:.2f})")
            return 0

        request = TranslationRequest(
            text=args.text,
            target_lang=args.target,
            source_lang=args.source,
            options=TranslationOptions(formality=args.formality, preferred_provider=args.provider),
        )
        if args.compare:
            results: dict[str, TranslationResponse] = await manager.parallel_translate(request, args.compare)
            for response in results.values():
                print_response(response)
        else:
            print_response(await manager.translate(request))
        if args.stats:
            print(manager.export_stats())
        return 0
    finally:
        await manager.shutdown()


async def run_speech(loader: ConfigLoader, args: argparse.Namespace) -> int:
    settings, provider_config = loader.build_speech_settings()
    manager = SpeechManager(settings, provider_config)
    try:
        response = await manager.synthesize(SynthesisRequest(text=args.text, voice_name=args.voice))
    finally:
        await manager.close()
    args.output.write_bytes(response.audio)
    print(f"Saved {len(response.audio)} bytes of {response.format} audio to {args.output}")
    return 0


async def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        int: Process exit status.
    """
    check_python_version()
    args: argparse.Namespace = build_parser().parse_args(argv)

    try:
        loader = ConfigLoader(config_filename=args.config, script_name=Path(sys.argv[0]).stem, debug=args.debug)
    except ConfigLoaderError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return 1

    logger_utils = LoggerUtils(loader.config.GENERAL.LOG_FILE)
    level: str = "DEBUG" if loader.config.GENERAL.DEBUG else loader.config.GENERAL.LOG_LEVEL
    logger_utils.set_level(cast("LevelType", level))

    try:
        if args.command == "speak":
            return await run_speech(loader, args)
        return await run_translation(loader, args)
    except TranslateExceptionError as err:
        print(f"\nTranslation failed: {err}", file=sys.stderr)
    except SpeechExceptionError as err:
        print(f"\nSpeech synthesis failed: {err}", file=sys.stderr)
    except (ValueError, OSError) as err:
        print(f"\nError: {err}", file=sys.stderr)
    return 1


def cli() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n\nCancelled by user.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    cli()
