"""
kokoro-console - Interactive Kokoro text-to-speech console.

Usage:
    kokoro-console                      # Interactive mode
    kokoro-console -t "Hello there"     # Speak once and exit
    kokoro-console -t "Hi" -i           # Speak, then stay interactive
    kokoro-console -v af_heart          # Start with a specific voice
    kokoro-console --list-voices        # List voices and exit
    kokoro-console -o out.wav -t "Hi"   # File output (not implemented, plays directly)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .catalog import VoiceCatalog, VoiceRecord, load_catalog
from .commands import CommandDispatcher, SessionState, print_voice_list
from .config import Config, SessionConfig, reload_config
from .engine import create_engine
from .errors import ConfigError, ConsoleError, EngineError, ErrorCode, VoiceLookupError
from .ranking import suggest_voices
from .session import ConsoleSession, bootstrap_engine, pick_startup_voice
from .terminal import Colors

logger = logging.getLogger("kokoro_console")


def configure_logging(level: str) -> None:
    """Send diagnostics to stderr at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kokoro-console",
        description="Kokoro TTS console - type text to hear it spoken",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Type 'help' inside the console for the command reference.",
    )
    parser.add_argument(
        "--text", "-t",
        help="Text to speak. Without it the console starts in interactive mode."
    )
    parser.add_argument(
        "--voice", "-v",
        help="Voice to use (exact name, e.g. af_heart)"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        metavar="PATH",
        help="Save audio to a WAV file (not implemented yet: audio plays directly)"
    )
    parser.add_argument(
        "--list-voices", "-l",
        action="store_true",
        help="List available voices and exit"
    )
    parser.add_argument(
        "--interactive", "-i",
        action="store_true",
        help="Stay in interactive mode after speaking --text"
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        metavar="PATH",
        help="Load the voice catalog from a YAML file"
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="Config file (default: ./kokoro_console.yaml or ~/.kokoro_console/config.yaml)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print debug logging to stderr"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    return parser


def show_voices(catalog: VoiceCatalog) -> None:
    """Print every voice, sorted by language then name."""
    if not catalog:
        print(f"{Colors.YELLOW}No voices available.{Colors.RESET}")
        return
    print(f"\n{Colors.BOLD}Available voices ({len(catalog)}):{Colors.RESET}")
    print_voice_list(catalog.sorted_for_display())
    print()


def resolve_voice(catalog: VoiceCatalog, requested: Optional[str], preferred: str) -> Optional[VoiceRecord]:
    """
    Pick the voice to start with.

    An explicitly requested voice must match exactly; on a miss the closest
    names are printed and None is returned.

    Raises:
        VoiceLookupError: the catalog has no voices at all.
    """
    if requested:
        voice = catalog.lookup(requested)
        if voice is None:
            print(f"{Colors.RED}❌ Voice '{requested}' not found.{Colors.RESET}")
            suggestions = suggest_voices(requested, catalog)
            if suggestions:
                print(f"{Colors.YELLOW}🔍 Did you mean one of these?{Colors.RESET}")
                print_voice_list(suggestions)
            print(f"{Colors.DIM}💡 Run with --list-voices to see all voices.{Colors.RESET}")
        return voice

    voice = pick_startup_voice(catalog, preferred)
    if voice is None:
        raise VoiceLookupError("No voices available. Exiting...", code=ErrorCode.CATALOG_EMPTY)
    return voice


def run(args: argparse.Namespace, config: Config) -> int:
    """Run the console with parsed arguments. Returns the process exit status."""
    catalog = load_catalog(args.catalog or config.catalog_file)

    if args.list_voices:
        show_voices(catalog)
        return 0

    voice = resolve_voice(catalog, args.voice, config.default_voice)
    if voice is None:
        return 1

    session_config = SessionConfig(prompt=config.prompt, output_path=args.output)
    if args.output:
        session_config.save_wav = True
        print(f"{Colors.YELLOW}⚠️  Saving to '{args.output}' is not implemented yet. "
              f"Audio will play directly instead.{Colors.RESET}")

    print(f"{Colors.BOLD}Welcome to Kokoro TTS Console!{Colors.RESET}")
    engine = create_engine(
        repo_id=config.get("engine", "repo_id"),
        sample_rate=config.get("engine", "sample_rate"),
    )
    try:
        bootstrap_engine(engine, attempts=config.load_attempts, delay=config.retry_delay)
    except EngineError as e:
        print(f"{Colors.RED}❌ Failed to load model: {e}{Colors.RESET}")
        return 1

    dispatcher = CommandDispatcher(catalog, engine)
    interactive = args.interactive or not args.text

    try:
        if args.text:
            state = SessionState(voice=voice, config=session_config)
            try:
                dispatcher.speak(args.text, state)
            except EngineError as e:
                print(f"{Colors.RED}Error speaking text: {e}{Colors.RESET}")
                return 1
            voice = state.voice

        if interactive:
            print(f"{Colors.DIM}Type 'help' for available commands.{Colors.RESET}")
            ConsoleSession(catalog, engine, voice, config=session_config, dispatcher=dispatcher).run()
    except Exception as e:
        logger.debug("Unhandled failure", exc_info=True)
        print(f"{Colors.RED}An error occurred: {e}{Colors.RESET}")
        return 1
    finally:
        dispatcher.close()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = reload_config(args.config)
    except ConfigError as e:
        print(f"{Colors.RED}❌ {e}{Colors.RESET}")
        return 1

    configure_logging("DEBUG" if args.debug else config.log_level)
    if not config.colors_enabled:
        Colors.disable()

    try:
        return run(args, config)
    except ConsoleError as e:
        print(f"{Colors.RED}❌ {e}{Colors.RESET}")
        return 1
    except KeyboardInterrupt:
        print(f"\n{Colors.DIM}Interrupted.{Colors.RESET}")
        return 130


if __name__ == "__main__":
    sys.exit(main())
