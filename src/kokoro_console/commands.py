"""
Command grammar and dispatch for the interactive console.

Grammar (keywords are case-insensitive, voice names are not):

    exit | quit                 leave the session
    voice <name>                switch the active voice
    voices [<prefix>]           list voices, optionally by name prefix
    search <term>               search voices by name or language
    help                        show the command reference
    wav on|off|status           toggle the save-to-wav indicator
    <anything else>             speak it with the active voice
"""

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .catalog import VoiceCatalog, VoiceRecord
from .config import SessionConfig
from .engine import SynthesisEngine
from .errors import ConsoleError, EngineError, ErrorCode, ValidationError, VoiceLookupError
from .ranking import SUGGESTION_LIMIT, search_voices, suggest_voices
from .terminal import Colors

logger = logging.getLogger(__name__)

# How many voices to show when a lookup has no close matches
FALLBACK_LISTING = 5


# === Commands ===

@dataclass(frozen=True)
class Speak:
    text: str


@dataclass(frozen=True)
class SwitchVoice:
    name: str


@dataclass(frozen=True)
class ListVoices:
    prefix: Optional[str] = None


@dataclass(frozen=True)
class Search:
    term: str


@dataclass(frozen=True)
class ToggleWav:
    action: str  # "on", "off", or "status"


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class Exit:
    pass


@dataclass(frozen=True)
class Empty:
    pass


Command = Union[Speak, SwitchVoice, ListVoices, Search, ToggleWav, Help, Exit, Empty]

WAV_ACTIONS = ("on", "off", "status")


def parse_command(line: str) -> Command:
    """
    Parse a finalized input line into a Command.

    Raises:
        ValidationError: a command keyword is missing its argument or has
            too many of them. Nothing has been changed when this is raised.
    """
    line = line.strip()
    if not line:
        return Empty()

    parts = line.split(maxsplit=1)
    keyword = parts[0].lower()
    rest = parts[1].strip() if len(parts) > 1 else ""

    if keyword in ("exit", "quit") and not rest:
        return Exit()

    if keyword == "help" and not rest:
        return Help()

    if keyword == "voice":
        if not rest:
            raise ValidationError(
                "Please specify a voice name.",
                code=ErrorCode.MISSING_VOICE_NAME,
                hints=["Example: voice af_heart", "Tip: Type 'voices' to see all available options."],
            )
        return SwitchVoice(rest)

    if keyword == "voices":
        tokens = rest.split()
        if not tokens:
            return ListVoices()
        if len(tokens) > 1:
            raise ValidationError(
                "Invalid voices command format.",
                code=ErrorCode.INVALID_VOICES_FORMAT,
                hints=["Usage: 'voices' or 'voices <prefix>'", "Example: voices bf_"],
            )
        return ListVoices(tokens[0])

    if keyword == "search":
        if not rest:
            raise ValidationError(
                "Please specify a search term.",
                code=ErrorCode.MISSING_SEARCH_TERM,
                hints=["Example: search english"],
            )
        return Search(rest)

    if keyword == "wav":
        action = rest.lower()
        if action not in WAV_ACTIONS:
            raise ValidationError(
                "Invalid wav command.",
                code=ErrorCode.INVALID_WAV_ARGUMENT,
                hints=["Usage: wav on|off|status"],
            )
        return ToggleWav(action)

    return Speak(line)


# === Output helpers ===

def print_voice_list(voices: Sequence[VoiceRecord], indent: str = "  ") -> None:
    for voice in voices:
        print(f"{indent}• {Colors.BOLD}{voice.name}{Colors.RESET} {Colors.DIM}({voice.language}){Colors.RESET}")


def print_error(error: ConsoleError) -> None:
    print(f"{Colors.RED}❌ {error}{Colors.RESET}")
    for hint in error.hints:
        print(f"{Colors.DIM}💡 {hint}{Colors.RESET}")


def show_help() -> None:
    """Print the static command reference."""
    print(f"\n{Colors.BOLD}Commands:{Colors.RESET}")
    print("  • Type text to speak it")
    print(f"  • {Colors.CYAN}voice <name>{Colors.RESET}      - Change voice (exact name required, Tab for completion)")
    print(f"  • {Colors.CYAN}voices{Colors.RESET}            - List all available voices")
    print(f"  • {Colors.CYAN}voices <prefix>{Colors.RESET}   - List voices starting with prefix (e.g., 'voices bf_')")
    print(f"  • {Colors.CYAN}search <term>{Colors.RESET}     - Search for voices by name or language")
    print(f"  • {Colors.CYAN}wav on|off|status{Colors.RESET} - Toggle the save-to-wav indicator (file output not implemented)")
    print(f"  • {Colors.CYAN}help{Colors.RESET}              - Show this help")
    print(f"  • {Colors.CYAN}exit{Colors.RESET} or {Colors.CYAN}quit{Colors.RESET}      - Exit the program")
    print()
    print(f"{Colors.DIM}💡 Tip: Use Tab after 'voice ' to auto-complete voice names!{Colors.RESET}")
    print()


# === Dispatch ===

@dataclass
class SessionState:
    """State carried across prompts: the active voice and session settings."""
    voice: VoiceRecord
    config: SessionConfig


class CommandDispatcher:
    """
    Routes parsed commands to their handlers.

    Stateless between calls apart from the SessionState it is handed.
    Speech runs on a single worker thread, but dispatch() always waits for
    it to finish before returning.
    """

    def __init__(self, catalog: VoiceCatalog, engine: SynthesisEngine,
                 executor: Optional[concurrent.futures.Executor] = None):
        self.catalog = catalog
        self.engine = engine
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="speak"
        )

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def dispatch_line(self, line: str, state: SessionState) -> bool:
        """Parse and run one line. Returns False when the session should end."""
        try:
            command = parse_command(line)
        except ValidationError as e:
            print_error(e)
            return True
        return self.dispatch(command, state)

    def dispatch(self, command: Command, state: SessionState) -> bool:
        """Run a command. Returns False when the session should end."""
        logger.debug("Dispatching %r", command)
        try:
            if isinstance(command, Empty):
                return True
            if isinstance(command, Exit):
                print(f"{Colors.DIM}Goodbye!{Colors.RESET}")
                return False
            if isinstance(command, Help):
                show_help()
            elif isinstance(command, SwitchVoice):
                self.switch_voice(command.name, state)
            elif isinstance(command, ListVoices):
                self.list_voices(command.prefix)
            elif isinstance(command, Search):
                self.search(command.term)
            elif isinstance(command, ToggleWav):
                self.toggle_wav(command.action, state.config)
            elif isinstance(command, Speak):
                self.speak(command.text, state)
        except VoiceLookupError as e:
            print_error(e)
        except EngineError as e:
            print(f"{Colors.RED}Error speaking text: {e}{Colors.RESET}")
        return True

    # --- Handlers ---

    def switch_voice(self, name: str, state: SessionState) -> VoiceRecord:
        """
        Switch the active voice by exact name.

        On a miss, shows close matches (or the start of the catalog when
        nothing is close) and leaves the active voice unchanged.
        """
        voice = self.catalog.lookup(name)
        if voice is not None:
            state.voice = voice
            print(f"{Colors.GREEN}✅ Switched to voice: {voice.describe()}{Colors.RESET}")
            print()
            return voice

        print(f"{Colors.RED}❌ Voice '{name}' not found.{Colors.RESET}")
        suggestions = suggest_voices(name, self.catalog)
        if suggestions:
            print(f"{Colors.YELLOW}🔍 Did you mean one of these?{Colors.RESET}")
            print_voice_list(suggestions[:SUGGESTION_LIMIT])
        else:
            voices = self.catalog.voices
            print("📋 Available voices:")
            print_voice_list(voices[:FALLBACK_LISTING])
            if len(voices) > FALLBACK_LISTING:
                remaining = len(voices) - FALLBACK_LISTING
                print(f"{Colors.DIM}  ... and {remaining} more (type 'voices' to see all){Colors.RESET}")

        print(f"{Colors.DIM}💡 Tip: Voice names are case-sensitive. Try copying the exact name from the list above.{Colors.RESET}")
        print(f"{Colors.DIM}💡 You can also use 'voices <prefix>' to filter voices (e.g., 'voices af_').{Colors.RESET}")
        return state.voice

    def list_voices(self, prefix: Optional[str] = None) -> List[VoiceRecord]:
        """Print the catalog (or the voices starting with prefix) by language, then name."""
        if not self.catalog:
            print(f"{Colors.YELLOW}No voices available.{Colors.RESET}")
            return []

        if prefix:
            voices = self.catalog.filter_by_prefix(prefix)
            if not voices:
                raise VoiceLookupError(
                    f"No voices found starting with '{prefix}'.",
                    code=ErrorCode.PREFIX_NOT_FOUND,
                    hints=["Try a different prefix or type 'voices' to see all available voices."],
                )
            print(f"\n{Colors.BOLD}Voices starting with '{prefix}' ({len(voices)} found):{Colors.RESET}")
        else:
            voices = self.catalog.voices
            print(f"\n{Colors.BOLD}Available voices:{Colors.RESET}")

        ordered = self.catalog.sorted_for_display(voices)
        print_voice_list(ordered)
        print()
        return ordered

    def search(self, term: str) -> List[VoiceRecord]:
        """Print voices matching term by name, language, or edit distance."""
        matches = search_voices(term, self.catalog)
        if not matches:
            raise VoiceLookupError(
                f"No voices found matching '{term}'.",
                code=ErrorCode.SEARCH_NO_MATCH,
                hints=["Try a different search term or type 'voices' to see all available voices."],
            )

        print(f"{Colors.CYAN}🔍 Found {len(matches)} voice(s) matching '{term}':{Colors.RESET}")
        print_voice_list(matches)
        print()
        print(f"{Colors.DIM}💡 To use a voice, type: voice <exact_name>{Colors.RESET}")
        return matches

    def toggle_wav(self, action: str, config: SessionConfig) -> bool:
        """Flip or report the save-to-wav indicator. Never writes files."""
        if action == "on":
            config.save_wav = True
        elif action == "off":
            config.save_wav = False

        state = "ON" if config.save_wav else "OFF"
        print(f"{Colors.CYAN}Save to WAV: {state}{Colors.RESET}")
        if config.save_wav:
            print(f"{Colors.DIM}⚠️  Saving audio to files is not implemented yet; audio will play directly.{Colors.RESET}")
        return config.save_wav

    def speak(self, text: str, state: SessionState) -> None:
        """Speak on the worker thread and wait for it to finish."""
        future = self._executor.submit(self.engine.speak, text, state.voice)
        try:
            future.result()
        except EngineError:
            raise
        except Exception as e:
            raise EngineError(f"{e}", code=ErrorCode.SYNTHESIS_FAILED) from e
