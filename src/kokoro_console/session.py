"""
Session Loop - prompt, read, dispatch, repeat.

Owns the active voice and the single line editor. Everything that changes
between prompts (voice, wav indicator, completion state) is mutated here or
by the dispatcher on this thread, so nothing needs locking.
"""

import logging
import time
from typing import Callable, Optional

from .catalog import VoiceCatalog, VoiceRecord
from .commands import CommandDispatcher, SessionState
from .completion import CompletionEngine
from .config import SessionConfig
from .engine import SynthesisEngine, load_with_retry
from .line_editor import LineEditor, read_line
from .terminal import Colors, ConsoleTerminal, KeySource, open_key_source

logger = logging.getLogger(__name__)


def bootstrap_engine(engine: SynthesisEngine, attempts: int = 3, delay: float = 1.0,
                     sleep: Callable[[float], None] = time.sleep) -> SynthesisEngine:
    """Load the model with retries, announcing progress."""
    print(f"{Colors.DIM}Loading model...{Colors.RESET}")
    load_with_retry(engine, attempts=attempts, delay=delay, sleep=sleep)
    print(f"{Colors.GREEN}Model loaded successfully!{Colors.RESET}")
    return engine


def pick_startup_voice(catalog: VoiceCatalog, preferred: str) -> Optional[VoiceRecord]:
    """Preferred voice if the catalog has it, else the first voice (with a warning)."""
    voice = catalog.default_voice(preferred)
    if voice is not None and voice.name != preferred:
        print(f"{Colors.YELLOW}⚠️  Default voice '{preferred}' not found. Using '{voice.name}' instead.{Colors.RESET}")
    return voice


class ConsoleSession:
    """The interactive read-eval loop."""

    def __init__(
        self,
        catalog: VoiceCatalog,
        engine: SynthesisEngine,
        voice: VoiceRecord,
        config: Optional[SessionConfig] = None,
        keys: Optional[KeySource] = None,
        terminal: Optional[ConsoleTerminal] = None,
        dispatcher: Optional[CommandDispatcher] = None,
    ):
        self.catalog = catalog
        self.state = SessionState(voice=voice, config=config or SessionConfig())
        self.keys = keys
        self.terminal = terminal or ConsoleTerminal()
        self.editor = LineEditor(CompletionEngine(catalog))
        self.dispatcher = dispatcher or CommandDispatcher(catalog, engine)

    @property
    def voice(self) -> VoiceRecord:
        return self.state.voice

    def read_command_line(self) -> str:
        """Show the prompt and read one finalized, trimmed line."""
        self.terminal.write(f"{Colors.GREEN}{self.state.config.prompt_text()}{Colors.RESET}")
        if self.keys is not None:
            return read_line(self.editor, self.keys, self.terminal).strip()
        # Raw mode only while reading, so command output and Ctrl+C behave normally
        with open_key_source() as keys:
            return read_line(self.editor, keys, self.terminal).strip()

    def run(self) -> None:
        """Loop until exit/quit, Ctrl+C, or end of input."""
        print(f"{Colors.CYAN}Using voice: {self.voice.describe()}{Colors.RESET}")
        print(f"{Colors.DIM}Type 'help' for available commands or just start typing to speak text.{Colors.RESET}")

        try:
            while True:
                try:
                    line = self.read_command_line()
                except (EOFError, KeyboardInterrupt):
                    print(f"\n{Colors.DIM}Exiting.{Colors.RESET}")
                    break

                if not self.dispatcher.dispatch_line(line, self.state):
                    break
        finally:
            self.dispatcher.close()
        logger.debug("Session ended with voice %s", self.voice.name)
