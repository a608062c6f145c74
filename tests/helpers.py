"""
Shared test helpers for the kokoro-console test suite.
"""

from kokoro_console.catalog import VoiceRecord
from kokoro_console.engine import SynthesisEngine
from kokoro_console.errors import EngineError, ErrorCode
from kokoro_console.terminal import Key, KeySource


class ScriptedKeys(KeySource):
    """Key source that replays a fixed list of keys, then raises EOFError."""

    def __init__(self, keys):
        self._keys = list(keys)
        self.closed = False

    def read_key(self) -> Key:
        if not self._keys:
            raise EOFError
        return self._keys.pop(0)

    def close(self):
        self.closed = True


def typed(text: str):
    """Keys for typing text character by character (Enter for newlines)."""
    return [Key.from_char(ch) for ch in text]


class FakeEngine(SynthesisEngine):
    """
    In-memory engine.

    Args:
        load_failures: Number of load() calls that fail before one succeeds
        speak_error: If set, speak() raises EngineError with this message
    """

    def __init__(self, load_failures: int = 0, speak_error: str = None):
        self.load_failures = load_failures
        self.speak_error = speak_error
        self.load_calls = 0
        self.loaded = False
        self.spoken = []

    def load(self) -> None:
        self.load_calls += 1
        if self.load_calls <= self.load_failures:
            raise EngineError(f"download interrupted ({self.load_calls})", code=ErrorCode.MODEL_LOAD_FAILED)
        self.loaded = True

    def speak(self, text: str, voice: VoiceRecord) -> None:
        if self.speak_error:
            raise EngineError(self.speak_error)
        self.spoken.append((text, voice.name))
