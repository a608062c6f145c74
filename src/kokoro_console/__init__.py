"""
kokoro-console: an interactive text-to-speech console for Kokoro voices.

Type text to hear it spoken, switch voices with tab completion, and search
the voice catalog with typo-tolerant matching.
"""

__version__ = "0.1.0"

from .catalog import VoiceCatalog, VoiceRecord, load_catalog
from .commands import CommandDispatcher, parse_command
from .completion import CompletionEngine, CompletionSession
from .line_editor import LineEditor
from .ranking import levenshtein, search_voices, suggest_voices
from .session import ConsoleSession

__all__ = [
    "VoiceCatalog",
    "VoiceRecord",
    "load_catalog",
    "CommandDispatcher",
    "parse_command",
    "CompletionEngine",
    "CompletionSession",
    "LineEditor",
    "levenshtein",
    "search_voices",
    "suggest_voices",
    "ConsoleSession",
]
