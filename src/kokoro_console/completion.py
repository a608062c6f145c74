"""
Tab completion of voice names after the "voice " keyword.

The first Tab snapshots the buffer and collects candidates; each further
Tab cycles through them, wrapping from last to first.
"""

from dataclasses import dataclass
from typing import List, Optional

from .catalog import VoiceCatalog

VOICE_KEYWORD = "voice "


@dataclass
class CompletionSession:
    """Live completion state between the first Tab and the next other key."""
    snapshot: str
    candidates: List[str]
    index: int = 0

    def __post_init__(self):
        if not self.candidates:
            raise ValueError("CompletionSession needs at least one candidate")
        if not 0 <= self.index < len(self.candidates):
            raise ValueError(f"index {self.index} out of range")

    @property
    def current(self) -> str:
        return self.candidates[self.index]

    def advance(self) -> str:
        self.index = (self.index + 1) % len(self.candidates)
        return self.current


def is_completable(text: str) -> bool:
    """True when text starts with "voice " (any case)."""
    return text[:len(VOICE_KEYWORD)].lower() == VOICE_KEYWORD


class CompletionEngine:
    """Produces and cycles voice-name completions from a catalog."""

    def __init__(self, catalog: VoiceCatalog):
        self.catalog = catalog

    def candidates(self, prefix: str) -> List[str]:
        """
        Voice names starting with prefix, ignoring case.

        Sorted on the upper-cased names, so "_" orders after letters;
        names that compare equal keep catalog order.
        """
        prefix_lower = prefix.lower()
        matches = [name for name in self.catalog.names() if name.lower().startswith(prefix_lower)]
        return sorted(matches, key=str.upper)

    def start(self, text: str) -> Optional[CompletionSession]:
        """
        Begin completing text.

        Returns None when text is not a voice command or nothing matches.
        """
        if not is_completable(text):
            return None
        found = self.candidates(text[len(VOICE_KEYWORD):])
        if not found:
            return None
        return CompletionSession(snapshot=text, candidates=found)

    @staticmethod
    def render(candidate: str) -> str:
        return VOICE_KEYWORD + candidate
