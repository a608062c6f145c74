"""
Edit-distance ranking for voice search and "did you mean" suggestions.

Levenshtein distance is the minimum number of single-character insertions,
deletions, or substitutions needed to turn one string into another.
"""

from typing import Iterable, List, Tuple

from rapidfuzz.distance import Levenshtein

from .catalog import VoiceRecord

# Names within this distance of the term count as matches
MAX_FUZZY_DISTANCE = 2

# How many suggestions "did you mean" shows
SUGGESTION_LIMIT = 3


def levenshtein(source: str, target: str) -> int:
    """Unit-cost edit distance (case-sensitive)."""
    return Levenshtein.distance(source, target)


def _is_match(voice: VoiceRecord, term_lower: str, distance: int) -> bool:
    return (
        term_lower in voice.name.lower()
        or term_lower in voice.language.lower()
        or distance <= MAX_FUZZY_DISTANCE
    )


def rank_voices(term: str, voices: Iterable[VoiceRecord]) -> List[Tuple[VoiceRecord, int]]:
    """
    Rank voices against a term.

    A voice matches when its name or language contains the term (ignoring
    case) or its name is within MAX_FUZZY_DISTANCE edits of the term.
    Matches are sorted by name distance, ascending. The sort is stable, so
    equal distances keep catalog order.

    Returns:
        List of (voice, distance) tuples
    """
    term_lower = term.lower()
    scored = []
    for voice in voices:
        distance = levenshtein(voice.name.lower(), term_lower)
        if _is_match(voice, term_lower, distance):
            scored.append((voice, distance))

    scored.sort(key=lambda pair: pair[1])
    return scored


def search_voices(term: str, voices: Iterable[VoiceRecord]) -> List[VoiceRecord]:
    """Voices matching a search term, best first."""
    return [voice for voice, _ in rank_voices(term, voices)]


def suggest_voices(name: str, voices: Iterable[VoiceRecord], limit: int = SUGGESTION_LIMIT) -> List[VoiceRecord]:
    """Closest voices to a name that failed exact lookup."""
    return search_voices(name, voices)[:limit]
