"""
Voice Catalog - the static registry of available voices.

Voices are loaded from YAML (the bundled voices.yaml by default) and kept
in file order. Lookups by name are exact and case-sensitive.
"""

import logging
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .errors import ConfigError, ErrorCode

logger = logging.getLogger(__name__)

BUNDLED_CATALOG_PATH = Path(__file__).parent / "voices.yaml"


@dataclass(frozen=True)
class VoiceRecord:
    """A single voice: unique name plus language label."""
    name: str
    language: str

    def describe(self) -> str:
        return f"{self.name} ({self.language})"


class VoiceCatalog:
    """Ordered, read-only collection of VoiceRecords."""

    def __init__(self, voices: Sequence[VoiceRecord]):
        self._voices: List[VoiceRecord] = list(voices)
        self._by_name = {v.name: v for v in self._voices}

    def __iter__(self) -> Iterator[VoiceRecord]:
        return iter(self._voices)

    def __len__(self) -> int:
        return len(self._voices)

    def __bool__(self) -> bool:
        return bool(self._voices)

    @property
    def voices(self) -> List[VoiceRecord]:
        return list(self._voices)

    def names(self) -> List[str]:
        return [v.name for v in self._voices]

    def lookup(self, name: str) -> Optional[VoiceRecord]:
        """Exact, case-sensitive lookup."""
        return self._by_name.get(name)

    def sorted_for_display(self, voices: Optional[Sequence[VoiceRecord]] = None) -> List[VoiceRecord]:
        """Sort by language, then by name."""
        if voices is None:
            voices = self._voices
        return sorted(voices, key=lambda v: (v.language, v.name))

    def filter_by_prefix(self, prefix: str) -> List[VoiceRecord]:
        """Voices whose name starts with prefix, ignoring case. Catalog order."""
        prefix_lower = prefix.lower()
        return [v for v in self._voices if v.name.lower().startswith(prefix_lower)]

    def default_voice(self, preferred: str = "bm_lewis") -> Optional[VoiceRecord]:
        """
        Resolve the startup voice.

        Returns the preferred voice when present, otherwise the first catalog
        entry, or None for an empty catalog.
        """
        voice = self.lookup(preferred)
        if voice is not None:
            return voice
        if self._voices:
            logger.debug("Preferred voice %r missing, using %r", preferred, self._voices[0].name)
            return self._voices[0]
        return None


def parse_catalog(data) -> VoiceCatalog:
    """
    Build a catalog from parsed YAML.

    Accepts either {"voices": [...]} or a bare list. Each entry is a mapping
    with "name" and "language".
    """
    if isinstance(data, dict):
        entries = data.get("voices", [])
    elif data is None:
        entries = []
    else:
        entries = data

    if not isinstance(entries, list):
        raise ConfigError("Catalog 'voices' must be a list", code=ErrorCode.CATALOG_INVALID)

    voices = []
    seen = set()
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ConfigError(f"Catalog entry {i}: missing 'name'", code=ErrorCode.CATALOG_INVALID)
        name = str(entry["name"]).strip()
        if name in seen:
            raise ConfigError(f"Duplicate voice name: '{name}'", code=ErrorCode.CATALOG_INVALID)
        seen.add(name)
        voices.append(VoiceRecord(name=name, language=str(entry.get("language", "")).strip()))

    return VoiceCatalog(voices)


def load_catalog(path: Optional[Path] = None) -> VoiceCatalog:
    """Load a catalog from YAML. Uses the bundled voice list when path is None."""
    catalog_path = Path(path) if path is not None else BUNDLED_CATALOG_PATH
    try:
        with open(catalog_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(
            f"Could not read voice catalog {catalog_path}: {e}",
            code=ErrorCode.CATALOG_INVALID,
        ) from e

    catalog = parse_catalog(data)
    logger.debug("Loaded %d voices from %s", len(catalog), catalog_path)
    return catalog
