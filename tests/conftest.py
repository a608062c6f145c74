"""
Shared test fixtures for the kokoro-console test suite.
"""

import io
import sys
from pathlib import Path

import pytest


# === Path Setup ===

# Add tests directory to path (for helpers module)
TESTS_PATH = Path(__file__).parent
sys.path.insert(0, str(TESTS_PATH))

# Add src to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))


from kokoro_console.catalog import VoiceCatalog, VoiceRecord
from kokoro_console.commands import CommandDispatcher, SessionState
from kokoro_console.config import SessionConfig
from kokoro_console.terminal import Colors, ConsoleTerminal

from helpers import FakeEngine


# Tests compare plain text
Colors.disable()


# === Catalog Fixtures ===

@pytest.fixture
def small_catalog():
    """The three-voice catalog used throughout the examples."""
    return VoiceCatalog([
        VoiceRecord("af_heart", "en"),
        VoiceRecord("bf_bella", "en"),
        VoiceRecord("bm_lewis", "en"),
    ])


@pytest.fixture
def mixed_catalog():
    """A catalog spanning languages, with mixed-case names."""
    return VoiceCatalog([
        VoiceRecord("af_heart", "en-us"),
        VoiceRecord("Af_Sky", "en-us"),
        VoiceRecord("am_adam", "en-us"),
        VoiceRecord("bf_emma", "en-gb"),
        VoiceRecord("bm_lewis", "en-gb"),
        VoiceRecord("ef_dora", "es"),
        VoiceRecord("ff_siwis", "fr"),
        VoiceRecord("jf_alpha", "ja"),
        VoiceRecord("zf_xiaobei", "zh"),
    ])


# === Engine / Dispatch Fixtures ===

@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def dispatcher(small_catalog, fake_engine):
    d = CommandDispatcher(small_catalog, fake_engine)
    yield d
    d.close()


@pytest.fixture
def state(small_catalog):
    """Session state starting on af_heart."""
    return SessionState(voice=small_catalog.lookup("af_heart"), config=SessionConfig())


# === I/O Fixtures ===

@pytest.fixture
def screen():
    """A terminal writing into a StringIO buffer."""
    return ConsoleTerminal(stream=io.StringIO())


@pytest.fixture
def catalog_file(tmp_path):
    """Write a small catalog YAML and return its path."""
    path = tmp_path / "voices.yaml"
    path.write_text(
        "voices:\n"
        "  - {name: af_heart, language: en}\n"
        "  - {name: bf_bella, language: en}\n"
        "  - {name: bm_lewis, language: en}\n",
        encoding="utf-8",
    )
    return path


# === Test Markers ===

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
