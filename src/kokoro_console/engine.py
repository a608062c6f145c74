"""
Synthesis engine interface and the Kokoro adapter.

The console only needs two operations from an engine: load the model once,
then speak text with a voice. Heavy audio libraries (kokoro, sounddevice)
are imported lazily inside KokoroEngine so the rest of the console,
including --list-voices, works without them.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from .catalog import VoiceRecord
from .errors import EngineError, ErrorCode
from .terminal import Colors

logger = logging.getLogger(__name__)

DEFAULT_REPO_ID = "hexgrad/Kokoro-82M"
DEFAULT_SAMPLE_RATE = 24000


class SynthesisEngine(ABC):
    """Abstract base class for synthesis engines."""

    @abstractmethod
    def load(self) -> None:
        """Load the model. Raises EngineError on failure."""

    @abstractmethod
    def speak(self, text: str, voice: VoiceRecord) -> None:
        """Speak text with voice (blocking). Raises EngineError on failure."""


class KokoroEngine(SynthesisEngine):
    """Kokoro-82M via kokoro.KPipeline, played back with sounddevice."""

    def __init__(self, repo_id: str = DEFAULT_REPO_ID, sample_rate: int = DEFAULT_SAMPLE_RATE):
        self.repo_id = repo_id
        self.sample_rate = sample_rate
        self._pipeline_cls = None
        self._pipelines: Dict[str, object] = {}

    @staticmethod
    def lang_code(voice: VoiceRecord) -> str:
        """Kokoro language code: first letter of the voice name."""
        return voice.name[:1].lower() or "a"

    def load(self) -> None:
        try:
            from kokoro import KPipeline
        except ImportError as e:
            raise EngineError(
                "kokoro is not installed (pip install 'kokoro-console[audio]')",
                code=ErrorCode.ENGINE_UNAVAILABLE,
            ) from e

        start = time.perf_counter()
        try:
            # American English pipeline doubles as the model download/warmup
            self._pipelines["a"] = KPipeline(lang_code="a", repo_id=self.repo_id)
        except Exception as e:
            raise EngineError(f"{e}", code=ErrorCode.MODEL_LOAD_FAILED) from e

        self._pipeline_cls = KPipeline
        logger.debug("Kokoro model loaded in %.0fms", (time.perf_counter() - start) * 1000)

    def _pipeline_for(self, voice: VoiceRecord):
        if self._pipeline_cls is None:
            raise EngineError("Model not loaded", code=ErrorCode.ENGINE_UNAVAILABLE)
        code = self.lang_code(voice)
        if code not in self._pipelines:
            # Share the loaded KModel; only the G2P front-end is per language
            self._pipelines[code] = self._pipeline_cls(
                lang_code=code, repo_id=self.repo_id, model=self._pipelines["a"].model
            )
            logger.debug("Created %r pipeline for %s", code, voice.name)
        return self._pipelines[code]

    def speak(self, text: str, voice: VoiceRecord) -> None:
        try:
            import numpy as np
            import sounddevice as sd
        except ImportError as e:
            raise EngineError(
                f"Audio playback unavailable: {e}",
                code=ErrorCode.ENGINE_UNAVAILABLE,
            ) from e

        try:
            pipeline = self._pipeline_for(voice)
            for _, _, audio in pipeline(text, voice=voice.name):
                if audio is None:
                    continue
                samples = np.asarray(audio, dtype=np.float32)
                sd.play(samples, self.sample_rate)
                sd.wait()
        except EngineError:
            raise
        except Exception as e:
            raise EngineError(f"{e}", code=ErrorCode.SYNTHESIS_FAILED) from e


def load_with_retry(
    engine: SynthesisEngine,
    attempts: int = 3,
    delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> SynthesisEngine:
    """
    Load the engine, retrying with a fixed delay between attempts.

    Each failed attempt except the last prints a retry notice. The failure
    from the final attempt propagates to the caller.
    """
    for attempt in range(1, attempts + 1):
        try:
            engine.load()
            return engine
        except EngineError as e:
            if attempt >= attempts:
                raise
            logger.debug("Model load attempt %d/%d failed: %r", attempt, attempts, e)
            print(f"{Colors.YELLOW}Failed to load model (attempt {attempt}/{attempts}): {e.message}{Colors.RESET}")
            print(f"{Colors.DIM}Retrying...{Colors.RESET}")
            sleep(delay)
    return engine


def create_engine(repo_id: Optional[str] = None, sample_rate: Optional[int] = None) -> SynthesisEngine:
    """Build the default engine from config values."""
    return KokoroEngine(
        repo_id=repo_id or DEFAULT_REPO_ID,
        sample_rate=sample_rate or DEFAULT_SAMPLE_RATE,
    )
