"""
Configuration - YAML settings for the console.

Looks for a config file in order of precedence:
    1. An explicit path (--config)
    2. ./kokoro_console.yaml (project directory)
    3. ~/.kokoro_console/config.yaml (user config)

Missing files fall back to built-in defaults. Sections present in the file
are merged over the defaults key by key.
"""

import copy
import logging
import threading
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError, ErrorCode

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".kokoro_console"
USER_CONFIG_PATH = CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_PATH = Path("kokoro_console.yaml")

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "voice": {
        "default": "bm_lewis",
    },
    "catalog": {
        "file": None,
    },
    "engine": {
        "load_attempts": 3,
        "retry_delay": 1.0,
        "repo_id": "hexgrad/Kokoro-82M",
        "sample_rate": 24000,
    },
    "display": {
        "colors": True,
        "prompt": "> ",
    },
    "logging": {
        "level": "WARNING",
    },
}


class Config:
    """Sectioned key/value settings backed by a YAML file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = self._find_config(path)
        self._data: Dict[str, Dict[str, Any]] = copy.deepcopy(DEFAULTS)
        self._load()

    def _find_config(self, path: Optional[Path]) -> Path:
        """Find config file in order of precedence."""
        if path is not None:
            return Path(path)
        if PROJECT_CONFIG_PATH.exists():
            return PROJECT_CONFIG_PATH
        return USER_CONFIG_PATH

    def _load(self):
        if not self.path.exists():
            logger.debug("No config at %s, using defaults", self.path)
            return

        try:
            with open(self.path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(
                f"Could not read config {self.path}: {e}",
                code=ErrorCode.CONFIG_INVALID,
            ) from e

        if not isinstance(loaded, dict):
            raise ConfigError(
                f"Config {self.path} must be a mapping of sections",
                code=ErrorCode.CONFIG_INVALID,
            )

        for section, values in loaded.items():
            if not isinstance(values, dict):
                logger.warning("Ignoring config section %r: not a mapping", section)
                continue
            self._data.setdefault(section, {}).update(values)
        logger.debug("Loaded config from %s", self.path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        return self._data.get(section, {}).get(key, default)

    # Convenience accessors

    @property
    def default_voice(self) -> str:
        return self.get("voice", "default") or DEFAULTS["voice"]["default"]

    @property
    def catalog_file(self) -> Optional[Path]:
        value = self.get("catalog", "file")
        return Path(value).expanduser() if value else None

    @property
    def load_attempts(self) -> int:
        return max(1, int(self.get("engine", "load_attempts", 3)))

    @property
    def retry_delay(self) -> float:
        return max(0.0, float(self.get("engine", "retry_delay", 1.0)))

    @property
    def colors_enabled(self) -> bool:
        return bool(self.get("display", "colors", True))

    @property
    def prompt(self) -> str:
        return str(self.get("display", "prompt", "> "))

    @property
    def log_level(self) -> str:
        return str(self.get("logging", "level", "WARNING")).upper()


@dataclass
class SessionConfig:
    """
    Per-session settings threaded through the dispatcher.

    save_wav is a display indicator only: file output is not implemented,
    so turning it on never writes audio anywhere.
    """
    prompt: str = "> "
    save_wav: bool = False
    output_path: Optional[Path] = None

    def prompt_text(self) -> str:
        """Prompt shown before each read, marked while the wav indicator is on."""
        if self.save_wav:
            return f"(wav) {self.prompt}"
        return self.prompt


_config: Optional[Config] = None
_config_lock = threading.Lock()


def get_config(path: Optional[Path] = None) -> Config:
    """Get the shared config instance, loading it on first use."""
    global _config
    with _config_lock:
        if _config is None:
            _config = Config(path)
    return _config


def reload_config(path: Optional[Path] = None) -> Config:
    """Drop the cached config and load it again."""
    global _config
    with _config_lock:
        _config = None
    return get_config(path)
