"""
Error codes and exceptions for the console.

Every failure the console reports carries an ErrorCode so messages stay
greppable: "[E201] Voice 'x' not found."
"""

from enum import IntEnum
from typing import List, Optional


class ErrorCode(IntEnum):
    """Numeric codes shown in error messages."""
    # 1xx: input validation
    MISSING_VOICE_NAME = 101
    MISSING_SEARCH_TERM = 102
    INVALID_VOICES_FORMAT = 103
    INVALID_WAV_ARGUMENT = 104

    # 2xx: catalog lookups
    VOICE_NOT_FOUND = 201
    PREFIX_NOT_FOUND = 202
    SEARCH_NO_MATCH = 203
    CATALOG_EMPTY = 204

    # 3xx: synthesis engine
    ENGINE_UNAVAILABLE = 301
    MODEL_LOAD_FAILED = 302
    SYNTHESIS_FAILED = 303

    # 4xx: configuration
    CONFIG_INVALID = 401
    CATALOG_INVALID = 402


class ConsoleError(Exception):
    """Base class for errors reported to the console user."""

    default_code = ErrorCode.CONFIG_INVALID

    def __init__(self, message: str, code: Optional[ErrorCode] = None,
                 hints: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code
        self.hints = list(hints or [])

    def __str__(self) -> str:
        return f"[E{int(self.code)}] {self.message}"


class ValidationError(ConsoleError):
    """A required argument is missing, empty, or malformed."""
    default_code = ErrorCode.MISSING_VOICE_NAME


class VoiceLookupError(ConsoleError, LookupError):
    """A voice, prefix, or search term matched nothing in the catalog."""
    default_code = ErrorCode.VOICE_NOT_FOUND


class EngineError(ConsoleError):
    """Model load or synthesis failure."""
    default_code = ErrorCode.SYNTHESIS_FAILED


class ConfigError(ConsoleError):
    """Config or catalog file could not be read."""
    default_code = ErrorCode.CONFIG_INVALID
