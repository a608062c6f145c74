"""
Terminal driver - raw key delivery and echo primitives.

TerminalKeySource reads one key at a time from a TTY in cbreak mode.
LineKeySource feeds keys from a line-oriented stream (pipes, files) so the
console still works when stdin is not a terminal.
"""

import os
import select
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TextIO


# === Terminal Colors ===

class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Foreground
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"

    @classmethod
    def disable(cls):
        """Disable colors (for non-TTY output)."""
        for attr in dir(cls):
            if not attr.startswith('_') and attr.isupper():
                setattr(cls, attr, "")


# Disable colors if not a TTY
if not sys.stdout.isatty():
    Colors.disable()


# === Keys ===

class KeyKind(Enum):
    """Kinds of key events the line editor understands."""
    CHAR = "char"
    ENTER = "enter"
    BACKSPACE = "backspace"
    TAB = "tab"
    ESCAPE = "escape"
    EOF = "eof"  # Ctrl+D
    OTHER = "other"  # arrows, function keys, unhandled control chars


@dataclass(frozen=True)
class Key:
    kind: KeyKind
    char: str = ""

    @classmethod
    def from_char(cls, ch: str) -> "Key":
        """Classify a single decoded character."""
        if ch in ("\r", "\n"):
            return cls(KeyKind.ENTER)
        if ch in ("\x7f", "\x08"):
            return cls(KeyKind.BACKSPACE)
        if ch == "\t":
            return cls(KeyKind.TAB)
        if ch == "\x1b":
            return cls(KeyKind.ESCAPE)
        if ch == "\x04":
            return cls(KeyKind.EOF)
        if ch.isprintable():
            return cls(KeyKind.CHAR, ch)
        return cls(KeyKind.OTHER, ch)


ENTER = Key(KeyKind.ENTER)
BACKSPACE = Key(KeyKind.BACKSPACE)
TAB = Key(KeyKind.TAB)
ESCAPE = Key(KeyKind.ESCAPE)
CTRL_D = Key(KeyKind.EOF)


class KeySource:
    """
    Blocking source of key events.

    read_key() raises EOFError when input is exhausted. Ctrl+D arrives as a
    KeyKind.EOF key; the line editor decides whether it ends input. Ctrl+C
    surfaces as KeyboardInterrupt.
    """

    def read_key(self) -> Key:
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self) -> None:
        pass


class TerminalKeySource(KeySource):
    """Reads keys straight from a TTY file descriptor in cbreak mode."""

    # Time to wait for the rest of an escape sequence after ESC
    ESCAPE_TIMEOUT = 0.05

    def __init__(self, fd: Optional[int] = None):
        import termios
        import tty

        self._termios = termios
        self._tty = tty
        self.fd = sys.stdin.fileno() if fd is None else fd
        self._old_settings = termios.tcgetattr(self.fd)
        # Ctrl+C still raises KeyboardInterrupt: cbreak keeps ISIG
        tty.setcbreak(self.fd)

    def close(self) -> None:
        if self._old_settings is not None:
            self._termios.tcsetattr(self.fd, self._termios.TCSADRAIN, self._old_settings)
            self._old_settings = None

    def _pending(self) -> bool:
        ready, _, _ = select.select([self.fd], [], [], self.ESCAPE_TIMEOUT)
        return bool(ready)

    def _read_char(self) -> str:
        raw = os.read(self.fd, 1)
        if not raw:
            raise EOFError
        # Pull continuation bytes of a multi-byte UTF-8 character
        first = raw[0]
        extra = 0
        if first >= 0xF0:
            extra = 3
        elif first >= 0xE0:
            extra = 2
        elif first >= 0xC0:
            extra = 1
        for _ in range(extra):
            raw += os.read(self.fd, 1)
        return raw.decode("utf-8", errors="replace")

    def read_key(self) -> Key:
        ch = self._read_char()

        if ch == "\x1b" and self._pending():
            # Escape sequence (arrow keys etc.): swallow it whole
            seq = self._read_char()
            if seq in ("[", "O"):
                while self._pending():
                    tail = self._read_char()
                    if tail.isalpha() or tail == "~":
                        break
            return Key(KeyKind.OTHER, "\x1b" + seq)

        return Key.from_char(ch)


class LineKeySource(KeySource):
    """Feeds keys from a line-oriented stream, one character at a time."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdin
        self._pending = ""

    def read_key(self) -> Key:
        if not self._pending:
            line = self.stream.readline()
            if not line:
                raise EOFError
            if not line.endswith("\n"):
                line += "\n"
            self._pending = line
        ch, self._pending = self._pending[0], self._pending[1:]
        return Key.from_char(ch)


def open_key_source() -> KeySource:
    """Pick the key source for the current stdin."""
    if sys.stdin.isatty():
        return TerminalKeySource()
    return LineKeySource()


class ConsoleTerminal:
    """Echo and redraw primitives over a text stream."""

    def __init__(self, stream: Optional[TextIO] = None, echo: bool = True):
        self.stream = stream if stream is not None else sys.stdout
        self.echo = echo

    def write(self, text: str) -> None:
        if not text or not self.echo:
            return
        self.stream.write(text)
        self.stream.flush()

    def bell(self) -> None:
        if self.echo:
            self.stream.write("\a")
            self.stream.flush()
