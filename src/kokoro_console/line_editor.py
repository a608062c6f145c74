"""
Line Editor - single-line input with tab completion.

A two-state machine:

    IDLE ──Tab (matches)──> COMPLETING ──Tab──> COMPLETING (next candidate)
      ^                         │
      └──── any other key ──────┘   (Escape also restores the snapshot)

The cursor always sits at the end of the buffer. Keys only ever append,
delete the last character, or replace the whole line (completion and
revert). handle_key() never touches the terminal itself; it returns a
RenderEffect that read_line() writes out.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .completion import CompletionEngine, CompletionSession, is_completable
from .terminal import ConsoleTerminal, Key, KeyKind, KeySource

ERASE_ONE = "\b \b"


class EditorState(Enum):
    IDLE = "idle"
    COMPLETING = "completing"


@dataclass
class RenderEffect:
    """What the terminal should do in response to one key."""
    output: str = ""
    bell: bool = False
    line: Optional[str] = None  # set only when Enter finalizes the buffer

    @property
    def finished(self) -> bool:
        return self.line is not None


def erase(length: int) -> str:
    """Move back over length cells, blank them, and move back again."""
    return "\b" * length + " " * length + "\b" * length


class LineEditor:
    """Editable input buffer driven one key at a time."""

    def __init__(self, completer: CompletionEngine):
        self.completer = completer
        self.buffer: List[str] = []
        self.session: Optional[CompletionSession] = None

    @property
    def state(self) -> EditorState:
        return EditorState.COMPLETING if self.session is not None else EditorState.IDLE

    @property
    def text(self) -> str:
        return "".join(self.buffer)

    def reset(self) -> None:
        self.buffer = []
        self.session = None

    def _replace(self, text: str) -> str:
        """Swap the whole buffer for text; returns the redraw sequence."""
        redraw = erase(len(self.buffer)) + text
        self.buffer = list(text)
        return redraw

    def handle_key(self, key: Key) -> RenderEffect:
        if key.kind is KeyKind.TAB:
            return self._on_tab()
        if key.kind is KeyKind.ESCAPE:
            return self._on_escape()

        # Anything but Tab/Escape ends completion
        self.session = None

        if key.kind is KeyKind.EOF:
            # Ctrl+D ends input only on an empty line
            if not self.buffer:
                raise EOFError
            return RenderEffect()

        if key.kind is KeyKind.ENTER:
            line = self.text
            self.buffer = []
            return RenderEffect(output="\n", line=line)

        if key.kind is KeyKind.BACKSPACE:
            if not self.buffer:
                return RenderEffect()
            self.buffer.pop()
            return RenderEffect(output=ERASE_ONE)

        if key.kind is KeyKind.CHAR and key.char:
            self.buffer.append(key.char)
            return RenderEffect(output=key.char)

        return RenderEffect()

    def _on_tab(self) -> RenderEffect:
        if self.session is not None:
            candidate = self.session.advance()
            return RenderEffect(output=self._replace(self.completer.render(candidate)))

        text = self.text
        if not is_completable(text):
            return RenderEffect()

        session = self.completer.start(text)
        if session is None:
            return RenderEffect(bell=True)

        self.session = session
        return RenderEffect(output=self._replace(self.completer.render(session.current)))

    def _on_escape(self) -> RenderEffect:
        if self.session is None:
            return RenderEffect()
        snapshot = self.session.snapshot
        self.session = None
        return RenderEffect(output=self._replace(snapshot))


def read_line(editor: LineEditor, keys: KeySource, terminal: ConsoleTerminal) -> str:
    """
    Read one line, echoing and redrawing as keys arrive.

    Raises EOFError on Ctrl+D at an empty line; EOFError and
    KeyboardInterrupt from the key source propagate unchanged.
    """
    editor.reset()
    try:
        while True:
            effect = editor.handle_key(keys.read_key())
            if effect.bell:
                terminal.bell()
            terminal.write(effect.output)
            if effect.finished:
                return effect.line
    finally:
        editor.reset()
