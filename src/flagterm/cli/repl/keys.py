"""
Key event types for the flagterm REPL.

Key codes follow the browser ``keyCode`` numbering so hosts that already
speak it can pass events through unchanged.
"""

from dataclasses import dataclass
from enum import IntEnum


class KeyCode(IntEnum):
    """Codes of the keys the REPL reacts to; anything else is printable input."""

    BACKSPACE = 8
    TAB = 9
    ENTER = 13
    LEFT = 37
    UP = 38
    RIGHT = 39
    DOWN = 40


# What the terminal echoes for each special key
KEY_SEQUENCES: dict[KeyCode, str] = {
    KeyCode.BACKSPACE: "\x7f",
    KeyCode.TAB: "\t",
    KeyCode.ENTER: "\r",
    KeyCode.LEFT: "\x1b[D",
    KeyCode.UP: "\x1b[A",
    KeyCode.RIGHT: "\x1b[C",
    KeyCode.DOWN: "\x1b[B",
}


@dataclass(frozen=True)
class KeyEvent:
    """
    A single key press.

    Attributes:
        key: Printable character, or the escape sequence of a special key.
        code: Numeric key identifier.
        alt: Whether Alt was held.
        ctrl: Whether Ctrl was held.
        meta: Whether Meta was held.
    """

    key: str
    code: int = 0
    alt: bool = False
    ctrl: bool = False
    meta: bool = False

    @property
    def has_modifier(self) -> bool:
        return self.alt or self.ctrl or self.meta

    @classmethod
    def special(cls, code: KeyCode) -> "KeyEvent":
        """Create the event for a special key."""
        return cls(key=KEY_SEQUENCES[code], code=int(code))

    @classmethod
    def printable(cls, char: str) -> "KeyEvent":
        """Create the event for a printable character (code 0, never a special key)."""
        return cls(key=char)
