"""
Line buffer module for the flagterm REPL.

Holds the line being edited and its cursor, and produces the character
sequences a write-only terminal needs to mirror every change. The
terminal cursor is only ever moved with backspace characters, so the
buffer's cursor and the visual cursor stay in lockstep by construction.
"""

from dataclasses import dataclass, field
from typing import Optional

from flagterm.core.tokenizer import TokenizeResult, tokenize

BACKSPACE = "\b"


@dataclass
class CursorSplit:
    """
    The line up to the cursor, split for completion.

    Attributes:
        args: Arguments that are fully typed.
        search: The partially typed argument under the cursor.
        single_quoted: Whether a single quote is open at the cursor.
        double_quoted: Whether a double quote is open at the cursor.
    """

    args: list[str] = field(default_factory=list)
    search: str = ""
    single_quoted: bool = False
    double_quoted: bool = False


class LineBuffer:
    """
    Mutable text and cursor for the line being edited.

    The cursor is an index into the text and always satisfies
    ``0 <= cursor <= len(text)``.
    """

    def __init__(self, text: str = "", cursor: Optional[int] = None) -> None:
        """
        Initialize the buffer.

        Args:
            text: Initial line content.
            cursor: Initial cursor, clamped into range. Defaults to the end.
        """
        self._text = text
        self._cursor = len(text) if cursor is None else self._clamp(cursor)

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    def _clamp(self, index: int) -> int:
        return min(max(0, index), len(self._text))

    def insert(self, text: str) -> str:
        """
        Insert text at the cursor.

        Args:
            text: Text to insert.

        Returns:
            The inserted text, then the rest of the line redrawn, then one
            backspace per redrawn character to bring the terminal cursor
            back to just after the insertion. Empty if nothing was inserted.
        """
        if not text:
            return ""
        before = self._text[: self._cursor]
        after = self._text[self._cursor:]
        self._text = f"{before}{text}{after}"
        self._cursor += len(text)
        return f"{text}{after}{BACKSPACE * len(after)}"

    def delete(self) -> bool:
        """
        Remove the character before the cursor.

        Returns:
            True if a character was removed, False at the start of the line.
        """
        if self._cursor == 0:
            return False
        self._text = self._text[: self._cursor - 1] + self._text[self._cursor:]
        self._cursor -= 1
        return True

    def move_next(self) -> bool:
        if self._cursor < len(self._text):
            self._cursor += 1
            return True
        return False

    def move_previous(self) -> bool:
        if self._cursor > 0:
            self._cursor -= 1
            return True
        return False

    def reset(self) -> None:
        """Clear the line, used after a successful submission."""
        self._text = ""
        self._cursor = 0

    def set_value(self, text: str) -> str:
        """
        Replace the whole line and put the cursor at its end.

        Args:
            text: New line content.

        Returns:
            Backspaces to the start of the old line, the new text, blanks
            over any leftover old characters, and the backspaces needed to
            place the terminal cursor at the new cursor.
        """
        length_diff = len(text) - len(self._text)
        sequence = BACKSPACE * self._cursor + text

        if length_diff < 0:
            sequence += " " * -length_diff + BACKSPACE * -length_diff

        self._text = text
        self._cursor = len(text)

        sequence += BACKSPACE * (len(text) - self._cursor)
        return sequence

    def render(self) -> str:
        """Sequence that draws the whole line with the cursor in place."""
        return f"{self._text}{BACKSPACE * (len(self._text) - self._cursor)}"

    def split_args(self) -> TokenizeResult:
        """Tokenize the whole line."""
        return tokenize(self._text)

    def split_args_up_to_cursor(self) -> CursorSplit:
        """
        Split the text before the cursor into completed args and a search prefix.

        If the text before the cursor ends with an unquoted space, every
        token is complete and the search prefix is empty. Otherwise the
        last token is the search prefix.
        """
        before_cursor = self._text[: self._cursor]
        result = tokenize(before_cursor)

        if before_cursor.endswith(" ") and result.balanced:
            args = result.tokens
            search = ""
        else:
            args = result.tokens[:-1]
            search = result.tokens[-1] if result.tokens else ""

        return CursorSplit(
            args=args,
            search=search,
            single_quoted=result.single_quoted,
            double_quoted=result.double_quoted,
        )
