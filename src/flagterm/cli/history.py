"""
History store module for flagterm.

Keeps the lines submitted during a REPL session and lets the user walk
back and forth through them with the arrow keys without losing the line
they were typing.
"""

from collections.abc import Iterable
from typing import Optional


class HistoryStore:
    """
    Navigable, deduplicating history of submitted lines.

    The last slot of ``entries`` is always a draft slot holding the line
    being edited. Navigating stores the caller's current text in the slot
    under the cursor before moving, so edits survive a round trip through
    history.

    Attributes:
        _entries: Submitted lines, oldest first, plus the trailing draft slot.
        _index: Position of the slot currently shown.
    """

    def __init__(self, initial_history: Iterable[str] = (), current_line: str = ""):
        """
        Initialize the history store.

        Args:
            initial_history: Lines to preload, oldest first. Lines are
                             trimmed and empty ones dropped.
            current_line: Initial content of the draft slot.
        """
        self._entries: list[str] = [""]
        self._index = 0
        self.set_history(*(line.strip() for line in initial_history))
        self.current(current_line)

    @property
    def entries(self) -> list[str]:
        """Copy of all slots including the draft slot."""
        return self._entries.copy()

    @property
    def cursor(self) -> int:
        return self._index

    def current(self, line: Optional[str] = None) -> str:
        """
        Read the slot under the cursor, overwriting it first if a line is given.

        Args:
            line: New content for the slot, or None to only read it.

        Returns:
            The content of the slot under the cursor.
        """
        if line is not None:
            self._entries[self._index] = line
        return self._entries[self._index]

    def submit(self, line: str) -> None:
        """
        Record a submitted line.

        The trimmed line becomes the most recent entry; an earlier copy of
        it is removed rather than duplicated. The cursor moves to a fresh
        draft slot.

        Args:
            line: The submitted line.
        """
        trimmed = line.strip()
        self.current(trimmed)

        self.set_history(*(entry for entry in self._entries if entry != trimmed))

        if self.current() != trimmed:
            self.set_history(*self._entries, trimmed)

    def previous(self, current_line: str) -> str:
        """
        Move one entry back in time.

        Args:
            current_line: The text currently in the line buffer.

        Returns:
            The entry under the cursor after moving.
        """
        self.current(current_line)
        if self._index > 0:
            self._index -= 1
        return self.current()

    def next(self, current_line: str) -> str:
        """
        Move one entry forward in time.

        Args:
            current_line: The text currently in the line buffer.

        Returns:
            The entry under the cursor after moving.
        """
        self.current(current_line)
        if self._index < self.index_of_last_line():
            self._index += 1
        return self.current()

    def list(self) -> list[str]:
        """
        Get the submitted lines for display.

        Returns:
            Non-empty entries, oldest first.
        """
        return [line for line in self._entries if line]

    def index_of_last_line(self) -> int:
        return len(self._entries) - 1

    def set_history(self, *lines: str) -> None:
        """
        Replace all entries and move the cursor to a new empty draft slot.

        Args:
            lines: Entries, oldest first. Empty lines are dropped and only the
                   most recent copy of a repeated line is kept.
        """
        latest = {line: index for index, line in enumerate(lines) if line}
        self._entries = [line for index, line in enumerate(lines) if latest.get(line) == index]
        self._entries.append("")
        self._index = self.index_of_last_line()
