"""
Terminal sink module for the flagterm REPL.

The REPL treats the terminal as a write-only character stream with an
optional flush callback. This module defines that contract and a
prompt_toolkit-backed implementation for real terminals, plus the
translation from prompt_toolkit key presses to REPL key events.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Optional, Protocol

from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys
from prompt_toolkit.output import Output, create_output

from flagterm.cli.repl.keys import KEY_SEQUENCES, KeyCode, KeyEvent

logger = logging.getLogger(__name__)

KeyHandler = Callable[[KeyEvent], None]
FlushCallback = Callable[[], None]


class TerminalSink(Protocol):
    """What the REPL needs from a terminal."""

    @property
    def columns(self) -> int: ...

    def write(self, sequence: str, on_flush: Optional[FlushCallback] = None) -> None: ...

    def on_key(self, handler: KeyHandler) -> None: ...

    def clear(self) -> None: ...


class PromptToolkitTerminal:
    """
    Terminal sink writing raw sequences through a prompt_toolkit Output.

    Key events are not read here; the session feeding keys calls
    ``emit_key`` for every translated key press.
    """

    def __init__(self, output: Optional[Output] = None) -> None:
        """
        Initialize the terminal.

        Args:
            output: prompt_toolkit output to write to. Defaults to stdout.
        """
        self._output = output or create_output()
        self._handlers: list[KeyHandler] = []

    @property
    def columns(self) -> int:
        return self._output.get_size().columns

    def write(self, sequence: str, on_flush: Optional[FlushCallback] = None) -> None:
        """
        Write a sequence and flush it.

        The flush callback runs on the next event loop iteration when a
        loop is running, immediately otherwise.
        """
        self._output.write_raw(sequence)
        self._output.flush()

        if on_flush is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            on_flush()
            return
        loop.call_soon(on_flush)

    def on_key(self, handler: KeyHandler) -> None:
        self._handlers.append(handler)

    def emit_key(self, event: KeyEvent) -> None:
        """Deliver a key event to every subscribed handler."""
        for handler in list(self._handlers):
            handler(event)

    def clear(self) -> None:
        self._output.erase_screen()
        self._output.cursor_goto(0, 0)
        self._output.flush()


# prompt_toolkit keys that map onto REPL special keys
_SPECIAL_KEYS: dict[Keys, KeyCode] = {
    Keys.ControlH: KeyCode.BACKSPACE,
    Keys.ControlI: KeyCode.TAB,
    Keys.ControlM: KeyCode.ENTER,
    Keys.ControlJ: KeyCode.ENTER,
    Keys.Left: KeyCode.LEFT,
    Keys.Up: KeyCode.UP,
    Keys.Right: KeyCode.RIGHT,
    Keys.Down: KeyCode.DOWN,
}


def key_event_from_press(press: KeyPress) -> Optional[KeyEvent]:
    """
    Translate a prompt_toolkit key press into a REPL key event.

    Args:
        press: Key press read from a prompt_toolkit input.

    Returns:
        The key event, or None for keys the REPL does not handle.
    """
    key = press.key

    if key in _SPECIAL_KEYS:
        code = _SPECIAL_KEYS[key]
        return KeyEvent(key=KEY_SEQUENCES[code], code=int(code))

    if key == Keys.BracketedPaste:
        # Single-line editing: pasted line breaks become spaces
        return KeyEvent(key=" ".join(press.data.splitlines()))

    if isinstance(key, Keys):
        logger.debug(f"Ignoring key {key.value!r}")
        return None

    return KeyEvent.printable(key)
