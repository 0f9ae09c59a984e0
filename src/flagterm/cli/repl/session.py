"""
Terminal session module for the flagterm REPL.

Runs a ReplController in the user's terminal: puts the input into raw
mode with prompt_toolkit, translates key presses into key events and
keeps the asyncio event loop alive until the user leaves.
"""

import asyncio
import logging
from typing import Optional

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.keys import Keys

from flagterm.cli.repl.controller import ReplController
from flagterm.cli.repl.terminal import PromptToolkitTerminal, key_event_from_press

logger = logging.getLogger(__name__)

EXIT_KEYS = (Keys.ControlC, Keys.ControlD)


class TerminalSession:
    """
    Interactive terminal session around a controller.

    Ctrl+C or Ctrl+D ends the session. A command still running at that
    point is allowed to finish.

    Attributes:
        controller: The REPL driven by this session.
        terminal: Sink the controller writes to; receives translated keys.
    """

    def __init__(
        self,
        controller: ReplController,
        terminal: PromptToolkitTerminal,
        input: Optional[Input] = None,
    ) -> None:
        """
        Initialize the session.

        Args:
            controller: Controller constructed with ``terminal`` as its sink.
            terminal: The prompt_toolkit terminal sink.
            input: prompt_toolkit input to read keys from. Defaults to stdin.
        """
        self.controller = controller
        self.terminal = terminal
        self._input = input or create_input()
        self._done: Optional[asyncio.Event] = None

    def _on_keys_ready(self) -> None:
        for press in self._input.read_keys():
            if press.key in EXIT_KEYS:
                logger.debug(f"Exit key {press.key.value!r} pressed")
                if self._done is not None:
                    self._done.set()
                return
            event = key_event_from_press(press)
            if event is not None:
                self.terminal.emit_key(event)

    async def run_async(self) -> None:
        """Run the session until an exit key is pressed."""
        self._done = asyncio.Event()

        with self._input.raw_mode(), self._input.attach(self._on_keys_ready):
            self.controller.start()
            await self._done.wait()

            if self.controller.pending is not None and not self.controller.pending.done():
                await self.controller.pending

        self.terminal.write("\r\nGoodbye!\r\n")

    def run(self) -> None:
        """Run the session on a new event loop."""
        asyncio.run(self.run_async())
