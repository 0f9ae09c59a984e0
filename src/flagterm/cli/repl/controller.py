"""
REPL controller module for flagterm.

Provides the state machine that turns key events into line edits, history
navigation, tab completion and command runs, rendering everything onto a
write-only terminal sink.
"""

import asyncio
import logging
import re
import traceback
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any, Optional

from flagterm.cli.errors import UnexpectedNodeError
from flagterm.cli.history import HistoryStore
from flagterm.cli.parser import format_command_line
from flagterm.cli.repl.completer import CommandCompleter
from flagterm.cli.repl.keys import KeyCode, KeyEvent
from flagterm.cli.repl.line_buffer import BACKSPACE, LineBuffer
from flagterm.cli.repl.terminal import TerminalSink
from flagterm.cli.router import CommandContext, CommandExecutor, CommandRunner
from flagterm.cli.tree import ArgGroup, CommandGroup, CommandLeaf, CommandNode, navigate_tree
from flagterm.cli.ui import render_error, render_help, render_prompt, render_welcome_banner
from flagterm.core.config import FlagtermConfig

logger = logging.getLogger(__name__)

CRLF = "\r\n"

# A line feed not already preceded by a carriage return
_BARE_LINE_FEED = re.compile(r"(?<!\r)\n")


class ReplState(str, Enum):
    """What the controller is doing. Key events are only handled when idle."""

    IDLE = "idle"
    WRITING_LINE = "writing_line"
    RUNNING_COMMAND = "running_command"


class ReplLogger:
    """Logger handed to commands; writes through the controller."""

    def __init__(self, controller: "ReplController") -> None:
        self._controller = controller

    def log(self, value: Any) -> None:
        self._controller.console_log(value)

    def error(self, value: Any) -> None:
        self._controller.console_error(value)


class ReplController:
    """
    Interactive REPL session controller.

    Owns the line buffer and the history, dispatches key events, and runs
    submitted lines through the command executor. While a history line is
    being written or a command is running, key events are dropped.

    Attributes:
        terminal: Sink all output is written to.
        config: Prompt, completion and logging settings.
        root: Command tree including the built-in commands.
        line: The line being edited.
        history: Lines submitted during the session.
        executor: Runs tokenized lines.
        logger: Output channel handed to commands.
        pending: The task of the command run in progress, if any.
    """

    def __init__(
        self,
        terminal: TerminalSink,
        subcommands: Sequence[CommandNode] = (),
        description: str = "",
        executor: Optional[CommandExecutor] = None,
        config: Optional[FlagtermConfig] = None,
        submit: bool = False,
        history: Iterable[str] = (),
    ):
        """
        Initialize the REPL controller.

        Args:
            terminal: Terminal sink to render to and receive keys from.
            subcommands: Host commands offered at the top level.
            description: Description of the root command group.
            executor: Command executor. Defaults to a CommandRunner over the tree.
            config: Settings. Defaults are loaded when None.
            submit: Run the current line right after start instead of
                    showing the welcome banner.
            history: Lines to preload into history, oldest first.
        """
        self.terminal = terminal
        self.config = config or FlagtermConfig()
        self.submit = submit
        self.line = LineBuffer()
        self.history = HistoryStore(history)
        self.pending: Optional[asyncio.Task] = None
        self._state = ReplState.IDLE
        self._color = self.config.prompt.color

        taken = {node.name for node in subcommands}
        builtins = [node for node in self._builtin_commands() if node.name not in taken]
        self.root = CommandGroup(
            name="",
            description=description,
            subcommands=[*subcommands, *builtins],
        )

        self.completer = CommandCompleter(self.root)
        self.executor: CommandExecutor = executor or CommandRunner(self.root, color=self._color)
        self.logger = ReplLogger(self)

    @property
    def state(self) -> ReplState:
        return self._state

    def _set_state(self, state: ReplState) -> None:
        if state is not self._state:
            logger.debug(f"REPL state {self._state.value} -> {state.value}")
        self._state = state

    def _builtin_commands(self) -> list[CommandNode]:
        """Create the commands every REPL offers."""
        return [
            CommandLeaf(
                name="clear",
                description="Clears the terminal",
                action=self._clear_action,
            ),
            CommandLeaf(
                name="help",
                description="Lists the commands available for you to use",
                action=self._help_action,
                positional_arg_group=ArgGroup(
                    description="Command to describe",
                    placeholder="<command>",
                    completer=self._suggest_command_names,
                ),
            ),
            CommandLeaf(
                name="history",
                description="Lists the lines entered in this session",
                action=self._history_action,
            ),
        ]

    def _clear_action(self, context: CommandContext) -> None:
        self.terminal.clear()

    def _help_action(self, context: CommandContext) -> None:
        navigation = navigate_tree(self.root, context.positional or [])
        if navigation.args:
            context.logger.error(
                f"Error: Unknown command '{navigation.args[0]}'. "
                "Type 'help' for available commands."
            )
            return
        context.logger.log(
            render_help(navigation.node, navigation.command_path, context.columns, self._color)
        )

    def _history_action(self, context: CommandContext) -> None:
        entries = self.history.list()
        width = len(str(len(entries)))
        for number, entry in enumerate(entries, start=1):
            context.logger.log(f"{number:>{width}}  {entry}")

    def _suggest_command_names(self, args: list[str], search: str) -> list[str]:
        return [sub.name for sub in self.root.visible_subcommands]

    def start(self) -> None:
        """
        Subscribe to key events and show the prompt.

        In submit mode the current line is run immediately, which needs a
        running event loop.
        """
        self.terminal.on_key(self.handle_key_event)
        if not self.submit and self.config.prompt.welcome:
            self.console_log(render_welcome_banner(self.terminal.columns))
        self.prompt()
        if self.submit:
            self.run_current_line()

    def prompt(self) -> None:
        """Draw the prompt followed by the line buffer."""
        symbol = render_prompt(self.config.prompt.symbol, self._color)
        self.terminal.write(f"{symbol}{self.line.render()}")

    def handle_key_event(self, event: KeyEvent) -> None:
        """
        Handle one key event.

        Events arriving while a line is being written or a command is
        running are dropped, not queued.

        Args:
            event: The key press.
        """
        if self._state is not ReplState.IDLE:
            logger.debug(f"Dropping key {event.key!r} while {self._state.value}")
            return

        code = event.code

        if code == KeyCode.BACKSPACE:
            if self.line.delete():
                self.terminal.write(self._erase_sequence())
        elif code == KeyCode.TAB:
            self.auto_complete()
        elif code == KeyCode.ENTER:
            self.run_current_line()
        elif code == KeyCode.LEFT:
            if self.line.move_previous():
                self.terminal.write(event.key)
        elif code == KeyCode.RIGHT:
            if self.line.move_next():
                self.terminal.write(event.key)
        elif code == KeyCode.UP:
            self.set_line(self.history.previous(self.line.text))
        elif code == KeyCode.DOWN:
            self.set_line(self.history.next(self.line.text))
        elif not event.has_modifier:
            self.add_to_line(event.key)

    def _erase_sequence(self) -> str:
        """
        Sequence erasing the character just deleted before the cursor.

        At the end of the line this is backspace, space, backspace; in the
        middle the rest of the line is redrawn one column to the left.
        """
        rest = self.line.text[self.line.cursor:]
        return f"{BACKSPACE}{rest} {BACKSPACE * (len(rest) + 1)}"

    def add_to_line(self, text: str) -> None:
        """Insert text at the cursor and render the change."""
        sequence = self.line.insert(text)
        if sequence:
            self.terminal.write(sequence)

    def set_line(self, text: str) -> None:
        """
        Replace the line and render it.

        Key events are dropped until the terminal confirms the write.
        """
        self._set_state(ReplState.WRITING_LINE)
        sequence = self.line.set_value(text)
        try:
            self.terminal.write(sequence, self._finish_writing_line)
        except Exception:
            self._set_state(ReplState.IDLE)
            raise

    def _finish_writing_line(self) -> None:
        if self._state is ReplState.WRITING_LINE:
            self._set_state(ReplState.IDLE)

    def set_and_run_args(self, args: Sequence[str]) -> None:
        """Replace the line with the given arguments and run it."""
        self.terminal.write(self.line.set_value(format_command_line(args)))
        self.run_current_line()

    def run_current_line(self) -> None:
        """
        Submit the line: record it, tokenize it and start its command.

        A line with an unbalanced quote is reported and left in the buffer
        for correction. Otherwise the command runs as a task on the running
        event loop; when it finishes, successfully or not, the buffer is
        cleared and the prompt redrawn.
        """
        self.terminal.write(CRLF)
        self.history.submit(self.line.text)

        result = self.line.split_args()
        if not result.balanced:
            kind = "single" if result.single_quoted else "double"
            self.console_error(f"Error: {kind} quotes are not balanced")
            self.prompt()
            return

        loop = asyncio.get_running_loop()
        self._set_state(ReplState.RUNNING_COMMAND)
        self.pending = loop.create_task(self._run_command(result.tokens))

    async def _run_command(self, tokens: list[str]) -> None:
        try:
            await self.executor.run(tokens, self.logger, self.terminal.columns)
        except Exception as e:
            logger.error(f"Command {tokens!r} failed: {e}", exc_info=True)
            self.console_error(f"Error: {e}")
        finally:
            self.line.reset()
            self._set_state(ReplState.IDLE)
            self.prompt()

    def auto_complete(self) -> None:
        """
        Complete the argument under the cursor.

        A single candidate is inserted (closing an open quote if the
        candidate completes the argument); several candidates are listed
        under the prompt, which is then redrawn.
        """
        split = self.line.split_args_up_to_cursor()

        try:
            candidates = self.completer.get_candidates(split.args, split.search)
        except UnexpectedNodeError as e:
            logger.debug(f"Completion aborted: {e}")
            self._report_completion_error(e)
            return
        except Exception as e:
            logger.error(f"Completion for {split.args!r} failed: {e}", exc_info=True)
            self._report_completion_error(e)
            return

        if not candidates:
            return

        if len(candidates) == 1:
            candidate = candidates[0]
            if candidate.endswith(" "):
                stem = candidate[:-1]
                if split.single_quoted:
                    candidate = f"{stem}' "
                elif split.double_quoted:
                    candidate = f'{stem}" '
            self.add_to_line(candidate)
            return

        self.console_log("")
        indent = " " * self.config.completion.indent
        for candidate in candidates:
            self.console_log(f"{indent}{split.search}{candidate}")
        self.prompt()

    def _report_completion_error(self, error: Exception) -> None:
        self.console_log("")
        self.console_error(f"Error: {error}")
        self.prompt()

    def console_log(self, value: Any) -> None:
        """Write a value on its own line(s)."""
        self.terminal.write(self._format_output(value))

    def console_error(self, value: Any) -> None:
        """Write a value on its own line(s), styled as an error."""
        logger.info(f"REPL error output: {value}")
        text = self._format_output(value)
        self.terminal.write(render_error(text[: -len(CRLF)], self._color) + CRLF)

    @staticmethod
    def _format_output(value: Any) -> str:
        """
        Normalize output for a raw terminal.

        Exceptions render as their traceback. Every line feed gets a
        carriage return, and the text always ends with a line break.
        """
        if isinstance(value, BaseException):
            text = "".join(traceback.format_exception(type(value), value, value.__traceback__))
        else:
            text = value if isinstance(value, str) else str(value)

        text = _BARE_LINE_FEED.sub(CRLF, text)
        if not text.endswith(CRLF):
            text += CRLF
        return text
