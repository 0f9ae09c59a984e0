"""
Command router module for flagterm.

Routes tokenized command lines through the command tree to leaf actions,
handling help output, argument validation and action failures.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from flagterm.cli.errors import UnexpectedNodeError, UsageError
from flagterm.cli.parser import ParsedArgs, parse_leaf_args
from flagterm.cli.tree import CommandGroup, CommandLeaf, CommandNode, navigate_tree
from flagterm.cli.ui import render_help

logger = logging.getLogger(__name__)


class CommandLogger(Protocol):
    """Output channel handed to commands."""

    def log(self, value: Any) -> None: ...

    def error(self, value: Any) -> None: ...


class CommandExecutor(Protocol):
    """Anything that can run a tokenized command line."""

    async def run(self, tokens: list[str], logger: CommandLogger, columns: int) -> None: ...


@dataclass
class CommandContext:
    """
    Everything a leaf action receives.

    Attributes:
        args: Parsed argument groups.
        logger: Output channel for results and errors.
        columns: Terminal width for formatting output.
        command_path: Names leading to the running leaf.
    """

    args: ParsedArgs
    logger: CommandLogger
    columns: int
    command_path: str = ""

    @property
    def positional(self) -> Any:
        return self.args.positional

    @property
    def named(self) -> dict[str, Any]:
        return self.args.named

    @property
    def double_dash(self) -> Any:
        return self.args.double_dash


class CommandRunner:
    """
    Default command executor.

    Navigates the tree with the given tokens, prints help for ``--help``
    and for bare groups, validates leaf arguments and runs the action.
    Errors are reported through the logger; nothing is raised to the caller
    except for a malformed tree.
    """

    def __init__(self, root: CommandNode, color: bool = True) -> None:
        """
        Initialize the runner.

        Args:
            root: Root of the command tree.
            color: Whether help and errors use ANSI styling.
        """
        self.root = root
        self.color = color

    async def run(
        self,
        tokens: list[str],
        logger: CommandLogger,
        columns: int,
        root: Optional[CommandNode] = None,
    ) -> None:
        """
        Run a tokenized command line.

        Args:
            tokens: Arguments of the line.
            logger: Output channel.
            columns: Terminal width.
            root: Tree to run against, defaults to the runner's root.
        """
        if not tokens:
            return

        navigation = navigate_tree(root or self.root, tokens)
        node = navigation.node
        path = navigation.command_path

        if isinstance(node, CommandGroup):
            if not navigation.args or navigation.args == ["--help"]:
                logger.log(render_help(node, path, columns, self.color))
                return
            logger.error(
                f"Error: Unknown command '{navigation.args[0]}'. "
                "Type 'help' for available commands."
            )
            return

        if isinstance(node, CommandLeaf):
            await self._run_leaf(node, navigation.args, path, logger, columns)
            return

        raise UnexpectedNodeError(f"Unexpected kind of command tree node: {type(node).__name__}")

    async def _run_leaf(
        self,
        leaf: CommandLeaf,
        args: list[str],
        path: str,
        output: CommandLogger,
        columns: int,
    ) -> None:
        flag_args = args[: args.index("--")] if "--" in args else args
        if "--help" in flag_args:
            output.log(render_help(leaf, path, columns, self.color))
            return

        try:
            parsed = parse_leaf_args(leaf, args)
        except UsageError as e:
            output.error(f"Error: {e}. Run '{path} --help' for usage.")
            return

        context = CommandContext(args=parsed, logger=output, columns=columns, command_path=path)

        try:
            result = leaf.action(context)
            if inspect.isawaitable(result):
                await result
        except UsageError as e:
            output.error(f"Error: {e}. Run '{path} --help' for usage.")
        except Exception as e:
            logger.error(f"Error executing '{path}': {e}", exc_info=True)
            output.error(f"Error executing '{path}': {e}")
