"""
CLI for flagterm.

Provides the interactive shell plus one-shot completion and run commands
for scripting and debugging command trees.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.text import Text

from flagterm.cli.commands import default_commands
from flagterm.cli.errors import CommandDescriptionError, CommandParseError
from flagterm.cli.parser import split_line
from flagterm.cli.plugins import load_command_file
from flagterm.cli.repl.completer import complete as complete_candidates
from flagterm.cli.repl.controller import ReplController
from flagterm.cli.repl.line_buffer import LineBuffer
from flagterm.cli.repl.session import TerminalSession
from flagterm.cli.repl.terminal import PromptToolkitTerminal
from flagterm.cli.router import CommandRunner
from flagterm.cli.tree import CommandGroup, CommandNode
from flagterm.core.config import FlagtermConfig, load_config

# Initialize Rich Console
console = Console()

app = typer.Typer(
    name="flagterm",
    help="Line-editing REPL with tab completion over a command tree",
    add_completion=False,
)

SHELL_DESCRIPTION = "flagterm interactive shell"


class ConsoleLogger:
    """Command logger printing to the Rich console."""

    def __init__(self, output: Console) -> None:
        self.console = output

    def log(self, value: Any) -> None:
        self.console.print(Text.from_ansi(str(value)), highlight=False)

    def error(self, value: Any) -> None:
        self.console.print(Text.from_ansi(str(value), style="red"), highlight=False)


def _configure_logging(config: FlagtermConfig) -> None:
    """Configure logging from the config; a log file keeps the terminal clean."""
    level = getattr(logging, config.logging.level.upper(), logging.WARNING)
    if config.logging.file:
        logging.basicConfig(level=level, format=config.logging.format, filename=config.logging.file)
    else:
        logging.basicConfig(level=level, format=config.logging.format)


def _load_commands(commands_path: Optional[Path]) -> tuple[list[CommandNode], Optional[str]]:
    """
    Build the command list from the demo commands and an optional description file.

    Returns:
        The commands and an error message if the description file was rejected.
    """
    commands = default_commands()
    if commands_path is None:
        return commands, None
    try:
        commands.extend(load_command_file(commands_path))
    except CommandDescriptionError as e:
        return commands, str(e)
    return commands, None


@app.command()
def shell(
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Configuration file (.yaml, .yml or .json)"
    ),
    commands_path: Optional[Path] = typer.Option(
        None, "--commands", "-c", help="Command description file (.yaml, .yml or .json)"
    ),
    exec_line: Optional[str] = typer.Option(
        None, "--exec", "-e", help="Line to run as soon as the shell starts"
    ),
):
    """Start the interactive shell. Ctrl+C or Ctrl+D leaves it."""
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _configure_logging(config)

    commands, load_error = _load_commands(commands_path)
    terminal = PromptToolkitTerminal()
    controller = ReplController(
        terminal,
        commands,
        description=SHELL_DESCRIPTION,
        config=config,
        submit=exec_line is not None,
    )

    if load_error:
        controller.console_error(f"Error: {load_error}")
    if exec_line is not None:
        controller.line.set_value(exec_line)

    TerminalSession(controller, terminal).run()


@app.command()
def complete(
    line: str = typer.Argument(..., help="Partially typed line, cursor at the end"),
    commands_path: Optional[Path] = typer.Option(
        None, "--commands", "-c", help="Command description file (.yaml, .yml or .json)"
    ),
):
    """
    Print the tab completion candidates for a line.

    Only the echo command and described commands are known here; the shell
    built-ins (help, clear, history) exist only inside the shell.
    """
    commands, load_error = _load_commands(commands_path)
    if load_error:
        console.print(f"[bold red]Error:[/bold red] {load_error}", highlight=False)
        raise typer.Exit(1)

    split = LineBuffer(line).split_args_up_to_cursor()
    root = CommandGroup(name="", description=SHELL_DESCRIPTION, subcommands=commands)

    for candidate in complete_candidates(root, split.args, split.search):
        console.print(f"{split.search}{candidate}", markup=False, highlight=False)


@app.command()
def run(
    line: str = typer.Argument(..., help="Command line to run"),
    commands_path: Optional[Path] = typer.Option(
        None, "--commands", "-c", help="Command description file (.yaml, .yml or .json)"
    ),
):
    """
    Run a single command line without entering the shell.

    Only the echo command and described commands are known here; the shell
    built-ins (help, clear, history) exist only inside the shell.
    """
    commands, load_error = _load_commands(commands_path)
    if load_error:
        console.print(f"[bold red]Error:[/bold red] {load_error}", highlight=False)
        raise typer.Exit(1)

    try:
        tokens = split_line(line)
    except CommandParseError as e:
        console.print(f"[bold red]Error:[/bold red] {e}", highlight=False)
        raise typer.Exit(1)

    root = CommandGroup(name="", description=SHELL_DESCRIPTION, subcommands=commands)
    runner = CommandRunner(root, color=console.is_terminal)
    asyncio.run(runner.run(tokens, ConsoleLogger(console), console.width))


if __name__ == "__main__":
    app()
