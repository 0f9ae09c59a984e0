"""
UI components module for flagterm.

Renders prompts, banners, errors and help tables into plain strings
(with ANSI styling when colour is enabled) so they can be written to a
write-only terminal sink. Uses the Rich library for layout and styling.
"""

import io
from typing import TYPE_CHECKING

from rich.color import ColorSystem
from rich.console import Console, RenderableType
from rich.style import Style
from rich.table import Table
from rich.text import Text

from flagterm.cli.tree import CommandGroup, CommandLeaf

if TYPE_CHECKING:
    from flagterm.cli.tree import CommandNode


HELP_HINT = "[?] Need help? Type 'help' to see available commands"


def style_text(text: str, style: str, color: bool = True) -> str:
    """
    Wrap text in ANSI codes for a Rich style definition.

    Args:
        text: Text to style.
        style: Rich style definition, e.g. "bold red".
        color: When False the text is returned unchanged.

    Returns:
        The styled text.
    """
    if not color or not text:
        return text
    return Style.parse(style).render(text, color_system=ColorSystem.STANDARD)


def render_to_string(renderable: RenderableType, columns: int, color: bool = True) -> str:
    """
    Render any Rich renderable into a string.

    Args:
        renderable: Table, Text or other Rich renderable.
        columns: Width to lay the output out for.
        color: Whether to emit ANSI styling.

    Returns:
        The rendered text, lines separated by "\\n".
    """
    console = Console(
        file=io.StringIO(),
        width=max(columns, 20),
        force_terminal=color,
        color_system="standard" if color else None,
        highlight=False,
    )
    with console.capture() as capture:
        console.print(renderable)
    return capture.get()


def render_prompt(symbol: str, color: bool = True) -> str:
    """
    Generate the prompt string written before the line buffer.

    Returns:
        Prompt symbol (green when colour is on) followed by a space.
    """
    return f"{style_text(symbol, 'green', color)} "


def render_welcome_banner(columns: int) -> str:
    """
    Render the welcome banner: a help hint between two full-width rules.

    Args:
        columns: Terminal width.
    """
    rule = "-" * columns
    return f"{rule}\n{HELP_HINT}\n{rule}"


def render_error(message: str, color: bool = True) -> str:
    """Render an error message in a visually distinct red."""
    return style_text(message, "red", color)


def render_help(
    node: "CommandNode",
    command_path: str,
    columns: int,
    color: bool = True,
) -> str:
    """
    Render usage and help information for a group or a leaf.

    Args:
        node: Node to describe.
        command_path: Names leading to the node, used in the usage line.
        columns: Terminal width.
        color: Whether to emit ANSI styling.

    Returns:
        The help text.
    """
    prefix = f"{command_path} " if command_path else ""

    if isinstance(node, CommandGroup):
        usage = Text()
        usage.append("Usage: ", style="bold")
        usage.append(f"{prefix}<subcommand> ...")
        parts: list[RenderableType] = [usage]
        if node.description:
            parts.append(Text(node.description))

        table = Table(
            title="Subcommands",
            title_style="bold cyan",
            border_style="blue",
            show_header=True,
            header_style="bold white",
        )
        table.add_column("Command", style="green", no_wrap=True)
        table.add_column("Description", style="white")
        for sub in node.visible_subcommands:
            name = sub.name if isinstance(sub, CommandLeaf) else f"{sub.name} ..."
            table.add_row(name, sub.description)
        parts.append(table)
        return "".join(render_to_string(part, columns, color) for part in parts)

    usage = Text()
    usage.append("Usage: ", style="bold")
    usage.append(_leaf_usage(node, command_path))
    parts = [usage]
    if node.description:
        parts.append(Text(node.description))

    rows = _leaf_argument_rows(node)
    if rows:
        table = Table(
            title="Arguments",
            title_style="bold cyan",
            border_style="blue",
            show_header=True,
            header_style="bold white",
        )
        table.add_column("Argument", style="magenta", no_wrap=True)
        table.add_column("Description", style="white")
        table.add_column("Required", style="dim cyan")
        for row in rows:
            table.add_row(*row)
        parts.append(table)

    return "".join(render_to_string(part, columns, color) for part in parts)


def _leaf_usage(leaf: CommandLeaf, command_path: str = "") -> str:
    """Build a leaf's usage line: its command path followed by its argument groups."""
    pieces: list[str] = []

    group = leaf.positional_arg_group
    if group is not None:
        pieces.append(f"[{group.placeholder}]" if group.optional else group.placeholder)

    for name, named_group in leaf.named_arg_groups.items():
        flag = f"--{name}" if named_group.is_flag else f"--{name} {named_group.placeholder}"
        pieces.append(f"[{flag}]" if named_group.optional else flag)

    group = leaf.double_dash_arg_group
    if group is not None:
        dd = f"-- {group.placeholder}"
        pieces.append(f"[{dd}]" if group.optional else dd)

    return " ".join([command_path or leaf.name, *pieces])


def _leaf_argument_rows(leaf: CommandLeaf) -> list[tuple[str, str, str]]:
    rows = []
    if leaf.positional_arg_group is not None:
        group = leaf.positional_arg_group
        rows.append((group.placeholder, group.description, "no" if group.optional else "yes"))
    for name, group in leaf.named_arg_groups.items():
        rows.append((f"--{name}", group.description, "no" if group.optional else "yes"))
    if leaf.double_dash_arg_group is not None:
        group = leaf.double_dash_arg_group
        rows.append(("--", group.description, "no" if group.optional else "yes"))
    return rows
