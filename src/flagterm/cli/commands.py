"""
Demo commands shipped with flagterm.

Every tree built by the CLI includes these alongside described commands.
"""

from flagterm.cli.router import CommandContext
from flagterm.cli.tree import ArgGroup, CommandLeaf, CommandNode
from flagterm.cli.ui import style_text

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def _echo(context: CommandContext) -> None:
    words = list(context.positional or [])
    words.extend(context.double_dash or [])
    text = " ".join(words)

    if context.named.get("upper"):
        text = text.upper()
    color = context.named.get("color")
    if color:
        text = style_text(text, color)

    context.logger.log(text)


def create_echo_command() -> CommandLeaf:
    """Create ``echo [<words>...] [--color <color>] [--upper] [-- <words>...]``."""
    return CommandLeaf(
        name="echo",
        description="Prints its arguments",
        action=_echo,
        positional_arg_group=ArgGroup(description="Words to print", placeholder="<words>..."),
        named_arg_groups={
            "color": ArgGroup(
                description="Colour of the output",
                placeholder="<color>",
                choices=COLORS,
                variadic=False,
            ),
            "upper": ArgGroup(description="Print in upper case", is_flag=True),
        },
        double_dash_arg_group=ArgGroup(
            description="Words printed verbatim, even if they look like flags",
            placeholder="<words>...",
        ),
    )


def default_commands() -> list[CommandNode]:
    return [create_echo_command()]
