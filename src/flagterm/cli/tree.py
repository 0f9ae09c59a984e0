"""
Command tree module for flagterm.

Defines the hierarchical command namespace walked by the executor and by
tab completion: groups hold subcommands, leaves hold argument groups and
an action. A node is always exactly one of these two kinds.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Union

from flagterm.cli.errors import UsageError

if TYPE_CHECKING:
    from flagterm.cli.router import CommandContext

# Returns raw suggestions for a partially typed value.
ArgCompleter = Callable[[list[str], str], Sequence[str]]

# A leaf action. May return an awaitable.
CommandAction = Callable[["CommandContext"], Any]


@dataclass
class ArgGroup:
    """
    A group of command-line argument values.

    The same type serves as a named group (``--flag values...``), the
    positional group and the double-dash group (everything after ``--``);
    which one it is depends on where the leaf stores it.

    Attributes:
        description: Brief description for help output.
        optional: Whether the group may be omitted.
        placeholder: Value placeholder shown in usage lines.
        choices: Allowed values, also used as completion suggestions.
        completer: Custom suggestion callback, takes precedence over choices.
        variadic: Whether the group accepts more than one value.
        is_flag: Whether the group is a boolean switch taking no values.
    """

    description: str = ""
    optional: bool = True
    placeholder: str = "<value>"
    choices: Optional[list[str]] = None
    completer: Optional[ArgCompleter] = None
    variadic: bool = True
    is_flag: bool = False

    def suggest(self, args: list[str], search: str) -> list[str]:
        """
        Return raw completion suggestions for this group.

        Args:
            args: Values already given to the group.
            search: The partially typed value.

        Returns:
            Unfiltered suggestions; callers filter them by prefix.
        """
        if self.completer is not None:
            return list(self.completer(args, search))
        if self.choices:
            return list(self.choices)
        return []

    def parse(self, values: Optional[list[str]], label: str) -> Any:
        """
        Validate and convert the raw values given to this group.

        Args:
            values: Raw values, or None if the group was not given at all.
            label: How to name the group in error messages.

        Returns:
            True/False for flags, a list for variadic groups, a single
            string otherwise, or None for an omitted optional group.

        Raises:
            UsageError: If the values do not fit the group.
        """
        if values is None:
            if not self.optional:
                raise UsageError(f"{label} is required")
            return False if self.is_flag else None

        if self.is_flag:
            if values:
                raise UsageError(f"{label} does not take a value")
            return True

        if not values:
            raise UsageError(f"{label} expects a value")

        if self.choices:
            for value in values:
                if value not in self.choices:
                    expected = ", ".join(self.choices)
                    raise UsageError(
                        f"Invalid value '{value}' for {label}. Expected one of: {expected}"
                    )

        if self.variadic:
            return list(values)
        if len(values) > 1:
            raise UsageError(f"{label} expects a single value")
        return values[0]


@dataclass
class CommandLeaf:
    """
    An executable command.

    Attributes:
        name: Command name as typed.
        action: Callable run with a CommandContext.
        description: Brief description for help output.
        named_arg_groups: Argument groups keyed by flag name (without ``--``).
        positional_arg_group: Values given before any flag.
        double_dash_arg_group: Values given after a literal ``--``.
        aliases: Alternative names.
        hidden: Whether to leave the command out of help and completion.
    """

    name: str
    action: CommandAction
    description: str = ""
    named_arg_groups: dict[str, ArgGroup] = field(default_factory=dict)
    positional_arg_group: Optional[ArgGroup] = None
    double_dash_arg_group: Optional[ArgGroup] = None
    aliases: list[str] = field(default_factory=list)
    hidden: bool = False

    def flag_names(self) -> list[str]:
        """Return ``--<name>`` for every named argument group."""
        return [f"--{name}" for name in self.named_arg_groups]


@dataclass
class CommandGroup:
    """
    A named collection of subcommands.

    Attributes:
        name: Group name as typed (empty for the root).
        description: Brief description for help output.
        subcommands: Child groups and leaves, in display order.
        aliases: Alternative names.
        hidden: Whether to leave the group out of help and completion.
    """

    name: str
    description: str = ""
    subcommands: list["CommandNode"] = field(default_factory=list)
    aliases: list[str] = field(default_factory=list)
    hidden: bool = False

    def find_subcommand(self, token: str) -> Optional["CommandNode"]:
        """Find a direct child by name or alias."""
        for sub in self.subcommands:
            if sub.name == token or token in sub.aliases:
                return sub
        return None

    @property
    def visible_subcommands(self) -> list["CommandNode"]:
        return [sub for sub in self.subcommands if not sub.hidden]


CommandNode = Union[CommandGroup, CommandLeaf]


@dataclass
class TreeNavigation:
    """
    Where a list of arguments leads in a command tree.

    Attributes:
        node: The node navigation stopped at.
        args: Arguments left over after the last matched node.
        path: Nodes visited from the root to ``node``, inclusive.
    """

    node: CommandNode
    args: list[str]
    path: list[CommandNode]

    @property
    def command_path(self) -> str:
        """Space-separated names from the root down, skipping an unnamed root."""
        return " ".join(node.name for node in self.path if node.name)


def navigate_tree(root: CommandNode, args: Sequence[str]) -> TreeNavigation:
    """
    Walk the tree consuming arguments that name subcommands.

    Navigation stops when arguments run out, when a leaf is reached, or
    when the next argument does not name a child of the current group.

    Args:
        root: Root of the command tree.
        args: Arguments to consume.

    Returns:
        TreeNavigation with the landing node and the unconsumed arguments.
    """
    node = root
    path: list[CommandNode] = [root]
    remaining = list(args)

    while isinstance(node, CommandGroup) and remaining:
        child = node.find_subcommand(remaining[0])
        if child is None:
            break
        node = child
        path.append(child)
        remaining.pop(0)

    return TreeNavigation(node=node, args=remaining, path=path)
