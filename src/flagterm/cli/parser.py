"""
Command parser module for flagterm.

Converts REPL input into argument lists and maps a leaf command's
arguments onto its positional, named and double-dash argument groups.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from flagterm.cli.errors import CommandParseError, UsageError
from flagterm.cli.tree import CommandLeaf
from flagterm.core.tokenizer import tokenize


@dataclass
class ParsedArgs:
    """
    Arguments of a leaf command after validation.

    Attributes:
        positional: Parsed value of the positional group (None if absent).
        named: Parsed values keyed by flag name (without ``--``).
        double_dash: Parsed value of the double-dash group (None if absent).
    """

    positional: Any = None
    named: dict[str, Any] = field(default_factory=dict)
    double_dash: Any = None


def split_line(line: str) -> list[str]:
    """
    Split a line into arguments.

    Args:
        line: Raw user input.

    Returns:
        The argument tokens.

    Raises:
        CommandParseError: If a quote is left open.

    Examples:
        >>> split_line('echo "hello world"')
        ['echo', 'hello world']
    """
    result = tokenize(line)
    if result.single_quoted:
        raise CommandParseError("single quotes are not balanced")
    if result.double_quoted:
        raise CommandParseError("double quotes are not balanced")
    return result.tokens


def format_command_line(args: Sequence[str]) -> str:
    """
    Join arguments back into a line that splits to the same arguments.

    Arguments containing spaces or quotes are wrapped in whichever quote
    character they do not contain. An argument holding both kinds is
    written as adjacent quoted segments, which split back into one token.

    Examples:
        >>> format_command_line(["echo", "hello world"])
        'echo "hello world"'

        >>> format_command_line(["it's \\"x\\""])
        '"it\\'s "\\'"x"\\''
    """
    parts = []
    for arg in args:
        if arg and " " not in arg and "'" not in arg and '"' not in arg:
            parts.append(arg)
        else:
            parts.append("".join(_quote_segment(s) for s in _quote_segments(arg)))
    return " ".join(parts)


def _quote_segments(arg: str) -> list[str]:
    """Split an argument into runs that each contain at most one kind of quote."""
    segments: list[str] = []
    current = ""
    for char in arg:
        if char == "'" and '"' in current or char == '"' and "'" in current:
            segments.append(current)
            current = ""
        current += char
    segments.append(current)
    return segments


def _quote_segment(segment: str) -> str:
    if '"' in segment:
        return f"'{segment}'"
    return f'"{segment}"'


def parse_leaf_args(leaf: CommandLeaf, args: Sequence[str]) -> ParsedArgs:
    """
    Assign arguments to a leaf's argument groups and validate them.

    Tokens before the first ``--<flag>`` are positional, tokens after a
    ``--<flag>`` belong to that flag, and everything after a bare ``--``
    belongs to the double-dash group.

    Args:
        leaf: The command whose argument groups apply.
        args: Arguments left over after tree navigation.

    Returns:
        ParsedArgs with every group parsed.

    Raises:
        UsageError: If an argument is unknown or a group rejects its values.
    """
    positional_values: list[str] = []
    named_values: dict[str, list[str]] = {}
    double_dash_values: list[str] | None = None
    current_flag: str | None = None

    for index, token in enumerate(args):
        if token == "--":
            double_dash_values = list(args[index + 1:])
            break
        if token.startswith("--"):
            name = token[2:]
            if name not in leaf.named_arg_groups:
                raise UsageError(f"Unknown named argument '{token}'")
            named_values.setdefault(name, [])
            current_flag = name
        elif current_flag is None:
            positional_values.append(token)
        else:
            named_values[current_flag].append(token)

    parsed = ParsedArgs()

    group = leaf.positional_arg_group
    if group is None:
        if positional_values:
            raise UsageError(f"Unexpected argument '{positional_values[0]}'")
    else:
        parsed.positional = group.parse(positional_values or None, group.placeholder)

    for name, named_group in leaf.named_arg_groups.items():
        parsed.named[name] = named_group.parse(named_values.get(name), f"--{name}")

    group = leaf.double_dash_arg_group
    if group is None:
        if double_dash_values is not None:
            raise UsageError("Unexpected argument '--'")
    else:
        parsed.double_dash = group.parse(double_dash_values or None, "--")

    return parsed
