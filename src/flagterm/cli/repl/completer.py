"""
Command completer module for the flagterm REPL.

Computes tab completion candidates for a partially typed line by walking
the command tree. A candidate is the text to append to the search prefix:
a single candidate ending in a space completes the argument, a single
candidate without one is a partial extension shared by all matches, and
several candidates are meant for display.
"""

import logging
from collections.abc import Sequence
from typing import Optional

from flagterm.cli.errors import UnexpectedNodeError
from flagterm.cli.tree import ArgGroup, CommandGroup, CommandLeaf, CommandNode, navigate_tree

logger = logging.getLogger(__name__)

DOUBLE_DASH = "--"
HELP_FLAG = "--help"


def longest_common_extension(values: Sequence[str], common: str = "") -> str:
    """
    Extend ``common`` one character at a time while every value shares it.

    Args:
        values: Strings to compare.
        common: Prefix known to be shared so far.

    Returns:
        The longest prefix shared by all values.
    """
    if not values or len(common) >= len(values[0]):
        return common
    candidate = values[0][: len(common) + 1]
    for value in values[1:]:
        if value[: len(common) + 1] != candidate:
            return common
    return longest_common_extension(values, candidate)


def filter_candidates(vocabulary: Sequence[str], prefix: str) -> list[str]:
    """
    Match a vocabulary against a typed prefix.

    Args:
        vocabulary: Every word that could be typed here.
        prefix: What has been typed so far.

    Returns:
        Nothing if no word matches; the rest of the word plus a space if
        exactly one matches; otherwise the extension all matches share, or
        every match with the prefix stripped if they share nothing more.

    Examples:
        >>> filter_candidates(["deploy", "destroy"], "dep")
        ['loy ']

        >>> filter_candidates(["deploy", "destroy"], "de")
        ['ploy', 'stroy']
    """
    matches = [word[len(prefix):] for word in vocabulary if word.startswith(prefix)]

    if not matches:
        return []
    if len(matches) == 1:
        return [f"{matches[0]} "]

    common = longest_common_extension(matches)
    if common:
        return [common]
    return matches


def _suggest(group: Optional[ArgGroup], search: str) -> list[str]:
    """Filtered suggestions of an argument group, or nothing without a group."""
    if group is None:
        return []
    return filter_candidates(group.suggest([], search), search)


def complete(root: CommandNode, completed_args: Sequence[str], search: str) -> list[str]:
    """
    Compute completion candidates.

    Args:
        root: Root of the command tree.
        completed_args: Arguments fully typed before the cursor.
        search: The partial argument under the cursor.

    Returns:
        Candidate suffixes for ``search``.

    Raises:
        UnexpectedNodeError: If navigation lands on a node of unknown kind.
    """
    if HELP_FLAG in completed_args:
        return []

    navigation = navigate_tree(root, completed_args)
    node = navigation.node

    if isinstance(node, CommandGroup):
        if navigation.args:
            return []
        return filter_candidates([sub.name for sub in node.visible_subcommands], search)

    if isinstance(node, CommandLeaf):
        return _complete_leaf(node, navigation.args, search)

    raise UnexpectedNodeError(f"Unexpected kind of command tree node: {type(node).__name__}")


def _complete_leaf(leaf: CommandLeaf, args: list[str], search: str) -> list[str]:
    flags = [*leaf.flag_names(), HELP_FLAG]
    double_dash = [DOUBLE_DASH] if leaf.double_dash_arg_group is not None else []
    last_arg = args[-1] if args else None

    if last_arg == DOUBLE_DASH:
        return _suggest(leaf.double_dash_arg_group, search)

    # Everything after "--" is free-form
    if DOUBLE_DASH in args:
        return []

    if search in ("-", DOUBLE_DASH):
        return filter_candidates([*double_dash, *flags], search)

    if search.startswith(DOUBLE_DASH):
        return filter_candidates(flags, search)

    if last_arg is None:
        group = leaf.positional_arg_group
        positional = _suggest(group, search)
        if group is not None and not group.optional:
            return positional
        if search == "":
            return [*double_dash, *flags, *positional]
        return positional

    if last_arg.startswith(DOUBLE_DASH):
        return _suggest(leaf.named_arg_groups.get(last_arg[2:]), search)

    return []


class CommandCompleter:
    """
    Tab completion bound to one command tree.

    Attributes:
        root: Root of the command tree; never modified.
    """

    def __init__(self, root: CommandNode):
        self.root = root

    def get_candidates(self, completed_args: Sequence[str], search: str) -> list[str]:
        """Compute candidates for the given split of the line."""
        candidates = complete(self.root, completed_args, search)
        logger.debug(
            f"Completion for args={list(completed_args)!r} search={search!r}: {candidates!r}"
        )
        return candidates
