"""Exception types for the flagterm command layer."""


class FlagtermError(Exception):
    """Base exception for flagterm errors."""

    pass


class CommandParseError(FlagtermError):
    """Raised when a line cannot be split into arguments (unbalanced quotes)."""

    pass


class UsageError(FlagtermError):
    """Raised when command-line arguments do not fit the command's argument groups."""

    pass


class UnexpectedNodeError(FlagtermError):
    """Raised when a command tree node is neither a group nor a leaf.

    This is a contract violation in the supplied command tree. It aborts
    the completion attempt that hit it, not the REPL session.
    """

    pass


class CommandDescriptionError(FlagtermError):
    """Raised when a command description payload cannot be turned into a command."""

    pass
