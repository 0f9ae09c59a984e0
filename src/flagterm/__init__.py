"""flagterm: line editing, history and tab completion for terminal REPLs."""

__version__ = "0.1.0"
