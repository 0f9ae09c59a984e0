"""
REPL module for the flagterm interactive shell.

This package provides the interactive shell components including the line
buffer, key events, the terminal sink, tab completion, the controller state
machine and the terminal session host.
"""

from flagterm.cli.repl.completer import CommandCompleter, complete, filter_candidates
from flagterm.cli.repl.controller import ReplController, ReplLogger, ReplState
from flagterm.cli.repl.keys import KeyCode, KeyEvent
from flagterm.cli.repl.line_buffer import CursorSplit, LineBuffer
from flagterm.cli.repl.session import TerminalSession
from flagterm.cli.repl.terminal import PromptToolkitTerminal, TerminalSink, key_event_from_press

__all__ = [
    "CommandCompleter",
    "CursorSplit",
    "KeyCode",
    "KeyEvent",
    "LineBuffer",
    "PromptToolkitTerminal",
    "ReplController",
    "ReplLogger",
    "ReplState",
    "TerminalSession",
    "TerminalSink",
    "complete",
    "filter_candidates",
    "key_event_from_press",
]
