"""
Core building blocks for flagterm.

Contains configuration loading and the quote-aware tokenizer.
"""

from flagterm.core.config import (
    CompletionConfig,
    FlagtermConfig,
    LoggingConfig,
    PromptConfig,
    load_config,
)
from flagterm.core.tokenizer import TokenizeResult, tokenize

__all__ = [
    "CompletionConfig",
    "FlagtermConfig",
    "LoggingConfig",
    "PromptConfig",
    "TokenizeResult",
    "load_config",
    "tokenize",
]
