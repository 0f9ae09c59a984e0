"""
Quote-aware command line tokenizer.

Splits a raw REPL line into shell-like argument tokens. Single and double
quotes group characters (including spaces) into one token; an unterminated
quote is reported back to the caller instead of raising.
"""

from dataclasses import dataclass, field

QUOTE_CHARS = ("'", '"')


@dataclass
class TokenizeResult:
    """
    Result of tokenizing a line.

    Attributes:
        tokens: Tokens in the order they appear in the line.
        open_quote: The quote character left open at end of input,
                    or an empty string if all quotes are balanced.
    """

    tokens: list[str] = field(default_factory=list)
    open_quote: str = ""

    @property
    def single_quoted(self) -> bool:
        return self.open_quote == "'"

    @property
    def double_quoted(self) -> bool:
        return self.open_quote == '"'

    @property
    def balanced(self) -> bool:
        return not self.open_quote


def tokenize(line: str) -> TokenizeResult:
    """
    Split a line into tokens, honouring single and double quotes.

    A quote of the other kind inside an open quote is literal text.
    A token that only ever saw quote characters (e.g. ``""``) still
    counts as started and is returned as an empty string.

    Args:
        line: Raw line text.

    Returns:
        TokenizeResult with the tokens and any quote left open.

    Examples:
        >>> tokenize('a "b c" d').tokens
        ['a', 'b c', 'd']

        >>> tokenize('a "b c').open_quote
        '"'
    """
    tokens: list[str] = []
    current: str | None = None
    open_quote = ""

    for char in line:
        if char in QUOTE_CHARS:
            if not open_quote:
                open_quote = char
                if current is None:
                    current = ""
            elif char == open_quote:
                open_quote = ""
            else:
                current = (current or "") + char
        elif char == " ":
            if open_quote:
                current = (current or "") + char
            elif current is not None:
                tokens.append(current)
                current = None
        else:
            current = (current or "") + char

    if current is not None:
        tokens.append(current)

    return TokenizeResult(tokens=tokens, open_quote=open_quote)
