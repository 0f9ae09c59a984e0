"""
Property-based tests for the quote-aware tokenizer.

**Feature: line-editing-repl, Property 3: Quoted arguments survive splitting**
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from flagterm.cli.parser import format_command_line
from flagterm.core.tokenizer import tokenize

# Arguments may hold spaces and either kind of quote
argument = st.text(
    alphabet=st.characters(
        whitelist_categories=("L", "N", "P", "Zs"),
        blacklist_characters="\n\r",
    ),
    min_size=0,
    max_size=15,
)

plain_word = st.text(
    alphabet=st.characters(whitelist_categories=("L", "N")),
    min_size=1,
    max_size=10,
)


@given(args=st.lists(argument, min_size=0, max_size=8))
@settings(max_examples=100)
def test_formatted_arguments_split_back(args: list[str]):
    """
    Joining arguments with format_command_line and tokenizing the result
    gives back the same arguments with no quote left open.
    """
    result = tokenize(format_command_line(args))
    assert result.tokens == args
    assert result.balanced


@given(words=st.lists(plain_word, min_size=0, max_size=8), gaps=st.integers(1, 4))
@settings(max_examples=100)
def test_unquoted_words_split_on_any_run_of_spaces(words: list[str], gaps: int):
    """
    Without quotes, tokens are exactly the words between runs of spaces.
    """
    line = (" " * gaps).join(words)
    assert tokenize(f" {line} ").tokens == words


@given(prefix=st.lists(plain_word, max_size=4), quoted=argument.filter(lambda s: '"' not in s))
@settings(max_examples=100)
def test_unterminated_double_quote_is_reported(prefix: list[str], quoted: str):
    """
    A line ending inside a double-quoted argument reports the open quote
    and keeps the partial argument as the last token.
    """
    result = tokenize(" ".join([*prefix, f'"{quoted}']))
    assert result.double_quoted
    assert result.tokens == [*prefix, quoted]
