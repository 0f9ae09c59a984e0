"""
Tests for the quote-aware tokenizer.
"""

import pytest

from flagterm.core.tokenizer import TokenizeResult, tokenize


class TestTokenize:
    """Unit tests for tokenize()."""

    def test_empty_line(self):
        result = tokenize("")
        assert result.tokens == []
        assert result.open_quote == ""

    def test_splits_on_spaces(self):
        assert tokenize("deploy api now").tokens == ["deploy", "api", "now"]

    def test_repeated_spaces_do_not_create_empty_tokens(self):
        assert tokenize("  a   b  ").tokens == ["a", "b"]

    def test_double_quoted_token_keeps_spaces(self):
        result = tokenize('a "b c" d')
        assert result.tokens == ["a", "b c", "d"]
        assert result.open_quote == ""
        assert result.balanced

    def test_single_quoted_token_keeps_spaces(self):
        assert tokenize("echo 'hello world'").tokens == ["echo", "hello world"]

    def test_unterminated_double_quote(self):
        result = tokenize('a "b c')
        assert result.tokens == ["a", "b c"]
        assert result.open_quote == '"'
        assert result.double_quoted
        assert not result.single_quoted

    def test_unterminated_single_quote(self):
        result = tokenize("a 'b")
        assert result.tokens == ["a", "b"]
        assert result.single_quoted

    def test_other_quote_inside_quote_is_literal(self):
        assert tokenize("\"it's\"").tokens == ["it's"]
        assert tokenize("'say \"hi\"'").tokens == ['say "hi"']

    def test_quotes_join_adjacent_text(self):
        assert tokenize('pre"fix suf"fix').tokens == ["prefix suffix"]

    def test_empty_quotes_produce_empty_token(self):
        assert tokenize('""').tokens == [""]
        assert tokenize("a '' b").tokens == ["a", "", "b"]

    def test_open_quote_alone_starts_a_token(self):
        result = tokenize('echo "')
        assert result.tokens == ["echo", ""]
        assert result.double_quoted

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("--", ["--"]),
            ("--flag value", ["--flag", "value"]),
            ("a\tb", ["a\tb"]),
        ],
    )
    def test_other_characters_are_literal(self, line, expected):
        assert tokenize(line).tokens == expected

    def test_result_defaults(self):
        result = TokenizeResult()
        assert result.tokens == []
        assert result.balanced
