"""Test backslash escapes and the strict lexer mode."""

import pytest

from tgmark.errors import InvalidTokenError
from tgmark.lexer import tokenize
from tgmark.tokens import TokenType

from .conftest import assert_types


class TestEscapes:
    def test_escaped_star(self, lex):
        tokens = lex("\\*")
        assert_types(tokens, [TokenType.ESCAPE])
        assert tokens[0].value == "*"
        assert tokens[0].raw == "\\*"

    def test_escaped_backslash(self, lex):
        tokens = lex("\\\\")
        assert_types(tokens, [TokenType.ESCAPE])
        assert tokens[0].value == "\\"

    def test_escape_consumes_one_char_only(self, lex):
        tokens = lex("\\ab")
        assert_types(tokens, [TokenType.ESCAPE, TokenType.TEXT])
        assert tokens[0].value == "a"
        assert tokens[1].value == "b"

    def test_escaped_entity_trigger(self, lex):
        tokens = lex("\\@name")
        assert_types(tokens, [TokenType.ESCAPE, TokenType.TEXT])

    def test_escaped_newline(self, lex):
        tokens = lex("\\\n")
        assert_types(tokens, [TokenType.ESCAPE])
        assert tokens[0].value == "\n"

    def test_trailing_backslash_is_text(self, lex):
        tokens = lex("end\\")
        assert_types(tokens, [TokenType.TEXT, TokenType.TEXT])
        assert tokens[1].value == "\\"


class TestStrictMode:
    def test_default_mode_accepts_nul(self, lex):
        tokens = lex("a\0b")
        assert_types(tokens, [TokenType.TEXT])

    def test_strict_rejects_nul(self):
        with pytest.raises(InvalidTokenError, match="NUL"):
            tokenize("a\0b", strict=True)

    def test_strict_error_position(self):
        with pytest.raises(InvalidTokenError) as exc_info:
            tokenize("ok\nab\0", strict=True)
        err = exc_info.value
        assert err.position.line == 2
        assert err.position.column == 3

    def test_strict_accepts_clean_input(self, lex):
        tokens = lex("**fine**", strict=True)
        assert len(tokens) == 5
