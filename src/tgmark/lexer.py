"""tgmark lexer: converts markup text into a flat token stream."""

from __future__ import annotations

from tgmark.errors import InvalidTokenError
from tgmark.tokens import (
    ENTITY_TRIGGERS,
    RESERVED,
    SINGLE_CHAR_TOKENS,
    Position,
    Span,
    Token,
    TokenType,
    is_entity_char,
)


class Lexer:
    """Tokenize tgmark source text into a stream of Token objects.

    The default mode never fails: every character ends up in exactly one
    token. With ``strict=True`` the lexer refuses NUL characters.
    """

    def __init__(self, source: str, *, strict: bool = False) -> None:
        self._source = source
        self._strict = strict
        self._pos = 0
        self._line = 1
        self._col = 1
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        while self._pos < len(self._source):
            self._lex_one()

        self._emit(TokenType.EOF, "", "")
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos)

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def _emit(self, tt: TokenType, value: str, raw: str, start: Position | None = None) -> Token:
        end = self._current_pos()
        if start is None:
            start = end
        tok = Token(tt, value, raw, Span(start, end))
        self._tokens.append(tok)
        return tok

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _lex_one(self) -> None:
        ch = self._peek()

        if ch == "\0" and self._strict:
            raise InvalidTokenError("NUL character in source", self._current_pos(), self._source)

        if ch in SINGLE_CHAR_TOKENS:
            start = self._current_pos()
            self._advance()
            self._emit(SINGLE_CHAR_TOKENS[ch], ch, ch, start)
            return

        if ch in ENTITY_TRIGGERS:
            self._lex_entity()
            return

        if ch == "\\":
            self._lex_escape()
            return

        if ch == "\n":
            start = self._current_pos()
            self._advance()
            self._emit(TokenType.LINE_BREAK, "\n", "\n", start)
            return

        if ch == "\r" and self._peek(1) == "\n":
            start = self._current_pos()
            self._advance()
            self._advance()
            self._emit(TokenType.LINE_BREAK, "\n", "\r\n", start)
            return

        self._lex_text()

    def _lex_text(self) -> None:
        start = self._current_pos()
        chars = [self._advance()]  # first char is never reserved here
        while self._pos < len(self._source):
            ch = self._peek()
            if ch in RESERVED or (ch == "\r" and self._peek(1) == "\n"):
                break
            if ch == "\0" and self._strict:
                break
            chars.append(self._advance())
        text = "".join(chars)
        self._emit(TokenType.TEXT, text, text, start)

    # ------------------------------------------------------------------
    # Mentions, hashtags, commands
    # ------------------------------------------------------------------

    def _lex_entity(self) -> None:
        start = self._current_pos()
        trigger = self._advance()
        entity_type, bare_type = ENTITY_TRIGGERS[trigger]

        chars = []
        while self._pos < len(self._source) and is_entity_char(self._peek()):
            chars.append(self._advance())

        if not chars:
            self._emit(bare_type, trigger, trigger, start)
            return

        name = "".join(chars)
        self._emit(entity_type, name, trigger + name, start)

    # ------------------------------------------------------------------
    # Escapes
    # ------------------------------------------------------------------

    def _lex_escape(self) -> None:
        start = self._current_pos()
        self._advance()  # consume backslash

        if self._pos >= len(self._source):
            self._emit(TokenType.TEXT, "\\", "\\", start)
            return

        ch = self._advance()
        self._emit(TokenType.ESCAPE, ch, f"\\{ch}", start)


def tokenize(source: str, *, strict: bool = False) -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source, strict=strict).tokenize()
