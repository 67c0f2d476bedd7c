"""tgmark parser: converts a token stream into a document tree."""

from __future__ import annotations

from tgmark.ast import (
    Bold,
    Code,
    Command,
    Hashtag,
    Italic,
    Link,
    Mention,
    Node,
    Pre,
    Spoiler,
    Strikethrough,
    Text,
    Underline,
)
from tgmark.errors import ParseError, UnexpectedEofError
from tgmark.lexer import tokenize
from tgmark.tokens import Span, Token, TokenType

DEFAULT_MAX_DEPTH = 64


class Parser:
    """Recursive descent parser for tgmark token streams."""

    def __init__(
        self, tokens: list[Token], source: str, *, max_depth: int = DEFAULT_MAX_DEPTH
    ) -> None:
        self._tokens = tokens
        self._source = source
        self._max_depth = max_depth
        self._pos = 0
        self._depth = 0

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        idx = self._pos + offset
        if idx < len(self._tokens):
            return self._tokens[idx]
        return self._tokens[-1]  # EOF

    def _at(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _at_eof(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _enter(self, opener: Token) -> None:
        self._depth += 1
        if self._depth > self._max_depth:
            raise self._error(f"nesting too deep (limit is {self._max_depth})", opener.span)

    def _leave(self) -> None:
        self._depth -= 1

    # ------------------------------------------------------------------
    # Document level
    # ------------------------------------------------------------------

    def parse(self) -> list[Node]:
        nodes: list[Node] = []
        while not self._at_eof():
            nodes.append(self._parse_element())
        return nodes

    def _parse_element(self) -> Node:
        tok = self._peek()

        match tok.type:
            case TokenType.STAR:
                return self._parse_delimited(Bold, Italic, "bold", "italic")
            case TokenType.UNDERSCORE:
                return self._parse_delimited(Underline, Italic, "underline", "italic")
            case TokenType.TILDE:
                return self._parse_delimited(Strikethrough, Spoiler, "strikethrough", "spoiler")
            case TokenType.BACKTICK:
                return self._parse_code_or_pre()
            case TokenType.LBRACKET:
                return self._parse_link()
            case TokenType.MENTION:
                self._advance()
                return Mention(tok.value)
            case TokenType.HASHTAG:
                self._advance()
                return Hashtag(tok.value)
            case TokenType.COMMAND:
                self._advance()
                return Command(tok.value)
            case TokenType.TEXT | TokenType.ESCAPE | TokenType.LINE_BREAK:
                self._advance()
                return Text(tok.value)
            case _ if tok.type in _LITERAL_TOKENS:
                self._advance()
                return Text(tok.raw)
            case _:
                self._advance()
                return Text("")

    # ------------------------------------------------------------------
    # Styled spans
    # ------------------------------------------------------------------

    def _parse_delimited(
        self,
        strong: type[Bold | Underline | Strikethrough],
        weak: type[Italic | Spoiler],
        strong_name: str,
        weak_name: str,
    ) -> Node:
        """Doubled delimiter opens the strong style, a single one the weak style."""
        opener = self._advance()
        delim = opener.type

        if self._at(delim):
            self._advance()
            return strong(self._parse_until(delim, True, strong_name, opener))
        return weak(self._parse_until(delim, False, weak_name, opener))

    def _parse_until(
        self, delim: TokenType, doubled: bool, construct: str, opener: Token
    ) -> tuple[Node, ...]:
        self._enter(opener)
        children: list[Node] = []

        while not self._at_eof():
            if self._at(delim) and (not doubled or self._peek(1).type == delim):
                self._advance()
                if doubled:
                    self._advance()
                self._leave()
                return tuple(children)
            children.append(self._parse_element())

        raise self._unterminated(construct, opener)

    # ------------------------------------------------------------------
    # Code and pre blocks
    # ------------------------------------------------------------------

    def _parse_code_or_pre(self) -> Code | Pre:
        opener = self._advance()

        if self._at(TokenType.BACKTICK):
            self._advance()
            if self._at(TokenType.BACKTICK):
                self._advance()
                return self._parse_pre(opener)
            return Code("")

        parts: list[str] = []
        while not self._at_eof():
            tok = self._advance()
            if tok.type == TokenType.BACKTICK:
                return Code("".join(parts))
            parts.append(_verbatim(tok))

        raise self._unterminated("code", opener)

    def _parse_pre(self, opener: Token) -> Pre:
        language: str | None = None

        # Language tag: the text run right after the opener
        if self._at(TokenType.TEXT):
            language = self._advance().value
            if self._at(TokenType.LINE_BREAK):
                self._advance()

        parts: list[str] = []
        backticks = 0
        while not self._at_eof():
            tok = self._advance()
            if tok.type == TokenType.BACKTICK:
                backticks += 1
                if backticks == 3:
                    return Pre("".join(parts), language)
                continue
            if backticks:
                parts.append("`" * backticks)
                backticks = 0
            parts.append(_verbatim(tok))

        raise self._unterminated("pre block", opener)

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def _parse_link(self) -> Link:
        opener = self._advance()
        self._enter(opener)

        children: list[Node] = []
        while not self._at(TokenType.RBRACKET):
            if self._at_eof():
                raise self._unterminated("link text", opener)
            children.append(self._parse_element())
        self._advance()  # consume ]
        self._leave()

        if self._at_eof():
            raise UnexpectedEofError(
                "expected '(' after link text, found end of input",
                self._peek().span,
                self._source,
            )
        if not self._at(TokenType.LPAREN):
            raise self._error("expected '(' after link text")
        self._advance()

        url: list[str] = []
        while not self._at(TokenType.EOF, TokenType.LINE_BREAK):
            tok = self._advance()
            if tok.type == TokenType.RPAREN:
                return Link(tuple(children), "".join(url))
            url.append(tok.value if tok.type == TokenType.ESCAPE else tok.raw)

        raise self._unterminated("link", opener)

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _unterminated(self, construct: str, opener: Token) -> ParseError:
        span = Span(opener.span.start, self._peek().span.end)
        return ParseError(f"unterminated {construct}", span, self._source)

    def _error(self, message: str, span: Span | None = None) -> ParseError:
        if span is None:
            span = self._peek().span
        return ParseError(message, span, self._source)


# Punctuation tokens that stand for their literal character in prose
_LITERAL_TOKENS: frozenset[TokenType] = frozenset(
    {
        TokenType.AT,
        TokenType.HASH,
        TokenType.SLASH,
        TokenType.PIPE,
        TokenType.LPAREN,
        TokenType.RPAREN,
        TokenType.LBRACE,
        TokenType.RBRACE,
        TokenType.RBRACKET,
    }
)


def _verbatim(tok: Token) -> str:
    """Source text of a token inside code; only \\` and \\\\ are unescaped."""
    if tok.type == TokenType.ESCAPE and tok.value in "`\\":
        return tok.value
    if tok.type == TokenType.LINE_BREAK:
        return "\n"
    return tok.raw


def parse(source: str, *, max_depth: int = DEFAULT_MAX_DEPTH, strict: bool = False) -> list[Node]:
    """Convenience function: parse source text and return its top-level nodes."""
    tokens = tokenize(source, strict=strict)
    return Parser(tokens, source, max_depth=max_depth).parse()
