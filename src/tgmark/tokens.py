"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    # Content
    TEXT = auto()  # maximal run of non-reserved characters
    ESCAPE = auto()  # backslash escape; value is the escaped character
    LINE_BREAK = auto()  # \n or \r\n

    # Delimiters
    STAR = auto()  # *
    UNDERSCORE = auto()  # _
    BACKTICK = auto()  # `
    TILDE = auto()  # ~
    PIPE = auto()  # |

    # Structural
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    LBRACKET = auto()  # [
    RBRACKET = auto()  # ]
    LBRACE = auto()  # {
    RBRACE = auto()  # }

    # Entities: value is the identifier without its trigger character
    MENTION = auto()  # @name
    HASHTAG = auto()  # #tag
    COMMAND = auto()  # /name

    # Entity triggers with an empty identifier
    AT = auto()  # @
    HASH = auto()  # #
    SLASH = auto()  # /

    EOF = auto()


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token with resolved value and original source text."""

    type: TokenType
    value: str
    raw: str
    span: Span


# Single-character tokens, keyed by their character
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "*": TokenType.STAR,
    "_": TokenType.UNDERSCORE,
    "`": TokenType.BACKTICK,
    "~": TokenType.TILDE,
    "|": TokenType.PIPE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
}

# Entity trigger -> (entity token, degraded punctuation token)
ENTITY_TRIGGERS: dict[str, tuple[TokenType, TokenType]] = {
    "@": (TokenType.MENTION, TokenType.AT),
    "#": (TokenType.HASHTAG, TokenType.HASH),
    "/": (TokenType.COMMAND, TokenType.SLASH),
}

# Characters that end a text run
RESERVED = frozenset(SINGLE_CHAR_TOKENS) | frozenset(ENTITY_TRIGGERS) | frozenset("\\\n")


def is_entity_char(ch: str) -> bool:
    """Return True if ch may appear in a mention, hashtag or command name."""
    return ch.isalnum() or ch == "_"
