"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from tgmark.ast import Node
from tgmark.dialects import Dialect
from tgmark.formatters import FormatterRegistry
from tgmark.generator import Generator
from tgmark.lexer import tokenize
from tgmark.parser import parse
from tgmark.tokens import Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _lex(source: str, *, strict: bool = False) -> list[Token]:
        tokens = tokenize(source, strict=strict)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != TokenType.EOF]

    return _lex


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns the top-level nodes."""

    def _parse(source: str, **kwargs) -> list[Node]:
        return parse(source, **kwargs)

    return _parse


@pytest.fixture
def md() -> Generator:
    """MarkdownV2 generator with the built-in formatters."""
    return Generator(Dialect.MARKDOWN_V2, formatters=FormatterRegistry.with_builtins())


@pytest.fixture
def html() -> Generator:
    """HTML generator with the built-in formatters."""
    return Generator(Dialect.HTML, formatters=FormatterRegistry.with_builtins())


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token values match the expected list."""
    actual = [t.value for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"
