"""Error types with formatted source context."""

from __future__ import annotations

from tgmark.tokens import Position, Span


def _excerpt(
    message: str,
    source: str,
    line: int,
    col: int,
    underline_len: int,
    filename: str,
) -> str:
    lines = source.splitlines(keepends=True)
    line_idx = line - 1

    # Build the source line (strip trailing newline for display)
    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].rstrip("\n").rstrip("\r")
    else:
        source_line = ""

    pad = " " * (col - 1)
    carets = "^" * max(1, underline_len)

    line_num = str(line)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    return (
        f"error: {message}\n"
        f"{' ' * gutter_width}--> {filename}:{line}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )


class MarkupError(Exception):
    """Base class for every error raised by tgmark."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ParseError(MarkupError):
    """Raised on the first parse error, with span and source context."""

    def __init__(self, message: str, span: Span, source: str) -> None:
        self.span = span
        self.source = source
        super().__init__(message)
        self.args = (self.format(),)

    def format(self, filename: str = "input.tgm") -> str:
        start = self.span.start
        lines = self.source.splitlines()
        line_len = len(lines[start.line - 1]) if 0 < start.line <= len(lines) else 0

        # Underline the full span when on one line, otherwise to end of line
        if self.span.end.line == start.line:
            underline_len = self.span.end.column - start.column
        else:
            underline_len = line_len - start.column + 1

        return _excerpt(self.message, self.source, start.line, start.column, underline_len, filename)


class UnexpectedEofError(ParseError):
    """Raised when the input ends where a specific token was required."""


class InvalidTokenError(MarkupError):
    """Raised by the strict lexer on a character it refuses to tokenize."""

    def __init__(self, message: str, position: Position, source: str) -> None:
        self.position = position
        self.source = source
        super().__init__(message)
        self.args = (self.format(),)

    def format(self, filename: str = "input.tgm") -> str:
        return _excerpt(
            self.message, self.source, self.position.line, self.position.column, 1, filename
        )


class GenerationError(MarkupError):
    """Raised when a document tree cannot be rendered."""


class FormatterNotFoundError(GenerationError):
    """Raised when a Custom node names a formatter that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"formatter not found: {name!r}")


class InvalidFormatterValueError(GenerationError):
    """Raised by a formatter that rejects the value it was asked to render."""

    def __init__(self, formatter: str, value: str, reason: str) -> None:
        self.formatter = formatter
        self.value = value
        super().__init__(f"invalid value {value!r} for formatter {formatter!r}: {reason}")


class InvalidTableError(GenerationError):
    """Raised in strict mode for tables with inconsistent structure."""


class RegexError(MarkupError):
    """Raised when a condition or recognizer pattern does not compile."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        super().__init__(f"invalid pattern {pattern!r}: {reason}")
