"""Custom leaf formatters: the registry, the built-ins, and free-text detection."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from tgmark.ast import Custom, Node, Text, flatten, map_text
from tgmark.dialects import (
    Dialect,
    escape_html,
    escape_markdown_v2,
    escape_markdown_v2_url,
    inline_code,
)
from tgmark.errors import FormatterNotFoundError, GenerationError, InvalidFormatterValueError

logger = logging.getLogger(__name__)


class Formatter(Protocol):
    """Renders ``Custom`` leaves and recognizes their values in free text."""

    name: str

    def render(self, value: str, dialect: Dialect) -> str:
        """Return dialect markup for value; spliced into the output unescaped."""
        ...

    def recognize(self, text: str) -> tuple[str, int] | None:
        """Match a value at the start of text: (value, characters consumed)."""
        ...


@dataclass
class FormatterRegistry:
    """Name-keyed formatter table owned by a single Generator."""

    _entries: dict[str, Formatter] = field(default_factory=dict, init=False)
    _frozen: bool = field(default=False, init=False)

    @classmethod
    def with_builtins(cls) -> FormatterRegistry:
        registry = cls()
        for entry in builtin_formatters():
            registry.register(entry)
        return registry

    def register(self, entry: Formatter) -> None:
        """Add a formatter; an existing entry with the same name is replaced."""
        if self._frozen:
            raise GenerationError(
                f"cannot register formatter {entry.name!r}: rendering has already started"
            )
        if entry.name in self._entries:
            logger.debug("Replacing formatter %r", entry.name)
        else:
            logger.debug("Registered formatter %r", entry.name)
        self._entries[entry.name] = entry

    def freeze(self) -> None:
        """Reject further registration; called when rendering starts."""
        self._frozen = True

    def get(self, name: str) -> Formatter | None:
        return self._entries.get(name)

    def names(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def render_custom(self, name: str, value: str, dialect: Dialect) -> str:
        entry = self._entries.get(name)
        if entry is None:
            raise FormatterNotFoundError(name)
        return entry.render(value, dialect)

    def recognize(self, name: str, text: str) -> tuple[str, int] | None:
        entry = self._entries.get(name)
        if entry is None:
            raise FormatterNotFoundError(name)
        return entry.recognize(text)


# ---------------------------------------------------------------------------
# Built-in formatters
# ---------------------------------------------------------------------------


class _PatternFormatter:
    """Recognizes values with an anchored regex; a ``value`` group narrows the match."""

    name = ""
    pattern: re.Pattern[str]

    def recognize(self, text: str) -> tuple[str, int] | None:
        m = self.pattern.match(text)
        if m is None or m.end() == 0:
            return None
        value = m.group("value") if "value" in self.pattern.groupindex else m.group(0)
        return value, m.end()

    def _number(self, value: str) -> float:
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            raise InvalidFormatterValueError(self.name, value, "not a number") from None
        if not math.isfinite(number):
            raise InvalidFormatterValueError(self.name, value, "not a finite number")
        return number


class PhoneFormatter(_PatternFormatter):
    name = "phone"
    pattern = re.compile(r"\+?[\d(][\d\s\-()]{5,}\d")

    def render(self, value: str, dialect: Dialect) -> str:
        return inline_code(value, dialect)


class DateFormatter(_PatternFormatter):
    """ISO dates are shown day-first; anything else is shown as given."""

    name = "date"
    pattern = re.compile(r"\d{4}-\d{2}-\d{2}")

    def render(self, value: str, dialect: Dialect) -> str:
        try:
            shown = datetime.strptime(value, "%Y-%m-%d").strftime("%d.%m.%Y")
        except ValueError:
            shown = value
        return inline_code(shown, dialect)


class TimeFormatter(_PatternFormatter):
    name = "time"
    pattern = re.compile(r"\d{1,2}:\d{2}(?::\d{2})?")

    def render(self, value: str, dialect: Dialect) -> str:
        return inline_code(value, dialect)


class EmailFormatter(_PatternFormatter):
    name = "email"
    pattern = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

    def render(self, value: str, dialect: Dialect) -> str:
        if dialect is Dialect.MARKDOWN_V2:
            return f"[✉️ {escape_markdown_v2(value)}]({escape_markdown_v2_url('mailto:' + value)})"
        return f'<a href="mailto:{escape_html(value)}">{escape_html(value)}</a>'


class CurrencyFormatter(_PatternFormatter):
    """Amount with two decimals and a currency symbol; registered under its code."""

    pattern = re.compile(r"\d[\d,]*(?:\.\d+)?")

    def __init__(self, symbol: str, code: str) -> None:
        self.symbol = symbol
        self.name = code

    def render(self, value: str, dialect: Dialect) -> str:
        amount = self._number(value)
        return inline_code(f"{amount:.2f} {self.symbol}", dialect)


class PercentFormatter(_PatternFormatter):
    name = "percent"
    pattern = re.compile(r"(?P<value>\d+(?:\.\d+)?)%")

    def render(self, value: str, dialect: Dialect) -> str:
        return inline_code(f"{self._number(value):.1f}%", dialect)


class ProgressFormatter(_PatternFormatter):
    """Ten-cell bar, clamped to 0..100."""

    name = "progress"
    pattern = re.compile(r"\d{1,3}(?![\d.])")

    def render(self, value: str, dialect: Dialect) -> str:
        progress = min(100, max(0, int(self._number(value))))
        filled = (progress + 5) // 10
        bar = "▓" * filled + "░" * (10 - filled)
        return inline_code(f"{bar} {progress}%", dialect)


def builtin_formatters() -> list[Formatter]:
    """Fresh instances of the built-ins that have a fixed name."""
    return [
        PhoneFormatter(),
        DateFormatter(),
        TimeFormatter(),
        EmailFormatter(),
        PercentFormatter(),
        ProgressFormatter(),
    ]


# ---------------------------------------------------------------------------
# Free-text detection
# ---------------------------------------------------------------------------


def detect_custom(
    nodes: Iterable[Node], registry: FormatterRegistry, names: Sequence[str]
) -> tuple[Node, ...]:
    """Split Text nodes into Text and Custom pieces using formatter recognizers.

    A value is only recognized where it starts a word. The first formatter in
    ``names`` that matches wins. Table cells are left alone.
    """
    entries: list[Formatter] = []
    for name in names:
        entry = registry.get(name)
        if entry is None:
            raise FormatterNotFoundError(name)
        entries.append(entry)

    if not entries:
        return flatten(nodes)

    def split(text: Text) -> list[Node]:
        value = text.value
        pieces: list[Node] = []
        plain_start = 0
        i = 0
        while i < len(value):
            if i == 0 or not value[i - 1].isalnum():
                hit = _recognize_at(entries, value[i:])
                if hit is not None:
                    name, matched, consumed = hit
                    if plain_start < i:
                        pieces.append(Text(value[plain_start:i]))
                    pieces.append(Custom(name, matched))
                    i += consumed
                    plain_start = i
                    continue
            i += 1
        if plain_start == 0:
            return [text]
        if plain_start < len(value):
            pieces.append(Text(value[plain_start:]))
        return pieces

    return map_text(nodes, split, into_tables=False)


def _recognize_at(entries: list[Formatter], text: str) -> tuple[str, str, int] | None:
    for entry in entries:
        hit = entry.recognize(text)
        if hit is not None and hit[1] > 0:
            logger.debug("Detected %s value %r", entry.name, hit[0])
            return entry.name, hit[0], hit[1]
    return None
