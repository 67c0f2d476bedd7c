"""Value predicates and conditional re-formatting of text nodes."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache

from tgmark.ast import Node, Text, flatten, map_text
from tgmark.errors import RegexError


@dataclass(frozen=True, slots=True)
class GreaterThan:
    threshold: float


@dataclass(frozen=True, slots=True)
class LessThan:
    threshold: float


@dataclass(frozen=True, slots=True)
class Equals:
    expected: str


@dataclass(frozen=True, slots=True)
class Contains:
    substring: str


@dataclass(frozen=True, slots=True)
class Matches:
    """Regular-expression search anywhere in the value."""

    pattern: str


@dataclass(frozen=True, slots=True)
class CustomCondition:
    """Named predicate with no built-in behaviour; never matches."""

    name: str


Condition = GreaterThan | LessThan | Equals | Contains | Matches | CustomCondition


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a condition pattern, raising RegexError if it is invalid."""
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise RegexError(pattern, str(exc)) from None


def _as_float(value: str) -> float | None:
    # No digit separators or surrounding whitespace
    if "_" in value or value != value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        return None


def evaluate(condition: Condition, value: str) -> bool:
    """Evaluate a condition against a text value. Never raises."""
    match condition:
        case GreaterThan(threshold):
            number = _as_float(value)
            return number is not None and number > threshold
        case LessThan(threshold):
            number = _as_float(value)
            return number is not None and number < threshold
        case Equals(expected):
            return value == expected
        case Contains(substring):
            return substring in value
        case Matches(pattern):
            try:
                return compile_pattern(pattern).search(value) is not None
            except RegexError:
                return False
        case CustomCondition():
            return False
    return False


@dataclass(frozen=True, slots=True)
class ConditionalFormat:
    """Replace a matching Text node with ``transform((text,))``."""

    condition: Condition
    transform: Callable[[tuple[Node, ...]], Sequence[Node]]


def format_text(text: Text, rules: Sequence[ConditionalFormat]) -> tuple[Node, ...]:
    """Apply the first rule whose condition matches ``text``."""
    for rule in rules:
        if evaluate(rule.condition, text.value):
            return tuple(rule.transform((text,)))
    return (text,)


def apply_rules(
    nodes: Iterable[Node], rules: Sequence[ConditionalFormat], *, into_tables: bool = True
) -> tuple[Node, ...]:
    """Pre-pass form: re-format every Text node of a tree."""
    if not rules:
        return flatten(nodes)
    return map_text(nodes, lambda text: format_text(text, rules), into_tables=into_tables)
