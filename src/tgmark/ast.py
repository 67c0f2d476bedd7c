"""Document tree node types.

Nodes are immutable values. Container nodes store their children as tuples and
splice any ``Group`` children into place when constructed, so a ``Group`` is
never seen inside another node.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tgmark.conditions import ConditionalFormat


def _freeze_children(obj: object, name: str = "children") -> None:
    object.__setattr__(obj, name, flatten(getattr(obj, name)))


def _freeze_tuple(obj: object, name: str) -> None:
    object.__setattr__(obj, name, tuple(getattr(obj, name)))


# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Text:
    """Literal text, escaped for the target dialect when rendered."""

    value: str


@dataclass(frozen=True, slots=True)
class Code:
    """Inline code span."""

    code: str


@dataclass(frozen=True, slots=True)
class Pre:
    """Pre-formatted block with an optional language tag."""

    code: str
    language: str | None = None


@dataclass(frozen=True, slots=True)
class TextLink:
    """Link whose label is flat text."""

    text: str
    url: str


@dataclass(frozen=True, slots=True)
class Mention:
    username: str


@dataclass(frozen=True, slots=True)
class MentionById:
    """Mention of a user without a username, by numeric id."""

    user_id: int
    text: str


@dataclass(frozen=True, slots=True)
class Hashtag:
    tag: str


@dataclass(frozen=True, slots=True)
class Command:
    """Bot command.

    Name and args are written out verbatim in every dialect; args holding
    dialect markup such as HTML tags reach the output unescaped.
    """

    name: str
    args: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze_tuple(self, "args")


@dataclass(frozen=True, slots=True)
class Emoji:
    """Unicode emoji, written out unescaped."""

    emoji: str


@dataclass(frozen=True, slots=True)
class CustomEmoji:
    emoji: str
    emoji_id: int


@dataclass(frozen=True, slots=True)
class Custom:
    """Leaf rendered by the formatter registered under ``formatter``."""

    formatter: str
    value: str


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Bold:
    children: tuple[Node, ...]

    def __post_init__(self) -> None:
        _freeze_children(self)


@dataclass(frozen=True, slots=True)
class Italic:
    children: tuple[Node, ...]

    def __post_init__(self) -> None:
        _freeze_children(self)


@dataclass(frozen=True, slots=True)
class Underline:
    children: tuple[Node, ...]

    def __post_init__(self) -> None:
        _freeze_children(self)


@dataclass(frozen=True, slots=True)
class Strikethrough:
    children: tuple[Node, ...]

    def __post_init__(self) -> None:
        _freeze_children(self)


@dataclass(frozen=True, slots=True)
class Spoiler:
    children: tuple[Node, ...]

    def __post_init__(self) -> None:
        _freeze_children(self)


@dataclass(frozen=True, slots=True)
class Quote:
    children: tuple[Node, ...]

    def __post_init__(self) -> None:
        _freeze_children(self)


@dataclass(frozen=True, slots=True)
class Link:
    """Link whose label is a sequence of nodes."""

    children: tuple[Node, ...]
    url: str

    def __post_init__(self) -> None:
        _freeze_children(self)


@dataclass(frozen=True, slots=True)
class Group:
    """Transparent splice container: "insert these nodes here"."""

    children: tuple[Node, ...]

    def __post_init__(self) -> None:
        _freeze_children(self)


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


class ListStyle(Enum):
    BULLET = auto()
    NUMBERED = auto()


@dataclass(frozen=True, slots=True)
class ListItem:
    content: tuple[Node, ...]
    nested: ListNode | None = None

    def __post_init__(self) -> None:
        _freeze_children(self, "content")


@dataclass(frozen=True, slots=True)
class ListNode:
    """Bullet, numbered, or custom-marker list. A str style is the marker."""

    items: tuple[ListItem, ...]
    style: ListStyle | str = ListStyle.BULLET

    def __post_init__(self) -> None:
        _freeze_tuple(self, "items")


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class CellAlign(Enum):
    LEFT = auto()
    CENTER = auto()
    RIGHT = auto()


class TableStyle(Enum):
    UNICODE = auto()
    ASCII = auto()
    MINIMAL = auto()
    COMPACT = auto()


@dataclass(frozen=True, slots=True)
class TableCell:
    """Table cell. Spans are stored but the layout treats every span as 1."""

    content: tuple[Node, ...] = ()
    align: CellAlign = CellAlign.LEFT
    colspan: int = 1
    rowspan: int = 1

    def __post_init__(self) -> None:
        _freeze_children(self, "content")


@dataclass(frozen=True, slots=True)
class TableRow:
    cells: tuple[TableCell, ...]

    def __post_init__(self) -> None:
        _freeze_tuple(self, "cells")


@dataclass(frozen=True, slots=True)
class TableNode:
    header: tuple[TableCell, ...]
    rows: tuple[TableRow, ...] = ()
    style: TableStyle = TableStyle.UNICODE
    rules: tuple[ConditionalFormat, ...] = ()

    def __post_init__(self) -> None:
        _freeze_tuple(self, "header")
        _freeze_tuple(self, "rows")
        _freeze_tuple(self, "rules")


Node = (
    Text
    | Bold
    | Italic
    | Underline
    | Strikethrough
    | Spoiler
    | Code
    | Pre
    | Link
    | TextLink
    | Mention
    | MentionById
    | Hashtag
    | Command
    | Emoji
    | CustomEmoji
    | ListNode
    | TableNode
    | Quote
    | Custom
    | Group
)

CONTAINERS = (Bold, Italic, Underline, Strikethrough, Spoiler, Quote, Link, Group)


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------


def flatten(nodes: Iterable[Node]) -> tuple[Node, ...]:
    """Return nodes as a tuple with every Group spliced into place."""
    result: list[Node] = []
    for node in nodes:
        if isinstance(node, Group):
            result.extend(node.children)
        else:
            result.append(node)
    return tuple(result)


def plain_text(nodes: Iterable[Node]) -> str:
    """Concatenate the direct Text children of a sequence; other nodes count as empty."""
    return "".join(node.value for node in nodes if isinstance(node, Text))


def map_text(
    nodes: Iterable[Node],
    fn: Callable[[Text], Sequence[Node]],
    *,
    into_tables: bool = True,
) -> tuple[Node, ...]:
    """Rebuild a tree, replacing every Text node with ``fn(text)``.

    Containers are rebuilt around the mapped children; nodes are never mutated.
    """
    result: list[Node] = []
    for node in nodes:
        if isinstance(node, Text):
            result.extend(fn(node))
        elif isinstance(node, CONTAINERS):
            result.append(
                dataclasses.replace(
                    node, children=map_text(node.children, fn, into_tables=into_tables)
                )
            )
        elif isinstance(node, ListNode):
            result.append(_map_list(node, fn, into_tables))
        elif isinstance(node, TableNode) and into_tables:
            result.append(
                dataclasses.replace(
                    node,
                    header=_map_cells(node.header, fn),
                    rows=tuple(TableRow(_map_cells(row.cells, fn)) for row in node.rows),
                )
            )
        else:
            result.append(node)
    return flatten(result)


def _map_list(node: ListNode, fn: Callable[[Text], Sequence[Node]], into_tables: bool) -> ListNode:
    items = []
    for item in node.items:
        nested = _map_list(item.nested, fn, into_tables) if item.nested is not None else None
        items.append(ListItem(map_text(item.content, fn, into_tables=into_tables), nested))
    return ListNode(tuple(items), node.style)


def _map_cells(
    cells: tuple[TableCell, ...], fn: Callable[[Text], Sequence[Node]]
) -> tuple[TableCell, ...]:
    return tuple(dataclasses.replace(c, content=map_text(c.content, fn)) for c in cells)
