"""--debug document tree dump to stderr."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from tgmark.ast import (
    CONTAINERS,
    Link,
    ListNode,
    Node,
    TableCell,
    TableNode,
    Text,
)


def dump_tree(nodes: Iterable[Node], *, file: TextIO | None = None) -> None:
    """Print a human-readable document tree to *file* (stderr by default)."""
    if file is None:
        file = sys.stderr
    file.write("Document\n")
    for node in nodes:
        _dump_node(node, 1, file)


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_node(node: Node, depth: int, f: TextIO) -> None:
    if isinstance(node, Text):
        f.write(f"{_indent(depth)}Text({node.value!r})\n")
    elif isinstance(node, Link):
        f.write(f"{_indent(depth)}Link url={node.url!r}\n")
        for child in node.children:
            _dump_node(child, depth + 1, f)
    elif isinstance(node, CONTAINERS):
        f.write(f"{_indent(depth)}{type(node).__name__}\n")
        for child in node.children:
            _dump_node(child, depth + 1, f)
    elif isinstance(node, ListNode):
        _dump_list(node, depth, f)
    elif isinstance(node, TableNode):
        _dump_table(node, depth, f)
    else:
        f.write(f"{_indent(depth)}{node!r}\n")


def _dump_list(node: ListNode, depth: int, f: TextIO) -> None:
    style = node.style.name if not isinstance(node.style, str) else repr(node.style)
    f.write(f"{_indent(depth)}List {style}\n")
    for item in node.items:
        f.write(f"{_indent(depth + 1)}Item\n")
        for child in item.content:
            _dump_node(child, depth + 2, f)
        if item.nested is not None:
            _dump_list(item.nested, depth + 2, f)


def _dump_table(node: TableNode, depth: int, f: TextIO) -> None:
    f.write(f"{_indent(depth)}Table {node.style.name}")
    if node.rules:
        f.write(f" rules={len(node.rules)}")
    f.write("\n")
    _dump_row("Header", node.header, depth + 1, f)
    for row in node.rows:
        _dump_row("Row", row.cells, depth + 1, f)


def _dump_row(label: str, cells: tuple[TableCell, ...], depth: int, f: TextIO) -> None:
    f.write(f"{_indent(depth)}{label}\n")
    for cell in cells:
        f.write(f"{_indent(depth + 1)}Cell {cell.align.name}\n")
        for child in cell.content:
            _dump_node(child, depth + 2, f)
