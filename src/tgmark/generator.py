"""Generator: renders a document tree into a target dialect."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence

from tgmark.ast import (
    Bold,
    Code,
    Command,
    Custom,
    CustomEmoji,
    Emoji,
    Group,
    Hashtag,
    Italic,
    Link,
    ListNode,
    ListStyle,
    Mention,
    MentionById,
    Node,
    Pre,
    Quote,
    Spoiler,
    Strikethrough,
    TableCell,
    TableNode,
    Text,
    TextLink,
    Underline,
)
from tgmark.conditions import ConditionalFormat, apply_rules, format_text
from tgmark.dialects import Dialect, escape_text, fence, inline_code, link
from tgmark.errors import InvalidTableError
from tgmark.formatters import Formatter, FormatterRegistry
from tgmark.layout import indent, layout_table

logger = logging.getLogger(__name__)

_WRAPPERS: dict[Dialect, dict[type, tuple[str, str]]] = {
    Dialect.MARKDOWN_V2: {
        Bold: ("*", "*"),
        Italic: ("_", "_"),
        Underline: ("__", "__"),
        Strikethrough: ("~", "~"),
        Spoiler: ("||", "||"),
    },
    Dialect.HTML: {
        Bold: ("<b>", "</b>"),
        Italic: ("<i>", "</i>"),
        Underline: ("<u>", "</u>"),
        Strikethrough: ("<s>", "</s>"),
        Spoiler: ("<tg-spoiler>", "</tg-spoiler>"),
    },
}


class Generator:
    """Renders nodes for one dialect using its own formatter registry.

    The registry is frozen by the first render call, after which the
    generator can be shared between threads.
    """

    def __init__(
        self,
        dialect: Dialect,
        *,
        formatters: FormatterRegistry | None = None,
        rules: Sequence[ConditionalFormat] = (),
        strict_tables: bool = False,
    ) -> None:
        self.dialect = dialect
        self.formatters = formatters if formatters is not None else FormatterRegistry()
        self.rules = tuple(rules)
        self.strict_tables = strict_tables

    def register_formatter(self, entry: Formatter) -> None:
        self.formatters.register(entry)

    def render(self, node: Node) -> str:
        self.formatters.freeze()
        return self._render(node, True)

    def render_all(self, nodes: Iterable[Node]) -> str:
        self.formatters.freeze()
        return self._render_nodes(nodes, True)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _render_nodes(self, nodes: Iterable[Node], ruled: bool) -> str:
        return "".join(self._render(node, ruled) for node in nodes)

    def _render(self, node: Node, ruled: bool) -> str:
        """Render one node; ``ruled`` is False inside a rule's own output."""
        d = self.dialect

        match node:
            case Text(value):
                if ruled and self.rules:
                    replaced = format_text(node, self.rules)
                    if replaced != (node,):
                        return self._render_nodes(replaced, False)
                return escape_text(value, d)
            case Bold() | Italic() | Underline() | Strikethrough() | Spoiler():
                opening, closing = _WRAPPERS[d][type(node)]
                return opening + self._render_nodes(node.children, ruled) + closing
            case Code(code):
                return inline_code(code, d)
            case Pre(code, language):
                return fence(code, d, language)
            case Link(children, url):
                return link(self._render_nodes(children, ruled), url, d)
            case TextLink(text, url):
                return link(escape_text(text, d), url, d)
            case Mention(username):
                return f"@{username}"
            case MentionById(user_id, text):
                return link(escape_text(text, d), f"tg://user?id={user_id}", d)
            case Hashtag(tag):
                return f"#{tag}"
            case Command(name, args):
                return " ".join([f"/{name}", *args])
            case Emoji(emoji):
                return emoji
            case CustomEmoji(emoji, emoji_id):
                return self._render_custom_emoji(emoji, emoji_id)
            case Quote(children):
                return self._render_quote(self._render_nodes(children, ruled))
            case ListNode():
                return self._render_list(node, ruled)
            case TableNode():
                return self._render_table(node)
            case Custom(formatter, value):
                logger.debug("Rendering %s value %r", formatter, value)
                return self.formatters.render_custom(formatter, value, d)
            case Group(children):
                return self._render_nodes(children, ruled)
            case _:
                raise TypeError(f"not a document node: {type(node).__name__}")

    # ------------------------------------------------------------------
    # Entities and blocks
    # ------------------------------------------------------------------

    def _render_custom_emoji(self, emoji: str, emoji_id: int) -> str:
        shown = escape_text(emoji, self.dialect)
        if self.dialect is Dialect.MARKDOWN_V2:
            return f"![{shown}](tg://emoji?id={emoji_id})"
        return f'<tg-emoji emoji-id="{emoji_id}">{shown}</tg-emoji>'

    def _render_quote(self, content: str) -> str:
        if self.dialect is Dialect.HTML:
            return f"<blockquote>{content}</blockquote>"
        lines = content.split("\n")
        if len(lines) > 1 and not lines[-1]:
            lines.pop()
        return "\n".join(">" + line for line in lines)

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def _render_list(self, node: ListNode, ruled: bool) -> str:
        lines: list[str] = []
        for index, item in enumerate(node.items, start=1):
            line = self._list_marker(node.style, index) + self._render_nodes(item.content, ruled)
            if item.nested is not None and item.nested.items:
                line += "\n" + indent(self._render_list(item.nested, ruled))
            lines.append(line)
        return "\n".join(lines)

    def _list_marker(self, style: ListStyle | str, index: int) -> str:
        if style is ListStyle.BULLET:
            return "• "
        marker = f"{index}." if style is ListStyle.NUMBERED else str(style)
        return escape_text(marker, self.dialect) + " "

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def _render_table(self, table: TableNode) -> str:
        self._check_table(table)
        rows = [row.cells for row in table.rows]
        if table.rules:
            rows = [
                tuple(
                    dataclasses.replace(cell, content=apply_rules(cell.content, table.rules))
                    for cell in cells
                )
                for cells in rows
            ]
        return fence(layout_table(table.header, rows, table.style), self.dialect)

    def _check_table(self, table: TableNode) -> None:
        columns = len(table.header)
        for number, row in enumerate(table.rows, start=1):
            if len(row.cells) == columns:
                continue
            if self.strict_tables:
                raise InvalidTableError(
                    f"row {number} has {len(row.cells)} cells, header has {columns}"
                )
            logger.warning(
                "Table row %d has %d cells, header has %d", number, len(row.cells), columns
            )
        if self.strict_tables:
            for cell in _all_cells(table):
                if cell.colspan < 1 or cell.rowspan < 1:
                    raise InvalidTableError(
                        f"cell spans must be at least 1 (colspan={cell.colspan}, "
                        f"rowspan={cell.rowspan})"
                    )


def _all_cells(table: TableNode) -> Iterable[TableCell]:
    yield from table.header
    for row in table.rows:
        yield from row.cells
