"""tgmark: inline markup rendered as Telegram MarkdownV2 or HTML."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from tgmark.dialects import Dialect

if TYPE_CHECKING:
    from tgmark.conditions import ConditionalFormat
    from tgmark.formatters import FormatterRegistry

__version__ = "0.1.0"


def render_markup(
    source: str,
    dialect: Dialect = Dialect.MARKDOWN_V2,
    formatters: FormatterRegistry | None = None,
    rules: Sequence[ConditionalFormat] = (),
    detect: Sequence[str] = (),
) -> str:
    """Parse markup source and render it in the given dialect.

    Without a registry the built-in formatters are used. ``detect`` names the
    formatters whose values are recognized in plain text before rendering.
    """
    from tgmark.formatters import FormatterRegistry, detect_custom
    from tgmark.generator import Generator
    from tgmark.parser import parse

    if formatters is None:
        formatters = FormatterRegistry.with_builtins()
    nodes = parse(source)
    if detect:
        nodes = list(detect_custom(nodes, formatters, detect))
    return Generator(dialect, formatters=formatters, rules=rules).render_all(nodes)
