"""Target dialects and their escaping rules."""

from __future__ import annotations

from enum import Enum


class Dialect(Enum):
    MARKDOWN_V2 = "markdownv2"
    HTML = "html"


# Characters MarkdownV2 reserves in prose
_MD_RESERVED = frozenset("\\_*[]()~`>#+-=|{}.!")


# ---------------------------------------------------------------------------
# MarkdownV2 escaping
# ---------------------------------------------------------------------------


def escape_markdown_v2(text: str) -> str:
    """Escape text for MarkdownV2 prose."""
    return "".join(f"\\{ch}" if ch in _MD_RESERVED else ch for ch in text)


def escape_markdown_v2_code(code: str) -> str:
    """Escape text inside a MarkdownV2 code span or pre block."""
    return code.replace("\\", "\\\\").replace("`", "\\`")


def escape_markdown_v2_url(url: str) -> str:
    """Escape the (...) part of a MarkdownV2 inline link."""
    return url.replace("\\", "\\\\").replace(")", "\\)")


# ---------------------------------------------------------------------------
# HTML escaping
# ---------------------------------------------------------------------------


def escape_html(text: str) -> str:
    """Escape text for HTML body content and attribute values."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def escape_html_code(code: str) -> str:
    """Escape text inside <code> or <pre>."""
    return code.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


# ---------------------------------------------------------------------------
# Dialect dispatch
# ---------------------------------------------------------------------------


def escape_text(text: str, dialect: Dialect) -> str:
    """General escaper for Text payloads."""
    if dialect is Dialect.MARKDOWN_V2:
        return escape_markdown_v2(text)
    return escape_html(text)


def escape_code(code: str, dialect: Dialect) -> str:
    """Narrow escaper for code, pre, and fenced table content."""
    if dialect is Dialect.MARKDOWN_V2:
        return escape_markdown_v2_code(code)
    return escape_html_code(code)


def escape_url(url: str, dialect: Dialect) -> str:
    if dialect is Dialect.MARKDOWN_V2:
        return escape_markdown_v2_url(url)
    return escape_html(url)


def inline_code(code: str, dialect: Dialect) -> str:
    """Wrap raw text as an inline code span."""
    if dialect is Dialect.MARKDOWN_V2:
        return f"`{escape_markdown_v2_code(code)}`"
    return f"<code>{escape_html_code(code)}</code>"


def fence(body: str, dialect: Dialect, language: str | None = None) -> str:
    """Wrap raw text in a pre-formatted block so fixed-width layout survives."""
    content = escape_code(body, dialect)
    if dialect is Dialect.MARKDOWN_V2:
        return f"```{language or ''}\n{content}\n```"
    if language:
        return f'<pre><code class="language-{escape_html(language)}">{content}</code></pre>'
    return f"<pre>{content}</pre>"


def link(label: str, url: str, dialect: Dialect) -> str:
    """Build a link from an already rendered label."""
    if dialect is Dialect.MARKDOWN_V2:
        return f"[{label}]({escape_markdown_v2_url(url)})"
    return f'<a href="{escape_html(url)}">{label}</a>'


def parse_dialect(name: str) -> Dialect:
    """Look up a dialect by its configuration name (case-insensitive)."""
    key = name.strip().lower().replace("_", "").replace("-", "")
    for dialect in Dialect:
        if dialect.value == key:
            return dialect
    choices = ", ".join(d.value for d in Dialect)
    raise ValueError(f"unknown dialect {name!r} (expected one of: {choices})")
