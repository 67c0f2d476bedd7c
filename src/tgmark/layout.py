"""Fixed-width layout for tables and indentation for nested lists.

Layout works on plain text only. Cell content is the concatenation of a cell's
direct Text children, so styled or custom children contribute nothing to the
width or to the rendered grid. The result is raw text; escaping and fencing
belong to the generator.
"""

from __future__ import annotations

from collections.abc import Sequence

from tgmark.ast import CellAlign, TableCell, TableStyle, plain_text

INDENT = "  "

# fill, top corners, separator corners, bottom corners, column separator
_BORDERS: dict[TableStyle, tuple[str, str, str, str, str]] = {
    TableStyle.UNICODE: ("─", "┌┬┐", "├┼┤", "└┴┘", "│"),
    TableStyle.ASCII: ("-", "+++", "+++", "+++", "|"),
}

_MINIMAL_RULE = "─"


def cell_text(cell: TableCell) -> str:
    return plain_text(cell.content)


def column_widths(rows: Sequence[Sequence[TableCell]]) -> list[int]:
    """Widest cell text per column position across all rows.

    Rows may be ragged; a missing cell counts as zero width.
    """
    count = max((len(row) for row in rows), default=0)
    widths = [0] * count
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell_text(cell)))
    return widths


def pad(text: str, width: int, align: CellAlign = CellAlign.LEFT) -> str:
    """Pad text to width; centred text puts the odd space on the right."""
    match align:
        case CellAlign.RIGHT:
            return f"{text:>{width}}"
        case CellAlign.CENTER:
            return f"{text:^{width}}"
        case _:
            return f"{text:<{width}}"


def _cells(row: Sequence[TableCell], widths: Sequence[int]) -> list[str]:
    padded = []
    for i, width in enumerate(widths):
        if i < len(row):
            padded.append(pad(cell_text(row[i]), width, row[i].align))
        else:
            padded.append(pad("", width))
    return padded


def _border(widths: Sequence[int], fill: str, corners: str) -> str:
    left, middle, right = corners
    return left + middle.join(fill * (w + 2) for w in widths) + right


def _bordered_row(row: Sequence[TableCell], widths: Sequence[int], sep: str) -> str:
    return sep + "".join(f" {text} {sep}" for text in _cells(row, widths))


def layout_table(
    header: Sequence[TableCell],
    rows: Sequence[Sequence[TableCell]],
    style: TableStyle = TableStyle.UNICODE,
) -> str:
    """Lay out a table as unescaped, unfenced lines joined by newlines."""
    widths = column_widths([header, *rows])

    if style in _BORDERS:
        fill, top, middle, bottom, sep = _BORDERS[style]
        lines = [
            _border(widths, fill, top),
            _bordered_row(header, widths, sep),
            _border(widths, fill, middle),
        ]
        lines.extend(_bordered_row(row, widths, sep) for row in rows)
        lines.append(_border(widths, fill, bottom))
        return "\n".join(lines)

    lines = [" ".join(_cells(header, widths))]
    if style is TableStyle.MINIMAL:
        lines.append(" ".join(_MINIMAL_RULE * w for w in widths))
    lines.extend(" ".join(_cells(row, widths)) for row in rows)
    return "\n".join(lines)


def indent(block: str, prefix: str = INDENT) -> str:
    """Prefix every line of a rendered block."""
    return "\n".join(prefix + line for line in block.split("\n"))
