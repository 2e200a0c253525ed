"""Application export – read a rendered worksheet back as a grid of cells with spans.

Shared by the writers that do not serialize the workbook natively (CSV, HTML,
PDF, XLS): merged ranges become colspan/rowspan on their anchor cell and the
covered cells are skipped.
"""
from __future__ import annotations

import datetime as dt
from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from openpyxl.cell.cell import Cell
from openpyxl.utils.cell import coordinate_from_string
from openpyxl.worksheet.worksheet import Worksheet

__all__ = ["SheetCell", "argb_to_hex", "cell_css", "cell_text", "header_row", "sheet_rows"]


@dataclass(frozen=True)
class SheetCell:
    """One rendered cell; ``row`` / ``column`` are zero-based."""

    row: int
    column: int
    value: Any
    text: str
    colspan: int
    rowspan: int
    cell: Cell


def cell_text(value: Any) -> str:
    """Display text of a cell value for text-based formats."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, dt.datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, (dt.date, dt.time)):
        return value.isoformat()
    return str(value)


def header_row(ws: Worksheet) -> int | None:
    """1-based header row, read from the frozen pane set below it."""
    if not ws.freeze_panes:
        return None
    _, row = coordinate_from_string(ws.freeze_panes)
    return row - 1 if row > 1 else None


def sheet_rows(ws: Worksheet) -> Iterator[list[SheetCell]]:
    """Yield the used rows of *ws*, each a list of anchor cells with their spans."""
    spans: dict[tuple[int, int], tuple[int, int]] = {}
    covered: set[tuple[int, int]] = set()
    for merged in ws.merged_cells.ranges:
        spans[(merged.min_row, merged.min_col)] = (
            merged.max_col - merged.min_col + 1,
            merged.max_row - merged.min_row + 1,
        )
        for r in range(merged.min_row, merged.max_row + 1):
            for c in range(merged.min_col, merged.max_col + 1):
                if (r, c) != (merged.min_row, merged.min_col):
                    covered.add((r, c))

    for cells in ws.iter_rows(min_row=1, max_row=ws.max_row, min_col=1, max_col=ws.max_column):
        row: list[SheetCell] = []
        for cell in cells:
            position = (cell.row, cell.column)
            if position in covered:
                continue
            colspan, rowspan = spans.get(position, (1, 1))
            row.append(
                SheetCell(
                    row=cell.row - 1,
                    column=cell.column - 1,
                    value=cell.value,
                    text=cell_text(cell.value),
                    colspan=colspan,
                    rowspan=rowspan,
                    cell=cell,
                )
            )
        yield row


def argb_to_hex(color: Any) -> str | None:
    """``#RRGGBB`` for an explicit ARGB openpyxl colour, ``None`` for theme/indexed ones."""
    if color is None or getattr(color, "type", None) != "rgb":
        return None
    rgb = color.rgb
    if not isinstance(rgb, str) or len(rgb) < 6 or rgb == "00000000":
        return None
    return f"#{rgb[-6:]}"


_CSS_H_ALIGN = {"left": "left", "center": "center", "right": "right", "justify": "justify"}
_CSS_V_ALIGN = {"top": "top", "center": "middle", "bottom": "bottom"}


def cell_css(cell: Cell) -> str:
    """Inline CSS equivalent of the font, fill, alignment and borders of *cell*."""
    rules: list[str] = []
    font = cell.font
    if font is not None:
        if font.b:
            rules.append("font-weight: bold")
        if font.i:
            rules.append("font-style: italic")
        color = argb_to_hex(font.color)
        if color:
            rules.append(f"color: {color}")
    fill = cell.fill
    if fill is not None and getattr(fill, "fill_type", None) == "solid":
        background = argb_to_hex(fill.fgColor)
        if background:
            rules.append(f"background-color: {background}")
    alignment = cell.alignment
    if alignment is not None:
        if alignment.horizontal in _CSS_H_ALIGN:
            rules.append(f"text-align: {_CSS_H_ALIGN[alignment.horizontal]}")
        if alignment.vertical in _CSS_V_ALIGN:
            rules.append(f"vertical-align: {_CSS_V_ALIGN[alignment.vertical]}")
    border = cell.border
    if border is not None:
        for side in ("top", "right", "bottom", "left"):
            edge = getattr(border, side)
            if edge is not None and edge.style:
                width = "2px" if edge.style in ("medium", "thick", "double") else "1px"
                line = "dotted" if edge.style in ("dotted", "hair") else "dashed" if "dash" in edge.style else "solid"
                rules.append(f"border-{side}: {width} {line} {argb_to_hex(edge.color) or '#000000'}")
    return "; ".join(rules)
