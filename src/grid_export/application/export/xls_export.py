"""Application export – XlsWriter: Excel 97 (BIFF8) output (requires the xlwt extra)."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, BinaryIO

from openpyxl import Workbook
from openpyxl.cell.cell import Cell
from openpyxl.utils import get_column_letter

from grid_export.application.export.layout import argb_to_hex, sheet_rows

__all__ = ["XlsWriter"]

_BORDER_STYLES = {
    "thin": 1,
    "medium": 2,
    "dashed": 3,
    "dotted": 4,
    "thick": 5,
    "double": 6,
    "hair": 7,
}
_FIRST_CUSTOM_COLOUR = 0x08
_LAST_CUSTOM_COLOUR = 0x3F
_AUTOMATIC_COLOUR = 0x7FFF


def _require_xlwt() -> Any:  # pragma: no cover
    try:
        import xlwt  # noqa: PLC0415
        return xlwt
    except ImportError as exc:
        raise ImportError(
            "xlwt is required for Excel 95+ (xls) export. "
            "Install it with: pip install xlwt"
        ) from exc


class _Palette:
    """Maps ``#RRGGBB`` colours onto the workbook's 56 custom palette slots."""

    def __init__(self, book: Any) -> None:
        self._book = book
        self._slots: dict[str, int] = {}

    def index(self, color: str | None) -> int:
        if color is None:
            return _AUTOMATIC_COLOUR
        if color in self._slots:
            return self._slots[color]
        slot = _FIRST_CUSTOM_COLOUR + len(self._slots)
        if slot > _LAST_CUSTOM_COLOUR:
            return _AUTOMATIC_COLOUR
        r, g, b = (int(color[i:i + 2], 16) for i in (1, 3, 5))
        self._book.set_colour_RGB(slot, r, g, b)
        self._slots[color] = slot
        return slot


class XlsWriter:
    """Writes the active sheet into an ``.xls`` workbook.

    Carries values, merged ranges, bold / italic / colour fonts, solid
    fills, alignment, borders and column widths; xlwt has no equivalent for
    the rest of the openpyxl model.
    """

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def write(self, workbook: Workbook, stream: BinaryIO) -> None:
        xlwt = _require_xlwt()
        book = xlwt.Workbook(encoding=self._encoding)
        ws = workbook.active
        sheet = book.add_sheet(ws.title, cell_overwrite_ok=True)
        palette = _Palette(book)
        styles: dict[tuple[Any, ...], Any] = {}

        for row in sheet_rows(ws):
            for item in row:
                value = self._value(item.value)
                style = self._style(xlwt, palette, styles, item.cell, item.value)
                if item.colspan > 1 or item.rowspan > 1:
                    sheet.write_merge(
                        item.row,
                        item.row + item.rowspan - 1,
                        item.column,
                        item.column + item.colspan - 1,
                        value,
                        style,
                    )
                else:
                    sheet.write(item.row, item.column, value, style)

        for position in range(1, ws.max_column + 1):
            dimension = ws.column_dimensions.get(get_column_letter(position))
            if dimension is not None and dimension.width:
                sheet.col(position - 1).width = min(int(dimension.width * 256), 65535)

        book.save(stream)

    @staticmethod
    def _value(value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, Decimal):
            return float(value)
        if isinstance(value, (bool, int, float, str, dt.date, dt.datetime)):
            return value
        return str(value)

    @staticmethod
    def _style(xlwt: Any, palette: _Palette, cache: dict[tuple[Any, ...], Any], cell: Cell, value: Any) -> Any:
        font, fill, alignment, border = cell.font, cell.fill, cell.alignment, cell.border
        number_format = None
        if isinstance(value, dt.datetime):
            number_format = "YYYY-MM-DD HH:MM:SS"
        elif isinstance(value, dt.date):
            number_format = "YYYY-MM-DD"
        elif cell.number_format and cell.number_format != "General":
            number_format = cell.number_format
        background = argb_to_hex(fill.fgColor) if fill.fill_type == "solid" else None
        edges = tuple(
            (getattr(border, side).style, argb_to_hex(getattr(border, side).color))
            for side in ("left", "right", "top", "bottom")
        )
        key = (
            bool(font.b),
            bool(font.i),
            argb_to_hex(font.color),
            background,
            alignment.horizontal,
            alignment.vertical,
            bool(alignment.wrap_text),
            edges,
            number_format,
        )
        if key in cache:
            return cache[key]

        style = xlwt.XFStyle()
        style.font.bold = key[0]
        style.font.italic = key[1]
        if key[2]:
            style.font.colour_index = palette.index(key[2])
        if background:
            pattern = xlwt.Pattern()
            pattern.pattern = xlwt.Pattern.SOLID_PATTERN
            pattern.pattern_fore_colour = palette.index(background)
            style.pattern = pattern
        align = xlwt.Alignment()
        align.horz = {
            "left": xlwt.Alignment.HORZ_LEFT,
            "center": xlwt.Alignment.HORZ_CENTER,
            "right": xlwt.Alignment.HORZ_RIGHT,
            "justify": xlwt.Alignment.HORZ_JUSTIFIED,
        }.get(alignment.horizontal, xlwt.Alignment.HORZ_GENERAL)
        align.vert = {
            "top": xlwt.Alignment.VERT_TOP,
            "center": xlwt.Alignment.VERT_CENTER,
        }.get(alignment.vertical, xlwt.Alignment.VERT_BOTTOM)
        align.wrap = int(key[6])
        style.alignment = align
        borders = xlwt.Borders()
        for side, (line, color) in zip(("left", "right", "top", "bottom"), edges):
            if line:
                setattr(borders, side, _BORDER_STYLES.get(line, 1))
                setattr(borders, f"{side}_colour", palette.index(color or "#000000"))
        style.borders = borders
        if number_format:
            style.num_format_str = number_format
        cache[key] = style
        return style
