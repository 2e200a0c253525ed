"""Application export – PdfWriter: the sheet as a reportlab table (requires the pdf extra)."""
from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, BinaryIO
from xml.sax.saxutils import escape

from openpyxl import Workbook

from grid_export.application.export.layout import argb_to_hex, header_row, sheet_rows
from grid_export.config.validation import ExportConfigError

__all__ = ["PdfWriter"]

_PDF_CONFIG_KEYS = frozenset(
    {
        "format",
        "orientation",
        "margin_left",
        "margin_right",
        "margin_top",
        "margin_bottom",
        "title",
        "author",
        "subject",
        "font_size",
    }
)

_MARGINS = {"left": 15.0, "right": 15.0, "top": 16.0, "bottom": 16.0}
_ORIENTATIONS = {"portrait": False, "p": False, "landscape": True, "l": True}


def _positive(config: Mapping[str, Any], key: str, default: float, *, allow_zero: bool = False) -> float:
    raw = config.get(key, default)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        value = float("nan")
    if not math.isfinite(value) or value < 0 or (value == 0 and not allow_zero):
        raise ExportConfigError(f"Invalid pdf_config {key}: {raw!r}", detail={key: raw})
    return value


def _require_reportlab() -> Any:  # pragma: no cover
    try:
        import reportlab  # noqa: PLC0415
        return reportlab
    except ImportError as exc:
        raise ImportError(
            "reportlab is required for PDF export. "
            "Install it with: pip install reportlab"
        ) from exc


class PdfWriter:
    """Lays the active sheet out as a paginated PDF table.

    ``pdf_config`` keys: ``format`` (``A4``, ``A3``, ``LETTER``, ``LEGAL``),
    ``orientation`` (``portrait`` / ``landscape``), ``margin_*`` in mm,
    ``title``, ``author``, ``subject`` and ``font_size``.  The header row is
    repeated on every page.
    """

    def __init__(self, pdf_config: Mapping[str, Any] | None = None, *, use_inline_css: bool = True) -> None:
        config = dict(pdf_config or {})
        unknown = sorted(set(config) - _PDF_CONFIG_KEYS)
        if unknown:
            raise ExportConfigError(
                f"Unknown pdf_config keys: {', '.join(unknown)}",
                detail={"unknown": unknown},
            )
        self._config = config
        self._use_inline_css = use_inline_css
        self._font_size = _positive(config, "font_size", 8)
        self._margins = {side: _positive(config, f"margin_{side}", default, allow_zero=True)
                         for side, default in _MARGINS.items()}
        orientation = str(config.get("orientation", "portrait")).lower()
        if orientation not in _ORIENTATIONS:
            raise ExportConfigError(
                f"Unknown PDF orientation {orientation!r}", detail={"orientation": orientation}
            )
        self._landscape = _ORIENTATIONS[orientation]
        self._page_size = self._resolve_page_size(str(config.get("format", "A4")).upper())

    def _resolve_page_size(self, name: str) -> tuple[float, float]:
        _require_reportlab()
        from reportlab.lib import pagesizes  # noqa: PLC0415

        size = getattr(pagesizes, name, None)
        if not isinstance(size, tuple):
            raise ExportConfigError(f"Unknown PDF page format {name!r}", detail={"format": name})
        return pagesizes.landscape(size) if self._landscape else pagesizes.portrait(size)

    def write(self, workbook: Workbook, stream: BinaryIO) -> None:
        _require_reportlab()
        from reportlab.lib import colors  # noqa: PLC0415
        from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet  # noqa: PLC0415
        from reportlab.lib.units import mm  # noqa: PLC0415
        from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle  # noqa: PLC0415

        ws = workbook.active
        font_size = self._font_size
        base = getSampleStyleSheet()["Normal"]
        body = ParagraphStyle("GridBody", parent=base, fontSize=font_size, leading=font_size * 1.2)
        bold = ParagraphStyle("GridBold", parent=body, fontName="Helvetica-Bold")

        width = max(ws.max_column, 1)
        data: list[list[Any]] = []
        commands: list[tuple[Any, ...]] = [
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ]
        for row in sheet_rows(ws):
            line: list[Any] = [""] * width
            for cell in row:
                style = bold if cell.cell.font is not None and cell.cell.font.b else body
                line[cell.column] = Paragraph(escape(cell.text).replace("\n", "<br/>"), style)
                if cell.colspan > 1 or cell.rowspan > 1:
                    commands.append(
                        (
                            "SPAN",
                            (cell.column, cell.row),
                            (cell.column + cell.colspan - 1, cell.row + cell.rowspan - 1),
                        )
                    )
                if self._use_inline_css and cell.cell.fill is not None and cell.cell.fill.fill_type == "solid":
                    background = argb_to_hex(cell.cell.fill.fgColor)
                    if background:
                        commands.append(
                            ("BACKGROUND", (cell.column, cell.row), (cell.column, cell.row), colors.HexColor(background))
                        )
            data.append(line)

        doc = SimpleDocTemplate(
            stream,
            pagesize=self._page_size,
            leftMargin=self._margins["left"] * mm,
            rightMargin=self._margins["right"] * mm,
            topMargin=self._margins["top"] * mm,
            bottomMargin=self._margins["bottom"] * mm,
            title=self._config.get("title") or workbook.properties.title or ws.title,
            author=self._config.get("author") or workbook.properties.creator or "",
            subject=self._config.get("subject") or workbook.properties.subject or "",
        )
        table = Table(data, repeatRows=header_row(ws) or 0)
        table.setStyle(TableStyle(commands))
        doc.build([table])
