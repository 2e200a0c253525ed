"""Application export – HtmlWriter: a standalone HTML document rendered with Jinja2."""
from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

import jinja2
from openpyxl import Workbook

from grid_export.application.export.layout import cell_css, header_row, sheet_rows

__all__ = ["HtmlWriter"]

_TEMPLATES = Path(__file__).parent / "templates"


class HtmlWriter:
    """Renders the active sheet as an HTML ``<table>``.

    Merged cells become ``colspan`` / ``rowspan``; with ``use_inline_css``
    every cell carries a ``style`` attribute derived from its font, fill,
    alignment and borders.
    """

    def __init__(self, *, use_inline_css: bool = True, encoding: str = "utf-8") -> None:
        self._use_inline_css = use_inline_css
        self._encoding = encoding
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(_TEMPLATES)),
            autoescape=True,
        )

    def render(self, workbook: Workbook) -> str:
        ws = workbook.active
        header = header_row(ws)
        rows = [
            [
                {
                    "tag": "th" if header is not None and cell.row + 1 == header else "td",
                    "text": cell.text,
                    "colspan": cell.colspan,
                    "rowspan": cell.rowspan,
                    "style": cell_css(cell.cell) if self._use_inline_css else "",
                }
                for cell in row
            ]
            for row in sheet_rows(ws)
        ]
        return self._env.get_template("html_export.html.j2").render(
            title=workbook.properties.title or ws.title,
            encoding=self._encoding,
            rows=rows,
        )

    def write(self, workbook: Workbook, stream: BinaryIO) -> None:
        stream.write(self.render(workbook).encode(self._encoding))
