"""Application export – CsvWriter (also serves the tab-delimited Txt format)."""
from __future__ import annotations

import csv
import io
from typing import BinaryIO

from openpyxl import Workbook

from grid_export.application.export.layout import sheet_rows

__all__ = ["CsvWriter"]


class CsvWriter:
    """Writes the active sheet as delimited text.

    Merged banner rows keep their value in the first cell only.  Fields are
    enclosed in ``"`` when needed and lines end with ``\\r\\n``.
    """

    def __init__(
        self,
        delimiter: str = ",",
        quoting: int = csv.QUOTE_MINIMAL,
        *,
        encoding: str = "utf-8",
        bom: bool = False,
    ) -> None:
        self._delimiter = delimiter
        self._quoting = quoting
        self._encoding = encoding
        self._bom = bom

    @property
    def delimiter(self) -> str:
        return self._delimiter

    def write(self, workbook: Workbook, stream: BinaryIO) -> None:
        buf = io.StringIO()
        if self._bom and self._encoding.lower().replace("-", "") == "utf8":
            buf.write("\ufeff")  # BOM for Excel compatibility

        writer = csv.writer(
            buf,
            delimiter=self._delimiter,
            quotechar='"',
            quoting=self._quoting,
            lineterminator="\r\n",
        )
        ws = workbook.active
        width = ws.max_column
        for row in sheet_rows(ws):
            values = [""] * width
            for cell in row:
                values[cell.column] = cell.text
            writer.writerow(values)

        stream.write(buf.getvalue().encode(self._encoding))
