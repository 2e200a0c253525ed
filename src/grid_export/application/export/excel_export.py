"""Application export – XlsxWriter (the rendered openpyxl workbook, saved as is)."""
from __future__ import annotations

from typing import BinaryIO

from openpyxl import Workbook

__all__ = ["XlsxWriter"]


class XlsxWriter:
    """Exports the workbook to an Excel 2007+ ``.xlsx`` file."""

    def write(self, workbook: Workbook, stream: BinaryIO) -> None:
        workbook.save(stream)
