"""Application export – ExportWriter port and the writer registry."""
from __future__ import annotations

from typing import Any, BinaryIO, Callable, Protocol, runtime_checkable

from openpyxl import Workbook

from grid_export.application.export.csv_export import CsvWriter
from grid_export.application.export.excel_export import XlsxWriter
from grid_export.application.export.formats import ExportFormat, FormatProfile
from grid_export.application.export.html_export import HtmlWriter
from grid_export.application.export.pdf_export import PdfWriter
from grid_export.application.export.xls_export import XlsWriter
from grid_export.config.validation import UnknownWriterError

__all__ = ["ExportWriter", "WriterFactory", "available_writers", "get_writer", "register_writer"]


@runtime_checkable
class ExportWriter(Protocol):
    """Serializes a rendered workbook into *stream*."""

    def write(self, workbook: Workbook, stream: BinaryIO) -> None: ...


WriterFactory = Callable[[FormatProfile, str], ExportWriter]

_WRITERS: dict[str, WriterFactory] = {
    ExportFormat.CSV.value: lambda profile, encoding: CsvWriter(profile.delimiter or ",", encoding=encoding),
    ExportFormat.HTML.value: lambda profile, encoding: HtmlWriter(
        use_inline_css=profile.use_inline_css, encoding=encoding
    ),
    ExportFormat.PDF.value: lambda profile, encoding: PdfWriter(
        profile.pdf_config, use_inline_css=profile.use_inline_css
    ),
    ExportFormat.EXCEL.value: lambda profile, encoding: XlsWriter(encoding=encoding),
    ExportFormat.EXCEL_X.value: lambda profile, encoding: XlsxWriter(),
}


def register_writer(writer_id: str, factory: WriterFactory) -> None:
    """Register (or replace) the writer used by profiles naming *writer_id*."""
    _WRITERS[str(writer_id)] = factory


def available_writers() -> list[str]:
    return sorted(_WRITERS)


def get_writer(writer_id: str, profile: FormatProfile, *, encoding: str = "utf-8") -> Any:
    """Build the writer for *writer_id* configured from *profile*.

    Raises :class:`UnknownWriterError` when nothing is registered under
    *writer_id*.
    """
    factory = _WRITERS.get(str(writer_id))
    if factory is None:
        raise UnknownWriterError(writer_id)
    return factory(profile, encoding)
