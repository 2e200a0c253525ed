"""Application export – resolve, render, write and deliver grid exports."""
from grid_export.application.export.csv_export import CsvWriter
from grid_export.application.export.excel_export import XlsxWriter
from grid_export.application.export.export_service import ExportResult, ExportService, content_disposition
from grid_export.application.export.formats import (
    ExportFormat,
    FormatProfile,
    default_export_config,
    merge_config,
)
from grid_export.application.export.hooks import ExportHooks
from grid_export.application.export.html_export import HtmlWriter
from grid_export.application.export.pdf_export import PdfWriter
from grid_export.application.export.renderer import (
    NO_COLUMNS_NOTICE,
    RenderedSheet,
    TabularExportRenderer,
)
from grid_export.application.export.request import (
    ExportParamNames,
    ExportRequestParams,
    parse_column_keys,
    parse_flag,
)
from grid_export.application.export.resolver import ExportConfigResolver, ResolvedExport
from grid_export.application.export.styles import (
    BOX_STYLE,
    GROUPED_ROW_STYLE,
    HEADER_STYLE,
    StyleSpec,
    apply_style,
)
from grid_export.application.export.writers import (
    ExportWriter,
    available_writers,
    get_writer,
    register_writer,
)
from grid_export.application.export.xls_export import XlsWriter

__all__ = [
    "BOX_STYLE",
    "CsvWriter",
    "ExportConfigResolver",
    "ExportFormat",
    "ExportHooks",
    "ExportParamNames",
    "ExportRequestParams",
    "ExportResult",
    "ExportService",
    "ExportWriter",
    "FormatProfile",
    "GROUPED_ROW_STYLE",
    "HEADER_STYLE",
    "HtmlWriter",
    "NO_COLUMNS_NOTICE",
    "PdfWriter",
    "RenderedSheet",
    "ResolvedExport",
    "StyleSpec",
    "TabularExportRenderer",
    "XlsWriter",
    "XlsxWriter",
    "apply_style",
    "available_writers",
    "content_disposition",
    "default_export_config",
    "get_writer",
    "merge_config",
    "parse_column_keys",
    "parse_flag",
    "register_writer",
]
