"""Application export – export formats, FormatProfile and the default profile table."""
from __future__ import annotations

import copy
import dataclasses
from collections.abc import Mapping
from enum import Enum
from typing import Any

from grid_export.config.validation import ExportConfigError

__all__ = [
    "ExportFormat",
    "FormatProfile",
    "default_export_config",
    "merge_config",
]


class ExportFormat(str, Enum):
    """Built-in format identifiers (also the default writer identifiers)."""

    HTML = "Html"
    CSV = "Csv"
    TEXT = "Txt"
    PDF = "Pdf"
    EXCEL = "Xls"
    EXCEL_X = "Xlsx"

    def __str__(self) -> str:
        return self.value


_TEXT_MIMES = ("text/", "application/csv")


@dataclasses.dataclass(frozen=True)
class FormatProfile:
    """Resolved configuration of one export format."""

    format: str
    writer: str
    extension: str
    mime: str = "application/octet-stream"
    label: str = ""
    icon: str | None = None
    icon_options: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    link_options: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    options: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    alert_msg: str = ""
    delimiter: str | None = None
    use_inline_css: bool = False
    pdf_config: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def is_text(self) -> bool:
        return self.mime.startswith(_TEXT_MIMES)

    @classmethod
    def from_mapping(cls, format_id: str, settings: Mapping[str, Any]) -> "FormatProfile":
        """Build a profile from a merged settings mapping.

        Raises :class:`ExportConfigError` when ``writer`` or ``extension`` is
        missing, or an unknown key is present.
        """
        missing = [k for k in ("writer", "extension") if not settings.get(k)]
        if missing:
            raise ExportConfigError(
                f"Export format {format_id!r} is missing {', '.join(missing)}",
                detail={"format": format_id, "missing": missing},
            )
        known = {f.name for f in dataclasses.fields(cls)} - {"format"}
        unknown = sorted(set(settings) - known)
        if unknown:
            raise ExportConfigError(
                f"Export format {format_id!r} has unknown settings: {', '.join(unknown)}",
                detail={"format": format_id, "unknown": unknown},
            )
        values = {
            k: copy.deepcopy(dict(v)) if isinstance(v, Mapping) else v
            for k, v in settings.items()
        }
        return cls(format=str(format_id), **values)


def merge_config(base: Mapping[str, Any], overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """Recursively merge *overrides* onto *base* (nested mappings merge, other values replace).

    Neither input is mutated.
    """
    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in (overrides or {}).items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _icon(bs_version: int, font_awesome: bool, bs4: str, fa: str, glyph: str) -> str:
    if bs_version != 3:
        return bs4
    return fa if font_awesome else glyph


def default_export_config(*, bs_version: int = 5, font_awesome: bool = False) -> dict[str, dict[str, Any]]:
    """The built-in profile table, in menu order."""
    def icon(bs4: str, fa: str, glyph: str) -> str:
        return _icon(bs_version, font_awesome, bs4, fa, glyph)

    return {
        ExportFormat.HTML.value: {
            "label": "HTML",
            "icon": icon("fas fa-file-alt", "fa fa-file-text", "glyphicon glyphicon-save"),
            "icon_options": {"class": "text-info"},
            "link_options": {},
            "options": {"title": "Hyper Text Markup Language"},
            "alert_msg": "The HTML export file will be generated for download.",
            "mime": "text/html",
            "extension": "html",
            "writer": ExportFormat.HTML.value,
            "use_inline_css": True,
        },
        ExportFormat.CSV.value: {
            "label": "CSV",
            "icon": icon("fas fa-file-code", "fa fa-file-code-o", "glyphicon glyphicon-floppy-open"),
            "icon_options": {"class": "text-primary"},
            "link_options": {},
            "options": {"title": "Comma Separated Values"},
            "alert_msg": "The CSV export file will be generated for download.",
            "mime": "application/csv",
            "extension": "csv",
            "writer": ExportFormat.CSV.value,
            "delimiter": ",",
        },
        ExportFormat.TEXT.value: {
            "label": "Text",
            "icon": icon("far fa-file-alt", "fa fa-file-text-o", "glyphicon glyphicon-floppy-save"),
            "icon_options": {"class": "text-muted"},
            "link_options": {},
            "options": {"title": "Tab Delimited Text"},
            "alert_msg": "The TEXT export file will be generated for download.",
            "mime": "text/plain",
            "extension": "txt",
            "writer": ExportFormat.CSV.value,
            "delimiter": "\t",
        },
        ExportFormat.PDF.value: {
            "label": "PDF",
            "icon": icon("far fa-file-pdf", "fa fa-file-pdf-o", "glyphicon glyphicon-floppy-disk"),
            "icon_options": {"class": "text-danger"},
            "link_options": {},
            "options": {"title": "Portable Document Format"},
            "alert_msg": "The PDF export file will be generated for download.",
            "mime": "application/pdf",
            "extension": "pdf",
            "writer": ExportFormat.PDF.value,
            "use_inline_css": True,
            "pdf_config": {},
        },
        ExportFormat.EXCEL.value: {
            "label": "Excel 95 +",
            "icon": icon("far fa-file-excel", "fa fa-file-excel-o", "glyphicon glyphicon-floppy-remove"),
            "icon_options": {"class": "text-success"},
            "link_options": {},
            "options": {"title": "Microsoft Excel 95+ (xls)"},
            "alert_msg": "The EXCEL 95+ (xls) export file will be generated for download.",
            "mime": "application/vnd.ms-excel",
            "extension": "xls",
            "writer": ExportFormat.EXCEL.value,
        },
        ExportFormat.EXCEL_X.value: {
            "label": "Excel 2007+",
            "icon": icon("fas fa-file-excel", "fa fa-file-excel-o", "glyphicon glyphicon-floppy-remove"),
            "icon_options": {"class": "text-success"},
            "link_options": {},
            "options": {"title": "Microsoft Excel 2007+ (xlsx)"},
            "alert_msg": "The EXCEL 2007+ (xlsx) export file will be generated for download.",
            "mime": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            "extension": "xlsx",
            "writer": ExportFormat.EXCEL_X.value,
        },
    }
