"""Application export – TabularExportRenderer.

Walks the visible columns and the provider rows and writes them into an
``openpyxl`` workbook (the tabular buffer the writers serialize)::

    content_before rows (merged)
    caption row + blank row            (optional)
    header row                         ← header_style_options, pane frozen below
    data rows / grouped rows           ← style_options, auto-filter
    footer row                         (when a column declares a footer)
    content_after rows (merged)
    ─ box_style_options over the whole occupied rectangle
"""
from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE, Cell
from openpyxl.styles import Alignment
from openpyxl.utils import get_column_letter, quote_sheetname
from openpyxl.worksheet.datavalidation import DataValidation
from openpyxl.worksheet.worksheet import Worksheet

from grid_export.application.export.hooks import ExportHooks
from grid_export.application.export.resolver import ResolvedExport
from grid_export.application.export.styles import (
    BOX_STYLE,
    GROUPED_ROW_STYLE,
    HEADER_STYLE,
    StyleSpec,
)
from grid_export.application.grid import (
    Column,
    DataColumn,
    DataProvider,
    Formatter,
    Row,
    column_label,
    iter_rows,
    render_cell,
)
from grid_export.config.validation import ExportConfigError
from grid_export.kernel.text import strip_html as strip_markup
from grid_export.observability.logging import get_logger

__all__ = ["CELL_FORMATS", "NO_COLUMNS_NOTICE", "RenderedSheet", "TabularExportRenderer"]

logger = get_logger(__name__)

NO_COLUMNS_NOTICE = "No columns selected for export"

CELL_FORMATS = frozenset({"s", "n", "b", "f", "null", "str", "inlineStr"})

_H_ALIGN = {"left": "left", "center": "center", "right": "right", "justify": "justify"}
_V_ALIGN = {"top": "top", "middle": "center", "center": "center", "bottom": "bottom"}
_DOC_PROPERTIES = frozenset(
    {"creator", "last_modified_by", "title", "subject", "description", "keywords", "category", "company"}
)
_MAX_WIDTH = 100
# numeric strings without a leading zero are stored as numbers
_NUMERIC = re.compile(r"^-?(0|[1-9]\d{0,14})(\.\d+)?([eE][-+]?\d+)?$")


@dataclass
class RenderedSheet:
    """The populated workbook plus the row / column bounds the writers need."""

    workbook: Workbook
    worksheet: Worksheet
    header_row: int | None
    first_data_row: int | None
    last_row: int
    last_column: int
    data_rows: int
    grouped_rows: int = 0


@dataclass(frozen=True)
class _Banner:
    value: Any
    cell_format: str | None
    style: StyleSpec

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | Any, name: str) -> "_Banner":
        if not isinstance(options, Mapping):
            options = {"value": options}
        return cls(
            value=options.get("value", ""),
            cell_format=_check_cell_format(options.get("cell_format"), name),
            style=StyleSpec.from_options(options.get("style_options"), name),
        )


def _check_cell_format(cell_format: str | None, name: str) -> str | None:
    if cell_format is not None and cell_format not in CELL_FORMATS:
        raise ExportConfigError(
            f"{name} has unknown cell format {cell_format!r}",
            detail={"option": name, "cell_format": cell_format},
        )
    return cell_format


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    if isinstance(value, (list, tuple, set, dict)):
        return str(value)
    return value


def _to_number(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    try:
        number = float(str(value).replace(",", ""))
    except ValueError:
        return value
    if not math.isfinite(number):
        return value
    return int(number) if number.is_integer() and "." not in str(value) else number


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in {"", "0", "false", "no", "off"}
    return bool(value)


def write_value(cell: Cell, value: Any, cell_format: str | None = None) -> None:
    """Write *value* into *cell*, forcing the data type named by *cell_format*.

    Without a cell format, numeric strings such as formatted ``text`` cells
    are stored as numbers; strings with a leading zero stay text.
    """
    value = _clean(value)
    if cell_format in ("s", "str", "inlineStr"):
        cell.value = "" if value is None else str(value)
        cell.data_type = "s"
    elif cell_format == "n":
        cell.value = _to_number(value)
    elif cell_format == "b":
        cell.value = _to_bool(value)
    elif cell_format == "f":
        text = str(value)
        cell.value = text if text.startswith("=") else f"={text}"
    elif cell_format == "null":
        cell.value = None
    elif isinstance(value, str) and _NUMERIC.match(value):
        cell.value = _to_number(value)
    else:
        cell.value = value


class TabularExportRenderer:
    """Render the rows of *provider* restricted to the resolved columns.

    Args:
        provider: Row source.
        formatter: Grid formatter applied per column ``format``.
        style_options / header_style_options / box_style_options /
            grouped_row_style: Style mappings (see :mod:`.styles`); the
            header, box and grouped-row styles default to the built-in ones.
        content_before / content_after: Banner rows, each
            ``{"value", "cell_format", "style_options"}``.
        caption: Optional caption written above the header.
        batch_size: Page size for provider fetches (``0`` = all at once).
        strip_html: Strip markup from rendered cell text.
        enable_formatter: Apply column formats; ``False`` writes raw values.
        enable_auto_format: Apply column ``h_align`` / ``v_align``.
        auto_width: Size columns to their longest rendered value.
        sheet_name: Title of the data sheet.
        doc_properties: Workbook properties (``title``, ``creator``, ...).
        supplement_sheets: ``title → values`` extra sheets (list sources).
        data_validation: ``title → {"column": key}`` list validations on
            data cells, sourced from a supplement sheet.
        hooks: :class:`ExportHooks` (or a mapping of them).
        widget: Passed as the last argument of every hook.

    Style and banner options are validated here so configuration errors
    surface before any row is fetched.
    """

    def __init__(
        self,
        provider: DataProvider,
        *,
        formatter: Formatter | None = None,
        style_options: Mapping[str, Any] | None = None,
        header_style_options: Mapping[str, Any] | None = None,
        box_style_options: Mapping[str, Any] | None = None,
        grouped_row_style: Mapping[str, Any] | None = None,
        content_before: Sequence[Mapping[str, Any]] = (),
        content_after: Sequence[Mapping[str, Any]] = (),
        caption: str | None = None,
        batch_size: int = 0,
        strip_html: bool = True,
        enable_formatter: bool = True,
        enable_auto_format: bool = True,
        auto_width: bool = True,
        sheet_name: str = "Worksheet",
        doc_properties: Mapping[str, Any] | None = None,
        supplement_sheets: Mapping[str, Iterable[Any] | Mapping[Any, Any]] | None = None,
        data_validation: Mapping[str, Mapping[str, Any]] | None = None,
        hooks: ExportHooks | Mapping[str, Any] | None = None,
        widget: Any = None,
    ) -> None:
        if batch_size < 0:
            raise ExportConfigError("batch_size must be >= 0", detail={"batch_size": batch_size})
        unknown = sorted(set(doc_properties or {}) - _DOC_PROPERTIES)
        if unknown:
            raise ExportConfigError(
                f"Unknown document properties: {', '.join(unknown)}",
                detail={"unknown": unknown},
            )
        self.provider = provider
        self.formatter = formatter or Formatter()
        self.body_style = StyleSpec.from_options(style_options, "style_options")
        self.header_style = StyleSpec.from_options(
            HEADER_STYLE if header_style_options is None else header_style_options, "header_style_options"
        )
        self.box_style = StyleSpec.from_options(
            BOX_STYLE if box_style_options is None else box_style_options, "box_style_options"
        )
        self.grouped_style = StyleSpec.from_options(
            GROUPED_ROW_STYLE if grouped_row_style is None else grouped_row_style, "grouped_row_style"
        )
        self.content_before = [_Banner.from_options(b, "content_before") for b in content_before]
        self.content_after = [_Banner.from_options(b, "content_after") for b in content_after]
        self.caption = caption
        self.batch_size = batch_size
        self.strip_html = strip_html
        self.enable_formatter = enable_formatter
        self.enable_auto_format = enable_auto_format
        self.auto_width = auto_width
        self.sheet_name = sheet_name
        self.doc_properties = dict(doc_properties or {})
        self.supplement_sheets = dict(supplement_sheets or {})
        self.data_validation = dict(data_validation or {})
        self.hooks = ExportHooks.from_mapping(hooks)
        self.widget = widget

    # ------------------------------------------------------------------
    # entry point
    # ------------------------------------------------------------------

    def render(self, resolved: ResolvedExport) -> RenderedSheet:
        """Build and return the populated workbook for *resolved*."""
        keys = list(resolved.selected_columns)
        columns = list(resolved.visible_columns)
        for column in columns:
            _check_cell_format(column.cell_format, "cell_format")

        workbook = Workbook()
        self.hooks.raise_event("on_init_excel", workbook, self.widget)
        for name, value in self.doc_properties.items():
            setattr(workbook.properties, name, value)
        ws = workbook.active
        try:
            ws.title = self.sheet_name
        except ValueError as exc:
            raise ExportConfigError(
                f"Invalid sheet name {self.sheet_name!r}", detail={"sheet_name": self.sheet_name}, cause=exc
            ) from exc
        self.hooks.raise_event("on_init_sheet", ws, self.widget)

        span = max(len(columns), 1)
        widths = [0] * len(columns)
        row = 1
        for banner in self.content_before:
            row = self._write_banner(ws, row, span, banner)
        if self.caption:
            write_value(ws.cell(row=row, column=1), strip_markup(self.caption))
            self._merge(ws, row, span)
            row += 2

        if not columns:
            ws.cell(row=row, column=1, value=NO_COLUMNS_NOTICE)
            last_row = row
            for banner in self.content_after:
                last_row = self._write_banner(ws, last_row + 1, span, banner) - 1
            logger.info("export_rendered", columns=0, rows=0)
            self.hooks.raise_event("on_render_sheet", ws, self.widget)
            return RenderedSheet(workbook, ws, None, None, last_row, 1, 0)

        header_row = row
        self._write_header(ws, header_row, keys, columns, widths)
        first_data_row = header_row + 1
        data_rows, grouped_rows, last_body_row = self._write_body(ws, first_data_row, keys, columns, widths)

        last_letter = get_column_letter(len(columns))
        ws.auto_filter.ref = f"A{header_row}:{last_letter}{max(last_body_row, header_row)}"

        last_row = last_body_row if last_body_row >= first_data_row else header_row
        if any(column.footer is not None for column in columns):
            last_row += 1
            self._write_footer(ws, last_row, columns, widths)

        for banner in self.content_after:
            last_row = self._write_banner(ws, last_row + 1, span, banner) - 1

        self.box_style.apply(ws, f"A1:{last_letter}{last_row}")
        if self.auto_width:
            for position, width in enumerate(widths, start=1):
                ws.column_dimensions[get_column_letter(position)].width = min(width + 2, _MAX_WIDTH)
        self._write_supplements(workbook, ws, keys, first_data_row, last_body_row)
        self.hooks.raise_event("on_render_sheet", ws, self.widget)
        logger.info("export_rendered", columns=len(columns), rows=data_rows, grouped_rows=grouped_rows)
        return RenderedSheet(
            workbook=workbook,
            worksheet=ws,
            header_row=header_row,
            first_data_row=first_data_row,
            last_row=last_row,
            last_column=len(columns),
            data_rows=data_rows,
            grouped_rows=grouped_rows,
        )

    # ------------------------------------------------------------------
    # sections
    # ------------------------------------------------------------------

    @staticmethod
    def _merge(ws: Worksheet, row: int, span: int) -> None:
        if span > 1:
            ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=span)

    def _write_banner(self, ws: Worksheet, row: int, span: int, banner: _Banner) -> int:
        write_value(ws.cell(row=row, column=1), banner.value, banner.cell_format)
        self._merge(ws, row, span)
        banner.style.apply(ws, f"A{row}:{get_column_letter(span)}{row}")
        return row + 1

    def _write_header(
        self,
        ws: Worksheet,
        row: int,
        keys: list[int],
        columns: list[Column],
        widths: list[int],
    ) -> None:
        for position, (key, column) in enumerate(zip(keys, columns)):
            label = column_label(key, column, self.provider)
            cell = ws.cell(row=row, column=position + 1)
            write_value(cell, label, "s")
            self._track(widths, position, label)
            self.hooks.raise_event("on_render_header_cell", cell, label, self.widget)
        self.header_style.apply(ws, f"A{row}:{get_column_letter(len(columns))}{row}")
        ws.freeze_panes = f"A{row + 1}"

    def _cell_content(self, column: Column, item: Row) -> Any:
        value = render_cell(
            column, item.model, item.key, item.index, self.formatter, enable_formatter=self.enable_formatter
        )
        if self.strip_html and isinstance(value, str):
            value = strip_markup(value)
        return value

    def _write_data_row(
        self,
        ws: Worksheet,
        row: int,
        item: Row,
        columns: list[Column],
        contents: list[Any],
        widths: list[int],
    ) -> None:
        for position, (column, content) in enumerate(zip(columns, contents)):
            cell = ws.cell(row=row, column=position + 1)
            write_value(cell, content, column.cell_format)
            if self.enable_auto_format and (column.h_align or column.v_align):
                cell.alignment = Alignment(
                    horizontal=_H_ALIGN.get(str(column.h_align).lower()) if column.h_align else None,
                    vertical=_V_ALIGN.get(str(column.v_align).lower()) if column.v_align else None,
                )
            self._track(widths, position, content)
            self.hooks.raise_event(
                "on_render_data_cell", cell, content, item.model, item.key, item.index, self.widget
            )
        self.body_style.apply(ws, f"A{row}:{get_column_letter(len(columns))}{row}")

    def _write_body(
        self,
        ws: Worksheet,
        first_row: int,
        keys: list[int],
        columns: list[Column],
        widths: list[int],
    ) -> tuple[int, int, int]:
        """Write data rows and grouped rows; returns (data rows, grouped rows, last row).

        A row is written once the next one is known, so a grouped row can
        follow it when a group column changes value.
        """
        group_positions = [
            p
            for p, column in enumerate(columns)
            if isinstance(column, DataColumn) and column.group and column.group_footer is not None
        ]
        row = first_row
        data_rows = grouped_rows = 0
        pending: tuple[Row, list[Any]] | None = None

        for item in iter_rows(self.provider, self.batch_size):
            contents = [self._cell_content(column, item) for column in columns]
            if pending is not None:
                previous, previous_contents = pending
                self._write_data_row(ws, row, previous, columns, previous_contents, widths)
                data_rows += 1
                row += 1
                changed = [p for p in group_positions if previous_contents[p] != contents[p]]
                if changed:
                    self._write_grouped_row(ws, row, previous, keys, columns, changed)
                    grouped_rows += 1
                    row += 1
            pending = (item, contents)

        if pending is not None:
            self._write_data_row(ws, row, pending[0], columns, pending[1], widths)
            data_rows += 1
            row += 1
            if group_positions:
                self._write_grouped_row(ws, row, pending[0], keys, columns, group_positions)
                grouped_rows += 1
                row += 1
        return data_rows, grouped_rows, row - 1

    def _write_grouped_row(
        self,
        ws: Worksheet,
        row: int,
        item: Row,
        keys: list[int],
        columns: list[Column],
        positions: list[int],
    ) -> None:
        content: dict[int, Any] = {}
        for position in positions:
            group_footer = getattr(columns[position], "group_footer", None)
            if group_footer is not None:
                content.update(group_footer(item.model, item.key, item.index, self.widget) or {})
        for position, key in enumerate(keys):
            if key in content:
                value = content[key]
                if self.strip_html and isinstance(value, str):
                    value = strip_markup(value)
                write_value(ws.cell(row=row, column=position + 1), value)
        self.grouped_style.apply(ws, f"A{row}:{get_column_letter(len(columns))}{row}")

    def _write_footer(self, ws: Worksheet, row: int, columns: list[Column], widths: list[int]) -> None:
        for position, column in enumerate(columns):
            footer = column.footer if column.footer is not None else ""
            content = strip_markup(footer) if self.strip_html else footer
            cell = ws.cell(row=row, column=position + 1)
            write_value(cell, content)
            self._track(widths, position, content)
            self.hooks.raise_event("on_render_footer_cell", cell, content, self.widget)
        self.header_style.apply(ws, f"A{row}:{get_column_letter(len(columns))}{row}")

    def _write_supplements(
        self,
        workbook: Workbook,
        ws: Worksheet,
        keys: list[int],
        first_data_row: int,
        last_body_row: int,
    ) -> None:
        sizes: dict[str, int] = {}
        for title, values in self.supplement_sheets.items():
            sheet = workbook.create_sheet(title=str(title))
            items = list(values.values()) if isinstance(values, Mapping) else list(values)
            for offset, value in enumerate(items, start=1):
                write_value(sheet.cell(row=offset, column=1), value)
            sizes[str(title)] = len(items)
        if last_body_row < first_data_row:
            return
        for title, options in self.data_validation.items():
            if title not in sizes:
                raise ExportConfigError(
                    f"Data validation source sheet {title!r} is not a supplement sheet",
                    detail={"sheet": title},
                )
            column_key = options.get("column")
            if column_key not in keys:
                logger.debug("export_validation_skipped", sheet=title, column=column_key)
                continue
            count = options.get("cell_position", sizes[title])
            validation = DataValidation(
                type="list",
                formula1=f"{quote_sheetname(title)}!$A$1:$A${max(count, 1)}",
                allow_blank=True,
            )
            letter = get_column_letter(keys.index(column_key) + 1)
            validation.add(f"{letter}{first_data_row}:{letter}{last_body_row}")
            ws.add_data_validation(validation)

    @staticmethod
    def _track(widths: list[int], position: int, value: Any) -> None:
        text = "" if value is None else str(value)
        longest = max((len(line) for line in text.splitlines()), default=0)
        if longest > widths[position]:
            widths[position] = longest
