"""Unit tests for TabularExportRenderer."""

from __future__ import annotations

import io
from typing import Any

import pytest
from openpyxl import Workbook

from grid_export.application.export import (
    NO_COLUMNS_NOTICE,
    CsvWriter,
    ExportConfigResolver,
    ExportHooks,
    ExportRequestParams,
    RenderedSheet,
    ResolvedExport,
    TabularExportRenderer,
)
from grid_export.application.export.renderer import write_value
from grid_export.application.grid import ArrayDataProvider, DataColumn, SerialColumn
from grid_export.config.validation import ExportConfigError, InvalidStyleError

ROWS = [
    {"id": 1, "name": "Widget", "price": 9.5, "region": "North"},
    {"id": 2, "name": "<b>Gadget</b>", "price": 12.25, "region": "North"},
    {"id": 3, "name": "Doohickey", "price": 3.0, "region": "South"},
]


def _columns() -> list[Any]:
    return [
        DataColumn(attribute="id", header="ID"),
        DataColumn(attribute="name"),
        DataColumn(attribute="price", format=["decimal", 2]),
    ]


def _resolve(columns: list[Any], export_type: str = "Xlsx", keys: list[Any] | None = None) -> ResolvedExport:
    params = ExportRequestParams(trigger_download=True, export_type=export_type, export_columns=keys)
    return ExportConfigResolver(columns).resolve(params)


def _render(rows: list[Any] = ROWS, columns: list[Any] | None = None, keys: list[Any] | None = None,
            **options: Any) -> RenderedSheet:
    columns = columns if columns is not None else _columns()
    renderer = TabularExportRenderer(ArrayDataProvider(rows), **options)
    return renderer.render(_resolve(columns, keys=keys))


def _values(rendered: RenderedSheet) -> list[list[Any]]:
    return [list(row) for row in rendered.worksheet.iter_rows(values_only=True)]


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class TestRendererLayout:
    def test_header_and_rows(self) -> None:
        rendered = _render()
        assert _values(rendered) == [
            ["ID", "Name", "Price"],
            [1, "Widget", 9.5],
            [2, "Gadget", 12.25],
            [3, "Doohickey", 3.0],
        ]
        assert rendered.header_row == 1
        assert rendered.first_data_row == 2
        assert rendered.last_row == 4
        assert rendered.last_column == 3
        assert rendered.data_rows == 3

    def test_header_frozen_and_filtered(self) -> None:
        ws = _render().worksheet
        assert ws.freeze_panes == "A2"
        assert ws.auto_filter.ref == "A1:C4"

    def test_header_style_applied(self) -> None:
        ws = _render().worksheet
        assert ws["A1"].font.b is True
        assert ws["A1"].fill.fgColor.rgb == "FFE5E5E5"
        assert ws["A2"].font.b is False

    def test_box_style_outline(self) -> None:
        ws = _render().worksheet
        assert ws["A4"].border.bottom.style == "medium"
        assert ws["C2"].border.right.style == "medium"

    def test_zero_rows(self) -> None:
        rendered = _render(rows=[])
        assert _values(rendered) == [["ID", "Name", "Price"]]
        assert rendered.data_rows == 0
        assert rendered.last_row == 1

    def test_zero_columns_writes_notice(self) -> None:
        rendered = _render(keys=[])
        assert rendered.worksheet["A1"].value == NO_COLUMNS_NOTICE
        assert rendered.header_row is None
        assert rendered.data_rows == 0

    def test_zero_columns_notice_after_banners(self) -> None:
        rendered = _render(keys=[], content_before=[{"value": "Report"}])
        assert rendered.worksheet["A1"].value == "Report"
        assert rendered.worksheet["A2"].value == NO_COLUMNS_NOTICE

    def test_selected_columns_only(self) -> None:
        rendered = _render(keys=[0, 2])
        assert _values(rendered)[0] == ["ID", "Price"]
        assert _values(rendered)[1] == [1, 9.5]

    def test_serial_column_continues_across_batches(self) -> None:
        columns = [SerialColumn(), DataColumn(attribute="name")]
        rendered = _render(columns=columns, batch_size=2)
        assert [row[0] for row in _values(rendered)] == ["#", 1, 2, 3]

    def test_strip_html_disabled(self) -> None:
        rendered = _render(strip_html=False)
        assert rendered.worksheet["B3"].value == "<b>Gadget</b>"

    def test_formatter_disabled(self) -> None:
        rows = [{"id": 1, "name": "x", "price": 1.23456}]
        rendered = _render(rows=rows, enable_formatter=False)
        assert rendered.worksheet["C2"].value == 1.23456

    def test_sheet_name_and_doc_properties(self) -> None:
        rendered = _render(sheet_name="Orders", doc_properties={"title": "Orders", "creator": "ops"})
        assert rendered.worksheet.title == "Orders"
        assert rendered.workbook.properties.title == "Orders"
        assert rendered.workbook.properties.creator == "ops"

    def test_auto_width(self) -> None:
        ws = _render().worksheet
        assert ws.column_dimensions["B"].width == len("Doohickey") + 2

    def test_alignment_from_column(self) -> None:
        columns = [DataColumn(attribute="price", h_align="right", v_align="middle")]
        ws = _render(columns=columns).worksheet
        assert ws["A2"].alignment.horizontal == "right"
        assert ws["A2"].alignment.vertical == "center"


class TestBannersAndFooter:
    def test_banners_and_caption(self) -> None:
        rendered = _render(
            content_before=[{"value": "Quarterly report", "style_options": {"font": {"bold": True}}}],
            content_after=[{"value": "Generated by ops"}],
            caption="Orders",
        )
        ws = rendered.worksheet
        assert ws["A1"].value == "Quarterly report"
        assert ws["A1"].font.b is True
        assert "A1:C1" in {str(r) for r in ws.merged_cells.ranges}
        assert ws["A2"].value == "Orders"
        assert ws["A3"].value is None
        assert rendered.header_row == 4
        assert ws.freeze_panes == "A5"
        assert ws["A8"].value == "Generated by ops"
        assert rendered.last_row == 8

    def test_footer_row(self) -> None:
        columns = [DataColumn(attribute="name", footer="Total"), DataColumn(attribute="price")]
        rendered = _render(columns=columns)
        assert _values(rendered)[-1] == ["Total", ""]
        assert rendered.last_row == 5
        assert rendered.worksheet["A5"].font.b is True

    def test_banner_cell_format(self) -> None:
        ws = _render(content_before=[{"value": "0042", "cell_format": "n"}]).worksheet
        assert ws["A1"].value == 42

    def test_scalar_banner(self) -> None:
        assert _render(content_before=["Title"]).worksheet["A1"].value == "Title"


# ---------------------------------------------------------------------------
# Grouped rows
# ---------------------------------------------------------------------------


class TestGroupedRows:
    def _columns(self) -> list[Any]:
        def footer(model: Any, key: Any, index: int, widget: Any) -> dict[int, Any]:
            return {0: f"End of {model['region']}"}

        return [
            DataColumn(attribute="region", group=True, group_footer=footer),
            DataColumn(attribute="name"),
        ]

    def test_grouped_row_after_each_group(self) -> None:
        rendered = _render(columns=self._columns())
        assert _values(rendered) == [
            ["Region", "Name"],
            ["North", "Widget"],
            ["North", "Gadget"],
            ["End of North", None],
            ["South", "Doohickey"],
            ["End of South", None],
        ]
        assert rendered.data_rows == 3
        assert rendered.grouped_rows == 2

    def test_grouped_row_style(self) -> None:
        ws = _render(columns=self._columns()).worksheet
        assert ws["A4"].font.color.rgb == "FF000080"

    def test_grouped_row_style_survives_body_style(self) -> None:
        ws = _render(columns=self._columns(), style_options={"fill": {"color": "FFFF0000"}}).worksheet
        assert ws["B3"].fill.fgColor.rgb == "FFFF0000"
        assert ws["B4"].fill.fgColor.rgb == "FFFFFFFF"
        assert ws["A4"].font.color.rgb == "FF000080"

    def test_grouping_with_batches(self) -> None:
        assert _values(_render(columns=self._columns(), batch_size=1)) == _values(_render(columns=self._columns()))


# ---------------------------------------------------------------------------
# Cell formats
# ---------------------------------------------------------------------------


class TestWriteValue:
    @pytest.fixture()
    def cell(self):  # type: ignore[no-untyped-def]
        return Workbook().active["A1"]

    def test_string_format(self, cell) -> None:  # type: ignore[no-untyped-def]
        write_value(cell, 12, "s")
        assert cell.value == "12"
        assert cell.data_type == "s"

    def test_numeric_format(self, cell) -> None:  # type: ignore[no-untyped-def]
        write_value(cell, "1,250.5", "n")
        assert cell.value == 1250.5

    def test_numeric_format_keeps_text_when_not_a_number(self, cell) -> None:  # type: ignore[no-untyped-def]
        write_value(cell, "n/a", "n")
        assert cell.value == "n/a"

    def test_bool_format(self, cell) -> None:  # type: ignore[no-untyped-def]
        write_value(cell, "no", "b")
        assert cell.value is False

    def test_formula_format(self, cell) -> None:  # type: ignore[no-untyped-def]
        write_value(cell, "SUM(B1:B3)", "f")
        assert cell.value == "=SUM(B1:B3)"
        assert cell.data_type == "f"

    def test_null_format(self, cell) -> None:  # type: ignore[no-untyped-def]
        write_value(cell, "x", "null")
        assert cell.value is None

    def test_numeric_strings_bound_as_numbers(self, cell) -> None:  # type: ignore[no-untyped-def]
        write_value(cell, "12.5")
        assert cell.value == 12.5
        write_value(cell, "7")
        assert cell.value == 7

    def test_leading_zero_stays_text(self, cell) -> None:  # type: ignore[no-untyped-def]
        write_value(cell, "0042")
        assert cell.value == "0042"

    def test_overflowing_exponent_stays_text(self, cell) -> None:  # type: ignore[no-untyped-def]
        write_value(cell, "1e999")
        assert cell.value == "1e999"
        write_value(cell, "1e999", "n")
        assert cell.value == "1e999"

    def test_illegal_characters_removed(self, cell) -> None:  # type: ignore[no-untyped-def]
        write_value(cell, "a\x01b")
        assert cell.value == "ab"

    def test_column_cell_format(self) -> None:
        columns = [DataColumn(attribute="id", cell_format="s")]
        ws = _render(columns=columns).worksheet
        assert ws["A2"].value == "1"


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------


class TestRendererHooks:
    def test_events_raised_in_order(self) -> None:
        calls: list[str] = []
        widget = object()
        hooks = ExportHooks(
            on_init_excel=lambda wb, w: calls.append("excel"),
            on_init_sheet=lambda ws, w: calls.append("sheet"),
            on_render_header_cell=lambda cell, content, w: calls.append(f"header:{content}"),
            on_render_data_cell=lambda cell, content, model, key, index, w: calls.append(f"data:{index}"),
            on_render_sheet=lambda ws, w: calls.append("done" if w is widget else "wrong-widget"),
        )
        _render(rows=ROWS[:1], columns=[DataColumn(attribute="id", header="ID")], hooks=hooks, widget=widget)
        assert calls == ["excel", "sheet", "header:ID", "data:0", "done"]

    def test_data_cell_hook_can_restyle(self) -> None:
        def bold(cell: Any, content: Any, model: Any, key: Any, index: int, widget: Any) -> None:
            if index == 1:
                cell.value = f"*{content}*"

        ws = _render(hooks={"on_render_data_cell": bold}, columns=[DataColumn(attribute="name")]).worksheet
        assert ws["A3"].value == "*Gadget*"

    def test_footer_hook(self) -> None:
        seen: list[Any] = []
        _render(
            columns=[DataColumn(attribute="name", footer="Sum")],
            hooks={"on_render_footer_cell": lambda cell, content, w: seen.append(content)},
        )
        assert seen == ["Sum"]

    def test_unknown_hook_name(self) -> None:
        with pytest.raises(TypeError):
            TabularExportRenderer(ArrayDataProvider([]), hooks={"on_everything": print})


# ---------------------------------------------------------------------------
# Configuration errors surface before rows are read
# ---------------------------------------------------------------------------


class _ExplodingProvider(ArrayDataProvider):
    def fetch_all(self):  # type: ignore[no-untyped-def]
        raise AssertionError("rows must not be fetched")

    fetch_page = fetch_all  # type: ignore[assignment]


class TestRendererValidation:
    def test_invalid_style(self) -> None:
        with pytest.raises(InvalidStyleError):
            TabularExportRenderer(_ExplodingProvider([]), style_options={"font": {"weight": 1}})

    def test_negative_batch_size(self) -> None:
        with pytest.raises(ExportConfigError):
            TabularExportRenderer(ArrayDataProvider([]), batch_size=-1)

    def test_unknown_doc_property(self) -> None:
        with pytest.raises(ExportConfigError):
            TabularExportRenderer(ArrayDataProvider([]), doc_properties={"owner": "x"})

    def test_unknown_banner_cell_format(self) -> None:
        with pytest.raises(ExportConfigError):
            TabularExportRenderer(ArrayDataProvider([]), content_before=[{"value": "x", "cell_format": "date"}])

    def test_unknown_column_cell_format_raised_before_fetch(self) -> None:
        renderer = TabularExportRenderer(_ExplodingProvider([]))
        with pytest.raises(ExportConfigError):
            renderer.render(_resolve([DataColumn(attribute="a", cell_format="money")]))

    def test_invalid_sheet_name(self) -> None:
        renderer = TabularExportRenderer(ArrayDataProvider([]), sheet_name="bad/name")
        with pytest.raises(ExportConfigError):
            renderer.render(_resolve(_columns()))


# ---------------------------------------------------------------------------
# Supplement sheets and list validation
# ---------------------------------------------------------------------------


class TestSupplements:
    def test_supplement_sheet_and_validation(self) -> None:
        rendered = _render(
            supplement_sheets={"Regions": ["North", "South"]},
            data_validation={"Regions": {"column": 1}},
        )
        wb = rendered.workbook
        assert wb.sheetnames == ["Worksheet", "Regions"]
        assert [c.value for c in wb["Regions"]["A"]] == ["North", "South"]
        validations = rendered.worksheet.data_validations.dataValidation
        assert len(validations) == 1
        assert validations[0].formula1.endswith("!$A$1:$A$2")
        assert "Regions" in validations[0].formula1
        assert str(validations[0].sqref) == "B2:B4"

    def test_validation_for_unselected_column_skipped(self) -> None:
        rendered = _render(
            keys=[0, 2],
            supplement_sheets={"Regions": {"n": "North"}},
            data_validation={"Regions": {"column": 1}},
        )
        assert rendered.worksheet.data_validations.dataValidation == []

    def test_validation_without_sheet(self) -> None:
        with pytest.raises(ExportConfigError):
            _render(data_validation={"Missing": {"column": 0}})


# ---------------------------------------------------------------------------
# Properties of the whole pipeline
# ---------------------------------------------------------------------------


class TestRendererProperties:
    @pytest.mark.parametrize("batch_size", [1, 2, 5])
    def test_batching_writes_same_rows(self, batch_size: int) -> None:
        rows = [{"id": i, "name": f"n{i}", "price": i / 4} for i in range(11)]
        assert _values(_render(rows=rows, batch_size=batch_size)) == _values(_render(rows=rows))

    def test_deterministic(self) -> None:
        first, second = _render(), _render()
        assert _values(first) == _values(second)
        assert [str(r) for r in first.worksheet.merged_cells.ranges] == [
            str(r) for r in second.worksheet.merged_cells.ranges
        ]

    def test_csv_example_two_of_three_columns(self) -> None:
        columns = [DataColumn(attribute="a"), DataColumn(attribute="b"), DataColumn(attribute="c")]
        rows = [{"a": 1, "b": 2, "c": 3}, {"a": 4, "b": 5, "c": 6}]
        resolved = _resolve(columns, export_type="Csv", keys=[0, 2])
        rendered = TabularExportRenderer(ArrayDataProvider(rows)).render(resolved)
        assert resolved.profile.extension == "csv"
        assert resolved.profile.delimiter == ","

        buffer = io.BytesIO()
        CsvWriter(resolved.profile.delimiter or ",").write(rendered.workbook, buffer)
        lines = buffer.getvalue().decode("utf-8").split("\r\n")
        assert lines == ["A,C", "1,3", "4,6", ""]
        assert rendered.data_rows == 2
