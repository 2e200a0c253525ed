"""Unit tests for export formats, request parameters and the config resolver."""

from __future__ import annotations

from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from grid_export.application.export import (
    ExportConfigResolver,
    ExportFormat,
    ExportParamNames,
    ExportRequestParams,
    FormatProfile,
    default_export_config,
    merge_config,
    parse_column_keys,
    parse_flag,
)
from grid_export.application.grid import ActionColumn, DataColumn, SerialColumn
from grid_export.config.validation import ExportConfigError, UnknownExportFormatError

ALL_FORMATS = ["Html", "Csv", "Txt", "Pdf", "Xls", "Xlsx"]


def _columns(n: int = 3) -> list[DataColumn]:
    return [DataColumn(attribute=f"c{i}") for i in range(n)]


def _download(**kw: Any) -> ExportRequestParams:
    return ExportRequestParams(trigger_download=True, **kw)


# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------


class TestDefaultExportConfig:
    def test_table_order(self) -> None:
        assert list(default_export_config()) == ALL_FORMATS

    def test_text_uses_csv_writer_with_tab(self) -> None:
        txt = default_export_config()["Txt"]
        assert txt["writer"] == "Csv"
        assert txt["delimiter"] == "\t"
        assert txt["extension"] == "txt"

    def test_bs3_glyphicons(self) -> None:
        assert default_export_config(bs_version=3)["Csv"]["icon"].startswith("glyphicon")

    def test_bs3_font_awesome(self) -> None:
        assert default_export_config(bs_version=3, font_awesome=True)["Csv"]["icon"] == "fa fa-file-code-o"

    def test_bs5_icons(self) -> None:
        assert default_export_config(bs_version=5)["Pdf"]["icon"] == "far fa-file-pdf"

    def test_enum_str(self) -> None:
        assert str(ExportFormat.EXCEL_X) == "Xlsx"
        assert ExportFormat("Txt") is ExportFormat.TEXT


class TestMergeConfig:
    def test_nested_merge(self) -> None:
        base = {"options": {"title": "t", "class": "a"}, "label": "L"}
        merged = merge_config(base, {"options": {"class": "b"}, "label": "M"})
        assert merged == {"options": {"title": "t", "class": "b"}, "label": "M"}

    def test_inputs_not_mutated(self) -> None:
        base = {"options": {"title": "t"}}
        override = {"options": {"x": 1}}
        merge_config(base, override)
        assert base == {"options": {"title": "t"}}
        assert override == {"options": {"x": 1}}

    def test_none_overrides(self) -> None:
        assert merge_config({"a": 1}, None) == {"a": 1}


class TestFormatProfile:
    def test_from_mapping(self) -> None:
        profile = FormatProfile.from_mapping("Csv", default_export_config()["Csv"])
        assert profile.format == "Csv"
        assert profile.extension == "csv"
        assert profile.is_text is True

    def test_binary_profile_not_text(self) -> None:
        assert FormatProfile.from_mapping("Xlsx", default_export_config()["Xlsx"]).is_text is False

    def test_missing_writer(self) -> None:
        with pytest.raises(ExportConfigError) as exc_info:
            FormatProfile.from_mapping("Json", {"extension": "json"})
        assert exc_info.value.detail["missing"] == ["writer"]

    def test_unknown_key(self) -> None:
        with pytest.raises(ExportConfigError):
            FormatProfile.from_mapping("Csv", {"writer": "Csv", "extension": "csv", "colour": "red"})

    def test_frozen(self) -> None:
        profile = FormatProfile(format="Csv", writer="Csv", extension="csv")
        with pytest.raises(AttributeError):
            profile.extension = "txt"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Request parameters
# ---------------------------------------------------------------------------


class TestRequestParams:
    @pytest.mark.parametrize(("raw", "expected"), [(None, None), ("1", True), ("0", False), ("", False), (True, True)])
    def test_parse_flag(self, raw: Any, expected: bool | None) -> None:
        assert parse_flag(raw) is expected

    def test_parse_column_keys(self) -> None:
        assert parse_column_keys("[0, 2]") == [0, 2]
        assert parse_column_keys(["1"]) == ["1"]
        assert parse_column_keys(None) is None
        assert parse_column_keys("") is None

    def test_malformed_json_is_no_list(self) -> None:
        assert parse_column_keys("[0, 2") is None
        assert parse_column_keys('{"a": 1}') is None

    def test_from_form(self) -> None:
        names = ExportParamNames(request="exportFull_orders")
        params = ExportRequestParams.from_form(
            {
                "exportFull_orders": "1",
                "export_type": "Csv",
                "export_columns": "[2, 0]",
                "column_selector_enabled": "0",
            },
            names,
        )
        assert params == ExportRequestParams(
            trigger_download=True, export_type="Csv", export_columns=[2, 0], column_selector_enabled=False
        )

    def test_from_empty_form(self) -> None:
        assert ExportRequestParams.from_form({}, ExportParamNames()) == ExportRequestParams()


# ---------------------------------------------------------------------------
# Resolver – formats
# ---------------------------------------------------------------------------


class TestResolverFormats:
    def test_all_defaults_enabled(self) -> None:
        assert list(ExportConfigResolver(_columns()).profiles()) == ALL_FORMATS

    @pytest.mark.parametrize("disabled", [False, None])
    def test_disabled_format_absent_and_rejected(self, disabled: Any) -> None:
        resolver = ExportConfigResolver(_columns(), export_config={"Pdf": disabled})
        assert "Pdf" not in resolver.profiles()
        with pytest.raises(UnknownExportFormatError) as exc_info:
            resolver.resolve(_download(export_type="Pdf"))
        assert "Pdf" not in exc_info.value.available

    def test_override_merges(self) -> None:
        resolver = ExportConfigResolver(
            _columns(), export_config={"Csv": {"label": "Spreadsheet CSV", "options": {"class": "x"}}}
        )
        profile = resolver.resolve_format("Csv")
        assert profile.label == "Spreadsheet CSV"
        assert profile.options == {"title": "Comma Separated Values", "class": "x"}
        assert profile.mime == "application/csv"

    def test_custom_format_appended(self) -> None:
        resolver = ExportConfigResolver(
            _columns(),
            export_config={"Semicolon": {"writer": "Csv", "extension": "csv", "delimiter": ";", "label": "SSV"}},
        )
        assert list(resolver.profiles())[-1] == "Semicolon"
        assert resolver.resolve_format("Semicolon").delimiter == ";"

    def test_custom_format_without_writer_fails(self) -> None:
        with pytest.raises(ExportConfigError):
            ExportConfigResolver(_columns(), export_config={"Odd": {"extension": "odd"}}).profiles()

    def test_default_export_type(self) -> None:
        resolved = ExportConfigResolver(_columns(), export_type="Html").resolve()
        assert resolved.export_type == "Html"
        assert resolved.profile.writer == "Html"

    def test_unknown_format(self) -> None:
        with pytest.raises(UnknownExportFormatError):
            ExportConfigResolver(_columns()).resolve(_download(export_type="Docx"))

    def test_profiles_returns_copy(self) -> None:
        resolver = ExportConfigResolver(_columns())
        resolver.profiles().pop("Csv")
        assert "Csv" in resolver.profiles()


# ---------------------------------------------------------------------------
# Resolver – columns
# ---------------------------------------------------------------------------


class TestResolverColumns:
    def test_no_list_selects_all(self) -> None:
        assert ExportConfigResolver(_columns()).resolve(_download()).selected_columns == (0, 1, 2)

    def test_posted_list(self) -> None:
        resolved = ExportConfigResolver(_columns()).resolve(_download(export_columns=[0, 2]))
        assert resolved.selected_columns == (0, 2)
        assert len(resolved.visible_columns) == 2

    def test_string_keys_coerced_and_grid_order_kept(self) -> None:
        resolved = ExportConfigResolver(_columns()).resolve(_download(export_columns=["2", "0", "0"]))
        assert resolved.selected_columns == (0, 2)

    def test_unknown_keys_dropped(self) -> None:
        resolved = ExportConfigResolver(_columns()).resolve(_download(export_columns=[1, 7, "x", -1]))
        assert resolved.selected_columns == (1,)

    def test_integral_float_keys_kept(self) -> None:
        resolved = ExportConfigResolver(_columns()).resolve(_download(export_columns=[2.0, 0.5, float("nan")]))
        assert resolved.selected_columns == (2,)

    def test_excluded_keys_never_selected(self) -> None:
        columns = [DataColumn(attribute="a"), ActionColumn(), DataColumn(attribute="b", hidden_from_export=True),
                   SerialColumn(), DataColumn(attribute="c")]
        resolver = ExportConfigResolver(columns, no_export_columns=[3])
        resolved = resolver.resolve(_download(export_columns=[0, 1, 2, 3, 4]))
        assert resolved.selected_columns == (0, 4)
        assert resolver.excluded_keys() == frozenset({1, 2, 3})

    def test_empty_list_gives_zero_columns(self) -> None:
        assert ExportConfigResolver(_columns()).resolve(_download(export_columns=[])).selected_columns == ()

    def test_selector_disabled_ignores_posted_list(self) -> None:
        resolver = ExportConfigResolver(_columns(), show_column_selector=False)
        resolved = resolver.resolve(_download(export_columns=[0]))
        assert resolved.column_selector_enabled is False
        assert resolved.selected_columns == (0, 1, 2)

    def test_not_dropdown_disables_selector(self) -> None:
        assert ExportConfigResolver(_columns(), as_dropdown=False).column_selector_active() is False

    def test_selector_disabled_uses_caller_selection(self) -> None:
        resolver = ExportConfigResolver(_columns(), show_column_selector=False, selected_columns=["1", 2])
        assert resolver.resolve(_download(export_columns=[0])).selected_columns == (1, 2)

    def test_posted_flag_overrides_selector(self) -> None:
        resolver = ExportConfigResolver(_columns(), selected_columns=[2])
        resolved = resolver.resolve(_download(export_columns=[0], column_selector_enabled=False))
        assert resolved.column_selector_enabled is False
        assert resolved.selected_columns == (2,)

    def test_posted_list_ignored_without_trigger(self) -> None:
        resolved = ExportConfigResolver(_columns()).resolve(ExportRequestParams(export_columns=[0]))
        assert resolved.selected_columns == (0, 1, 2)
        assert resolved.trigger_download is False


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


_keys = st.one_of(st.integers(min_value=-3, max_value=12), st.integers(0, 12).map(str), st.text(max_size=3))


class TestResolverProperties:
    @given(
        n=st.integers(min_value=0, max_value=8),
        requested=st.one_of(st.none(), st.lists(_keys, max_size=12)),
        excluded=st.sets(st.integers(0, 8), max_size=4),
        selector=st.booleans(),
    )
    def test_selection_is_declared_non_excluded_subset(
        self, n: int, requested: list[Any] | None, excluded: set[int], selector: bool
    ) -> None:
        resolver = ExportConfigResolver(_columns(n), no_export_columns=excluded, show_column_selector=selector)
        selected = resolver.resolve(_download(export_columns=requested)).selected_columns
        assert set(selected) <= set(range(n)) - excluded
        assert list(selected) == sorted(set(selected))

    @given(disabled=st.sets(st.sampled_from(ALL_FORMATS), min_size=1, max_size=5))
    def test_disabled_formats_never_resolved(self, disabled: set[str]) -> None:
        resolver = ExportConfigResolver(_columns(), export_config={fmt: False for fmt in disabled})
        assert not disabled & set(resolver.profiles())
        for fmt in disabled:
            with pytest.raises(UnknownExportFormatError):
                resolver.resolve_format(fmt)
