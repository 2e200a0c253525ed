"""Unit tests for structured export logging."""

from __future__ import annotations

import io
import json
import logging
from typing import Any

import pytest
import structlog

from grid_export.observability.logging import (
    ExportContextProcessor,
    JsonLoggerFactory,
    bind_export_context,
    clear_export_context,
    get_logger,
)


@pytest.fixture(autouse=True)
def _reset_context() -> Any:
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


# ---------------------------------------------------------------------------
# ExportContextProcessor
# ---------------------------------------------------------------------------


class TestExportContextProcessor:
    def test_injects_bound_values(self) -> None:
        bind_export_context(menu_id="orders", export_type="Csv")
        event = ExportContextProcessor()(None, "info", {"event": "x"})
        assert event["menu_id"] == "orders"
        assert event["export_type"] == "Csv"

    def test_explicit_values_win(self) -> None:
        bind_export_context(export_type="Csv")
        event = ExportContextProcessor()(None, "info", {"event": "x", "export_type": "Pdf"})
        assert event["export_type"] == "Pdf"

    def test_no_context_leaves_event_untouched(self) -> None:
        assert ExportContextProcessor()(None, "info", {"event": "x"}) == {"event": "x"}

    def test_clear_export_context(self) -> None:
        bind_export_context(menu_id="orders", export_type="Csv", request_id="r-1")
        clear_export_context()
        ctx = structlog.contextvars.get_contextvars()
        assert "menu_id" not in ctx
        assert "export_type" not in ctx
        assert ctx["request_id"] == "r-1"


# ---------------------------------------------------------------------------
# JsonLoggerFactory + get_logger
# ---------------------------------------------------------------------------


class TestJsonLoggerFactory:
    @pytest.fixture()
    def stream(self) -> Any:
        buffer = io.StringIO()
        JsonLoggerFactory.configure(logging.DEBUG, stream=buffer)
        yield buffer
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def test_emits_json_line_with_context(self, stream: io.StringIO) -> None:
        bind_export_context(menu_id="w1", export_type="Xlsx")
        get_logger("grid_export.test").info("export_rendered", rows=3)
        line = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert line["event"] == "export_rendered"
        assert line["rows"] == 3
        assert line["menu_id"] == "w1"
        assert line["export_type"] == "Xlsx"
        assert line["level"] == "info"
        assert line["logger"] == "grid_export.test"
        assert "timestamp" in line

    def test_initial_values_bound(self, stream: io.StringIO) -> None:
        get_logger("grid_export.test", component="menu").warning("something")
        line = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert line["component"] == "menu"
        assert line["level"] == "warning"
