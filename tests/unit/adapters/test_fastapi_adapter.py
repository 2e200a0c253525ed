"""Unit tests for the FastAPI adapter – export router, assets and error mapping."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from grid_export.adapters.fastapi import (
    FastAPIExceptionMapper,
    create_export_router,
    install_export,
)
from grid_export.application.grid import ArrayDataProvider, DataColumn
from grid_export.application.menu import ExportMenu
from grid_export.config.validation import ConfigError, ExportConfigError
from grid_export.kernel.errors import FolderCreationError, InfrastructureError

ROWS = [{"id": 1, "name": "Ann", "city": "Oslo"}, {"id": 2, "name": "Bob", "city": "Rome"}]


def _factory(**options: Any) -> Any:
    def build() -> ExportMenu:
        columns = [DataColumn(attribute="name", label="Name"), DataColumn(attribute="city", label="City")]
        return ExportMenu(columns, ArrayDataProvider(ROWS), id="people", **options)

    return build


def _client(**options: Any) -> TestClient:
    app = FastAPI()
    install_export(app, _factory(**options), "/people/export")
    return TestClient(app)


# ---------------------------------------------------------------------------
# Export page
# ---------------------------------------------------------------------------


class TestExportPage:
    def test_get_renders_menu_page(self) -> None:
        resp = _client().get("/people/export")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert 'id="people-csv"' in resp.text
        assert '<script src="/people/export/assets/js/kv-export-data.js"></script>' in resp.text
        assert "var kvexpmenu_" in resp.text

    def test_custom_title(self) -> None:
        app = FastAPI()
        app.include_router(create_export_router(_factory(), "/x", title="People"))
        resp = TestClient(app).get("/x")
        assert "<title>People</title>" in resp.text

    def test_assets_served(self) -> None:
        client = _client()
        resp = client.get("/people/export/assets/js/kv-export-data.js")
        assert resp.status_code == 200
        assert "exportdata" in resp.text
        assert client.get("/people/export/assets/css/kv-export-columns.css").status_code == 200


# ---------------------------------------------------------------------------
# Downloads
# ---------------------------------------------------------------------------


class TestExportDownload:
    def test_post_streams_csv(self) -> None:
        resp = _client().post(
            "/people/export",
            data={"exportFull_people": "1", "export_type": "Csv", "export_columns": "[1]"},
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/csv; charset=utf-8"
        assert resp.headers["content-disposition"] == 'attachment; filename="grid-export.csv"'
        assert resp.content == b"City\r\nOslo\r\nRome\r\n"

    def test_post_streams_xlsx(self) -> None:
        resp = _client(filename="people").post("/people/export", data={"exportFull_people": "1"})
        assert resp.status_code == 200
        assert resp.headers["content-disposition"] == 'attachment; filename="people.xlsx"'
        assert resp.content[:2] == b"PK"

    def test_post_without_trigger_renders_page(self) -> None:
        resp = _client().post("/people/export", data={"export_type": "Csv"})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "export-full-csv" in resp.text

    def test_veto_answers_no_content(self) -> None:
        client = _client(hooks={"on_generate_file": lambda ext, widget: False})
        resp = client.post("/people/export", data={"exportFull_people": "1", "export_type": "Csv"})
        assert resp.status_code == 204
        assert resp.content == b""

    def test_save_mode_renders_link(self, tmp_path: Path) -> None:
        client = _client(stream=False, folder=tmp_path, link_path="/files")
        resp = client.post("/people/export", data={"exportFull_people": "1", "export_type": "Html"})
        assert resp.status_code == 200
        assert '<a href="/files/grid-export.html" download="grid-export.html"' in resp.text
        assert (tmp_path / "grid-export.html").exists()

    def test_unknown_format_is_bad_request(self) -> None:
        resp = _client().post("/people/export", data={"exportFull_people": "1", "export_type": "Docx"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "unknown_export_format"
        assert body["detail"]["export_type"] == "Docx"
        assert "Csv" in body["detail"]["available"]

    def test_folder_error_is_server_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        client = _client(stream=False, folder=blocker / "exports")
        resp = client.post("/people/export", data={"exportFull_people": "1", "export_type": "Csv"})
        assert resp.status_code == 500
        assert resp.json()["code"] == FolderCreationError.default_code


# ---------------------------------------------------------------------------
# Exception mapper
# ---------------------------------------------------------------------------


class TestFastAPIExceptionMapper:
    def test_mappings(self) -> None:
        assert FastAPIExceptionMapper().mappings == [(ConfigError, 400), (InfrastructureError, 500)]

    def test_error_body_has_no_cause(self) -> None:
        app = FastAPI()
        FastAPIExceptionMapper().register(app)

        @app.get("/boom")
        def boom() -> None:
            raise ExportConfigError("bad option", detail={"option": "x"}, cause=ValueError("inner"))

        resp = TestClient(app).get("/boom")
        assert resp.status_code == 400
        assert resp.json() == {"code": ExportConfigError.default_code, "message": "bad option", "detail": {"option": "x"}}

    def test_subclass_status_overrides_family_status(self) -> None:
        class TooLarge(ExportConfigError):
            default_code = "export_too_large"
            http_status = 413

        app = FastAPI()
        FastAPIExceptionMapper().register(app)

        @app.get("/big")
        def big() -> None:
            raise TooLarge("too many rows", detail={"rows": 10})

        resp = TestClient(app).get("/big")
        assert resp.status_code == 413
        assert resp.json()["code"] == "export_too_large"


@pytest.mark.parametrize("path", ["/export", "/export/"])
def test_assets_url_ignores_trailing_slash(path: str) -> None:
    app = FastAPI()
    app.include_router(create_export_router(_factory(), path))
    resp = TestClient(app).get(path)
    assert '/export/assets/js/kv-export-data.js' in resp.text
