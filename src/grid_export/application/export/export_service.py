"""Application export – ExportService: serialize a rendered sheet, stream it or save it."""
from __future__ import annotations

import io
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, BinaryIO
from urllib.parse import quote

from grid_export.application.export.hooks import ExportHooks
from grid_export.application.export.renderer import RenderedSheet
from grid_export.application.export.resolver import ResolvedExport
from grid_export.application.export.writers import get_writer
from grid_export.kernel.errors import BaseError, ExportWriteError, FolderCreationError
from grid_export.observability.logging import get_logger

if TYPE_CHECKING:
    from grid_export.config.settings import ExportSettings

__all__ = ["ExportResult", "ExportService", "content_disposition"]

logger = get_logger(__name__)


def content_disposition(filename: str, disposition: str = "attachment") -> str:
    """``Content-Disposition`` value; non-ASCII names get an RFC 5987 ``filename*``."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "")
    value = f'{disposition}; filename="{fallback}"'
    if fallback != filename:
        value += f"; filename*=UTF-8''{quote(filename)}"
    return value


@dataclass
class ExportResult:
    """Outcome of one export: the bytes to stream or where the file was saved."""

    export_type: str
    filename: str
    extension: str
    mime: str
    content_type: str
    data: bytes | None = None
    path: str | None = None
    link: str | None = None
    streamed: bool = False
    aborted: bool = False
    deleted: bool = False

    @property
    def size_bytes(self) -> int:
        return len(self.data) if self.data is not None else 0

    @property
    def content_disposition(self) -> str:
        return content_disposition(self.filename)


class ExportService:
    """Runs the writer for the resolved profile and delivers the output.

    Stream mode keeps the file in memory for the HTTP layer.  Save mode
    writes ``folder/filename.ext`` (creating *folder*), optionally deletes it
    again, and reports ``link_path/<link_file_name or filename>.ext``.
    """

    def __init__(
        self,
        *,
        filename: str = "grid-export",
        folder: str | Path = "runtime/export",
        link_path: str = "/runtime/export",
        link_file_name: str | None = None,
        stream: bool = True,
        delete_after_save: bool = False,
        encoding: str = "utf-8",
        hooks: ExportHooks | dict[str, Any] | None = None,
        widget: Any = None,
    ) -> None:
        self.filename = filename
        self.folder = Path(folder)
        self.link_path = link_path
        self.link_file_name = link_file_name
        self.stream = stream
        self.delete_after_save = delete_after_save
        self.encoding = encoding
        self.hooks = ExportHooks.from_mapping(hooks)
        self.widget = widget

    @classmethod
    def from_settings(cls, settings: "ExportSettings", **overrides: Any) -> "ExportService":
        options: dict[str, Any] = {
            "filename": settings.filename,
            "folder": settings.folder,
            "link_path": settings.link_path,
            "stream": settings.stream,
            "delete_after_save": settings.delete_after_save,
            "encoding": settings.encoding,
        }
        options.update(overrides)
        return cls(**options)

    def export(self, resolved: ResolvedExport, rendered: RenderedSheet) -> ExportResult:
        profile = resolved.profile
        writer = get_writer(profile.writer, profile, encoding=self.encoding)
        self.hooks.raise_event("on_init_writer", writer, self.widget)

        extension = profile.extension
        content_type = profile.mime
        if profile.is_text:
            content_type += f"; charset={self.encoding}"
        result = ExportResult(
            export_type=resolved.export_type,
            filename=f"{self.filename}.{extension}",
            extension=extension,
            mime=profile.mime,
            content_type=content_type,
        )
        start = time.monotonic()
        if self.stream:
            self._stream(writer, rendered, result)
        else:
            self._save(writer, rendered, result)
        logger.info(
            "export_generated",
            export_type=result.export_type,
            filename=result.filename,
            streamed=result.streamed,
            aborted=result.aborted,
            bytes=result.size_bytes,
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )
        return result

    # ------------------------------------------------------------------
    # delivery
    # ------------------------------------------------------------------

    def _write(self, writer: Any, rendered: RenderedSheet, stream: BinaryIO, path: Path | None = None) -> None:
        try:
            writer.write(rendered.workbook, stream)
        except BaseError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ExportWriteError(
                f"Writer {type(writer).__name__} failed: {exc}",
                path=str(path) if path is not None else None,
                cause=exc,
            ) from exc

    def _stream(self, writer: Any, rendered: RenderedSheet, result: ExportResult) -> None:
        with io.BytesIO() as buffer:
            self._write(writer, rendered, buffer)
            data = buffer.getvalue()
        if not self.hooks.allows_file(result.extension, self.widget):
            result.aborted = True
            return
        result.data = data
        result.streamed = True

    def _save(self, writer: Any, rendered: RenderedSheet, result: ExportResult) -> None:
        try:
            self.folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FolderCreationError(str(self.folder), cause=exc) from exc
        if not self.folder.is_dir():
            raise FolderCreationError(str(self.folder))

        path = self.folder / result.filename
        try:
            with path.open("wb") as handle:
                self._write(writer, rendered, handle, path)
        except OSError as exc:
            path.unlink(missing_ok=True)
            raise ExportWriteError(f"Could not write export file: {exc}", path=str(path), cause=exc) from exc
        except BaseError:
            path.unlink(missing_ok=True)
            raise
        logger.info("export_file_saved", path=str(path))

        if not self.hooks.allows_file(result.extension, self.widget):
            path.unlink(missing_ok=True)
            result.aborted = True
            return

        result.path = str(path)
        result.link = f"{self.link_path.rstrip('/')}/{self.link_file_name or self.filename}.{result.extension}"
        if self.delete_after_save:
            path.unlink(missing_ok=True)
            result.deleted = True
            logger.info("export_file_deleted", path=str(path))
