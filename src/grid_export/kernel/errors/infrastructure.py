"""Infrastructure errors – filesystem and serialization failures."""

from __future__ import annotations

from typing import Any

from grid_export.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a configuration problem."""

    default_code = "infrastructure_error"


class ExportIOError(InfrastructureError):
    """Generating or persisting an export file failed."""

    default_code = "export_io_error"

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.path = path
        if path is not None:
            self.detail.setdefault("path", path)


class FolderCreationError(ExportIOError):
    """The export folder does not exist and could not be created."""

    default_code = "export_folder_error"

    def __init__(self, path: str, **kwargs: Any) -> None:
        super().__init__(f"Could not create export folder '{path}'", path=path, **kwargs)


class ExportWriteError(ExportIOError):
    """A writer failed while serializing the worksheet."""

    default_code = "export_write_error"


__all__ = [
    "ExportIOError",
    "ExportWriteError",
    "FolderCreationError",
    "InfrastructureError",
]
