"""Config settings – ExportSettings (``GRID_EXPORT_*`` environment variables)."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from grid_export.config.settings.base import Settings
from grid_export.config.validation import InvalidSettingValueError

TARGET_POPUP = "_popup"
TARGET_IFRAME = "_iframe"
TARGET_SELF = "_self"
TARGET_BLANK = "_blank"

TARGETS = frozenset({TARGET_POPUP, TARGET_IFRAME, TARGET_SELF, TARGET_BLANK})
BS_VERSIONS = frozenset({3, 4, 5})


@dataclasses.dataclass
class ExportSettings(Settings):
    """Deployment-level defaults for every export menu in a process.

    ``folder`` is where non-streamed exports are written and ``link_path``
    the web path under which that folder is served.
    """

    _prefix: ClassVar[str] = "GRID_EXPORT"

    filename: str = "grid-export"
    folder: str = "runtime/export"
    link_path: str = "/runtime/export"
    stream: bool = True
    delete_after_save: bool = False
    batch_size: int = 0
    encoding: str = "utf-8"
    bs_version: int = 5
    font_awesome: bool = False
    strip_html: bool = True
    auto_width: bool = True
    sheet_name: str = "Worksheet"
    target: str = TARGET_SELF
    show_confirm_alert: bool = True

    def _validate(self) -> None:
        if self.batch_size < 0:
            raise InvalidSettingValueError("batch_size", self.batch_size, "must be >= 0")
        if self.target not in TARGETS:
            raise InvalidSettingValueError("target", self.target, f"must be one of {sorted(TARGETS)}")
        if self.bs_version not in BS_VERSIONS:
            raise InvalidSettingValueError("bs_version", self.bs_version, "must be 3, 4 or 5")
        if not self.filename.strip():
            raise InvalidSettingValueError("filename", self.filename, "must not be blank")
        if not 1 <= len(self.sheet_name) <= 31:
            raise InvalidSettingValueError("sheet_name", self.sheet_name, "must be 1-31 characters")


__all__ = [
    "BS_VERSIONS",
    "ExportSettings",
    "TARGETS",
    "TARGET_BLANK",
    "TARGET_IFRAME",
    "TARGET_POPUP",
    "TARGET_SELF",
]
