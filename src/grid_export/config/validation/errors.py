"""Config validation errors."""
from __future__ import annotations

from typing import Any, Iterable

from grid_export.kernel.errors import ApplicationError


class ConfigError(ApplicationError):
    """Raised when configuration is invalid or loading failed."""
    default_code = "config_error"
    http_status = 400


class MissingRequiredSettingError(ConfigError):
    """A required environment variable / setting is absent."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(f"Required setting '{setting_name}' is missing")
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A setting's value is present but semantically invalid."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(
            f"Setting '{setting_name}' has invalid value {value!r}: {reason}"
        )
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


class ExportConfigError(ConfigError):
    """The export menu / renderer was configured inconsistently."""
    default_code = "export_config_error"


class UnknownExportFormatError(ExportConfigError):
    """The requested export format is unknown or has been disabled."""
    default_code = "unknown_export_format"

    def __init__(self, export_type: object, available: Iterable[str] = (), **kwargs: Any) -> None:
        names = sorted(available)
        super().__init__(
            f"Export format {export_type!r} is not available",
            detail={"export_type": export_type, "available": names},
            **kwargs,
        )
        self.export_type = export_type
        self.available = names


class UnknownWriterError(ExportConfigError):
    """A format profile names a writer that is not registered."""
    default_code = "unknown_writer"

    def __init__(self, writer: object, **kwargs: Any) -> None:
        super().__init__(f"No export writer registered as {writer!r}", detail={"writer": writer}, **kwargs)
        self.writer = writer


class InvalidStyleError(ExportConfigError):
    """A style configuration mapping could not be applied to a cell range."""
    default_code = "invalid_style"

    def __init__(self, message: str, *, option: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.option = option
        if option is not None:
            self.detail.setdefault("option", option)


__all__ = [
    "ConfigError",
    "ExportConfigError",
    "InvalidSettingValueError",
    "InvalidStyleError",
    "MissingRequiredSettingError",
    "UnknownExportFormatError",
    "UnknownWriterError",
]
