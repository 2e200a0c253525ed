"""Config validation errors."""
from grid_export.config.validation.errors import (
    ConfigError,
    ExportConfigError,
    InvalidSettingValueError,
    InvalidStyleError,
    MissingRequiredSettingError,
    UnknownExportFormatError,
    UnknownWriterError,
)

__all__ = [
    "ConfigError",
    "ExportConfigError",
    "InvalidSettingValueError",
    "InvalidStyleError",
    "MissingRequiredSettingError",
    "UnknownExportFormatError",
    "UnknownWriterError",
]
