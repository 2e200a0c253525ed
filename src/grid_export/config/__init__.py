"""Config – settings loading and configuration errors."""
from grid_export.config.settings import ExportSettings, SettingsFactory
from grid_export.config.validation import ConfigError, ExportConfigError

__all__ = ["ConfigError", "ExportConfigError", "ExportSettings", "SettingsFactory"]
