"""Config settings – 12-factor env-based configuration."""
from grid_export.config.settings.base import Settings
from grid_export.config.settings.export import (
    TARGET_BLANK,
    TARGET_IFRAME,
    TARGET_POPUP,
    TARGET_SELF,
    ExportSettings,
)
from grid_export.config.settings.factory import SettingsFactory
from grid_export.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "ExportSettings",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
    "TARGET_BLANK",
    "TARGET_IFRAME",
    "TARGET_POPUP",
    "TARGET_SELF",
]
