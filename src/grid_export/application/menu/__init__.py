"""Application menu – the ExportMenu widget, its markup helpers and asset bundles."""
from grid_export.application.menu.assets import (
    BUNDLES,
    DIALOG_ASSET,
    EXPORT_COLUMN_ASSET,
    EXPORT_MENU_ASSET,
    POS_HEAD,
    POS_READY,
    STATIC_DIR,
    AssetBundle,
    View,
)
from grid_export.application.menu.html import add_css_class, render_attributes, tag
from grid_export.application.menu.widget import (
    DEFAULT_MESSAGES,
    TEMPLATES_DIR,
    ExportMenu,
    MenuOutput,
    render_page,
)

__all__ = [
    "AssetBundle",
    "BUNDLES",
    "DEFAULT_MESSAGES",
    "DIALOG_ASSET",
    "EXPORT_COLUMN_ASSET",
    "EXPORT_MENU_ASSET",
    "ExportMenu",
    "MenuOutput",
    "POS_HEAD",
    "POS_READY",
    "STATIC_DIR",
    "TEMPLATES_DIR",
    "View",
    "add_css_class",
    "render_attributes",
    "render_page",
    "tag",
]
