"""Observability – structured logging helpers."""
from grid_export.observability.logging.factory import JsonLoggerFactory
from grid_export.observability.logging.processors import (
    ExportContextProcessor,
    bind_export_context,
    clear_export_context,
    get_logger,
)

__all__ = [
    "ExportContextProcessor",
    "JsonLoggerFactory",
    "bind_export_context",
    "clear_export_context",
    "get_logger",
]
