"""Observability – structured logging for export requests."""
from grid_export.observability.logging import JsonLoggerFactory, get_logger

__all__ = ["JsonLoggerFactory", "get_logger"]
