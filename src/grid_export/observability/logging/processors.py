"""Observability – structlog processors and get_logger helper."""
from __future__ import annotations

from typing import Any

import structlog


class ExportContextProcessor:
    """structlog processor that tags every event with the export in progress.

    Injects ``export_type`` and ``menu_id`` from structlog's context variables
    under stable names so JSON log lines can be grouped per export request::

        bind_export_context(menu_id="w0", export_type="Csv")
        structlog.configure(processors=[ExportContextProcessor(), ...])
    """

    def __call__(
        self,
        logger: Any,           # noqa: ARG002
        method_name: str,      # noqa: ARG002
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        ctx = structlog.contextvars.get_contextvars()
        for key in ("menu_id", "export_type"):
            if key in ctx:
                event_dict.setdefault(key, ctx[key])
        return event_dict


def bind_export_context(**values: Any) -> None:
    """Bind export-scoped values (``menu_id``, ``export_type``) to the current context."""
    structlog.contextvars.bind_contextvars(**values)


def clear_export_context() -> None:
    structlog.contextvars.unbind_contextvars("menu_id", "export_type")


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


__all__ = [
    "ExportContextProcessor",
    "bind_export_context",
    "clear_export_context",
    "get_logger",
]
