"""FastAPI adapter – FastAPIExceptionMapper."""
from __future__ import annotations

from typing import Any, Callable


def _require_fastapi() -> None:
    try:
        import fastapi  # noqa: F401
    except ImportError as exc:
        raise ImportError(
            "Install 'grid-export[fastapi]' to use the FastAPI adapter"
        ) from exc


class FastAPIExceptionMapper:
    """Register grid_export error → HTTP status-code mappings on a FastAPI app.

    Error body schema::

        {"code": "unknown_export_format", "message": "...", "detail": {...}}

    Mappings
    --------
    ``ConfigError``         → 400
    ``InfrastructureError`` → 500

    A subclass may override ``http_status`` to answer with its own status.
    """

    def __init__(self) -> None:
        _require_fastapi()
        from grid_export.config.validation import ConfigError
        from grid_export.kernel.errors import InfrastructureError

        self._map: list[tuple[type[Exception], int]] = [
            (ConfigError, ConfigError.http_status),
            (InfrastructureError, InfrastructureError.http_status),
        ]

    @property
    def mappings(self) -> list[tuple[type[Exception], int]]:
        return list(self._map)

    def register(self, app: Any) -> None:
        """Register all error handlers on a ``FastAPI`` or ``Starlette`` app."""
        from fastapi.responses import JSONResponse  # type: ignore[import-untyped]

        from grid_export.kernel.errors.base import BaseError
        from grid_export.observability.logging import get_logger

        logger = get_logger(__name__)

        for exc_type, status in self._map:

            def make_handler(code: int) -> Callable[[Any, Any], Any]:
                def handler(request: Any, exc: Any) -> Any:  # noqa: ARG001
                    if isinstance(exc, BaseError):
                        status_code = exc.http_status
                        body = exc.to_dict(include_cause=False)
                        fields = exc.log_fields()
                    else:
                        status_code = code
                        body = {"code": "error", "message": str(exc), "detail": {}}
                        fields = {"error": type(exc).__name__, "error_code": "error"}
                    log = logger.warning if status_code < 500 else logger.error
                    log("export_request_failed", status=status_code, **fields)
                    return JSONResponse(status_code=status_code, content=body)

                return handler

            app.add_exception_handler(exc_type, make_handler(status))


__all__ = ["FastAPIExceptionMapper"]
