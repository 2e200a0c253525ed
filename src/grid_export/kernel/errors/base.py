"""Kernel errors – BaseError, the root of every grid-export failure."""

from __future__ import annotations

import json
from typing import Any, ClassVar


class BaseError(Exception):
    """Root of the error hierarchy.

    Every error carries a machine-readable ``code``, the HTTP status an
    adapter should answer with and a ``detail`` dict that ends up both in
    the response body and in the structured log line.

    Args:
        message: Human-readable description.
        code: Machine-readable slug (defaults to ``default_code``).
        detail: Extra context; values must be JSON-serialisable.
        cause: Original exception that triggered this error.
    """

    default_code: ClassVar[str] = "base_error"
    http_status: ClassVar[int] = 500

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = detail or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self, *, include_cause: bool = True) -> dict[str, Any]:
        """Response body: ``code``, ``message``, ``detail`` and optionally ``cause``.

        ``cause`` is the repr of the wrapped exception and is meant for logs;
        HTTP adapters pass ``include_cause=False``.
        """
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
        }
        if include_cause and self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload

    def log_fields(self) -> dict[str, Any]:
        """Flat key/value pairs for a structlog event."""
        fields: dict[str, Any] = {
            "error": type(self).__name__,
            "error_code": self.code,
            "http_status": self.http_status,
        }
        if self.cause is not None:
            fields["cause"] = type(self.cause).__name__
        return fields


__all__ = ["BaseError"]
