"""Application-layer errors – problems with how the library is being used."""

from __future__ import annotations

from grid_export.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


__all__ = ["ApplicationError"]
