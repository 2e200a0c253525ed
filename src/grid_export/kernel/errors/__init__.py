"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── ApplicationError        (application.py)
    │   └── ConfigError         (grid_export.config.validation)
    └── InfrastructureError     (infrastructure.py)
        └── ExportIOError
            ├── FolderCreationError
            └── ExportWriteError
"""

from grid_export.kernel.errors.application import ApplicationError
from grid_export.kernel.errors.base import BaseError
from grid_export.kernel.errors.infrastructure import (
    ExportIOError,
    ExportWriteError,
    FolderCreationError,
    InfrastructureError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ExportIOError",
    "ExportWriteError",
    "FolderCreationError",
    "InfrastructureError",
]
