"""FastAPI adapter – export router, static assets mount and exception mapper."""
from grid_export.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from grid_export.adapters.fastapi.routers import (
    MenuFactory,
    create_export_router,
    install_export,
    mount_export_assets,
)

__all__ = [
    "FastAPIExceptionMapper",
    "MenuFactory",
    "create_export_router",
    "install_export",
    "mount_export_assets",
]
