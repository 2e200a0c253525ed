"""
grid_export – grid export menu and tabular export library.

Import path convention::

    from grid_export.application.grid import ArrayDataProvider, DataColumn
    from grid_export.application.export import ExportConfigResolver, TabularExportRenderer
    from grid_export.application.menu import ExportMenu
    from grid_export.adapters.fastapi import create_export_router
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
