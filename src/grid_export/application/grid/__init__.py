"""Application grid – the column / data-provider contracts an export reads from."""
from grid_export.application.grid.columns import (
    ActionColumn,
    Column,
    DataColumn,
    SerialColumn,
    column_label,
    get_value,
    render_cell,
)
from grid_export.application.grid.formatter import Formatter
from grid_export.application.grid.provider import ArrayDataProvider, DataProvider, Row, iter_rows

__all__ = [
    "ActionColumn",
    "ArrayDataProvider",
    "Column",
    "DataColumn",
    "DataProvider",
    "Formatter",
    "Row",
    "SerialColumn",
    "column_label",
    "get_value",
    "iter_rows",
    "render_cell",
]
