"""Application grid – column descriptors.

A grid is an ordered list of columns; a column's *key* is its zero-based
position in that list.  Columns are read-only to the exporter.
"""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable

from grid_export.application.grid.formatter import FormatSpec, Formatter
from grid_export.kernel.text import camel2words, class_words, plain_label

if TYPE_CHECKING:
    from grid_export.application.grid.provider import DataProvider

ValueCallable = Callable[[Any, Any, int, "Column"], Any]
GroupFooterCallable = Callable[[Any, Any, int, Any], Mapping[int, Any]]

_MISSING = object()


def get_value(model: Any, path: str | Callable[[Any, Any], Any], default: Any = None) -> Any:
    """Read *path* from *model*: mapping keys, attributes, dotted paths or a callable."""
    if callable(path):
        return path(model, default)
    if isinstance(model, Mapping) and path in model:
        return model[path]
    current = model
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return default
    return current


@dataclasses.dataclass(eq=False)
class Column:
    """Base column: a header, an optional footer and export flags.

    ``cell_format`` forces the spreadsheet data type of body cells
    (``"s"``, ``"n"``, ``"b"``, ``"f"``, ``"null"``, ``"str"``, ``"inlineStr"``).
    """

    header: str | None = None
    label: str | None = None
    footer: str | None = None
    hidden_from_export: bool = False
    cell_format: str | None = None
    h_align: str | None = None
    v_align: str | None = None
    content: ValueCallable | None = None

    exportable: bool = dataclasses.field(default=True, init=False)

    def get_data_cell_value(self, model: Any, key: Any, index: int) -> Any:
        return None

    def render_value(self, model: Any, key: Any, index: int) -> Any:
        """Raw value of this column for one row (before formatting)."""
        if self.content is not None:
            return self.content(model, key, index, self)
        return self.get_data_cell_value(model, key, index)

    def format_spec(self) -> FormatSpec:
        return "raw"


@dataclasses.dataclass(eq=False)
class DataColumn(Column):
    """Column bound to a model attribute (or a value callable)."""

    attribute: str | None = None
    value: str | ValueCallable | None = None
    format: FormatSpec = "text"
    group: bool = False
    group_footer: GroupFooterCallable | None = None

    def get_data_cell_value(self, model: Any, key: Any, index: int) -> Any:
        if self.value is not None:
            if isinstance(self.value, str):
                return get_value(model, self.value)
            return self.value(model, key, index, self)
        if self.attribute is not None:
            return get_value(model, self.attribute)
        return None

    def format_spec(self) -> FormatSpec:
        return self.format


@dataclasses.dataclass(eq=False)
class SerialColumn(Column):
    """Running row number, continuing across batches."""

    header: str | None = "#"

    def get_data_cell_value(self, model: Any, key: Any, index: int) -> Any:
        return index + 1


@dataclasses.dataclass(eq=False)
class ActionColumn(Column):
    """Row action buttons; never exported."""

    def __post_init__(self) -> None:
        self.exportable = False


def column_label(
    key: int,
    column: Column,
    provider: "DataProvider | None" = None,
) -> str:
    """Resolve the display label of *column* at position *key*.

    Order: ``label`` → ``header`` → attribute label → words of the column
    class name (non data columns) → ``Column N``.
    """
    label = f"Column {key + 1}"
    if column.label is not None:
        label = column.label
    elif column.header is not None:
        label = column.header
    elif isinstance(column, DataColumn) and column.attribute:
        label = provider.attribute_label(column.attribute) if provider is not None else camel2words(column.attribute)
    elif not isinstance(column, DataColumn):
        label = class_words(column)
    return plain_label(label)


def render_cell(
    column: Column,
    model: Any,
    key: Any,
    index: int,
    formatter: Formatter,
    *,
    enable_formatter: bool = True,
) -> Any:
    """Compute the formatted cell value of *column* for one row."""
    if not column.exportable:
        return ""
    value = column.render_value(model, key, index)
    return formatter.format(value, column.format_spec() if enable_formatter else "raw")


__all__ = [
    "ActionColumn",
    "Column",
    "DataColumn",
    "SerialColumn",
    "column_label",
    "get_value",
    "render_cell",
]
