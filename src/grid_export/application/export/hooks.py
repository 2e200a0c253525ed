"""Application export – ExportHooks: caller callbacks raised while an export runs."""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable

from grid_export.observability.logging import get_logger

__all__ = ["ExportHooks"]

logger = get_logger(__name__)

Hook = Callable[..., Any]


@dataclass
class ExportHooks:
    """Optional callbacks; each receives the export menu as its last argument.

    Signatures::

        on_init_excel(workbook, widget)
        on_init_writer(writer, widget)
        on_init_sheet(sheet, widget)
        on_render_header_cell(cell, content, widget)
        on_render_data_cell(cell, content, model, key, index, widget)
        on_render_footer_cell(cell, content, widget)
        on_render_sheet(sheet, widget)
        on_generate_file(extension, widget) -> bool   # False vetoes the output
    """

    on_init_excel: Hook | None = None
    on_init_writer: Hook | None = None
    on_init_sheet: Hook | None = None
    on_render_header_cell: Hook | None = None
    on_render_data_cell: Hook | None = None
    on_render_footer_cell: Hook | None = None
    on_render_sheet: Hook | None = None
    on_generate_file: Hook | None = None

    @classmethod
    def from_mapping(cls, hooks: "ExportHooks | dict[str, Hook] | None") -> "ExportHooks":
        if hooks is None:
            return cls()
        if isinstance(hooks, cls):
            return hooks
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(hooks) - known)
        if unknown:
            raise TypeError(f"Unknown export hooks: {', '.join(unknown)}")
        return cls(**hooks)

    def raise_event(self, name: str, *args: Any) -> Any:
        """Call hook *name* with *args*; ``None`` when it is not set."""
        hook = getattr(self, name)
        if hook is None:
            return None
        return hook(*args)

    def allows_file(self, extension: str, widget: Any) -> bool:
        """Raise ``on_generate_file``; only an explicit ``False`` vetoes."""
        if self.raise_event("on_generate_file", extension, widget) is False:
            logger.info("export_file_vetoed", extension=extension)
            return False
        return True
