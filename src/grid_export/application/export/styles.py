"""Application export – style options → openpyxl styles applied over cell ranges.

Style options are plain mappings so they can live in configuration::

    {
        "font": {"bold": True, "color": "FF000080", "size": 11, "name": "Arial"},
        "fill": {"fill_type": "solid", "color": "FFE5E5E5"},
        "borders": {
            "outline": {"style": "medium", "color": "FF000000"},
            "inside": {"style": "thin"},
        },
        "alignment": {"horizontal": "center", "wrap_text": True},
        "number_format": "#,##0.00",
    }

Border keys: ``all``, ``outline``, ``inside``, ``vertical``, ``horizontal``,
``top``, ``bottom``, ``left``, ``right``; applied in that order over the range,
later keys overriding earlier ones.  Partial fonts / alignments merge onto
what a cell already has.
"""
from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import range_boundaries
from openpyxl.worksheet.worksheet import Worksheet

from grid_export.config.validation import InvalidStyleError

__all__ = [
    "BOX_STYLE",
    "COLOR_BLACK",
    "COLOR_DARKBLUE",
    "COLOR_WHITE",
    "GROUPED_ROW_STYLE",
    "HEADER_STYLE",
    "StyleSpec",
    "apply_style",
]

COLOR_BLACK = "FF000000"
COLOR_WHITE = "FFFFFFFF"
COLOR_DARKBLUE = "FF000080"

HEADER_STYLE: dict[str, Any] = {
    "font": {"bold": True},
    "fill": {"fill_type": "solid", "color": "FFE5E5E5"},
    "borders": {
        "outline": {"style": "medium", "color": COLOR_BLACK},
        "inside": {"style": "thin", "color": COLOR_BLACK},
    },
}

BOX_STYLE: dict[str, Any] = {
    "borders": {
        "outline": {"style": "medium", "color": COLOR_BLACK},
        "inside": {"style": "dotted", "color": COLOR_BLACK},
    },
}

GROUPED_ROW_STYLE: dict[str, Any] = {
    "font": {"bold": False, "color": COLOR_DARKBLUE},
    "fill": {"fill_type": "solid", "color": COLOR_WHITE},
}

_STYLE_KEYS = frozenset({"font", "fill", "borders", "alignment", "number_format"})
_BORDER_ORDER = ("all", "outline", "inside", "vertical", "horizontal", "top", "bottom", "left", "right")
_SIDES = ("left", "right", "top", "bottom")


def _color(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = value.get("argb") or value.get("rgb")
    text = str(value).lstrip("#").upper()
    if len(text) == 6:
        text = "FF" + text
    return text


@dataclass
class StyleSpec:
    """Validated, pre-built form of one style option mapping."""

    name: str = "style"
    font: dict[str, Any] = field(default_factory=dict)
    fill: PatternFill | None = None
    alignment: dict[str, Any] = field(default_factory=dict)
    borders: dict[str, Side] = field(default_factory=dict)
    number_format: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.font or self.fill or self.alignment or self.borders or self.number_format)

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None, name: str = "style") -> "StyleSpec":
        """Validate *options*; raises :class:`InvalidStyleError` naming *name*."""
        spec = cls(name=name)
        if not options:
            return spec
        if not isinstance(options, Mapping):
            raise InvalidStyleError(f"{name} must be a mapping", option=name)
        unknown = sorted(set(options) - _STYLE_KEYS)
        if unknown:
            raise InvalidStyleError(f"{name} has unknown keys: {', '.join(unknown)}", option=name)
        try:
            spec.font = cls._font(options.get("font") or {})
            spec.fill = cls._fill(options.get("fill"))
            spec.alignment = dict(options.get("alignment") or {})
            if spec.alignment:
                Alignment(**spec.alignment)
            spec.borders = {
                key: Side(style=side.get("style"), color=_color(side.get("color", COLOR_BLACK)))
                for key, side in (options.get("borders") or {}).items()
                if cls._border_key(key, name)
            }
            spec.number_format = options.get("number_format")
        except InvalidStyleError:
            raise
        except (TypeError, ValueError, AttributeError) as exc:
            raise InvalidStyleError(f"{name} is invalid: {exc}", option=name, cause=exc) from exc
        return spec

    @staticmethod
    def _border_key(key: str, name: str) -> bool:
        if key not in _BORDER_ORDER:
            raise InvalidStyleError(f"{name} has unknown border '{key}'", option=name)
        return True

    @staticmethod
    def _font(options: Mapping[str, Any]) -> dict[str, Any]:
        font = dict(options)
        if "color" in font:
            font["color"] = _color(font["color"])
        if font.get("underline") is True:
            font["underline"] = "single"
        elif font.get("underline") is False:
            font["underline"] = None
        if font:
            Font(**font)
        return font

    @staticmethod
    def _fill(options: Mapping[str, Any] | None) -> PatternFill | None:
        if not options:
            return None
        opts = dict(options)
        color = _color(opts.pop("color", None))
        start = _color(opts.pop("start_color", None)) or color
        end = _color(opts.pop("end_color", None)) or start
        fill_type = opts.pop("fill_type", "solid")
        if opts:
            raise InvalidStyleError(f"unknown fill keys: {', '.join(sorted(opts))}", option="fill")
        return PatternFill(fill_type=fill_type, start_color=start, end_color=end)

    def apply(self, ws: Worksheet, cell_range: str) -> None:
        """Apply this style to every cell of *cell_range* (``"A1:C4"``)."""
        if self.is_empty:
            return
        min_col, min_row, max_col, max_row = range_boundaries(cell_range)
        for row in ws.iter_rows(min_row=min_row, max_row=max_row, min_col=min_col, max_col=max_col):
            for cell in row:
                if self.font:
                    font = copy.copy(cell.font)
                    for attr, value in self.font.items():
                        setattr(font, attr, value)
                    cell.font = font
                if self.fill is not None:
                    cell.fill = copy.copy(self.fill)
                if self.alignment:
                    alignment = copy.copy(cell.alignment)
                    for attr, value in self.alignment.items():
                        setattr(alignment, attr, value)
                    cell.alignment = alignment
                if self.number_format:
                    cell.number_format = self.number_format
                if self.borders:
                    cell.border = self._border_for(cell, min_row, max_row, min_col, max_col)

    def _border_for(self, cell: Any, min_row: int, max_row: int, min_col: int, max_col: int) -> Border:
        r, c = cell.row, cell.column
        sides = {s: getattr(cell.border, s) for s in _SIDES}
        edges = {
            "all": set(_SIDES),
            "outline": {
                s for s, hit in (("top", r == min_row), ("bottom", r == max_row),
                                 ("left", c == min_col), ("right", c == max_col)) if hit
            },
            "inside": {
                s for s, hit in (("top", r > min_row), ("bottom", r < max_row),
                                 ("left", c > min_col), ("right", c < max_col)) if hit
            },
            "horizontal": {s for s, hit in (("top", r > min_row), ("bottom", r < max_row)) if hit},
            "vertical": {s for s, hit in (("left", c > min_col), ("right", c < max_col)) if hit},
            "top": {"top"} if r == min_row else set(),
            "bottom": {"bottom"} if r == max_row else set(),
            "left": {"left"} if c == min_col else set(),
            "right": {"right"} if c == max_col else set(),
        }
        for key in _BORDER_ORDER:
            side = self.borders.get(key)
            if side is None:
                continue
            for s in edges[key]:
                sides[s] = copy.copy(side)
        return Border(**sides)


def apply_style(ws: Worksheet, cell_range: str, options: Mapping[str, Any] | StyleSpec | None) -> None:
    """Validate (when needed) and apply *options* over *cell_range*."""
    spec = options if isinstance(options, StyleSpec) else StyleSpec.from_options(options)
    spec.apply(ws, cell_range)
