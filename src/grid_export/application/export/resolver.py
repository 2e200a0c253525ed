"""Application export – ExportConfigResolver.

Turns caller configuration plus request parameters into the single format
profile and column set a request exports with.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from grid_export.application.export.formats import (
    ExportFormat,
    FormatProfile,
    default_export_config,
    merge_config,
)
from grid_export.application.export.request import ExportRequestParams
from grid_export.application.grid.columns import Column
from grid_export.config.validation import UnknownExportFormatError
from grid_export.observability.logging import get_logger

__all__ = ["ExportConfigResolver", "ResolvedExport", "coerce_column_key"]

logger = get_logger(__name__)


def coerce_column_key(raw: Any) -> int | None:
    """Column keys are list positions; accept ints, integral floats and integer-like strings."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    if isinstance(raw, str):
        text = raw.strip()
        digits = text[1:] if text.startswith("-") else text
        if digits.isdecimal():
            return int(text)
    return None


@dataclass(frozen=True)
class ResolvedExport:
    """Outcome of resolution for one request."""

    export_type: str
    profile: FormatProfile
    profiles: Mapping[str, FormatProfile]
    selected_columns: tuple[int, ...]
    visible_columns: tuple[Column, ...]
    column_selector_enabled: bool
    trigger_download: bool = False


class ExportConfigResolver:
    """Merge format overrides onto the defaults and resolve format + columns.

    Args:
        columns: The grid columns, in display order.
        export_config: ``format → partial profile`` overrides; ``False`` or
            ``None`` disables a format.
        export_type: Format used when the request names none.
        show_column_selector / as_dropdown: The selector is active only
            when both are true.
        selected_columns: Caller default selection (keys), ``None`` = all.
        no_export_columns: Keys excluded from export and from the selector.
    """

    def __init__(
        self,
        columns: Sequence[Column],
        *,
        export_config: Mapping[str, Any] | None = None,
        export_type: str = ExportFormat.EXCEL_X.value,
        show_column_selector: bool = True,
        as_dropdown: bool = True,
        selected_columns: Iterable[Any] | None = None,
        no_export_columns: Iterable[int] = (),
        bs_version: int = 5,
        font_awesome: bool = False,
    ) -> None:
        self.columns = list(columns)
        self.export_config = dict(export_config or {})
        self.export_type = export_type
        self.show_column_selector = show_column_selector
        self.as_dropdown = as_dropdown
        self.selected_columns = list(selected_columns) if selected_columns is not None else None
        self.no_export_columns = frozenset(no_export_columns)
        self.bs_version = bs_version
        self.font_awesome = font_awesome
        self._profiles: dict[str, FormatProfile] | None = None

    # ------------------------------------------------------------------
    # formats
    # ------------------------------------------------------------------

    def profiles(self) -> dict[str, FormatProfile]:
        """Enabled profiles, defaults first (in table order) then custom formats."""
        if self._profiles is None:
            defaults = default_export_config(bs_version=self.bs_version, font_awesome=self.font_awesome)
            profiles: dict[str, FormatProfile] = {}
            for fmt in list(defaults) + [k for k in self.export_config if k not in defaults]:
                override = self.export_config.get(fmt, {})
                if override is False or (override is None and fmt in self.export_config):
                    continue
                if override is True:
                    override = {}
                settings = merge_config(defaults.get(fmt, {}), override)
                profiles[str(fmt)] = FormatProfile.from_mapping(str(fmt), settings)
            self._profiles = profiles
        return dict(self._profiles)

    def resolve_format(self, export_type: str | None = None) -> FormatProfile:
        requested = str(export_type or self.export_type)
        profiles = self.profiles()
        if requested not in profiles:
            raise UnknownExportFormatError(requested, profiles)
        return profiles[requested]

    # ------------------------------------------------------------------
    # columns
    # ------------------------------------------------------------------

    def excluded_keys(self) -> frozenset[int]:
        """Keys that can never be exported, whatever the request says."""
        return frozenset(
            key
            for key, column in enumerate(self.columns)
            if key in self.no_export_columns or not column.exportable or column.hidden_from_export
        )

    def column_selector_active(self, params: ExportRequestParams | None = None) -> bool:
        enabled = self.show_column_selector and self.as_dropdown
        if params is not None and params.trigger_download and params.column_selector_enabled is not None:
            enabled = params.column_selector_enabled
        return enabled

    def resolve_columns(
        self,
        requested: Iterable[Any] | None,
        *,
        column_selector_enabled: bool = True,
    ) -> tuple[int, ...]:
        """Selected column keys, in grid order.

        With no explicit list the caller default applies, else every column.
        Unknown keys are dropped; excluded keys never survive.
        """
        declared = range(len(self.columns))
        wanted: Iterable[Any] | None = requested if column_selector_enabled else None
        if wanted is None:
            wanted = self.selected_columns if self.selected_columns is not None else declared

        keys = {coerce_column_key(k) for k in wanted}
        unknown = [k for k in keys if k is None or k not in declared]
        if unknown:
            logger.debug("export_columns_dropped", keys=sorted(unknown, key=str))
        excluded = self.excluded_keys()
        return tuple(k for k in declared if k in keys and k not in excluded)

    def resolve(self, params: ExportRequestParams | None = None) -> ResolvedExport:
        """Resolve the active profile and column set for one request.

        Raises :class:`UnknownExportFormatError` before any rendering when
        the requested format is unknown or disabled.
        """
        params = params or ExportRequestParams()
        export_type = str(params.export_type or self.export_type)
        profile = self.resolve_format(export_type)
        selector = self.column_selector_active(params)
        requested = params.export_columns if params.trigger_download else None
        selected = self.resolve_columns(requested, column_selector_enabled=selector)
        logger.debug(
            "export_resolved",
            export_type=export_type,
            writer=profile.writer,
            columns=list(selected),
            column_selector=selector,
        )
        return ResolvedExport(
            export_type=export_type,
            profile=profile,
            profiles=self.profiles(),
            selected_columns=selected,
            visible_columns=tuple(self.columns[k] for k in selected),
            column_selector_enabled=selector,
            trigger_download=params.trigger_download,
        )
