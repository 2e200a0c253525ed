"""Application export – ExportRequestParams: the form fields an export POST carries."""
from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from grid_export.observability.logging import get_logger

__all__ = ["ExportParamNames", "ExportRequestParams", "parse_column_keys", "parse_flag"]

logger = get_logger(__name__)

_FALSY = frozenset({"", "0", "false", "no", "off"})


@dataclass(frozen=True)
class ExportParamNames:
    """Names of the form fields used by one export menu."""

    request: str = "exportFull_w0"
    export_type: str = "export_type"
    export_columns: str = "export_columns"
    column_selector_flag: str = "column_selector_enabled"


def parse_flag(raw: Any) -> bool | None:
    """Interpret a posted flag; ``None`` when the field was absent."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() not in _FALSY


def parse_column_keys(raw: Any) -> list[Any] | None:
    """Decode the posted column list.

    Accepts a JSON array (``"[0, 2]"``) or an already decoded sequence.
    Returns ``None`` when nothing usable was posted, which callers treat as
    "no explicit selection".
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, (list, tuple)):
        return list(raw)
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("export_columns_invalid_json", payload=str(raw)[:200])
        return None
    if not isinstance(decoded, list):
        logger.warning("export_columns_not_a_list", payload=str(raw)[:200])
        return None
    return decoded


@dataclass(frozen=True)
class ExportRequestParams:
    """Export-related request parameters (from a POST body or built by hand)."""

    trigger_download: bool = False
    export_type: str | None = None
    export_columns: list[Any] | None = None
    column_selector_enabled: bool | None = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any], names: ExportParamNames) -> "ExportRequestParams":
        return cls(
            trigger_download=bool(parse_flag(form.get(names.request))),
            export_type=form.get(names.export_type) or None,
            export_columns=parse_column_keys(form.get(names.export_columns)),
            column_selector_enabled=parse_flag(form.get(names.column_selector_flag)),
        )
