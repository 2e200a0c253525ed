"""Kernel text – markup stripping for cell content and labels."""

from __future__ import annotations

import re
from typing import Any, Final

from markupsafe import Markup

_BREAK_TAGS: Final = re.compile(r"<br\s*/?>", re.IGNORECASE)


def strip_html(value: Any) -> Any:
    """Remove tags from *value* and unescape entities.

    Non-string values are returned untouched so numeric cells keep their type.
    Whitespace runs collapse to a single space.
    """
    if not isinstance(value, str) or "<" not in value and "&" not in value:
        return value
    return Markup(_BREAK_TAGS.sub(" ", value)).striptags()


def plain_label(label: str) -> str:
    """Normalise a header/selector label: ``<br>`` becomes a space, tags removed."""
    return str(strip_html(label)).strip()


__all__ = ["plain_label", "strip_html"]
