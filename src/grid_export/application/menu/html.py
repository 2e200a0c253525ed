"""Application menu – HTML attribute helpers used by the menu templates."""
from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any

from markupsafe import Markup, escape

__all__ = ["add_css_class", "render_attributes", "tag"]


def add_css_class(options: MutableMapping[str, Any], *classes: str | Iterable[str]) -> MutableMapping[str, Any]:
    """Append *classes* to ``options["class"]`` without duplicates; returns *options*."""
    current = options.get("class") or []
    names = current.split() if isinstance(current, str) else list(current)
    for item in classes:
        for name in ([item] if isinstance(item, str) else list(item)):
            for part in name.split():
                if part not in names:
                    names.append(part)
    options["class"] = " ".join(names)
    return options


def render_attributes(options: Mapping[str, Any] | None) -> Markup:
    """Render *options* as tag attributes (leading space included).

    ``None`` / ``False`` values are skipped, ``True`` renders a bare
    attribute, ``data`` / ``aria`` mappings expand into ``data-*`` /
    ``aria-*`` attributes and other mappings / lists are JSON encoded.
    """
    parts: list[str] = []
    for name, value in (options or {}).items():
        if value is None or value is False:
            continue
        if name in ("data", "aria") and isinstance(value, Mapping):
            for sub, sub_value in value.items():
                if sub_value is None or sub_value is False:
                    continue
                parts.append(_attribute(f"{name}-{sub}", sub_value))
            continue
        if name == "class" and not isinstance(value, str):
            value = " ".join(value)
        parts.append(_attribute(name, value))
    return Markup("".join(parts))


def _attribute(name: str, value: Any) -> str:
    if value is True:
        return f" {escape(name)}"
    if isinstance(value, (Mapping, list, tuple)):
        value = json.dumps(value)
    return f' {escape(name)}="{escape(value)}"'


def tag(name: str, content: str | Markup = "", options: Mapping[str, Any] | None = None) -> Markup:
    """``<name attrs>content</name>``; *content* is escaped unless it is :class:`Markup`."""
    return Markup(f"<{name}{render_attributes(options)}>{escape(content)}</{name}>")
