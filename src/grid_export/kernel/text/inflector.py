"""Kernel text – word inflection helpers used for derived column labels."""

from __future__ import annotations

import re
from typing import Final

_CAMEL_BOUNDARY: Final = re.compile(r"(?<![A-Z])([A-Z])|([A-Z])(?=[a-z])")
_SEPARATORS: Final = re.compile(r"[-_.]")


def camel2words(name: str, *, ucwords: bool = True) -> str:
    """Convert a camel-cased or snake-cased name into space separated words.

    ``"firstName"`` → ``"First Name"``, ``"created_at"`` → ``"Created At"``,
    ``"HTMLParser"`` → ``"Html Parser"``.
    """
    spaced = _CAMEL_BOUNDARY.sub(r" \g<0>", name)
    words = _SEPARATORS.sub(" ", spaced).lower().split()
    if ucwords:
        words = [w[:1].upper() + w[1:] for w in words]
    return " ".join(words)


def class_words(obj: object) -> str:
    """Words derived from the class name of *obj* (``SerialColumn`` → ``Serial Column``)."""
    return camel2words(type(obj).__name__)


__all__ = ["camel2words", "class_words"]
