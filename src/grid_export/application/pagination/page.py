"""Application pagination – Page."""
from __future__ import annotations

import dataclasses
from typing import Generic, Sequence, TypeVar

from grid_export.application.pagination.page_request import PageRequest

T = TypeVar("T")


@dataclasses.dataclass
class Page(Generic[T]):
    """One slice of a provider's rows plus the provider-wide ``total``.

    ``keys`` holds the provider key of each item, aligned with ``items``.
    """

    items: list[T]
    total: int
    page: int
    size: int
    keys: list[object] = dataclasses.field(default_factory=list)

    @classmethod
    def of(cls, all_items: Sequence[T], request: PageRequest, keys: Sequence[object] | None = None) -> "Page[T]":
        """Build a :class:`Page` by slicing *all_items* with *request*."""
        start = request.offset
        end = start + request.size
        return cls(
            items=list(all_items[start:end]),
            total=len(all_items),
            page=request.page,
            size=request.size,
            keys=list(keys[start:end]) if keys is not None else list(range(start, min(end, len(all_items)))),
        )


__all__ = ["Page"]
