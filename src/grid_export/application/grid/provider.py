"""Application grid – DataProvider port, ArrayDataProvider and batched row iteration."""
from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable

from grid_export.application.grid.columns import get_value
from grid_export.application.pagination import Page, PageRequest
from grid_export.kernel.text import camel2words
from grid_export.observability.logging import get_logger

logger = get_logger(__name__)

KeySpec = str | Callable[[Any], Any] | None


@runtime_checkable
class DataProvider(Protocol):
    """Port: the rows behind a grid."""

    supports_pagination: bool

    def get_total_count(self) -> int: ...

    def fetch_all(self) -> Page[Any]: ...

    def fetch_page(self, request: PageRequest) -> Page[Any]: ...

    def attribute_label(self, attribute: str) -> str: ...


def resolve_key(model: Any, index: int, key: KeySpec) -> Any:
    if key is None:
        return index
    if callable(key):
        return key(model)
    return get_value(model, key)


def model_attribute_label(model: Any, attribute: str) -> str | None:
    """Label a model declares for *attribute* (``get_attribute_label`` or a pydantic field title)."""
    getter = getattr(model, "get_attribute_label", None)
    if callable(getter):
        return getter(attribute)
    fields = getattr(type(model), "model_fields", None)
    if isinstance(fields, Mapping) and attribute in fields:
        title = getattr(fields[attribute], "title", None)
        if title:
            return title
    return None


class ArrayDataProvider:
    """In-memory provider over a sequence of dicts or objects.

    Args:
        models: The rows.
        key: Attribute name / callable producing each row key (default: index).
        labels: Explicit ``attribute → label`` map used for derived headers.
        pagination: Set to ``False`` to force full materialization even when
            a batch size is configured.
    """

    def __init__(
        self,
        models: Sequence[Any],
        *,
        key: KeySpec = None,
        labels: Mapping[str, str] | None = None,
        pagination: bool = True,
    ) -> None:
        self._models = list(models)
        self._key = key
        self._labels = dict(labels or {})
        self.supports_pagination = pagination

    def get_total_count(self) -> int:
        return len(self._models)

    def _keys(self, start: int, items: Sequence[Any]) -> list[Any]:
        return [resolve_key(m, start + i, self._key) for i, m in enumerate(items)]

    def fetch_all(self) -> Page[Any]:
        total = len(self._models)
        return Page(items=list(self._models), total=total, page=1, size=max(total, 1), keys=self._keys(0, self._models))

    def fetch_page(self, request: PageRequest) -> Page[Any]:
        page = Page.of(self._models, request)
        page.keys = self._keys(request.offset, page.items)
        return page

    def attribute_label(self, attribute: str) -> str:
        if attribute in self._labels:
            return self._labels[attribute]
        if self._models:
            label = model_attribute_label(self._models[0], attribute)
            if label:
                return label
        return camel2words(attribute)


def _key_at(page: Page[Any], position: int, default: Any) -> Any:
    return page.keys[position] if position < len(page.keys) else default


@dataclass(frozen=True)
class Row:
    """One provider row as seen by the renderer; ``index`` is global across batches."""

    model: Any
    key: Any
    index: int


def iter_rows(provider: DataProvider, batch_size: int = 0) -> Iterator[Row]:
    """Yield every row of *provider*, fetching in pages of *batch_size* when possible.

    The total count is read once from the first page; iteration stops at that
    count or at the first empty page, whichever comes first.
    """
    if batch_size <= 0 or not provider.supports_pagination:
        page = provider.fetch_all()
        for i, model in enumerate(page.items):
            yield Row(model, _key_at(page, i, i), i)
        return

    request = PageRequest(page=1, size=batch_size)
    page = provider.fetch_page(request)
    total = page.total
    index = 0
    while page.items:
        logger.debug("export_batch_fetched", page=request.page, size=batch_size, rows=len(page.items))
        for i, model in enumerate(page.items):
            if index >= total:
                return
            yield Row(model, _key_at(page, i, index), index)
            index += 1
        if index >= total:
            return
        request = request.next()
        page = provider.fetch_page(request)


__all__ = [
    "ArrayDataProvider",
    "DataProvider",
    "KeySpec",
    "Row",
    "iter_rows",
    "model_attribute_label",
    "resolve_key",
]
