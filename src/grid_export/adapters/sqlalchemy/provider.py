"""SQLAlchemy adapter – SqlAlchemyDataProvider: grid rows from a ``select()`` statement."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from grid_export.application.grid.provider import KeySpec, resolve_key
from grid_export.application.pagination import Page, PageRequest
from grid_export.kernel.text import camel2words


def _require_sqlalchemy() -> None:
    try:
        import sqlalchemy  # noqa: F401
    except ImportError as exc:
        raise ImportError("Install 'grid-export[sqlalchemy]' to use the SQLAlchemy adapter") from exc


class SqlAlchemyDataProvider:
    """Rows of *statement* read through a synchronous ``Session``.

    Pages use ``OFFSET`` / ``LIMIT``; the total is ``COUNT(*)`` over the
    statement as a subquery.  Statements selecting a single ORM entity yield
    the entities, others yield row mappings.

    Args:
        session: An open ``sqlalchemy.orm.Session``.
        statement: A ``select()``; give it an ``ORDER BY`` so pages are stable.
        key: Attribute / callable producing each row key (default ``"id"``).
        labels: Explicit ``attribute → label`` map for derived headers.
    """

    supports_pagination = True

    def __init__(
        self,
        session: Any,
        statement: Any,
        *,
        key: KeySpec = "id",
        labels: Mapping[str, str] | None = None,
    ) -> None:
        _require_sqlalchemy()
        self._session = session
        self._statement = statement
        self._key = key
        self._labels = dict(labels or {})
        self._total: int | None = None

    def _entity(self) -> type | None:
        descriptions = self._statement.column_descriptions
        if len(descriptions) == 1 and descriptions[0].get("entity") is not None:
            expr = descriptions[0].get("expr")
            if expr is descriptions[0]["entity"]:
                return descriptions[0]["entity"]
        return None

    def _fetch(self, statement: Any) -> list[Any]:
        result = self._session.execute(statement)
        if self._entity() is not None:
            return list(result.scalars().all())
        return [dict(row) for row in result.mappings().all()]

    def _keys(self, start: int, items: list[Any]) -> list[Any]:
        keys = []
        for i, model in enumerate(items):
            key = resolve_key(model, start + i, self._key)
            keys.append(start + i if key is None else key)
        return keys

    def get_total_count(self) -> int:
        """Row count of the statement; queried once per provider."""
        if self._total is None:
            from sqlalchemy import func, select  # type: ignore[import-untyped]

            subquery = self._statement.order_by(None).subquery()
            self._total = int(self._session.execute(select(func.count()).select_from(subquery)).scalar_one())
        return self._total

    def fetch_all(self) -> Page[Any]:
        items = self._fetch(self._statement)
        return Page(items=items, total=len(items), page=1, size=max(len(items), 1), keys=self._keys(0, items))

    def fetch_page(self, request: PageRequest) -> Page[Any]:
        items = self._fetch(self._statement.offset(request.offset).limit(request.size))
        return Page(
            items=items,
            total=self.get_total_count(),
            page=request.page,
            size=request.size,
            keys=self._keys(request.offset, items),
        )

    def attribute_label(self, attribute: str) -> str:
        if attribute in self._labels:
            return self._labels[attribute]
        entity = self._entity()
        if entity is not None:
            getter = getattr(entity, "get_attribute_label", None)
            if callable(getter):
                return getter(attribute)
            column = getattr(entity, "__table__", None)
            if column is not None and attribute in column.c:
                info = column.c[attribute].info
                if info.get("label"):
                    return info["label"]
        return camel2words(attribute)


__all__ = ["SqlAlchemyDataProvider"]
