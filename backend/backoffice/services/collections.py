"""
Collection handles consumed by the list-query engine.

A handle answers two questions about a named set of records: how many match a
query, and which records fall in a sorted skip/limit window. Records come back
as plain dicts; the engine never looks inside them.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict
from sqlalchemy import false, func, inspect, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.db.base import Base


class SortKey(BaseModel):
    """Field and direction for deterministic ordering (newest-first by convention)."""

    model_config = ConfigDict(frozen=True)

    field: str
    descending: bool = True


class RecordQuery(BaseModel):
    """Filter handed to a collection: AND of equalities, optional date range and text search."""

    equals: dict[str, Any] = {}
    date_field: str | None = None
    since: datetime | None = None
    until: datetime | None = None
    search: str | None = None
    search_fields: tuple[str, ...] = ()


class Collection(Protocol):
    async def count(self, query: RecordQuery) -> int: ...

    async def find(
        self,
        query: RecordQuery,
        sort: SortKey,
        skip: int,
        limit: int,
    ) -> list[dict[str, Any]]: ...


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _coerce(python_type: type, value: Any) -> Any:
    """Convert a query-string value to the column's Python type. Raises ValueError/TypeError."""
    if not isinstance(value, str) or python_type is str:
        return value
    if python_type is bool:
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes"):
            return True
        if lowered in ("0", "false", "no"):
            return False
        raise ValueError(f"not a boolean: {value!r}")
    if python_type in (datetime, date):
        return python_type.fromisoformat(value)
    return python_type(value)


class SqlCollection:
    """Collection handle over one SQLAlchemy model, read through an AsyncSession."""

    def __init__(self, session: AsyncSession, model: type[Base]):
        self.session = session
        self.model = model
        mapper = inspect(model)
        self._columns = {attr.key: attr.columns[0] for attr in mapper.column_attrs}
        self._primary_key = [getattr(model, mapper.get_property_by_column(c).key) for c in mapper.primary_key]

    def _attr(self, name: str):
        if name not in self._columns:
            raise ValueError(f"{self.model.__name__} has no column {name!r}")
        return getattr(self.model, name)

    def _equality(self, name: str, value: Any):
        attr = self._attr(name)
        try:
            python_type = self._columns[name].type.python_type
        except NotImplementedError:
            return attr == value
        try:
            return attr == _coerce(python_type, value)
        except (TypeError, ValueError):
            # A value that cannot be stored in this column cannot match any row
            return false()

    def _conditions(self, query: RecordQuery) -> list:
        conditions = [self._equality(name, value) for name, value in query.equals.items()]
        if query.date_field and (query.since or query.until):
            column = self._attr(query.date_field)
            if query.since is not None:
                conditions.append(column >= query.since)
            if query.until is not None:
                conditions.append(column <= query.until)
        if query.search and query.search_fields:
            pattern = f"%{_escape_like(query.search)}%"
            conditions.append(
                or_(*(self._attr(name).ilike(pattern, escape="\\") for name in query.search_fields))
            )
        return conditions

    def _to_dict(self, row: Base) -> dict[str, Any]:
        return {name: getattr(row, name) for name in self._columns}

    async def count(self, query: RecordQuery) -> int:
        stmt = select(func.count()).select_from(self.model).where(*self._conditions(query))
        return (await self.session.execute(stmt)).scalar() or 0

    async def find(
        self,
        query: RecordQuery,
        sort: SortKey,
        skip: int,
        limit: int,
    ) -> list[dict[str, Any]]:
        column = self._attr(sort.field)
        # Primary key breaks ties so equal timestamps page stably
        keys = [column, *(pk for pk in self._primary_key if pk.key != sort.field)]
        order_by = [k.desc() if sort.descending else k.asc() for k in keys]
        stmt = (
            select(self.model)
            .where(*self._conditions(query))
            .order_by(*order_by)
            .offset(skip)
            .limit(limit)
        )
        r = await self.session.execute(stmt)
        return [self._to_dict(row) for row in r.scalars().all()]
