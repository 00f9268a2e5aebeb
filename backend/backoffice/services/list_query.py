"""
Paginated list-query engine.

Turns untrusted query-string parameters into a bounded, filtered, sorted read
against a collection handle and returns items + pagination info. Malformed
paging input falls back to defaults instead of failing the request; filter keys
outside the resource's allow-list are dropped before they reach the query.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timezone
from typing import Any

from pydantic import BaseModel

from backoffice.config import settings
from backoffice.schemas.pagination import ListQueryResult, PaginationInfo
from backoffice.services.collections import Collection, RecordQuery, SortKey

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
# Largest OFFSET a signed 64-bit column type (Postgres BIGINT, SQLite INTEGER) accepts
MAX_SKIP = 2**63 - 1


class ListQueryError(Exception):
    """Base class for list-query failures."""


class QueryFailed(ListQueryError):
    """The collection handle raised while counting or fetching; no retry is attempted."""

    def __init__(self, cause: Exception):
        super().__init__(f"List query failed: {cause}")
        self.cause = cause


class ListQueryRequest(BaseModel):
    """Normalized list request. Built per call, used once."""

    page: int = DEFAULT_PAGE
    limit: int
    filters: dict[str, Any] = {}
    since: datetime | None = None
    until: datetime | None = None
    search: str | None = None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def _positive_int(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_moment(value: str | None, end_of_day: bool = False) -> datetime | None:
    """ISO date or datetime -> aware datetime (UTC when no offset). Bad input -> None."""
    if not value or not value.strip():
        return None
    text = value.strip()
    try:
        if len(text) == 10:
            day = date.fromisoformat(text)
            moment = datetime.combine(day, time.max if end_of_day else time.min)
        else:
            moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def parse_list_request(
    raw_params: Mapping[str, str],
    allowed_filter_fields: Iterable[str],
    scope: Mapping[str, Any] | None = None,
    default_limit: int | None = None,
    max_limit: int | None = None,
) -> ListQueryRequest:
    """
    Normalize raw query params.

    page/limit: non-numeric or non-positive -> defaults; limit clamped to max_limit,
    page clamped so the offset fits a signed 64-bit integer.
    Filters: only keys in allowed_filter_fields with a non-empty value. scope is
    applied last and overrides anything the caller sent for the same field.
    from_date/to_date: ISO date or datetime; a bare to_date covers the whole day.
    """
    default_limit = default_limit or settings.list_default_limit
    max_limit = max_limit or settings.list_max_limit
    page = _positive_int(raw_params.get("page"), DEFAULT_PAGE)
    limit = min(_positive_int(raw_params.get("limit"), default_limit), max_limit)
    page = min(page, MAX_SKIP // limit + 1)

    allowed = set(allowed_filter_fields)
    filters: dict[str, Any] = {}
    for key, value in raw_params.items():
        if key not in allowed or value is None:
            continue
        value = str(value).strip()
        if value:
            filters[key] = value
    if scope:
        filters.update(scope)

    search = (raw_params.get("search") or "").strip() or None
    return ListQueryRequest(
        page=page,
        limit=limit,
        filters=filters,
        since=_parse_moment(raw_params.get("from_date")),
        until=_parse_moment(raw_params.get("to_date"), end_of_day=True),
        search=search,
    )


async def run_list_query(
    collection: Collection,
    request: ListQueryRequest,
    sort_key: SortKey,
    date_field: str | None = None,
    search_fields: Iterable[str] = (),
) -> ListQueryResult:
    """Count + fetch one page. Any collection error is raised as QueryFailed; cancellation propagates."""
    search_fields = tuple(search_fields)
    query = RecordQuery(
        equals=dict(request.filters),
        date_field=date_field,
        since=request.since if date_field else None,
        until=request.until if date_field else None,
        search=request.search if search_fields else None,
        search_fields=search_fields,
    )
    logger.debug(
        "List query: page=%s limit=%s filters=%s sort=%s",
        request.page,
        request.limit,
        query.equals,
        sort_key,
    )
    # Count and page are separate reads; a concurrent insert may skew pages by one.
    try:
        total = await collection.count(query)
        items = await collection.find(query, sort_key, request.skip, request.limit)
    except Exception as e:
        raise QueryFailed(e) from e
    return ListQueryResult(
        items=list(items)[: request.limit],
        pagination=PaginationInfo.build(request.page, request.limit, total),
    )


async def list_records(
    collection: Collection,
    raw_params: Mapping[str, str],
    allowed_filter_fields: Iterable[str],
    sort_key: SortKey,
    scope: Mapping[str, Any] | None = None,
    date_field: str | None = None,
    search_fields: Iterable[str] = (),
) -> ListQueryResult:
    """Parse raw params and run the paginated query against collection."""
    request = parse_list_request(raw_params, allowed_filter_fields, scope=scope)
    return await run_list_query(
        collection,
        request,
        sort_key,
        date_field=date_field,
        search_fields=search_fields,
    )
