"""Glue between list routes and the list-query engine: resource definitions and the JSON envelope."""

import logging
from collections.abc import Mapping
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from backoffice.config import settings
from backoffice.schemas.pagination import ErrorEnvelope
from backoffice.services.collections import Collection, SortKey
from backoffice.services.list_query import QueryFailed, list_records

logger = logging.getLogger(__name__)


class ListResource(BaseModel):
    """What a list route exposes: its items key, filterable fields, ordering and search columns."""

    name: str
    items_key: str
    allowed_filters: frozenset[str]
    sort_key: SortKey
    date_field: str | None = None
    search_fields: tuple[str, ...] = ()


async def list_response(
    resource: ListResource,
    collection: Collection,
    raw_params: Mapping[str, str],
    scope: Mapping[str, Any] | None = None,
) -> dict[str, Any] | JSONResponse:
    """Run the engine and wrap the result: {success, data: {<items_key>, pagination}} or a 500 envelope."""
    try:
        result = await list_records(
            collection,
            raw_params,
            resource.allowed_filters,
            resource.sort_key,
            scope=scope,
            date_field=resource.date_field,
            search_fields=resource.search_fields,
        )
    except QueryFailed as e:
        logger.exception("List %s failed: %s", resource.name, e.cause)
        body = ErrorEnvelope(
            message=f"Failed to retrieve {resource.name}",
            error=None if settings.is_production else str(e.cause),
        )
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))
    return {
        "success": True,
        "data": {
            resource.items_key: jsonable_encoder(result.items),
            "pagination": result.pagination.model_dump(),
        },
    }
