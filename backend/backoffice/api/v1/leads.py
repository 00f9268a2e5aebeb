"""CRM leads: paginated list with status/source/owner filters and free-text search."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from backoffice.api.deps import CurrentUser, get_leads_collection, require_roles
from backoffice.api.listing import ListResource, list_response
from backoffice.services.collections import Collection, SortKey

router = APIRouter(prefix="/leads", tags=["crm"])

LEADS = ListResource(
    name="leads",
    items_key="leads",
    allowed_filters=frozenset({"status", "source", "assigned_to"}),
    sort_key=SortKey(field="created_at"),
    date_field="created_at",
    search_fields=("name", "email", "company"),
)


@router.get(
    "",
    response_model=None,
    summary="List leads",
    responses={401: {"description": "Not authenticated"}, 403: {"description": "Forbidden"}},
)
async def list_leads(
    request: Request,
    collection: Annotated[Collection, Depends(get_leads_collection)],
    user: Annotated[CurrentUser, Depends(require_roles("admin", "sales", "super_admin"))],
) -> dict[str, Any] | JSONResponse:
    """Query params: page, limit, status, source, assigned_to, from_date, to_date, search."""
    return await list_response(LEADS, collection, request.query_params)
