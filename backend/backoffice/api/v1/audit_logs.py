"""Audit trail: read-only paginated view for admins and auditors."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from backoffice.api.deps import CurrentUser, get_audit_logs_collection, require_roles
from backoffice.api.listing import ListResource, list_response
from backoffice.config import settings
from backoffice.core.rate_limit import limiter
from backoffice.services.collections import Collection, SortKey

router = APIRouter(prefix="/audit-logs", tags=["audit"])

AUDIT_LOGS = ListResource(
    name="audit trail",
    items_key="audit_logs",
    allowed_filters=frozenset({"user_id", "action", "resource", "severity"}),
    sort_key=SortKey(field="timestamp"),
    date_field="timestamp",
    search_fields=("action", "resource", "description", "user_email"),
)


@router.get(
    "",
    response_model=None,
    summary="List audit log entries",
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Forbidden"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(settings.audit_rate_limit)
async def list_audit_logs(
    request: Request,
    collection: Annotated[Collection, Depends(get_audit_logs_collection)],
    user: Annotated[CurrentUser, Depends(require_roles("admin", "auditor", "super_admin"))],
) -> dict[str, Any] | JSONResponse:
    """Query params: page, limit, user_id, action, resource, severity, from_date, to_date, search."""
    return await list_response(AUDIT_LOGS, collection, request.query_params)
