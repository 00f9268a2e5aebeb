"""OBD telemetry alerts for the current user's vehicles (admins see all users)."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from backoffice.api.deps import CurrentUser, get_current_user, get_obd_alerts_collection
from backoffice.api.listing import ListResource, list_response
from backoffice.services.collections import Collection, SortKey

router = APIRouter(prefix="/obd", tags=["fleet"])

OBD_ALERTS = ListResource(
    name="OBD alerts",
    items_key="alerts",
    allowed_filters=frozenset({"user_id", "vehicle_id", "status", "severity"}),
    sort_key=SortKey(field="timestamp"),
    date_field="timestamp",
)


@router.get(
    "/alerts",
    response_model=None,
    summary="List OBD alerts",
    responses={401: {"description": "Not authenticated"}},
)
async def list_obd_alerts(
    request: Request,
    collection: Annotated[Collection, Depends(get_obd_alerts_collection)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> dict[str, Any] | JSONResponse:
    """Query params: page, limit, vehicle_id, status, severity, from_date, to_date (user_id for admins)."""
    scope = None if user.is_admin else {"user_id": user.id}
    return await list_response(OBD_ALERTS, collection, request.query_params, scope=scope)
