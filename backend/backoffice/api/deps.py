"""FastAPI dependencies: current user from JWT, role checks, collection handles for list routes."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from jose import JWTError
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.auth import decode_token
from backoffice.db.session import get_db
from backoffice.models.audit_log import AuditLog
from backoffice.models.lead import Lead
from backoffice.models.obd_alert import ObdAlert
from backoffice.services.collections import Collection, SqlCollection

ADMIN_ROLES = ("admin", "super_admin")


class CurrentUser(BaseModel):
    id: str
    email: str | None = None
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


async def get_current_user(request: Request) -> CurrentUser:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = auth_header[7:].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return CurrentUser(id=str(user_id), email=payload.get("email"), role=payload.get("role") or "user")


def require_roles(*allowed: str):
    """Dependency factory: 403 unless the current user's role is in allowed."""

    async def _dep(user: Annotated[CurrentUser, Depends(get_current_user)]) -> CurrentUser:
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return _dep


async def get_leads_collection(
    session: Annotated[AsyncSession, Depends(get_db)],
) -> Collection:
    return SqlCollection(session, Lead)


async def get_obd_alerts_collection(
    session: Annotated[AsyncSession, Depends(get_db)],
) -> Collection:
    return SqlCollection(session, ObdAlert)


async def get_audit_logs_collection(
    session: Annotated[AsyncSession, Depends(get_db)],
) -> Collection:
    return SqlCollection(session, AuditLog)
