"""Tests for audit trail API: role gate, filters, search, date range."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient

from backoffice.models.audit_log import AuditLog

T0 = datetime(2026, 4, 1, 8, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def audit_entries(seed):
    await seed(
        AuditLog(user_id="admin-1", user_email="admin@corp.test", action="login", resource="session", severity="info", description="Admin signed in", timestamp=T0),
        AuditLog(user_id="sales-1", user_email="sales@corp.test", action="update", resource="lead", severity="info", description="Changed lead status to qualified", timestamp=T0 + timedelta(days=1)),
        AuditLog(user_id="sales-1", user_email="sales@corp.test", action="delete", resource="lead", severity="warning", description="Deleted duplicate lead", timestamp=T0 + timedelta(days=2)),
        AuditLog(user_id="admin-1", user_email="admin@corp.test", action="update", resource="partner", severity="critical", description="Revoked partner API key", timestamp=T0 + timedelta(days=3)),
    )


@pytest.mark.asyncio
async def test_auditor_lists_newest_first(client: AsyncClient, auditor_headers: dict, audit_entries):
    resp = await client.get("/api/v1/audit-logs", headers=auditor_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [e["resource"] for e in data["audit_logs"]] == ["partner", "lead", "lead", "session"]
    assert data["pagination"] == {"page": 1, "limit": 10, "total": 4, "pages": 1}


@pytest.mark.asyncio
async def test_filter_by_user_and_action(client: AsyncClient, admin_headers: dict, audit_entries):
    resp = await client.get("/api/v1/audit-logs?user_id=sales-1&action=update", headers=admin_headers)
    entries = resp.json()["data"]["audit_logs"]
    assert [e["description"] for e in entries] == ["Changed lead status to qualified"]


@pytest.mark.asyncio
async def test_search_across_fields(client: AsyncClient, admin_headers: dict, audit_entries):
    by_description = await client.get("/api/v1/audit-logs?search=DUPLICATE", headers=admin_headers)
    assert [e["action"] for e in by_description.json()["data"]["audit_logs"]] == ["delete"]
    by_email = await client.get("/api/v1/audit-logs?search=admin@corp", headers=admin_headers)
    assert by_email.json()["data"]["pagination"]["total"] == 2


@pytest.mark.asyncio
async def test_date_range(client: AsyncClient, auditor_headers: dict, audit_entries):
    resp = await client.get("/api/v1/audit-logs?from_date=2026-04-02&to_date=2026-04-03", headers=auditor_headers)
    actions = [e["action"] for e in resp.json()["data"]["audit_logs"]]
    assert actions == ["delete", "update"]


@pytest.mark.asyncio
async def test_sales_role_forbidden(client: AsyncClient, sales_headers: dict):
    resp = await client.get("/api/v1/audit-logs", headers=sales_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_missing_token(client: AsyncClient):
    resp = await client.get("/api/v1/audit-logs")
    assert resp.status_code == 401
