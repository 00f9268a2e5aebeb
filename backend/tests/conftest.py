"""Pytest configuration and shared fixtures for API tests."""

import os
import tempfile

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test DB before app imports so config/engine use it
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'backoffice_test.db')}",
)
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from backoffice.core.auth import create_access_token
from backoffice.db.base import Base
from backoffice.db.session import async_session_maker, engine, init_db
from backoffice.main import app


async def _clear_all():
    """Delete all rows in reverse dependency order so tests start clean."""
    async with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            await conn.execute(table.delete())


@pytest_asyncio.fixture
async def ensure_db():
    """Create tables (idempotent)."""
    await init_db()
    yield


@pytest_asyncio.fixture
async def clean_db(ensure_db):
    await _clear_all()
    yield


@pytest_asyncio.fixture
async def client(clean_db):
    """Yield AsyncClient over the ASGI app; dependency overrides are reset afterwards."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seed(clean_db):
    """Return an async callable that commits ORM rows."""

    async def _seed(*rows):
        async with async_session_maker() as session:
            session.add_all(rows)
            await session.commit()

    return _seed


def _headers(user_id: str, role: str) -> dict:
    token = create_access_token(user_id, f"{user_id}@test.com", role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict:
    return _headers("admin-1", "admin")


@pytest.fixture
def sales_headers() -> dict:
    return _headers("sales-1", "sales")


@pytest.fixture
def auditor_headers() -> dict:
    return _headers("auditor-1", "auditor")


@pytest.fixture
def user_headers() -> dict:
    return _headers("user-1", "user")
