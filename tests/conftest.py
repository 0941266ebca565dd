"""
TripDesk Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test that touches storage gets its own SQLite file under
       tmp_path, migrated to head, so tests never share rows or sessions.

Fixture Hierarchy:
    test_settings ─► database ─► repository
    test_settings ─► app (bootstrapped) ─► client ─► admin_client
    valid_payload: a registration that passes every rule
"""

import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any tripdesk import: the module-level settings/app read these.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["SESSION_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from tripdesk.bootstrap import bootstrap  # noqa: E402
from tripdesk.config import Settings  # noqa: E402
from tripdesk.database import Database  # noqa: E402
from tripdesk.main import create_app  # noqa: E402
from tripdesk.schema import initialize_schema  # noqa: E402
from tripdesk.services.repository import Repository  # noqa: E402

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


# ══════════════════════════════════════════════════════════════════════════
# Settings & Storage
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a fresh SQLite file; cheap bcrypt, no retry waits."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tripdesk.db'}",
        session_secret="test-secret-not-real",
        admin_username=ADMIN_USERNAME,
        admin_password=ADMIN_PASSWORD,
        bcrypt_rounds=4,
        schema_init_attempts=1,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings) -> AsyncGenerator[Database, None]:
    """A migrated database with no rows."""
    db = Database.from_settings(test_settings)
    await initialize_schema(db.engine)
    yield db
    await db.dispose()


@pytest.fixture
def repository(database) -> Repository:
    return Repository(database)


@pytest.fixture
def mock_repository():
    """
    Repository stand-in for service tests that must not touch storage.

    Usage:
        mock_repository.find_admin_by_username.return_value = None
    """
    repo = MagicMock(spec=Repository)
    repo.find_admin_by_username = AsyncMock(return_value=None)
    repo.insert_admin = AsyncMock(return_value=1)
    return repo


# ══════════════════════════════════════════════════════════════════════════
# Application & HTTP Clients
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(test_settings):
    """
    A TripDesk app with its own engine and session store.

    ASGITransport does not run the lifespan, so bootstrap is run here the
    same way the lifespan would.
    """
    application = create_app(test_settings)
    await bootstrap(
        application.state.database,
        application.state.repository,
        application.state.auth_service.hasher,
        test_settings,
    )
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Unauthenticated HTTP client.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def admin_client(client) -> AsyncClient:
    """The same client after a successful admin login (cookie jar populated)."""
    response = await client.post(
        "/api/admin/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return client


# ══════════════════════════════════════════════════════════════════════════
# Sample Data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def valid_payload():
    """A registration payload that passes every validation rule."""
    return {
        "fullName": "Ada Obi",
        "sex": "female",
        "phone": "+234-801-234-5678",
        "email": "ada@example.com",
        "destination": "Zanzibar",
        "city": "Lagos",
        "persons": 2,
        "travelTime": "2025-12-01",
        "message": "",
    }
