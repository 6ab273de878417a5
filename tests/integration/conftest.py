"""Integration test fixtures for Rant to Reflection.

Provides async HTTP client and sync TestClient (for WebSocket) that use
an in-memory SQLite database with real repository operations.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient

from src.api.app import create_app
from src.services.storage import database


@pytest.fixture
def app():
    """Create a fresh FastAPI application instance."""
    return create_app()


@pytest.fixture
async def async_client(app, db_engine):
    """AsyncClient backed by the in-memory test engine.

    Injects the test engine into the database module so that all routes
    use the same in-memory SQLite with tables already created.
    """
    database._engine = db_engine
    database._session_factory = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    database.reset_engine()


@pytest.fixture
def test_client(app, tmp_path, monkeypatch):
    """Synchronous TestClient for WebSocket tests.

    The TestClient runs the app on its own event loop, so it gets a
    file-backed SQLite database created by the app lifespan on that loop.
    """
    from src.core.config import get_settings

    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'ws.db'}")
    get_settings.cache_clear()
    database.reset_engine()
    with TestClient(app) as c:
        yield c
    database.reset_engine()


async def _signup(client: AsyncClient, email: str) -> dict:
    resp = await client.post("/api/v1/auth/signup", json={"email": email, "password": "hunter22"})
    assert resp.status_code == 201, resp.text
    session = resp.json()
    session["headers"] = {"Authorization": f"Bearer {session['token']}"}
    return session


@pytest.fixture
async def alice(async_client):
    """Signed-up user; ``alice["headers"]`` carries her bearer token."""
    return await _signup(async_client, "alice@example.com")


@pytest.fixture
async def bob(async_client):
    return await _signup(async_client, "bob@example.com")
