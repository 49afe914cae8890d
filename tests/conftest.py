"""Shared test fixtures."""

from __future__ import annotations

import os

# Settings are read at import time by opphub.main; configure before importing it
os.environ["OPPHUB_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["OPPHUB_ENVIRONMENT"] = "test"
os.environ["OPPHUB_LOG_FORMAT"] = "console"
os.environ["OPPHUB_LOG_LEVEL"] = "WARNING"
os.environ["OPPHUB_REVOCATION_BACKEND"] = "memory"
os.environ["OPPHUB_RATE_LIMIT_REQUESTS"] = "10000"
os.environ["OPPHUB_RATE_LIMIT_AUTH_REQUESTS"] = "1000"
os.environ["OPPHUB_RATE_LIMIT_REGISTRATION_REQUESTS"] = "1000"

from collections.abc import AsyncGenerator  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from opphub.auth.revocation import reset_revocation_registry  # noqa: E402
from opphub.config import get_settings  # noqa: E402
from opphub.database import close_db, create_tables, get_session, init_db  # noqa: E402
from opphub.main import create_app  # noqa: E402

get_settings.cache_clear()

ALICE = {"email": "alice@example.com", "password": "Password1!", "name": "Alice A"}
ADMIN = {"email": "admin@example.com", "password": "AdminPass1"}


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client over a fresh app and a fresh in-memory database."""
    get_settings.cache_clear()
    reset_revocation_registry()
    app = create_app()
    settings = get_settings()
    await init_db(settings.database_url)
    await create_tables()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await close_db()
    reset_revocation_registry()


@pytest_asyncio.fixture
async def db_session(client: AsyncClient) -> AsyncGenerator[AsyncSession, None]:
    """A direct session on the same database the client's app uses."""
    async for session in get_session():
        yield session
        break


async def register_user(client: AsyncClient, **overrides: str) -> dict:
    """Register a user and return credentials plus the issued tokens."""
    payload = {**ALICE, **overrides}
    response = await client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    data = response.json()
    return {
        **payload,
        "user_id": data["user"]["id"],
        "access_token": data["accessToken"],
        "refresh_token": data["refreshToken"],
    }


async def create_admin_token(client: AsyncClient, **overrides: str) -> str:
    """Run admin setup and log in. Returns the admin token."""
    payload = {**ADMIN, **overrides}
    response = await client.post("/api/admin/setup", json=payload)
    assert response.status_code == 201, response.text
    response = await client.post("/api/admin/login", json=payload)
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient) -> dict:
    return await register_user(client)


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, registered_user: dict) -> AsyncClient:
    """Client carrying the registered user's access token."""
    client.headers["x-auth-token"] = registered_user["access_token"]
    return client


@pytest_asyncio.fixture
async def admin_token(client: AsyncClient) -> str:
    return await create_admin_token(client)
