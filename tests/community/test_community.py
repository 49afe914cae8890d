"""Community leaderboard and public profiles."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from opphub.db.models import User
from tests.conftest import register_user


async def _set_score(db: AsyncSession, user_id: str, xp: int, stars: int) -> None:
    await db.execute(update(User).where(User.id == user_id).values(xp=xp, stars=stars))
    await db.commit()


class TestLeaderboard:
    @pytest.mark.asyncio
    async def test_sorted_by_stars_then_xp(self, client: AsyncClient, db_session: AsyncSession) -> None:
        alice = await register_user(client)
        bob = await register_user(client, email="bob@example.com", name="Bob B")
        carol = await register_user(client, email="carol@example.com", name="Carol C")
        await _set_score(db_session, alice["user_id"], xp=60, stars=3)
        await _set_score(db_session, bob["user_id"], xp=120, stars=4)
        await _set_score(db_session, carol["user_id"], xp=75, stars=3)

        response = await client.get("/api/community/leaderboard")
        assert response.status_code == 200
        data = response.json()
        assert [u["id"] for u in data["users"]] == [bob["user_id"], carol["user_id"], alice["user_id"]]
        assert data["pagination"] == {"currentPage": 1, "totalPages": 1, "totalUsers": 3, "hasMore": False}

        entry = data["users"][0]
        assert "email" not in entry
        assert set(entry["profile"]) == {"bio", "location", "skills", "github", "linkedin"}

    @pytest.mark.asyncio
    async def test_pagination(self, client: AsyncClient) -> None:
        for i in range(3):
            await register_user(client, email=f"user{i}@example.com", name=f"User {i}")

        response = await client.get("/api/community/leaderboard", params={"page": 1, "limit": 2})
        data = response.json()
        assert len(data["users"]) == 2
        assert data["pagination"] == {"currentPage": 1, "totalPages": 2, "totalUsers": 3, "hasMore": True}

        response = await client.get("/api/community/leaderboard", params={"page": 2, "limit": 2})
        data = response.json()
        assert len(data["users"]) == 1
        assert data["pagination"]["hasMore"] is False


class TestPublicProfile:
    @pytest.mark.asyncio
    async def test_public_view_hides_email(self, client: AsyncClient) -> None:
        alice = await register_user(client)
        response = await client.get(f"/api/community/profile/{alice['user_id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Alice A"
        assert "email" not in data
        assert "passwordHash" not in data
        assert data["level"] == "Newcomer"

    @pytest.mark.asyncio
    async def test_unknown_user(self, client: AsyncClient) -> None:
        response = await client.get("/api/community/profile/nobody")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"
