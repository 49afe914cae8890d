"""Opportunities catalogue: public listing and admin CRUD."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.conftest import register_user


def _auth(token: str) -> dict[str, str]:
    return {"x-auth-token": token}


def _opportunity(**overrides: object) -> dict:
    return {
        "title": "Summer Research Internship",
        "description": "Ten weeks in a machine learning lab",
        "category": "internship",
        "organization": "Open Science Lab",
        "location": "Remote",
        "deadline": "2026-12-01T00:00:00Z",
        "requirements": ["Python"],
        "benefits": ["Stipend"],
        "applicationUrl": "https://example.org/apply",
        **overrides,
    }


async def _create(client: AsyncClient, token: str, **overrides: object) -> dict:
    response = await client.post("/api/opportunities", json=_opportunity(**overrides), headers=_auth(token))
    assert response.status_code == 201, response.text
    return response.json()


class TestAdminWrites:
    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient, admin_token: str) -> None:
        data = await _create(client, admin_token)
        assert data["id"]
        assert data["category"] == "internship"
        assert data["applicationUrl"] == "https://example.org/apply"
        assert data["isFeatured"] is False
        assert data["status"] == "active"

    @pytest.mark.asyncio
    async def test_create_requires_admin(self, client: AsyncClient) -> None:
        user = await register_user(client)
        response = await client.post("/api/opportunities", json=_opportunity(), headers=_auth(user["access_token"]))
        assert response.status_code == 401

        response = await client.post("/api/opportunities", json=_opportunity())
        assert response.json()["code"] == "NO_TOKEN"

    @pytest.mark.asyncio
    async def test_create_validates(self, client: AsyncClient, admin_token: str) -> None:
        response = await client.post(
            "/api/opportunities",
            json=_opportunity(category="party", applicationUrl="not a url"),
            headers=_auth(admin_token),
        )
        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert fields == {"category", "applicationUrl"}

    @pytest.mark.asyncio
    async def test_partial_update(self, client: AsyncClient, admin_token: str) -> None:
        created = await _create(client, admin_token)
        response = await client.put(
            f"/api/opportunities/{created['id']}",
            json={"isFeatured": True, "title": "  Renamed  "},
            headers=_auth(admin_token),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["isFeatured"] is True
        assert data["title"] == "Renamed"
        assert data["organization"] == created["organization"]

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, admin_token: str) -> None:
        created = await _create(client, admin_token)
        response = await client.delete(f"/api/opportunities/{created['id']}", headers=_auth(admin_token))
        assert response.json() == {"message": "Opportunity deleted"}

        response = await client.get(f"/api/opportunities/{created['id']}")
        assert response.status_code == 404
        assert response.json() == {"message": "Opportunity not found", "code": "NOT_FOUND"}

    @pytest.mark.asyncio
    async def test_update_missing(self, client: AsyncClient, admin_token: str) -> None:
        response = await client.put("/api/opportunities/missing", json={"title": "x"}, headers=_auth(admin_token))
        assert response.status_code == 404


class TestListing:
    @pytest.mark.asyncio
    async def test_newest_first_and_filters(self, client: AsyncClient, admin_token: str) -> None:
        first = await _create(client, admin_token, title="Data Science Scholarship", category="scholarship")
        second = await _create(client, admin_token, title="Backend Job", category="job", isFeatured=True)
        third = await _create(client, admin_token, organization="Data Guild", category="fellowship")

        response = await client.get("/api/opportunities")
        assert [o["id"] for o in response.json()] == [third["id"], second["id"], first["id"]]

        response = await client.get("/api/opportunities", params={"category": "job"})
        assert [o["id"] for o in response.json()] == [second["id"]]

        response = await client.get("/api/opportunities", params={"featured": "true"})
        assert [o["id"] for o in response.json()] == [second["id"]]

        # Case-insensitive match on title, description or organization
        response = await client.get("/api/opportunities", params={"search": "DATA"})
        assert {o["id"] for o in response.json()} == {first["id"], third["id"]}

        response = await client.get("/api/opportunities", params={"limit": 1})
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_search_is_literal(self, client: AsyncClient, admin_token: str) -> None:
        await _create(client, admin_token)
        response = await client.get("/api/opportunities", params={"search": "%"})
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_get_one(self, client: AsyncClient, admin_token: str) -> None:
        created = await _create(client, admin_token)
        response = await client.get(f"/api/opportunities/{created['id']}")
        assert response.status_code == 200
        assert response.json()["title"] == created["title"]
