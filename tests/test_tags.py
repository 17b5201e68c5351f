"""Tests for tag CRUD, per-owner uniqueness and the delete guard."""

import asyncio
from unittest.mock import AsyncMock

from httpx import AsyncClient

from conftest import create_tag, create_task
from taskflow.db.repository import OwnedRepository


class TestTagCrud:
    async def test_create_defaults(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/tags", json={"name": "urgent"})
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "urgent"
        assert data["color"] == "#6B7280"
        assert data["taskCount"] == 0

    async def test_list_with_counts(self, authed_client: AsyncClient):
        urgent = await create_tag(authed_client, "urgent")
        await create_tag(authed_client, "later")
        await create_task(authed_client, tagIds=[urgent["id"]])

        response = await authed_client.get("/api/tags")
        data = response.json()
        assert [t["name"] for t in data] == ["later", "urgent"]
        assert data[1]["taskCount"] == 1
        assert data[0]["taskCount"] == 0

    async def test_update(self, authed_client: AsyncClient):
        tag = await create_tag(authed_client)
        response = await authed_client.put(f"/api/tags/{tag['id']}", json={"name": "asap", "color": "#000000"})
        assert response.status_code == 200
        assert response.json()["name"] == "asap"
        assert response.json()["color"] == "#000000"

    async def test_name_limit(self, authed_client: AsyncClient):
        assert (await authed_client.post("/api/tags", json={"name": "x" * 30})).status_code == 200
        assert (await authed_client.post("/api/tags", json={"name": "y" * 31})).status_code == 400

    async def test_duplicate_name(self, authed_client: AsyncClient):
        await create_tag(authed_client)
        response = await authed_client.post("/api/tags", json={"name": "urgent"})
        assert response.status_code == 409


class TestTagNameRace:
    async def test_constraint_violation_is_a_conflict(self, authed_client: AsyncClient, monkeypatch):
        await create_tag(authed_client)
        monkeypatch.setattr(OwnedRepository, "exists_by_name_for_owner", AsyncMock(return_value=False))

        response = await authed_client.post("/api/tags", json={"name": "urgent"})
        assert response.status_code == 409
        assert response.json() == {"detail": "Tag with name 'urgent' already exists", "error": "conflict"}

    async def test_rename_collision_is_a_conflict(self, authed_client: AsyncClient, monkeypatch):
        await create_tag(authed_client, "urgent")
        later = await create_tag(authed_client, "later")
        monkeypatch.setattr(OwnedRepository, "exists_by_name_for_owner", AsyncMock(return_value=False))

        response = await authed_client.put(f"/api/tags/{later['id']}", json={"name": "urgent"})
        assert response.status_code == 409

    async def test_concurrent_creates(self, authed_client: AsyncClient):
        responses = await asyncio.gather(*(authed_client.post("/api/tags", json={"name": "race"}) for _ in range(5)))
        assert sorted(r.status_code for r in responses) == [200, 409, 409, 409, 409]


class TestTagOwnership:
    async def test_same_tag_name_under_two_owners(self, authed_client: AsyncClient, other_user):
        await create_tag(authed_client, "home")
        response = await authed_client.post("/api/tags", json={"name": "home"}, headers=other_user["headers"])
        assert response.status_code == 200

    async def test_other_owner_sees_404(self, authed_client: AsyncClient, other_user):
        tag = await create_tag(authed_client)
        response = await authed_client.get(f"/api/tags/{tag['id']}", headers=other_user["headers"])
        assert response.status_code == 404


class TestTagDeleteGuard:
    async def test_delete_guarded_then_allowed(self, authed_client: AsyncClient):
        tag = await create_tag(authed_client)
        task = await create_task(authed_client, tagIds=[tag["id"]])

        response = await authed_client.delete(f"/api/tags/{tag['id']}")
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot delete tag that is used by tasks"

        await authed_client.delete(f"/api/tasks/{task['id']}")
        response = await authed_client.delete(f"/api/tags/{tag['id']}")
        assert response.status_code == 200

    async def test_deleted_tag_disappears_from_soft_deleted_task(self, authed_client: AsyncClient):
        tag = await create_tag(authed_client)
        task = await create_task(authed_client, tagIds=[tag["id"]])
        await authed_client.delete(f"/api/tasks/{task['id']}")
        await authed_client.delete(f"/api/tags/{tag['id']}")

        response = await authed_client.get(f"/api/tasks/{task['id']}")
        assert response.status_code == 200
        assert response.json()["tags"] == []
