"""Tests for profile, settings and account deletion."""

import asyncio

from httpx import AsyncClient
from sqlalchemy import func, select

from conftest import create_category, create_tag, create_task, register_user
from taskflow.db.models import Category, Notification, Tag, Task, User, UserSettings


class TestProfile:
    async def test_get_profile(self, authed_client: AsyncClient, registered_user):
        response = await authed_client.get("/api/users/profile")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == registered_user["user_id"]
        assert data["email"] == "alice@example.com"
        assert data["name"] == "Alice"

    async def test_profile_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/users/profile")
        assert response.status_code == 401

    async def test_partial_update(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/users/profile", json={"firstName": "Ali", "lastName": "Smith"})
        assert response.status_code == 200
        data = response.json()
        assert data["firstName"] == "Ali"
        assert data["lastName"] == "Smith"
        assert data["name"] == "Alice"

    async def test_blank_name_rejected(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/users/profile", json={"name": "   "})
        assert response.status_code == 400

    async def test_email_change_resets_verification(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/users/profile", json={"email": "Alice.New@Example.com"})
        assert response.status_code == 200
        assert response.json()["email"] == "alice.new@example.com"
        assert response.json()["emailVerified"] is False

    async def test_email_collision(self, authed_client: AsyncClient, other_user):
        response = await authed_client.put("/api/users/profile", json={"email": other_user["email"]})
        assert response.status_code == 409
        assert response.json()["detail"] == "Email is already in use"


class TestUserSettings:
    async def test_defaults_created_lazily(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/users/settings")
        assert response.status_code == 200
        data = response.json()
        assert data["theme"] == "LIGHT"
        assert data["language"] == "en"
        assert data["timeZone"] == "UTC"
        assert data["dailyDigest"] is False
        assert data["emailNotifications"] is True

    async def test_update_settings(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/users/settings", json={"theme": "dark", "timeFormat": "24h"})
        assert response.status_code == 200
        data = response.json()
        assert data["theme"] == "DARK"
        assert data["timeFormat"] == "24h"
        assert data["language"] == "en"

    async def test_unknown_theme_falls_back_to_light(self, authed_client: AsyncClient):
        await authed_client.put("/api/users/settings", json={"theme": "DARK"})
        response = await authed_client.put("/api/users/settings", json={"theme": "neon"})
        assert response.status_code == 200
        assert response.json()["theme"] == "LIGHT"

    async def test_concurrent_first_reads_share_one_row(self, authed_client: AsyncClient, registered_user, db_session):
        responses = await asyncio.gather(*(authed_client.get("/api/users/settings") for _ in range(5)))
        assert [r.status_code for r in responses] == [200] * 5
        assert {r.json()["theme"] for r in responses} == {"LIGHT"}

        rows = await db_session.scalar(
            select(func.count())
            .select_from(UserSettings)
            .where(UserSettings.user_id == registered_user["user_id"])
        )
        assert rows == 1


class TestDeleteAccount:
    async def test_delete_account_removes_owned_rows(
        self, authed_client: AsyncClient, other_user, db_session
    ):
        category = await create_category(authed_client)
        tag = await create_tag(authed_client)
        await create_task(authed_client, categoryId=category["id"], tagIds=[tag["id"]])

        bob_headers = other_user["headers"]
        await authed_client.post("/api/tasks", json={"title": "Bob's"}, headers=bob_headers)

        response = await authed_client.delete("/api/users/account")
        assert response.status_code == 200

        assert (await db_session.execute(select(func.count()).select_from(User))).scalar_one() == 1
        assert (await db_session.execute(select(func.count()).select_from(Category))).scalar_one() == 0
        assert (await db_session.execute(select(func.count()).select_from(Tag))).scalar_one() == 0
        assert (await db_session.execute(select(func.count()).select_from(Task))).scalar_one() == 1

    async def test_delete_account_removes_settings_and_notifications(
        self, authed_client: AsyncClient, other_user, db_session
    ):
        await authed_client.get("/api/users/settings")
        await authed_client.get("/api/users/settings", headers=other_user["headers"])

        response = await authed_client.delete("/api/users/account")
        assert response.status_code == 200

        for model in (Notification, UserSettings):
            owners = (await db_session.execute(select(model.user_id))).scalars().all()
            assert owners == [other_user["user_id"]]

    async def test_token_unusable_after_delete(self, authed_client: AsyncClient):
        await authed_client.delete("/api/users/account")
        response = await authed_client.get("/api/users/profile")
        assert response.status_code == 401

    async def test_email_reusable_after_delete(self, authed_client: AsyncClient, mock_email_service):
        await authed_client.delete("/api/users/account")
        user = await register_user(authed_client, email="alice@example.com")
        assert user["user_id"]
