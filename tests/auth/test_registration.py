"""Tests for registration and login."""

import asyncio
from unittest.mock import AsyncMock

from httpx import AsyncClient

from conftest import PASSWORD, register_user


class TestRegistration:
    async def test_register_success(self, client: AsyncClient, mock_email_service):
        response = await client.post("/api/auth/register", json={
            "email": "new@example.com",
            "password": PASSWORD,
            "confirmPassword": PASSWORD,
            "name": "New User",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["tokenType"] == "Bearer"
        assert data["expiresIn"] == 30 * 60
        assert data["token"]
        assert data["refreshToken"]
        assert data["user"]["email"] == "new@example.com"
        assert data["user"]["name"] == "New User"
        assert data["user"]["emailVerified"] is False
        assert data["user"]["active"] is True

    async def test_register_duplicate_email_rejected(self, client: AsyncClient, mock_email_service):
        await register_user(client, email="dup@example.com")
        response = await client.post("/api/auth/register", json={
            "email": "dup@example.com",
            "password": PASSWORD,
            "confirmPassword": PASSWORD,
            "name": "Again",
        })
        assert response.status_code == 409
        assert response.json()["detail"] == "User with this email already exists"

    async def test_duplicate_email_caught_by_constraint(self, client: AsyncClient, mock_email_service, monkeypatch):
        await register_user(client, email="dup@example.com")
        monkeypatch.setattr("taskflow.auth.service.get_user_by_email", AsyncMock(return_value=None))

        response = await client.post("/api/auth/register", json={
            "email": "dup@example.com",
            "password": PASSWORD,
            "confirmPassword": PASSWORD,
            "name": "Again",
        })
        assert response.status_code == 409
        assert response.json()["detail"] == "User with this email already exists"

    async def test_concurrent_registrations_same_email(self, client: AsyncClient, mock_email_service):
        body = {"email": "race@example.com", "password": PASSWORD, "confirmPassword": PASSWORD, "name": "Race"}
        responses = await asyncio.gather(*(client.post("/api/auth/register", json=body) for _ in range(3)))
        assert sorted(r.status_code for r in responses) == [200, 409, 409]

    async def test_register_email_case_insensitive(self, client: AsyncClient, mock_email_service):
        await register_user(client, email="CasE@Example.COM")
        response = await client.post("/api/auth/register", json={
            "email": "case@example.com",
            "password": PASSWORD,
            "confirmPassword": PASSWORD,
            "name": "Case",
        })
        assert response.status_code == 409

    async def test_register_password_mismatch(self, client: AsyncClient, mock_email_service):
        response = await client.post("/api/auth/register", json={
            "email": "mismatch@example.com",
            "password": PASSWORD,
            "confirmPassword": "different1",
            "name": "Mismatch",
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "Passwords do not match"

    async def test_register_short_password(self, client: AsyncClient, mock_email_service):
        response = await client.post("/api/auth/register", json={
            "email": "short@example.com",
            "password": "abc",
            "confirmPassword": "abc",
            "name": "Short",
        })
        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert "password" in fields

    async def test_register_missing_fields(self, client: AsyncClient, mock_email_service):
        response = await client.post("/api/auth/register", json={})
        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert {"email", "password", "name"} <= fields

    async def test_register_invalid_email(self, client: AsyncClient, mock_email_service):
        response = await client.post("/api/auth/register", json={
            "email": "not-an-email",
            "password": PASSWORD,
            "confirmPassword": PASSWORD,
            "name": "Bad Email",
        })
        assert response.status_code == 400
        assert {"field": "email", "message": "Email should be valid"} in response.json()["errors"]

    async def test_register_sends_welcome_email(self, client: AsyncClient, mock_email_service):
        await register_user(client, email="welcome@example.com")
        mock_email_service.send_template.assert_called_once()
        kwargs = mock_email_service.send_template.call_args.kwargs
        assert kwargs["to"] == "welcome@example.com"
        assert kwargs["template_name"] == "welcome"
        assert "token=" in kwargs["context"]["verify_url"]

    async def test_register_creates_welcome_notification(self, client: AsyncClient, mock_email_service):
        user = await register_user(client)
        response = await client.get("/api/notifications", headers=user["headers"])
        assert response.status_code == 200
        notifications = response.json()
        assert len(notifications) == 1
        assert notifications[0]["type"] == "welcome"
        assert notifications[0]["read"] is False

    async def test_email_failure_does_not_fail_registration(self, client: AsyncClient, mock_email_service):
        mock_email_service.send_template.side_effect = RuntimeError("smtp down")
        response = await client.post("/api/auth/register", json={
            "email": "smtpdown@example.com",
            "password": PASSWORD,
            "confirmPassword": PASSWORD,
            "name": "Down",
        })
        assert response.status_code == 200


class TestLogin:
    async def test_login_success(self, client: AsyncClient, registered_user):
        response = await client.post("/api/auth/login", json={
            "email": registered_user["email"],
            "password": PASSWORD,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == registered_user["user_id"]
        assert data["token"]

    async def test_login_email_is_case_insensitive(self, client: AsyncClient, registered_user):
        response = await client.post("/api/auth/login", json={
            "email": registered_user["email"].upper(),
            "password": PASSWORD,
        })
        assert response.status_code == 200

    async def test_login_wrong_password(self, client: AsyncClient, registered_user):
        response = await client.post("/api/auth/login", json={
            "email": registered_user["email"],
            "password": "wrong-password",
        })
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    async def test_login_unknown_email_same_message(self, client: AsyncClient, registered_user):
        response = await client.post("/api/auth/login", json={
            "email": "nobody@example.com",
            "password": PASSWORD,
        })
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    async def test_login_validation(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"email": "", "password": ""})
        assert response.status_code == 400

    async def test_logout_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/auth/logout")
        assert response.status_code == 401

    async def test_logout(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/auth/logout")
        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"
