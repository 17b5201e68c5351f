"""Shared test fixtures."""

from __future__ import annotations

import os
import time
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse

os.environ.setdefault("TASKFLOW_DATABASE_URL", "sqlite+aiosqlite:///./taskflow-test.db")
os.environ.setdefault("TASKFLOW_REDIS_URL", "")
os.environ.setdefault("TASKFLOW_LOG_FORMAT", "console")
os.environ.setdefault("TASKFLOW_LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.config import get_settings
from taskflow.database import close_db, get_engine, get_session, init_db
from taskflow.db import models  # noqa: F401
from taskflow.db.base import Base
from taskflow.email.service import reset_email_service
from taskflow.main import create_app
from taskflow.redis_client import close_redis, set_redis

get_settings.cache_clear()

PASSWORD = "secret123"


class FakePipeline:
    """Just enough of a redis pipeline for the rate limiter."""

    def __init__(self, store: FakeRedis) -> None:
        self.store = store
        self.ops: list[tuple[str, tuple[Any, ...]]] = []

    def incr(self, key: str) -> FakePipeline:
        self.ops.append(("incr", (key,)))
        return self

    def expire(self, key: str, seconds: int) -> FakePipeline:
        self.ops.append(("expire", (key, seconds)))
        return self

    async def execute(self) -> list[Any]:
        results: list[Any] = []
        for op, args in self.ops:
            results.append(getattr(self.store, f"_{op}")(*args))
        self.ops.clear()
        return results


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis covering INCR/EXPIRE."""

    def __init__(self) -> None:
        self.counters: dict[str, int] = {}
        self.expiry: dict[str, float] = {}

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self)

    def _incr(self, key: str) -> int:
        self.counters[key] = self.counters.get(key, 0) + 1
        return self.counters[key]

    def _expire(self, key: str, seconds: int) -> bool:
        self.expiry[key] = time.time() + seconds
        return True

    async def aclose(self) -> None:
        self.counters.clear()


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> AsyncGenerator[str, None]:
    """Fresh SQLite database file per test with the full schema created."""
    set_redis(None)
    url = f"sqlite+aiosqlite:///{tmp_path / 'taskflow.db'}"
    await init_db(url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield url
    await close_db()


@pytest_asyncio.fixture
async def client(database: str) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client against the real app. Redis is disabled unless fake_redis is requested."""
    reset_email_service()
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await close_redis()


@pytest_asyncio.fixture
async def db_session(database: str) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for test setup and assertions."""
    async for session in get_session():
        yield session
        break


@pytest.fixture
def fake_redis(client: AsyncClient) -> FakeRedis:
    """Install an in-memory Redis for the rate limiter."""
    fake = FakeRedis()
    set_redis(fake)  # type: ignore[arg-type]
    return fake


@pytest.fixture
def mock_email_service(monkeypatch):
    """Mock the email service to prevent actual email sending."""
    mock_service = MagicMock()
    mock_service.send_template = AsyncMock(return_value=True)
    mock_service.send_email = AsyncMock(return_value=True)

    monkeypatch.setattr("taskflow.auth.router.get_email_service", lambda *a, **kw: mock_service)
    return mock_service


def token_from_email(mock_service: MagicMock, url_key: str) -> str:
    """Pull the one-time token out of the link in the last templated email."""
    context = mock_service.send_template.call_args.kwargs["context"]
    return parse_qs(urlparse(context[url_key]).query)["token"][0]


async def register_user(
    client: AsyncClient,
    email: str = "alice@example.com",
    name: str = "Alice",
    password: str = PASSWORD,
) -> dict[str, Any]:
    """Register via the API and return credentials plus the token pair."""
    response = await client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "confirmPassword": password, "name": name},
    )
    assert response.status_code == 200, response.text
    data = response.json()
    return {
        "email": email,
        "password": password,
        "user_id": data["user"]["id"],
        "token": data["token"],
        "refresh_token": data["refreshToken"],
        "headers": {"Authorization": f"Bearer {data['token']}"},
    }


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient, mock_email_service) -> dict[str, Any]:
    return await register_user(client)


@pytest_asyncio.fixture
async def other_user(client: AsyncClient, mock_email_service) -> dict[str, Any]:
    """A second, unrelated account for ownership-isolation checks."""
    return await register_user(client, email="bob@example.com", name="Bob")


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, registered_user: dict[str, Any]) -> AsyncClient:
    """Client that sends the registered user's bearer token on every request."""
    client.headers["Authorization"] = f"Bearer {registered_user['token']}"
    return client


async def create_task(client: AsyncClient, **fields: Any) -> dict[str, Any]:
    payload = {"title": "Task", **fields}
    response = await client.post("/api/tasks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def create_category(client: AsyncClient, name: str = "Work", **fields: Any) -> dict[str, Any]:
    response = await client.post("/api/categories", json={"name": name, **fields})
    assert response.status_code == 200, response.text
    return response.json()


async def create_tag(client: AsyncClient, name: str = "urgent", **fields: Any) -> dict[str, Any]:
    response = await client.post("/api/tags", json={"name": name, **fields})
    assert response.status_code == 200, response.text
    return response.json()
