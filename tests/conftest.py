"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from gameratez.auth.email_validation import StaticMxResolver
from gameratez.config import Settings
from gameratez.main import create_app
from gameratez.storage import FileStore, SqlStore, Store

ADMIN_TOKEN = "test-admin-token"
START = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock. Call it to read the current instant."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


def make_settings(tmp_path: Path, **overrides: object) -> Settings:
    values: dict[str, object] = {
        "database_url": "",
        "data_dir": str(tmp_path / "data"),
        "uploads_dir": str(tmp_path / "uploads"),
        "admin_token": ADMIN_TOKEN,
        "log_format": "console",
        "redis_url": "",
        "games_file": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mx_resolver() -> StaticMxResolver:
    """Only example.com and gmail.com accept mail."""
    return StaticMxResolver({"example.com", "gmail.com"})


@pytest.fixture(params=["file", "sql"])
def settings(request: pytest.FixtureRequest, tmp_path: Path) -> Settings:
    """Every API test runs once against each storage backend."""
    if request.param == "sql":
        return make_settings(tmp_path, database_url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    return make_settings(tmp_path)


@pytest_asyncio.fixture(params=["file", "sql"])
async def store(request: pytest.FixtureRequest, tmp_path: Path) -> AsyncGenerator[Store, None]:
    """Each store-level test runs once per backend."""
    if request.param == "file":
        backend: Store = FileStore(tmp_path / "data")
    else:
        backend = SqlStore(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await backend.open()
    yield backend
    await backend.close()


@pytest_asyncio.fixture
async def app(settings: Settings, clock: FakeClock, mx_resolver: StaticMxResolver) -> AsyncGenerator[FastAPI, None]:
    """App with full lifespan, a fake clock and a fake MX resolver."""
    application = create_app(settings, clock=clock, mx_resolver=mx_resolver)
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _register(
    client: AsyncClient,
    username: str,
    *,
    display_name: str | None = None,
    email: str | None = None,
    password: str = "hunter2-but-longer",
    platform: str = "",
) -> dict:
    """Run both signup steps. Returns the created profile."""
    email = email or f"{username.lower()}@example.com"
    started = await client.post("/api/auth/signup", json={"email": email, "password": password})
    assert started.status_code == 200, started.text
    completed = await client.post(
        "/api/auth/complete",
        json={
            "completeToken": started.json()["completeToken"],
            "displayName": display_name or username.title(),
            "username": username,
            "favoriteGameKinds": ["rpg"],
            "feedPreference": "all",
            "platform": platform,
        },
    )
    assert completed.status_code == 200, completed.text
    return completed.json()["profile"]


@pytest.fixture
def register(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Factory: ``await register("alice")`` signs a user up through the API."""

    async def _do(username: str, **kwargs: object) -> dict:
        return await _register(client, username, **kwargs)

    return _do


@pytest.fixture
def post_rate(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Factory: ``await post_rate("alice", "Hades")`` creates a rate through the API."""

    async def _do(handle: str, game: str, rating: int = 8, body: str = "Great game", **extra: object) -> dict:
        payload = {
            "gameName": game,
            "rating": rating,
            "body": body,
            "raterName": handle.title(),
            "raterHandle": handle,
            **extra,
        }
        response = await client.post("/api/rates", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _do
