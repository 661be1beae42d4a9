"""
Shared fixtures: a throwaway SQLite database per test and an HTTP client
wired to a freshly built application.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from config.settings import Settings
from database.session import Database
from main import create_app

from .helpers import API, login_token, register


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}",
        api_prefix=API,
    )


@pytest_asyncio.fixture()
async def database(settings: Settings):
    db = Database.from_settings(settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture()
async def session(database: Database):
    async with database.session_factory() as s:
        yield s


@pytest_asyncio.fixture()
async def client(settings: Settings, database: Database):
    app = create_app(settings, database=database)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest_asyncio.fixture()
async def user_token(client: httpx.AsyncClient) -> str:
    await register(client, "Alice", "alice@example.com")
    return await login_token(client, "alice@example.com")
