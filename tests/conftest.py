"""
Pytest fixtures for the user service.

Most tests run the real FastAPI app against `InMemoryUserStore`, which is
injected through `create_app(store=...)`. Tests that need PostgreSQL use the
`pg_client` fixture and are skipped unless `TEST_DATABASE_URL` is set.
"""

from __future__ import annotations

import itertools
import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from core.db import Database
from main import create_app
from users.repository import StoreError, UserNotFound, UserStore
from users.schemas import User

TEST_SETTINGS = Settings(database_url="postgresql://unused@localhost/unused", api_resource="py")
USERS_URL = "/api/py/users"


class InMemoryUserStore:
    """Dict-backed stand-in for `UserStore` with the same async surface."""

    def __init__(self) -> None:
        self._rows: dict[int, User] = {}
        self._ids = itertools.count(1)
        self.initialized = False
        self.closed = False

    async def initialize(self) -> None:
        self.initialized = True

    async def close(self) -> None:
        self.closed = True

    async def list_all(self) -> list[User]:
        return [self._rows[key] for key in sorted(self._rows)]

    async def create(self, name: str, email: str) -> User:
        user = User(id=next(self._ids), name=name, email=email)
        self._rows[user.id] = user
        return user

    async def get_by_id(self, user_id: int) -> User:
        try:
            return self._rows[user_id]
        except KeyError:
            raise UserNotFound(user_id) from None

    async def update(self, user_id: int, name: str, email: str) -> User:
        if user_id not in self._rows:
            raise UserNotFound(user_id)
        user = User(id=user_id, name=name, email=email)
        self._rows[user_id] = user
        return user

    async def delete(self, user_id: int) -> None:
        if self._rows.pop(user_id, None) is None:
            raise UserNotFound(user_id)


class BrokenUserStore(InMemoryUserStore):
    """Every data call fails the way a lost database connection does."""

    async def list_all(self) -> list[User]:
        raise StoreError("list_all failed: connection refused")

    async def create(self, name: str, email: str) -> User:
        raise StoreError("create failed: connection refused")

    async def get_by_id(self, user_id: int) -> User:
        raise StoreError("get_by_id failed: connection refused")

    async def update(self, user_id: int, name: str, email: str) -> User:
        raise StoreError("update failed: connection refused")

    async def delete(self, user_id: int) -> None:
        raise StoreError("delete failed: connection refused")


class CrashingUserStore(InMemoryUserStore):
    """Fails with an error the app has no dedicated handler for."""

    async def list_all(self) -> list[User]:
        raise RuntimeError("unexpected state")


@pytest.fixture
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def client(store: InMemoryUserStore) -> Generator[TestClient, None, None]:
    app = create_app(TEST_SETTINGS, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def broken_client() -> Generator[TestClient, None, None]:
    app = create_app(TEST_SETTINGS, store=BrokenUserStore())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def crashing_client() -> Generator[TestClient, None, None]:
    app = create_app(TEST_SETTINGS, store=CrashingUserStore())
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


async def _truncate_users(url: str) -> None:
    db = Database(url, min_size=1, max_size=1)
    await db.open()
    try:
        await db.execute("TRUNCATE TABLE users RESTART IDENTITY")
    finally:
        await db.close()


@pytest.fixture(scope="session")
def test_database_url() -> str:
    url = os.getenv("TEST_DATABASE_URL", "").strip()
    if not url:
        pytest.skip("TEST_DATABASE_URL is not set; skipping PostgreSQL tests")
    return url


@pytest.fixture
def pg_store(test_database_url: str) -> UserStore:
    return UserStore(Database(test_database_url, min_size=1, max_size=5))


@pytest.fixture
def pg_client(test_database_url: str, pg_store: UserStore) -> Generator[TestClient, None, None]:
    """
    App wired to a real PostgreSQL store, with an empty `users` table.
    """
    settings = Settings(database_url=test_database_url, api_resource="py")
    app = create_app(settings, store=pg_store)
    with TestClient(app) as test_client:
        test_client.portal.call(_truncate_users, test_database_url)
        yield test_client
