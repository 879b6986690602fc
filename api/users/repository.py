"""
User persistence (raw SQL).

`UserStore` is the only place that talks to the `users` table. It is built
once per process and shared by every request, so it keeps no per-request
state; the asyncpg pool hands each statement its own connection.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg

from core.db import Database

from .schemas import User

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    name TEXT,
    email TEXT
)
"""


class StoreError(RuntimeError):
    """The database could not be reached or rejected a statement."""


class UserNotFound(LookupError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found.")
        self.user_id = user_id


def _row_to_user(row: dict[str, Any]) -> User:
    return User(
        id=int(row["id"]),
        name=str(row["name"] or ""),
        email=str(row["email"] or ""),
    )


@asynccontextmanager
async def _translate_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as exc:
        logger.exception("user_store_failed operation=%s", operation)
        raise StoreError(f"{operation} failed: {exc}") from exc


class UserStore:
    def __init__(self, db: Database) -> None:
        self._db = db

    async def initialize(self) -> None:
        """
        Open the pool and make sure the table exists.

        Errors propagate unchanged: if this fails the service must not start.
        """
        await self._db.open()
        await self._db.execute(CREATE_TABLE_SQL)
        logger.info("users_table_ready")

    async def close(self) -> None:
        await self._db.close()

    async def list_all(self) -> list[User]:
        async with _translate_errors("list_all"):
            rows = await self._db.fetch_all(
                """
                SELECT id, name, email
                FROM users
                ORDER BY id
                """
            )
        return [_row_to_user(row) for row in rows]

    async def create(self, name: str, email: str) -> User:
        async with _translate_errors("create"):
            row = await self._db.fetch_one(
                """
                INSERT INTO users (name, email)
                VALUES ($1, $2)
                RETURNING id, name, email
                """,
                name,
                email,
            )
        if row is None:
            raise StoreError("Failed to create user.")
        return _row_to_user(row)

    async def get_by_id(self, user_id: int) -> User:
        async with _translate_errors("get_by_id"):
            row = await self._db.fetch_one(
                """
                SELECT id, name, email
                FROM users
                WHERE id = $1
                """,
                user_id,
            )
        if row is None:
            raise UserNotFound(user_id)
        return _row_to_user(row)

    async def update(self, user_id: int, name: str, email: str) -> User:
        # One statement: the returned row is exactly what was written, and a
        # missing id shows up as no row instead of a stale re-read.
        async with _translate_errors("update"):
            row = await self._db.fetch_one(
                """
                UPDATE users
                SET name = $1,
                    email = $2
                WHERE id = $3
                RETURNING id, name, email
                """,
                name,
                email,
                user_id,
            )
        if row is None:
            raise UserNotFound(user_id)
        return _row_to_user(row)

    async def delete(self, user_id: int) -> None:
        async with _translate_errors("delete"):
            row = await self._db.fetch_one(
                """
                DELETE FROM users
                WHERE id = $1
                RETURNING id
                """,
                user_id,
            )
        if row is None:
            raise UserNotFound(user_id)
