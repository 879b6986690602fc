"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns the connection pool. The application lifespan opens it on
startup and closes it on shutdown (see `api/main.py`); handlers never touch
it directly, they go through the store that wraps it.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

logger = logging.getLogger(__name__)


def split_sslmode(url: str) -> tuple[str, str | None]:
    """
    Pull `sslmode` out of a libpq-style URL.

    Returns the URL without it and the mode (or None), so the mode can be
    handed to asyncpg as its `ssl` argument.
    """
    parts = urlsplit(url)
    if not parts.query:
        return url, None

    sslmode: str | None = None
    params = []
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key == "sslmode":
            sslmode = value or None
            continue
        params.append((key, value))
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment)), sslmode


class Database:
    def __init__(
        self,
        url: str,
        *,
        min_size: int = 1,
        max_size: int = 5,
        command_timeout: float = 30,
    ) -> None:
        self._url = url
        self._min_size = min_size
        self._max_size = max_size
        self._command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    async def open(self) -> None:
        if self._pool is not None:
            return None
        dsn, sslmode = split_sslmode(self._url)
        self._pool = await asyncpg.create_pool(
            dsn=dsn,
            ssl=sslmode,
            min_size=self._min_size,
            max_size=self._max_size,
            command_timeout=self._command_timeout,
        )
        logger.info("db_pool_opened min_size=%s max_size=%s", self._min_size, self._max_size)

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None
        logger.info("db_pool_closed")

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call open() on startup.")
        return self._pool

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        row = await self.pool.fetchrow(sql, *args)
        return dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        rows = await self.pool.fetch(sql, *args)
        return [dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> None:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
        """
        await self.pool.execute(sql, *args)
