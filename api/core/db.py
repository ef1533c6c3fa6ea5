"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

Every repository call borrows exactly one connection through
`create_connection()` and gives it back before returning.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

_pool: asyncpg.Pool | None = None


# Driver failures are explicit and separable from other runtime errors.
class DatabaseError(RuntimeError):
    pass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def pool_min_size() -> int:
    return max(_env_int("DB_POOL_MIN_SIZE", 1), 0)


def pool_max_size() -> int:
    return max(_env_int("DB_POOL_MAX_SIZE", 5), 1)


def command_timeout() -> int:
    return _env_int("DB_COMMAND_TIMEOUT", 30)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    max_size = pool_max_size()
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=min(pool_min_size(), max_size),
        max_size=max_size,
        command_timeout=command_timeout(),
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


@asynccontextmanager
async def create_connection() -> AsyncIterator[asyncpg.Connection]:
    """
    Borrow one connection for the duration of a single operation.

    The connection goes back to the pool on every exit path. Driver errors
    raised inside the block are re-raised as `DatabaseError`.
    """
    try:
        async with pool().acquire() as conn:  # type: asyncpg.Connection
            yield conn
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
        raise DatabaseError(str(exc) or exc.__class__.__name__) from exc


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    async with create_connection() as conn:
        row = await conn.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    async with create_connection() as conn:
        rows = await conn.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the status tag, e.g. "DELETE 1".
    """
    async with create_connection() as conn:
        return await conn.execute(sql, *args)
