from __future__ import annotations

from typing import Any

import asyncpg
import pytest
from fastapi.testclient import TestClient

from core import db
from main import app


class FakeTransaction:
    def __init__(self, conn: "FakeConnection", options: dict[str, Any]):
        self.conn = conn
        self.options = options

    async def __aenter__(self) -> "FakeTransaction":
        self.conn.events.append(("begin", self.options))
        self.conn.pending = []
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.conn.committed.extend(self.conn.pending)
            self.conn.events.append(("commit", None))
        else:
            self.conn.events.append(("rollback", None))
        self.conn.pending = []
        return False


class FakeConnection:
    """
    Scripted stand-in for an asyncpg connection.

    `fetchrow` / `fetch` results are consumed in call order. `executemany`
    raises a unique violation on record index `fail_at`.
    """

    def __init__(
        self,
        *,
        fetchrow: list[Any] | None = None,
        fetch: list[list[dict]] | None = None,
        execute: str = "UPDATE 1",
        fail_at: int | None = None,
        error: Exception | None = None,
    ):
        self.fetchrow_results = list(fetchrow or [])
        self.fetch_results = list(fetch or [])
        self.execute_result = execute
        self.fail_at = fail_at
        self.error = error
        self.calls: list[tuple[str, str, tuple]] = []
        self.events: list[tuple[str, Any]] = []
        self.pending: list[tuple] = []
        self.committed: list[tuple] = []

    def _record(self, method: str, sql: str, args: tuple) -> None:
        self.calls.append((method, " ".join(sql.split()), args))
        if self.error is not None:
            raise self.error

    async def fetchrow(self, sql: str, *args: Any):
        self._record("fetchrow", sql, args)
        return self.fetchrow_results.pop(0) if self.fetchrow_results else None

    async def fetch(self, sql: str, *args: Any):
        self._record("fetch", sql, args)
        return self.fetch_results.pop(0) if self.fetch_results else []

    async def execute(self, sql: str, *args: Any) -> str:
        self._record("execute", sql, args)
        return self.execute_result

    async def executemany(self, sql: str, records: list[tuple]) -> None:
        self._record("executemany", sql, (records,))
        for index, record in enumerate(records):
            if index == self.fail_at:
                raise asyncpg.UniqueViolationError("duplicate key value violates unique constraint")
            self.pending.append(record)

    def transaction(self, **options: Any) -> FakeTransaction:
        return FakeTransaction(self, options)


class _Acquire:
    def __init__(self, pool: "FakePool"):
        self.pool = pool

    async def __aenter__(self) -> FakeConnection:
        self.pool.acquired += 1
        return self.pool.conn

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self.pool.released += 1
        return False


class FakePool:
    def __init__(self, conn: FakeConnection):
        self.conn = conn
        self.acquired = 0
        self.released = 0

    def acquire(self) -> _Acquire:
        return _Acquire(self)


@pytest.fixture
def fake_db(monkeypatch):
    """
    Install a scripted connection behind `db.pool()`; returns (conn, pool).
    """

    def _install(**kwargs: Any) -> tuple[FakeConnection, FakePool]:
        conn = FakeConnection(**kwargs)
        pool = FakePool(conn)
        monkeypatch.setattr(db, "_pool", pool)
        return conn, pool

    return _install


@pytest.fixture
def client():
    # No `with` block: lifespan (and the real pool) stays off for unit tests.
    return TestClient(app)


def company_row(company_id: int, name: str = "Acme", address: str = "1 Main St", country: str = "USA") -> dict:
    return {"id": company_id, "name": name, "address": address, "country": country}


def employee_row(employee_id: int, company_id: int, name: str = "Jane", age: int = 30, position: str = "Dev") -> dict:
    return {"id": employee_id, "company_id": company_id, "name": name, "age": age, "position": position}


def joined_row(company: dict, employee: dict) -> dict:
    row = dict(company)
    row.update({f"employee_{key}": value for key, value in employee.items()})
    return row
