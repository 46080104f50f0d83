"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import pytest

from dyn_query.core.connection import (
    AsyncConnectionManager,
    ConnectionConfig,
    ConnectionManager,
)
from dyn_query.core.enums import ColumnType
from dyn_query.core.pool import AsyncLeasePool, LeasePool


@dataclass
class FakeCursor:
    """Cursor stand-in carrying a scripted result."""

    rowcount: int = -1
    result: tuple[list[ColumnType], list[Sequence[Any]]] | None = None


@dataclass
class FakeConnection:
    """Records every statement it receives."""

    name: str
    executed: list[tuple[str, list[Any] | None]] = field(default_factory=list)
    closed: bool = False


class FakeSyncAdapter:
    """In-memory SyncAdapter that replays scripted cursors in order."""

    def __init__(self) -> None:
        self.cursors: list[FakeCursor] = []
        self.connections: list[FakeConnection] = []
        self.scripts: list[str] = []

    def script_rowcount(self, rowcount: int) -> None:
        """Queue a cursor for a statement that returns no rows."""
        self.cursors.append(FakeCursor(rowcount=rowcount))

    def script_rows(self, columns: list[ColumnType], rows: list[Sequence[Any]]) -> None:
        """Queue a cursor for a statement that returns rows."""
        self.cursors.append(FakeCursor(rowcount=len(rows), result=(columns, rows)))

    def create_pool(self, config: ConnectionConfig) -> LeasePool:
        self.connections = [FakeConnection(f"conn-{i}") for i in range(config.pool_size)]
        return LeasePool(list(self.connections), config.pool_timeout, self._close)

    @staticmethod
    def _close(connection: FakeConnection) -> None:
        connection.closed = True

    def acquire_connection(self, pool: LeasePool) -> Any:
        return pool.acquire()

    def release_connection(self, connection: Any, pool: LeasePool) -> None:
        pool.release(connection)

    def close_pool(self, pool: LeasePool) -> None:
        pool.close()

    def execute(self, connection: Any, sql: str, params: list[Any] | None = None) -> Any:
        connection.executed.append((sql, params))
        return self.cursors.pop(0) if self.cursors else FakeCursor()

    def fetch_result(self, cursor: Any) -> Any:
        return cursor.result

    def batch_execute(self, connection: Any, script: str) -> None:
        self.scripts.append(script)

    @property
    def executed(self) -> list[tuple[str, list[Any] | None]]:
        return [stmt for conn in self.connections for stmt in conn.executed]


class FakeAsyncAdapter(FakeSyncAdapter):
    """AsyncAdapter counterpart of FakeSyncAdapter."""

    async def create_pool_async(self, config: ConnectionConfig) -> AsyncLeasePool:
        self.connections = [FakeConnection(f"conn-{i}") for i in range(config.pool_size)]
        return AsyncLeasePool(list(self.connections), config.pool_timeout, self._aclose)

    @staticmethod
    async def _aclose(connection: FakeConnection) -> None:
        connection.closed = True

    async def acquire_connection_async(self, pool: AsyncLeasePool) -> Any:
        return await pool.acquire()

    async def release_connection_async(self, connection: Any, pool: AsyncLeasePool) -> None:
        await pool.release(connection)

    async def close_pool_async(self, pool: AsyncLeasePool) -> None:
        await pool.close()

    async def execute_async(
        self, connection: Any, sql: str, params: list[Any] | None = None
    ) -> Any:
        return self.execute(connection, sql, params)

    async def fetch_result_async(self, cursor: Any) -> Any:
        return cursor.result

    async def batch_execute_async(self, connection: Any, script: str) -> None:
        self.batch_execute(connection, script)


@pytest.fixture
def pg_config() -> ConnectionConfig:
    """Config pointing nowhere in particular; used with fake adapters."""
    return ConnectionConfig(database="dyn_query_test", pool_size=1, pool_timeout=0.1)


@pytest.fixture
def fake_adapter() -> FakeSyncAdapter:
    return FakeSyncAdapter()


@pytest.fixture
def fake_async_adapter() -> FakeAsyncAdapter:
    return FakeAsyncAdapter()


@pytest.fixture
def connection_manager(pg_config: ConnectionConfig, fake_adapter: FakeSyncAdapter) -> ConnectionManager:
    return ConnectionManager(pg_config, adapter=fake_adapter)


@pytest.fixture
def async_connection_manager(
    pg_config: ConnectionConfig, fake_async_adapter: FakeAsyncAdapter
) -> AsyncConnectionManager:
    return AsyncConnectionManager(pg_config, adapter=fake_async_adapter)
