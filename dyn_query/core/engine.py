"""Query execution engine.

The Engine encodes dynamic-value parameters, executes through the adapter
on a leased connection, and decodes result rows back into dynamic values.
"""

from __future__ import annotations

import logging
from typing import Any

from dyn_query.core.connection import (
    AsyncConnectionManager,
    ConnectionConfig,
    ConnectionManager,
)
from dyn_query.core.exceptions import TypeMismatchError, variant_name
from dyn_query.core.params import encode_parameters, normalize_params
from dyn_query.core.rows import decode_rows
from dyn_query.core.values import Int, Value, Vector

logger = logging.getLogger(__name__)

_EMPTY = Vector(())


def _prepare(query: str, parameters: Value | None) -> tuple[str, list[Any] | None]:
    """Encode ``parameters`` and rewrite ``query`` placeholders for the driver."""
    if parameters is None:
        return query, None
    return normalize_params(query, encode_parameters(parameters))


def _require_vector(parameters: Any) -> None:
    if not isinstance(parameters, Vector):
        raise TypeMismatchError("Vector", variant_name(parameters), "parameters")


def _preview(sql: str) -> str:
    return sql if len(sql) <= 60 else f"{sql[:60]}..."


class Engine:
    """Synchronous query execution engine.

    Each call leases one connection for its whole duration; concurrent
    callers get distinct connections or wait for one.
    """

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self._connection_manager = connection_manager

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> Engine:
        """Create an Engine from a ConnectionConfig."""
        return cls(ConnectionManager(config))

    def execute(self, query: str, parameters: Value) -> Int:
        """Execute a write statement.

        Args:
            query: SQL with ``$1, $2, ...`` placeholders.
            parameters: A ``Vector`` of values, one per placeholder.

        Returns:
            ``Int`` carrying the affected row count.

        Raises:
            TypeMismatchError: If ``parameters`` is not a ``Vector``. Nothing
                is sent to the database in that case.
        """
        _require_vector(parameters)
        sql, bound = _prepare(query, parameters)
        adapter = self._connection_manager.adapter

        with self._connection_manager.get_connection() as conn:
            cursor = adapter.execute(conn, sql, bound)
            rowcount = max(int(cursor.rowcount), 0)

        logger.debug(
            "Executed with %d parameter(s), %d row(s) affected: %s",
            len(parameters),
            rowcount,
            _preview(query),
        )
        return Int(rowcount)

    def query(self, query: str, parameters: Value | None = None) -> Vector:
        """Run a read query and return a ``Vector`` of row ``Vector`` values."""
        if parameters is not None:
            _require_vector(parameters)
        sql, bound = _prepare(query, parameters)
        adapter = self._connection_manager.adapter

        with self._connection_manager.get_connection() as conn:
            cursor = adapter.execute(conn, sql, bound)
            result = adapter.fetch_result(cursor)

        if result is None:
            return _EMPTY
        column_types, rows = result
        decoded = decode_rows(rows, column_types)
        logger.debug("Query returned %d row(s): %s", len(decoded), _preview(query))
        return decoded

    def batch_execute(self, script: str) -> None:
        """Run a parameterless SQL script of one or more statements."""
        with self._connection_manager.get_connection() as conn:
            self._connection_manager.adapter.batch_execute(conn, script)
        logger.debug("Batch executed: %s", _preview(script))

    def close(self) -> None:
        """Close all pooled connections."""
        self._connection_manager.close_pool()

    def __enter__(self) -> Engine:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class AsyncEngine:
    """Asynchronous query execution engine."""

    def __init__(self, connection_manager: AsyncConnectionManager) -> None:
        self._connection_manager = connection_manager

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> AsyncEngine:
        """Create an AsyncEngine from a ConnectionConfig."""
        return cls(AsyncConnectionManager(config))

    async def execute(self, query: str, parameters: Value) -> Int:
        """Execute a write statement asynchronously."""
        _require_vector(parameters)
        sql, bound = _prepare(query, parameters)
        adapter = self._connection_manager.adapter

        async with self._connection_manager.get_connection() as conn:
            cursor = await adapter.execute_async(conn, sql, bound)
            rowcount = max(int(cursor.rowcount), 0)

        logger.debug(
            "Executed with %d parameter(s), %d row(s) affected: %s",
            len(parameters),
            rowcount,
            _preview(query),
        )
        return Int(rowcount)

    async def query(self, query: str, parameters: Value | None = None) -> Vector:
        """Run a read query asynchronously."""
        if parameters is not None:
            _require_vector(parameters)
        sql, bound = _prepare(query, parameters)
        adapter = self._connection_manager.adapter

        async with self._connection_manager.get_connection() as conn:
            cursor = await adapter.execute_async(conn, sql, bound)
            result = await adapter.fetch_result_async(cursor)

        if result is None:
            return _EMPTY
        column_types, rows = result
        decoded = decode_rows(rows, column_types)
        logger.debug("Query returned %d row(s): %s", len(decoded), _preview(query))
        return decoded

    async def batch_execute(self, script: str) -> None:
        """Run a parameterless SQL script asynchronously."""
        async with self._connection_manager.get_connection() as conn:
            await self._connection_manager.adapter.batch_execute_async(conn, script)
        logger.debug("Batch executed: %s", _preview(script))

    async def close(self) -> None:
        """Close all pooled connections."""
        await self._connection_manager.close_pool()

    async def __aenter__(self) -> AsyncEngine:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
