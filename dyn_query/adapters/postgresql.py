"""PostgreSQL adapter - sync and async using psycopg (v3.2+)."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import psycopg
from psycopg.adapt import Dumper
from psycopg.conninfo import make_conninfo

from dyn_query.core.connection import ConnectionConfig
from dyn_query.core.enums import ColumnType
from dyn_query.core.exceptions import ConnectionError, DriverError, UnsupportedTypeError
from dyn_query.core.params import AnyNull
from dyn_query.core.pool import AsyncLeasePool, LeasePool

logger = logging.getLogger(__name__)

# Builtin type OIDs from pg_type
OID_COLUMN_TYPES: dict[int, ColumnType] = {
    16: ColumnType.BOOL,
    17: ColumnType.BYTEA,
    20: ColumnType.INT8,
    21: ColumnType.INT2,
    23: ColumnType.INT4,
    25: ColumnType.TEXT,
    700: ColumnType.FLOAT4,
    701: ColumnType.FLOAT8,
    1043: ColumnType.VARCHAR,
}


class AnyNullDumper(Dumper):
    """Dump ``AnyNull`` as NULL with the unknown OID (0).

    The server then infers the parameter type from context, so the same
    value binds into a column of any type.
    """

    def dump(self, obj: AnyNull) -> None:
        return None


def _build_conninfo(config: ConnectionConfig) -> str:
    """Merge config fields into ``conninfo`` (key/value or URI form).

    Fields override the same keyword in ``conninfo``; values are escaped.
    """
    return make_conninfo(
        config.conninfo or "",
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        dbname=config.database,
    )


def _register_dumpers(connection: Any) -> None:
    connection.adapters.register_dumper(AnyNull, AnyNullDumper)


def resolve_column_types(cursor: Any) -> list[ColumnType]:
    """Map the cursor's column OIDs to ``ColumnType`` tags.

    Raises:
        UnsupportedTypeError: For the first column with no decoding rule.
    """
    column_types: list[ColumnType] = []
    for position, column in enumerate(cursor.description):
        column_type = OID_COLUMN_TYPES.get(column.type_code)
        if column_type is None:
            raise UnsupportedTypeError(
                _type_name(cursor, column.type_code),
                position=position,
                column=column.name,
            )
        column_types.append(column_type)
    return column_types


def _type_name(cursor: Any, oid: int) -> str:
    info = cursor.connection.adapters.types.get(oid)
    if info is None:
        return f"oid {oid}"
    return f"{info.name} (oid {oid})"


def _rows(raw_rows: Sequence[Any]) -> list[Sequence[Any]]:
    return [tuple(row) for row in raw_rows]


class PostgresqlSyncAdapter:
    """Synchronous PostgreSQL adapter using psycopg (v3.2+)."""

    def create_pool(self, config: ConnectionConfig) -> LeasePool:
        connections: list[psycopg.Connection[Any]] = []
        try:
            conninfo = _build_conninfo(config)
            for _ in range(config.pool_size):
                connections.append(self._connect(conninfo, config))
        except psycopg.Error as e:
            for conn in connections:
                conn.close()
            raise ConnectionError(e) from e
        logger.debug("Opened %d PostgreSQL connection(s)", len(connections))
        return LeasePool(connections, config.pool_timeout, self._close)

    def _connect(self, conninfo: str, config: ConnectionConfig) -> psycopg.Connection[Any]:
        conn = psycopg.connect(conninfo, autocommit=True, **config.extra)
        _register_dumpers(conn)
        return conn

    @staticmethod
    def _close(connection: psycopg.Connection[Any]) -> None:
        connection.close()

    def acquire_connection(self, pool: LeasePool) -> Any:
        return pool.acquire()

    def release_connection(self, connection: Any, pool: LeasePool) -> None:
        pool.release(connection)

    def close_pool(self, pool: LeasePool) -> None:
        pool.close()

    def execute(
        self,
        connection: Any,
        sql: str,
        params: list[Any] | None = None,
    ) -> Any:
        try:
            return connection.execute(sql, params)
        except psycopg.Error as e:
            raise DriverError(e) from e

    def fetch_result(self, cursor: Any) -> tuple[list[ColumnType], list[Sequence[Any]]] | None:
        if cursor.description is None:
            return None
        column_types = resolve_column_types(cursor)
        try:
            return column_types, _rows(cursor.fetchall())
        except psycopg.Error as e:
            raise DriverError(e) from e

    def batch_execute(self, connection: Any, script: str) -> None:
        try:
            connection.execute(script)
        except psycopg.Error as e:
            raise DriverError(e) from e


class PostgresqlAsyncAdapter:
    """Asynchronous PostgreSQL adapter using psycopg (v3.2+) async support."""

    async def create_pool_async(self, config: ConnectionConfig) -> AsyncLeasePool:
        connections: list[psycopg.AsyncConnection[Any]] = []
        try:
            conninfo = _build_conninfo(config)
            for _ in range(config.pool_size):
                conn = await psycopg.AsyncConnection.connect(
                    conninfo, autocommit=True, **config.extra
                )
                _register_dumpers(conn)
                connections.append(conn)
        except psycopg.Error as e:
            for conn in connections:
                await conn.close()
            raise ConnectionError(e) from e
        logger.debug("Opened %d async PostgreSQL connection(s)", len(connections))
        return AsyncLeasePool(connections, config.pool_timeout, self._close)

    @staticmethod
    async def _close(connection: psycopg.AsyncConnection[Any]) -> None:
        await connection.close()

    async def acquire_connection_async(self, pool: AsyncLeasePool) -> Any:
        return await pool.acquire()

    async def release_connection_async(self, connection: Any, pool: AsyncLeasePool) -> None:
        await pool.release(connection)

    async def close_pool_async(self, pool: AsyncLeasePool) -> None:
        await pool.close()

    async def execute_async(
        self,
        connection: Any,
        sql: str,
        params: list[Any] | None = None,
    ) -> Any:
        try:
            return await connection.execute(sql, params)
        except psycopg.Error as e:
            raise DriverError(e) from e

    async def fetch_result_async(
        self, cursor: Any
    ) -> tuple[list[ColumnType], list[Sequence[Any]]] | None:
        if cursor.description is None:
            return None
        column_types = resolve_column_types(cursor)
        try:
            return column_types, _rows(await cursor.fetchall())
        except psycopg.Error as e:
            raise DriverError(e) from e

    async def batch_execute_async(self, connection: Any, script: str) -> None:
        try:
            await connection.execute(script)
        except psycopg.Error as e:
            raise DriverError(e) from e
