"""Database adapter protocols.

Every adapter module MUST implement these protocols. The engines only talk
to the driver through them: pooling, execution, and result metadata.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from dyn_query.core.connection import ConnectionConfig
from dyn_query.core.enums import ColumnType

ResultSet = tuple[list[ColumnType], list[Sequence[Any]]]


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous database adapter protocol."""

    def create_pool(self, config: ConnectionConfig) -> Any:
        """Create a connection pool."""
        ...

    def acquire_connection(self, pool: Any) -> Any:
        """Lease a connection exclusively from the pool."""
        ...

    def release_connection(self, connection: Any, pool: Any) -> None:
        """Return a leased connection to the pool."""
        ...

    def close_pool(self, pool: Any) -> None:
        """Close the pool and release all connections."""
        ...

    def execute(
        self,
        connection: Any,
        sql: str,
        params: list[Any] | None = None,
    ) -> Any:
        """Execute SQL with positional ``%s`` parameters, return a cursor."""
        ...

    def fetch_result(self, cursor: Any) -> ResultSet | None:
        """Return ``(column_types, rows)``, or None if no rows were produced.

        Column types are resolved before any row is fetched.
        """
        ...

    def batch_execute(self, connection: Any, script: str) -> None:
        """Run one or more statements without parameters."""
        ...


@runtime_checkable
class AsyncAdapter(Protocol):
    """Asynchronous database adapter protocol."""

    async def create_pool_async(self, config: ConnectionConfig) -> Any:
        """Create an async connection pool."""
        ...

    async def acquire_connection_async(self, pool: Any) -> Any:
        """Lease a connection exclusively from the async pool."""
        ...

    async def release_connection_async(self, connection: Any, pool: Any) -> None:
        """Return a leased connection to the async pool."""
        ...

    async def close_pool_async(self, pool: Any) -> None:
        """Close the async pool."""
        ...

    async def execute_async(
        self,
        connection: Any,
        sql: str,
        params: list[Any] | None = None,
    ) -> Any:
        """Execute SQL asynchronously and return a cursor-like object."""
        ...

    async def fetch_result_async(self, cursor: Any) -> ResultSet | None:
        """Async variant of ``SyncAdapter.fetch_result``."""
        ...

    async def batch_execute_async(self, connection: Any, script: str) -> None:
        """Run one or more statements without parameters."""
        ...
