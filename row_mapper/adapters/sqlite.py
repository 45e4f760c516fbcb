"""SQLite adapter on the stdlib sqlite3 driver."""

from __future__ import annotations

import queue
import sqlite3
from typing import Any

from row_mapper.core.connection import ConnectionConfig
from row_mapper.core.exceptions import DatabaseConnectionError, PoolError
from row_mapper.core.statement import ExecutionResult

Pool = queue.LifoQueue  # of sqlite3.Connection


class SqliteSyncAdapter:
    """Synchronous SQLite adapter.

    Connections are opened up front and kept in a LIFO queue, so the most
    recently released connection is handed out next. An in-memory database
    belongs to a single connection: pair ``:memory:`` with ``pool_size=1``.
    """

    @property
    def paramstyle(self) -> str:
        return sqlite3.paramstyle

    def _connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(config.database, timeout=config.pool_timeout, **config.extra)
            conn.execute("PRAGMA foreign_keys=ON")
        except sqlite3.Error as e:
            raise DatabaseConnectionError(f"Cannot open {config.database!r}: {e}") from e
        conn.row_factory = sqlite3.Row
        return conn

    def create_pool(self, config: ConnectionConfig) -> Pool:
        pool: Pool = queue.LifoQueue(maxsize=config.pool_size)
        for _ in range(config.pool_size):
            pool.put_nowait(self._connect(config))
        return pool

    def acquire_connection(self, pool: Pool) -> sqlite3.Connection:
        try:
            return pool.get_nowait()
        except queue.Empty:
            raise PoolError(f"All {pool.maxsize} connections are checked out") from None

    def release_connection(self, connection: sqlite3.Connection, pool: Pool) -> None:
        pool.put_nowait(connection)

    def close_pool(self, pool: Pool) -> None:
        """Close every idle connection; checked-out ones are left to their holders."""
        while True:
            try:
                pool.get_nowait().close()
            except queue.Empty:
                return

    def execute(self, connection: sqlite3.Connection, sql: str, params: Any = None) -> sqlite3.Cursor:
        return connection.execute(sql, () if params is None else params)

    def fetch_rows(self, cursor: sqlite3.Cursor) -> list[dict[str, Any]]:
        return [dict(row) for row in cursor.fetchall()]

    def write_result(self, cursor: sqlite3.Cursor) -> ExecutionResult:
        return ExecutionResult(rowcount=cursor.rowcount, lastrowid=cursor.lastrowid)
