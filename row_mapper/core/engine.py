"""Statement execution engine.

The Engine is the query/write collaborator the mapper layer talks to. It
renders Select/Insert/Update/Delete specifications to SQL, binds parameters
in the adapter's paramstyle, executes them and hands back flat row dicts or
an ExecutionResult.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from row_mapper.core.connection import ConnectionConfig, ConnectionManager
from row_mapper.core.exceptions import StatementExecutionError, TransactionStateError
from row_mapper.core.params import bind
from row_mapper.core.statement import ExecutionResult, Select, Statement
from row_mapper.core.transaction import JoinedTransaction, TransactionManager

logger = structlog.get_logger(__name__)


class Engine:
    """Synchronous statement execution engine."""

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self._connection_manager = connection_manager
        self._adapter = connection_manager.adapter
        self._paramstyle = self._adapter.paramstyle
        self._transaction: TransactionManager | None = None

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> Engine:
        """Create an Engine from a ConnectionConfig."""
        return cls(ConnectionManager(config))

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    def close(self) -> None:
        """Close every pooled connection."""
        self._connection_manager.close_pool()

    def select(self, select: Select) -> list[dict[str, Any]]:
        """Run a select specification and return its rows as dicts."""
        sql, params = select.to_sql()
        rows = self.fetch_all(sql, params, label=select.table)
        logger.debug("rows_selected", table=select.table, count=len(rows))
        return rows

    def execute(self, statement: Statement) -> ExecutionResult:
        """Run an insert/update/delete specification."""
        sql, params = statement.to_sql()
        result = self.execute_sql(sql, params, label=statement.table)
        logger.debug(
            "statement_executed",
            kind=type(statement).__name__.lower(),
            table=statement.table,
            rowcount=result.rowcount,
        )
        return result

    def fetch_all(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        *,
        label: str = "<inline>",
    ) -> list[dict[str, Any]]:
        """Fetch all rows of a raw SQL query."""
        sql, bound = bind(sql, params, self._paramstyle)
        with self._connection() as conn:
            cursor = self._run(conn, sql, bound, label)
            return self._adapter.fetch_rows(cursor)

    def execute_sql(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        *,
        label: str = "<inline>",
    ) -> ExecutionResult:
        """Execute a raw write statement.

        Outside a transaction the change is committed immediately.
        """
        sql, bound = bind(sql, params, self._paramstyle)
        with self._connection() as conn:
            cursor = self._run(conn, sql, bound, label)
            if self._transaction is None:
                conn.commit()
            return self._adapter.write_result(cursor)

    def transaction(self) -> TransactionManager | JoinedTransaction:
        """Create a new transaction context manager.

        The connection is taken from the pool now and returned when the
        context exits. Inside an active transaction the new one joins it
        instead: same connection, and a failure dooms the outer transaction.
        """
        if self._transaction is not None:
            return JoinedTransaction(self._transaction)
        conn = self._connection_manager.acquire()
        return TransactionManager(self, conn)

    def _begin(self, transaction: TransactionManager) -> None:
        if self._transaction is not None and self._transaction is not transaction:
            # a manager created before the outer one began; it cannot share its connection
            raise TransactionStateError(self._transaction.state, "begin")
        self._transaction = transaction

    def _end(self, transaction: TransactionManager) -> None:
        if self._transaction is transaction:
            self._transaction = None
        self._connection_manager.release(transaction.connection)

    @contextmanager
    def _connection(self) -> Iterator[Any]:
        if self._transaction is not None:
            self._transaction.check_active()
            yield self._transaction.connection
            return
        with self._connection_manager.get_connection() as conn:
            yield conn

    def _run(
        self,
        conn: Any,
        sql: str,
        params: dict[str, Any] | tuple[Any, ...],
        label: str,
    ) -> Any:
        try:
            return self._adapter.execute(conn, sql, params)
        except Exception as e:
            raise StatementExecutionError(label, str(e)) from e
