"""Database adapter protocol.

An adapter owns everything driver-specific: pooling, the DB-API paramstyle,
and turning driver cursors into plain row dicts and ExecutionResults. The
engine only ever talks to this protocol.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from row_mapper.core.connection import ConnectionConfig
from row_mapper.core.statement import ExecutionResult


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous database adapter protocol."""

    @property
    def paramstyle(self) -> str:
        """DB-API paramstyle of the driver (see ``row_mapper.core.params.bind``)."""
        ...

    def create_pool(self, config: ConnectionConfig) -> Any: ...

    def acquire_connection(self, pool: Any) -> Any: ...

    def release_connection(self, connection: Any, pool: Any) -> None: ...

    def close_pool(self, pool: Any) -> None: ...

    def execute(self, connection: Any, sql: str, params: Any = None) -> Any:
        """Execute already-bound SQL and return the driver cursor."""
        ...

    def fetch_rows(self, cursor: Any) -> list[dict[str, Any]]:
        """All remaining rows of ``cursor`` as column-name keyed dicts."""
        ...

    def write_result(self, cursor: Any) -> ExecutionResult:
        """Affected row count and generated key of a write."""
        ...
