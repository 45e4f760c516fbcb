"""Executor protocol.

The mapper layer never talks to a driver directly. It hands statement
specifications to an executor; Engine is the shipped implementation, and
tests substitute in-memory ones.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from row_mapper.core.statement import ExecutionResult, Select, Statement


@runtime_checkable
class Executor(Protocol):
    """Query and write collaborator protocol."""

    def select(self, select: Select) -> list[dict[str, Any]]:
        """Return the rows matching ``select`` as flat column dicts."""
        ...

    def execute(self, statement: Statement) -> ExecutionResult:
        """Execute an insert, update or delete."""
        ...

    def transaction(self) -> AbstractContextManager[Any]:
        """Context manager making every call inside it atomic."""
        ...
