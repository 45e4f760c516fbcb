"""Identity map ensuring a single in-memory Row per primary key.

One map belongs to one MapperLocator scope (a request or unit of work) and
is shared by every table gateway in that scope.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Any

import structlog

from row_mapper.table.row import Row

logger = structlog.get_logger(__name__)

IdentityKey = tuple[str, Hashable]


class IdentityMap:
    """Stores rows keyed by (table name, primary-key value)."""

    def __init__(self) -> None:
        self._rows: dict[IdentityKey, Row] = {}

    def get(self, table: str, primary_value: Any) -> Row | None:
        return self._rows.get((table, primary_value))

    def has(self, table: str, primary_value: Any) -> bool:
        return (table, primary_value) in self._rows

    def set(self, table: str, row: Row) -> None:
        """Register ``row`` under its current primary value.

        Rows without a primary value are not tracked.
        """
        primary_value = row.get_primary_value()
        if primary_value is None:
            return
        self._rows[(table, primary_value)] = row

    def get_or_create(
        self,
        table: str,
        primary_value: Any,
        factory: Callable[[], Row],
    ) -> Row:
        """Return the registered row for the key, or build and register one."""
        key = (table, primary_value)
        row = self._rows.get(key)
        if row is not None:
            logger.debug("identity_map_hit", table=table, primary=primary_value)
            return row
        row = factory()
        if primary_value is not None:
            self._rows[key] = row
        return row

    def remove(self, table: str, primary_value: Any) -> Row | None:
        return self._rows.pop((table, primary_value), None)

    def discard(self, row: Row) -> None:
        """Drop every entry that points at ``row``, whatever key it is under."""
        for key in [key for key, tracked in self._rows.items() if tracked is row]:
            del self._rows[key]

    def clear(self) -> None:
        self._rows.clear()

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, row: object) -> bool:
        return any(tracked is row for tracked in self._rows.values())
