"""Table data gateway.

The gateway is the only component that builds rows. It resolves selected
data through the identity map, builds write statements for a row, runs them
through the executor between the caller's modify/after callbacks, and drives
the row's lifecycle transition when the write succeeds.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

import structlog

from row_mapper.core.enums import RowStatus
from row_mapper.core.exceptions import UnexpectedStatusError, UnknownColumnError
from row_mapper.core.executor import Executor
from row_mapper.core.statement import Delete, ExecutionResult, Insert, Select, Update
from row_mapper.table.identity_map import IdentityMap
from row_mapper.table.row import Row
from row_mapper.table.table import Table

logger = structlog.get_logger(__name__)

ModifyHook = Callable[[Row, Any], None]
AfterHook = Callable[[Row, Any, ExecutionResult], None]


def _noop_modify(row: Row, statement: Any) -> None:
    return None


def _noop_after(row: Row, statement: Any, result: ExecutionResult) -> None:
    return None


class TableGateway:
    """Row persistence for one table within one identity-map scope."""

    def __init__(
        self,
        table: Table,
        executor: Executor,
        identity_map: IdentityMap,
        row_class: type[Row] = Row,
    ) -> None:
        self._table = table
        self._executor = executor
        self._identity_map = identity_map
        self._row_class = row_class

    @property
    def table(self) -> Table:
        return self._table

    @property
    def executor(self) -> Executor:
        return self._executor

    # --- row factories ---

    def new_row(self, cols: Mapping[str, Any] | None = None) -> Row:
        """Build a FOR_INSERT row from defaults overlaid with ``cols``."""
        data = self._table.default_cols()
        for col, value in (cols or {}).items():
            if col not in data:
                raise UnknownColumnError(self._table.name, col)
            data[col] = value
        return self._row_class(data, self._table.primary_key, RowStatus.FOR_INSERT)

    def new_selected_row(self, cols: Mapping[str, Any]) -> Row:
        data = {col: cols.get(col) for col in self._table.columns}
        return self._row_class(data, self._table.primary_key, RowStatus.SELECTED)

    def get_identified_or_selected_row(self, cols: Mapping[str, Any]) -> Row:
        """Return the tracked row for this data's key, else a new SELECTED row.

        A tracked row wins over the freshly selected values so unsaved
        in-memory changes are never clobbered by a later select.
        """
        primary_value = cols.get(self._table.primary_key)
        return self._identity_map.get_or_create(
            self._table.name,
            primary_value,
            lambda: self.new_selected_row(cols),
        )

    # --- selects ---

    def new_select(self, cols_vals: Mapping[str, Any] | None = None) -> Select:
        select = Select(table=self._table.name, columns=self._table.columns)
        for col, value in (cols_vals or {}).items():
            self._table.assert_column(col)
            select.where(col, value)
        return select

    def select_rows(self, select: Select) -> list[Row]:
        data = self._executor.select(select)
        return [self.get_identified_or_selected_row(cols) for cols in data]

    def select_row(self, select: Select) -> Row | None:
        select.limit = 1
        rows = self.select_rows(select)
        return rows[0] if rows else None

    def select_row_by_primary(self, primary_value: Any) -> Row | None:
        row = self._identity_map.get(self._table.name, primary_value)
        if row is not None:
            logger.debug("identity_map_hit", table=self._table.name, primary=primary_value)
            return row
        return self.select_row(self.new_select({self._table.primary_key: primary_value}))

    def select_rows_by_primary(self, primary_values: Iterable[Any]) -> list[Row]:
        """Return rows in the order of ``primary_values``, querying only unknown keys.

        Keys with no matching row are skipped.
        """
        values = list(dict.fromkeys(primary_values))
        found: dict[Any, Row] = {}
        missing = []
        for value in values:
            row = self._identity_map.get(self._table.name, value)
            if row is None:
                missing.append(value)
            else:
                found[value] = row
        if missing:
            select = self.new_select({self._table.primary_key: missing})
            for row in self.select_rows(select):
                found[row.get_primary_value()] = row
        return [found[value] for value in values if value in found]

    # --- writes ---

    def insert(
        self,
        row: Row,
        modify: ModifyHook = _noop_modify,
        after: AfterHook = _noop_after,
    ) -> bool:
        if row.get_status() is not RowStatus.FOR_INSERT:
            raise UnexpectedStatusError("insert", row.get_status().value)

        values = row.to_dict()
        primary_key = self._table.primary_key
        if self._table.autoincrement and values.get(primary_key) is None:
            values.pop(primary_key, None)

        insert = Insert(table=self._table.name, values=values)
        modify(row, insert)
        result = self._executor.execute(insert)
        after(row, insert, result)

        if result.rowcount != 1:
            return False

        if (
            self._table.autoincrement
            and row.get_primary_value() is None
            and result.lastrowid is not None
        ):
            row.set_generated_primary(result.lastrowid)
        row.mark_persisted(RowStatus.INSERTED)
        self._identity_map.set(self._table.name, row)
        logger.debug("row_inserted", table=self._table.name, primary=row.get_primary_value())
        return True

    def update(
        self,
        row: Row,
        modify: ModifyHook = _noop_modify,
        after: AfterHook = _noop_after,
    ) -> bool:
        """Write the row's changed columns; False when nothing changed."""
        if row.has_status([RowStatus.FOR_INSERT, RowStatus.DELETED]):
            raise UnexpectedStatusError("update", row.get_status().value)

        diff = row.get_modified()
        if not diff:
            return False

        update = Update(table=self._table.name, values=diff, where=row.get_identity())
        modify(row, update)
        result = self._executor.execute(update)
        after(row, update, result)

        if result.rowcount != 1:
            return False

        old_primary = row.get_identity().get(self._table.primary_key)
        row.mark_persisted(RowStatus.SELECTED)
        if old_primary != row.get_primary_value():
            self._identity_map.remove(self._table.name, old_primary)
            self._identity_map.set(self._table.name, row)
        logger.debug("row_updated", table=self._table.name, columns=sorted(diff))
        return True

    def delete(
        self,
        row: Row,
        modify: ModifyHook = _noop_modify,
        after: AfterHook = _noop_after,
    ) -> bool:
        if row.has_status([RowStatus.FOR_INSERT, RowStatus.DELETED]):
            raise UnexpectedStatusError("delete", row.get_status().value)

        delete = Delete(table=self._table.name, where=row.get_identity())
        modify(row, delete)
        result = self._executor.execute(delete)
        after(row, delete, result)

        if result.rowcount != 1:
            return False

        self._identity_map.remove(
            self._table.name, row.get_identity().get(self._table.primary_key)
        )
        row.set_status(RowStatus.DELETED)
        logger.debug("row_deleted", table=self._table.name, primary=row.get_primary_value())
        return True
