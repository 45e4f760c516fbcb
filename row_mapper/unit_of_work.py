"""Unit of work: plan record writes, then run them atomically.

Usage:
    transaction = locator.new_transaction()
    transaction.insert(thread)
    transaction.update(author)
    transaction.exec()

Every planned item runs inside ``executor.transaction()``. If one of them
raises, the executor rolls the whole plan back, the touched rows are put back
as they were, and the original exception is re-raised after being recorded
on the transaction.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, NamedTuple

import structlog

from row_mapper.core.exceptions import MapperNotFoundError
from row_mapper.table.row import Row, RowState
from row_mapper.work import Work

if TYPE_CHECKING:
    from row_mapper.mapper.locator import MapperLocator
    from row_mapper.mapper.mapper import Mapper
    from row_mapper.mapper.record import Record

logger = structlog.get_logger(__name__)


class _SavedRow(NamedTuple):
    row: Row
    state: RowState
    table: str | None
    tracked: bool


class Transaction:
    """An ordered plan of Work items executed as one atomic unit."""

    def __init__(self, locator: MapperLocator) -> None:
        self._locator = locator
        self._plan: list[Work] = []
        self._completed: list[Work] = []
        self._failed: Work | None = None
        self._exception: BaseException | None = None

    def __repr__(self) -> str:
        return f"Transaction(planned={len(self._plan)}, completed={len(self._completed)})"

    @property
    def completed(self) -> list[Work]:
        return list(self._completed)

    @property
    def failed(self) -> Work | None:
        return self._failed

    @property
    def exception(self) -> BaseException | None:
        return self._exception

    def get_plan(self) -> list[Work]:
        return list(self._plan)

    def plan(self, label: str, callable: Callable[[Record], Any], record: Record) -> Work:  # noqa: A002
        """Append an arbitrary callable to the plan."""
        work = Work(label, callable, record)
        self._plan.append(work)
        return work

    def insert(self, record: Record) -> Work:
        mapper = self._mapper_for(record)
        return self.plan(self._label("insert", record), mapper.insert, record)

    def update(self, record: Record) -> Work:
        mapper = self._mapper_for(record)
        return self.plan(self._label("update", record), mapper.update, record)

    def delete(self, record: Record) -> Work:
        mapper = self._mapper_for(record)
        return self.plan(self._label("delete", record), mapper.delete, record)

    def exec(self) -> None:
        """Run the plan inside one executor transaction.

        On failure the storage rollback is mirrored in memory: every row the
        plan touched gets back the status, values and identity-map entry it
        had before ``exec`` started.
        """
        logger.info("unit_of_work_started", planned=len(self._plan))
        saved: list[_SavedRow] = []
        try:
            with self._locator.executor.transaction():
                for work in self._plan:
                    saved.append(self._save(work.record))
                    try:
                        work()
                    except Exception:
                        self._failed = work
                        raise
                    self._completed.append(work)
        except Exception as e:
            self._exception = e
            self._restore(saved)
            logger.warning(
                "unit_of_work_failed",
                work=self._failed.label if self._failed is not None else None,
                completed=len(self._completed),
                error=str(e),
            )
            raise
        logger.info("unit_of_work_committed", completed=len(self._completed))

    def _save(self, record: Record) -> _SavedRow:
        row = record.get_row()
        mapper = record.get_mapper()
        table = mapper.table.name if mapper is not None else None
        tracked = (
            table is not None
            and self._locator.identity_map.get(table, row.get_primary_value()) is row
        )
        return _SavedRow(row, row.snapshot_state(), table, tracked)

    def _restore(self, saved: list[_SavedRow]) -> None:
        identity_map = self._locator.identity_map
        for entry in reversed(saved):
            entry.row.restore_state(entry.state)
            identity_map.discard(entry.row)
            if entry.tracked:
                identity_map.set(entry.table, entry.row)
        logger.debug("unit_of_work_rows_restored", rows=len(saved))

    def _mapper_for(self, record: Record) -> Mapper:
        mapper = record.get_mapper()
        if mapper is None:
            raise MapperNotFoundError(f"<none for {type(record).__name__}>")
        return mapper

    @staticmethod
    def _label(action: str, record: Record) -> str:
        row = record.get_row()
        return f"{action} {type(record).__name__} {row.get_primary_value()!r}"
