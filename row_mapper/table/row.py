"""Rows: column value bags with a persistence lifecycle.

Columns are exposed as attributes (``row.title``) and as items
(``row["title"]``); item access also reaches columns whose names collide
with Row methods. The column set is fixed when the row is built.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, NamedTuple

from row_mapper.core.enums import RowStatus
from row_mapper.core.exceptions import (
    BadStatusError,
    ImmutableRowError,
    UnknownColumnError,
)


class RowState(NamedTuple):
    cols: dict[str, Any]
    initial: dict[str, Any]
    identity: dict[str, Any]
    status: RowStatus


def _coerce_status(status: RowStatus | str) -> RowStatus:
    try:
        return RowStatus(status)
    except ValueError:
        raise BadStatusError(status) from None


class Row:
    """A mutable set of column values tracked through its lifecycle.

    Args:
        cols: Column name to value; defines the row's columns.
        primary_key: Name of the primary-key column, if any.
        status: Initial status. Rows built from user values start as
            FOR_INSERT; rows built from selected data start as SELECTED.
    """

    def __init__(
        self,
        cols: Mapping[str, Any],
        primary_key: str | None = None,
        status: RowStatus | str = RowStatus.FOR_INSERT,
    ) -> None:
        if primary_key is not None and primary_key not in cols:
            raise UnknownColumnError(type(self).__name__, primary_key)
        object.__setattr__(self, "_cols", dict(cols))
        object.__setattr__(self, "_primary_key", primary_key)
        object.__setattr__(self, "_status", _coerce_status(status))
        object.__setattr__(self, "_initial", dict(cols))
        object.__setattr__(self, "_identity", self._snapshot_identity())

    # --- column access ---

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        self[name] = value

    def __delattr__(self, name: str) -> None:
        self[name] = None

    def __getitem__(self, col: str) -> Any:
        try:
            return self._cols[col]
        except KeyError:
            raise UnknownColumnError(type(self).__name__, col) from None

    def __setitem__(self, col: str, value: Any) -> None:
        self._assert_col(col)
        if self._status is RowStatus.DELETED:
            raise ImmutableRowError(type(self).__name__, col)
        self._cols[col] = value
        if self._status is not RowStatus.FOR_INSERT:
            self._status = RowStatus.MODIFIED

    def __delitem__(self, col: str) -> None:
        self[col] = None

    def __contains__(self, col: object) -> bool:
        return col in self._cols

    def __iter__(self) -> Iterator[str]:
        return iter(self._cols)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._cols!r}, status={self._status.value!r})"

    def has(self, col: str) -> bool:
        """True if the column exists and holds a non-None value."""
        self._assert_col(col)
        return self._cols[col] is not None

    def _assert_col(self, col: str) -> None:
        if col not in self._cols:
            raise UnknownColumnError(type(self).__name__, col)

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self._cols)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._cols)

    # --- identity ---

    @property
    def primary_key(self) -> str | None:
        return self._primary_key

    def get_primary_value(self) -> Any:
        if self._primary_key is None:
            return None
        return self._cols[self._primary_key]

    def get_identity(self) -> dict[str, Any]:
        """The primary-key values as they were when last loaded or persisted."""
        return dict(self._identity)

    def _snapshot_identity(self) -> dict[str, Any]:
        if self._primary_key is None:
            return {}
        return {self._primary_key: self._cols[self._primary_key]}

    # --- status ---

    def get_status(self) -> RowStatus:
        return self._status

    def set_status(self, status: RowStatus | str) -> None:
        self._status = _coerce_status(status)

    def has_status(self, statuses: Iterable[RowStatus | str]) -> bool:
        """True if the current status is any of ``statuses``."""
        return self._status in {_coerce_status(status) for status in statuses}

    # --- persistence bookkeeping, driven by the table gateway ---

    def get_modified(self) -> dict[str, Any]:
        """Columns whose values differ from when the row was last persisted."""
        return {
            col: value
            for col, value in self._cols.items()
            if col not in self._initial or self._initial[col] != value
        }

    def set_generated_primary(self, value: Any) -> None:
        """Record a storage-generated key without marking the row modified."""
        if self._primary_key is None:
            raise UnknownColumnError(type(self).__name__, "<primary key>")
        self._cols[self._primary_key] = value

    def mark_persisted(self, status: RowStatus | str) -> None:
        """Take a fresh snapshot after a successful write and move to ``status``."""
        self._initial = dict(self._cols)
        self._identity = self._snapshot_identity()
        self.set_status(status)

    def snapshot_state(self) -> RowState:
        """Capture values, persisted snapshot and status for a later :meth:`restore_state`."""
        return RowState(dict(self._cols), dict(self._initial), dict(self._identity), self._status)

    def restore_state(self, state: RowState) -> None:
        """Put the row back exactly as it was when ``state`` was captured."""
        self._cols = dict(state.cols)
        self._initial = dict(state.initial)
        self._identity = dict(state.identity)
        self._status = state.status
