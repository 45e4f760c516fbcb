"""Mapper-bound selects that return records instead of raw rows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from row_mapper.core.statement import Select
from row_mapper.relationship.relationships import normalize_with

if TYPE_CHECKING:
    from row_mapper.mapper.mapper import Mapper
    from row_mapper.mapper.record import Record
    from row_mapper.mapper.record_set import RecordSet
    from row_mapper.relationship.relationships import WithSpec
    from row_mapper.table.row import Row


class MapperSelect:
    """A select against a mapper's table plus the relationships to stitch."""

    def __init__(self, mapper: Mapper, select: Select) -> None:
        self._mapper = mapper
        self._select = select
        self._with: dict[str, Any] = {}

    @property
    def statement(self) -> Select:
        return self._select

    def where(self, column: str, value: Any) -> MapperSelect:
        self._mapper.table.assert_column(column)
        self._select.where(column, value)
        return self

    def order_by(self, *columns: str) -> MapperSelect:
        self._select.order_by(*columns)
        return self

    def limit(self, limit: int | None) -> MapperSelect:
        self._select.limit = limit
        return self

    def offset(self, offset: int | None) -> MapperSelect:
        self._select.offset = offset
        return self

    def with_(self, spec: WithSpec) -> MapperSelect:
        """Add relationship fields to load with the results."""
        self._with.update(normalize_with(spec))
        return self

    def get_with(self) -> dict[str, Any]:
        return dict(self._with)

    def fetch_rows(self) -> list[Row]:
        return self._mapper.gateway.select_rows(self._select)

    def fetch_record(self) -> Record | None:
        """The first matching record, or None when nothing matches."""
        row = self._mapper.gateway.select_row(self._select)
        if row is None:
            return None
        return self._mapper.new_record_from_row(row, self._with)

    def fetch_record_set(self) -> RecordSet:
        """Every matching record; an empty set when nothing matches."""
        rows = self._mapper.gateway.select_rows(self._select)
        return self._mapper.new_record_set_from_rows(rows, self._with)
