"""Records: a row plus its related fields.

Attribute access reads and writes row columns first, then related fields.
Anything else is an error, so typos never silently create attributes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from row_mapper.core.exceptions import (
    MapperNotFoundError,
    RecordTypeError,
    UnknownRelatedFieldError,
)
from row_mapper.mapper.related import NOT_LOADED, Related
from row_mapper.table.row import Row

if TYPE_CHECKING:
    from row_mapper.mapper.mapper import Mapper
    from row_mapper.relationship.relationships import WithSpec


class Record:
    """A domain object backed by a single row."""

    def __init__(self, mapper: Mapper | None, row: Row, related: Related) -> None:
        object.__setattr__(self, "_mapper", mapper)
        object.__setattr__(self, "_row", row)
        object.__setattr__(self, "_related", related)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        self[name] = value

    def __getitem__(self, name: str) -> Any:
        if name in self._row:
            return self._row[name]
        if name in self._related:
            return self._related[name]
        raise UnknownRelatedFieldError(type(self).__name__, name)

    def __setitem__(self, name: str, value: Any) -> None:
        if name in self._row:
            self._row[name] = value
            return
        if name in self._related:
            self._assert_related_value(value)
            self._related[name] = value
            return
        raise UnknownRelatedFieldError(type(self).__name__, name)

    def __contains__(self, name: object) -> bool:
        return name in self._row or name in self._related

    def __copy__(self) -> Record:
        return type(self)(self._mapper, self._row, self._related.copy())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._row.to_dict()!r})"

    @staticmethod
    def _assert_related_value(value: Any) -> None:
        from row_mapper.mapper.record_set import RecordSet

        if value is None or value is NOT_LOADED:
            return
        if not isinstance(value, (Record, RecordSet)):
            raise RecordTypeError("Record, RecordSet or None", value)

    def get_mapper(self) -> Mapper | None:
        return self._mapper

    def get_row(self) -> Row:
        return self._row

    def get_related(self) -> Related:
        return self._related

    def has(self, name: str) -> bool:
        """True if the column or loaded related field holds a value."""
        value = self[name]
        if value is None or value is NOT_LOADED:
            return False
        return True

    def load(self, with_: WithSpec) -> Record:
        """Stitch related fields into this record after the fact."""
        if self._mapper is None:
            raise MapperNotFoundError(f"<none for {type(self).__name__}>")
        self._mapper.relationships.stitch_into_record(self, with_)
        return self

    def to_dict(self) -> dict[str, Any]:
        data = self._row.to_dict()
        data.update(self._related.to_dict())
        return data
