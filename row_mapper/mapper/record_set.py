"""Record sets: ordered, typed collections of records."""

from __future__ import annotations

from collections.abc import Iterable, MutableSequence
from typing import TYPE_CHECKING, Any, ClassVar, overload

from row_mapper.core.exceptions import RecordTypeError
from row_mapper.mapper.record import Record

if TYPE_CHECKING:
    from row_mapper.mapper.mapper import Mapper
    from row_mapper.relationship.relationships import WithSpec


class RecordSet(MutableSequence[Record]):
    """A list of records that only ever holds ``record_class`` instances.

    Relationship loading on a set is batched: one fetch per relationship
    field for the whole set, never one per member.
    """

    record_class: ClassVar[type[Record]] = Record

    def __init__(
        self,
        records: Iterable[Record] = (),
        mapper: Mapper | None = None,
    ) -> None:
        self._mapper = mapper
        records = list(records)
        for record in records:
            self._assert_record(record)
        self._records: list[Record] = records

    def _assert_record(self, value: Any) -> None:
        if not isinstance(value, self.record_class):
            raise RecordTypeError(self.record_class.__name__, value)

    @overload
    def __getitem__(self, index: int) -> Record: ...

    @overload
    def __getitem__(self, index: slice) -> RecordSet: ...

    def __getitem__(self, index: int | slice) -> Record | RecordSet:
        if isinstance(index, slice):
            return type(self)(self._records[index], self._mapper)
        return self._records[index]

    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, slice):
            values = list(value)
            for item in values:
                self._assert_record(item)
            self._records[index] = values
            return
        self._assert_record(value)
        self._records[index] = value

    def __delitem__(self, index: int | slice) -> None:
        del self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def insert(self, index: int, value: Record) -> None:
        self._assert_record(value)
        self._records.insert(index, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._records!r})"

    def is_empty(self) -> bool:
        return not self._records

    def get_mapper(self) -> Mapper | None:
        if self._mapper is None and self._records:
            return self._records[0].get_mapper()
        return self._mapper

    def get_one_by(self, **cols_vals: Any) -> Record | None:
        """First record whose columns equal every given value, else None."""
        for record in self._records:
            if all(record[col] == val for col, val in cols_vals.items()):
                return record
        return None

    def get_all_by(self, **cols_vals: Any) -> RecordSet:
        matches = [
            record
            for record in self._records
            if all(record[col] == val for col, val in cols_vals.items())
        ]
        return type(self)(matches, self._mapper)

    def load(self, with_: WithSpec) -> RecordSet:
        """Stitch related fields into every member with batched fetches."""
        mapper = self.get_mapper()
        if mapper is not None:
            mapper.relationships.stitch_into_record_set(self, with_)
        return self

    def to_list(self) -> list[dict[str, Any]]:
        return [record.to_dict() for record in self._records]
