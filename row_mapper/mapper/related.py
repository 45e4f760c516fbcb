"""Related-field container for records."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any

from row_mapper.core.exceptions import UnknownRelatedFieldError


class _Sentinel(Enum):
    NOT_LOADED = "NOT_LOADED"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return self.value


#: Marks a related field that has not been stitched yet. ``None`` means the
#: field was loaded and nothing matched.
NOT_LOADED = _Sentinel.NOT_LOADED


class Related:
    """Holds a record's relationship fields.

    The field names are fixed by the owning mapper's relationship
    definitions; every field starts out NOT_LOADED.
    """

    def __init__(self, fields: Iterable[str] = ()) -> None:
        self._fields: dict[str, Any] = {name: NOT_LOADED for name in fields}

    def __getitem__(self, name: str) -> Any:
        try:
            return self._fields[name]
        except KeyError:
            raise UnknownRelatedFieldError(type(self).__name__, name) from None

    def __setitem__(self, name: str, value: Any) -> None:
        if name not in self._fields:
            raise UnknownRelatedFieldError(type(self).__name__, name)
        self._fields[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def is_loaded(self, name: str) -> bool:
        return self[name] is not NOT_LOADED

    def copy(self) -> Related:
        related = Related()
        related._fields = dict(self._fields)
        return related

    def to_dict(self) -> dict[str, Any]:
        """Loaded fields only, with records and record sets flattened."""
        from row_mapper.mapper.record import Record
        from row_mapper.mapper.record_set import RecordSet

        data: dict[str, Any] = {}
        for name, value in self._fields.items():
            if value is NOT_LOADED:
                continue
            if isinstance(value, RecordSet):
                data[name] = value.to_list()
            elif isinstance(value, Record):
                data[name] = value.to_dict()
            else:
                data[name] = value
        return data
