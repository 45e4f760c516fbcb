"""Relationship base class and the shared two-pass stitching algorithm.

Stitching always runs in two passes over every native record in scope:

1. collect the native key values, then fetch every matching foreign record
   with ONE select (an ``IN`` filter per ``on`` column);
2. index the foreign records by key in memory and assign each native record
   its match (or matches).

The number of selects per relationship field is therefore constant no
matter how many native records are being stitched.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, ClassVar

import structlog

from row_mapper.core.enums import RelationshipKind
from row_mapper.core.exceptions import UnknownColumnError

if TYPE_CHECKING:
    from row_mapper.mapper.locator import MapperLocator
    from row_mapper.mapper.mapper import Mapper
    from row_mapper.mapper.record import Record
    from row_mapper.mapper.record_set import RecordSet
    from row_mapper.mapper.select import MapperSelect
    from row_mapper.table.table import Table

    #: A refinement for one relationship field: None for the foreign mapper's
    #: defaults, a nested with-spec, or a callable that adjusts the foreign select.
    Custom = Callable[[MapperSelect], Any] | Sequence[Any] | Mapping[str, Any] | str | None

logger = structlog.get_logger(__name__)

Key = tuple[Any, ...]


def record_key(record: Record, columns: Iterable[str]) -> Key | None:
    """The record's values for ``columns``; None if any of them is None."""
    values = tuple(record[col] for col in columns)
    if any(value is None for value in values):
        return None
    return values


class Relationship(ABC):
    """A mapping from a field on native records to foreign records."""

    kind: ClassVar[RelationshipKind]

    def __init__(
        self,
        locator: MapperLocator,
        native_mapper_class: type[Mapper],
        native_table: Table,
        name: str,
        foreign_mapper_class: type[Mapper],
    ) -> None:
        self._locator = locator
        self.native_mapper_class = native_mapper_class
        self.native_table = native_table
        self.name = name
        self.foreign_mapper_class = foreign_mapper_class
        self._on = self._default_on()
        self._assert_on(self._on)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.native_mapper_class.__name__}.{self.name} -> "
            f"{self.foreign_mapper_class.__name__}, on={self._on!r})"
        )

    @property
    def foreign_table(self) -> Table:
        return self.foreign_mapper_class.table

    @property
    def native_mapper(self) -> Mapper:
        return self._locator.get(self.native_mapper_class)

    @property
    def foreign_mapper(self) -> Mapper:
        return self._locator.get(self.foreign_mapper_class)

    def on(self, mapping: Mapping[str, str]) -> Relationship:
        """Set the native column -> foreign column mapping."""
        on = dict(mapping)
        self._assert_on(on)
        self._on = on
        return self

    def get_on(self) -> dict[str, str]:
        return dict(self._on)

    @abstractmethod
    def _default_on(self) -> dict[str, str]:
        """The column mapping used when ``on()`` is never called."""

    def _source_table(self) -> Table:
        """The table the ``on`` keys are read from."""
        return self.native_table

    def _assert_on(self, on: Mapping[str, str]) -> None:
        source = self._source_table()
        for native_col, foreign_col in on.items():
            if native_col not in source.columns:
                raise UnknownColumnError(source.name, native_col)
            if foreign_col not in self.foreign_table.columns:
                raise UnknownColumnError(self.foreign_table.name, foreign_col)

    # --- stitching contract ---

    def stitch_into_record(self, record: Record, custom: Custom = None) -> None:
        self.stitch_records([record], custom)

    def stitch_into_record_set(self, record_set: RecordSet, custom: Custom = None) -> None:
        self.stitch_records(list(record_set), custom)

    @abstractmethod
    def stitch_records(self, records: Sequence[Record], custom: Custom = None) -> None:
        """Load this field for every record with a bounded number of fetches."""

    # --- shared passes ---

    def _fetch_foreign(self, keys: Iterable[Key], custom: Custom) -> list[Record]:
        """One select against the foreign mapper for every key in ``keys``."""
        keys = list(dict.fromkeys(keys))
        if not keys:
            return []
        select = self.foreign_mapper.select()
        for position, foreign_col in enumerate(self._on.values()):
            select.where(foreign_col, list(dict.fromkeys(key[position] for key in keys)))
        self._apply_custom(select, custom)
        foreign_records = list(select.fetch_record_set())
        logger.debug(
            "relationship_fetched",
            relationship=self.name,
            native=self.native_mapper_class.__name__,
            foreign=self.foreign_mapper_class.__name__,
            keys=len(keys),
            matched=len(foreign_records),
        )
        return foreign_records

    @staticmethod
    def _apply_custom(select: MapperSelect, custom: Custom) -> None:
        if custom is None:
            return
        if callable(custom):
            custom(select)
        else:
            select.with_(custom)

    def _index_foreign(self, foreign_records: Iterable[Record]) -> dict[Key, list[Record]]:
        index: dict[Key, list[Record]] = {}
        foreign_cols = list(self._on.values())
        for foreign in foreign_records:
            key = record_key(foreign, foreign_cols)
            if key is not None:
                index.setdefault(key, []).append(foreign)
        return index

    def _match_by_native_key(
        self, records: Sequence[Record], custom: Custom
    ) -> list[tuple[Record, list[Record]]]:
        """Pair every native record with the foreign records matching its key."""
        native_cols = list(self._on)
        native_keys = [record_key(record, native_cols) for record in records]
        foreign_records = self._fetch_foreign(
            (key for key in native_keys if key is not None), custom
        )
        index = self._index_foreign(foreign_records)
        return [
            (record, index.get(key, []) if key is not None else [])
            for record, key in zip(records, native_keys, strict=True)
        ]
