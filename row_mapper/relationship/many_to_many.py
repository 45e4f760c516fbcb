"""Many-to-many through an association ("bridge") table.

The native mapper must already define a relationship to the bridge mapper
(usually a OneToMany); the ``on`` mapping of this relationship maps bridge
columns to far-side columns.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from row_mapper.core.enums import RelationshipKind
from row_mapper.relationship.base import Relationship, record_key

if TYPE_CHECKING:
    from row_mapper.mapper.locator import MapperLocator
    from row_mapper.mapper.mapper import Mapper
    from row_mapper.mapper.record import Record
    from row_mapper.relationship.base import Custom
    from row_mapper.table.table import Table


def _bridge_records(value: Any) -> list[Record]:
    # A RecordSet for one-to-many bridges; a Record, None or NOT_LOADED otherwise.
    if isinstance(value, Sequence):
        return list(value)
    return [value] if value else []


class ManyToMany(Relationship):
    """Assigns a RecordSet of far-side records, deduplicated by primary key."""

    kind = RelationshipKind.MANY_TO_MANY

    def __init__(
        self,
        locator: MapperLocator,
        native_mapper_class: type[Mapper],
        native_table: Table,
        name: str,
        foreign_mapper_class: type[Mapper],
        through: Relationship,
    ) -> None:
        self.through = through
        super().__init__(locator, native_mapper_class, native_table, name, foreign_mapper_class)

    def _default_on(self) -> dict[str, str]:
        primary_key = self.foreign_table.primary_key
        return {primary_key: primary_key}

    def _source_table(self) -> Table:
        return self.through.foreign_table

    def stitch_records(self, records: Sequence[Record], custom: Custom = None) -> None:
        through_name = self.through.name
        unloaded = [r for r in records if not r.get_related().is_loaded(through_name)]
        if unloaded:
            self.through.stitch_records(unloaded)

        bridge_cols = list(self._on)
        bridges_by_record = [
            _bridge_records(record.get_related()[through_name]) for record in records
        ]
        bridge_keys = [
            [record_key(bridge, bridge_cols) for bridge in bridges]
            for bridges in bridges_by_record
        ]

        foreign_records = self._fetch_foreign(
            (key for keys in bridge_keys for key in keys if key is not None), custom
        )
        index = self._index_foreign(foreign_records)

        foreign_mapper = self.foreign_mapper
        for record, keys in zip(records, bridge_keys, strict=True):
            seen: set[Any] = set()
            matches: list[Record] = []
            for key in keys:
                if key is None:
                    continue
                for foreign in index.get(key, []):
                    primary_value = foreign.get_row().get_primary_value()
                    if primary_value in seen:
                        continue
                    seen.add(primary_value)
                    matches.append(foreign)
            record.get_related()[self.name] = foreign_mapper.new_record_set(matches)
