"""One-to-many: many foreign rows hold a key back to the native row."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from row_mapper.core.enums import RelationshipKind
from row_mapper.relationship.base import Relationship

if TYPE_CHECKING:
    from row_mapper.mapper.record import Record
    from row_mapper.relationship.base import Custom


class OneToMany(Relationship):
    """Assigns a RecordSet of foreign records; empty, never None, on no match."""

    kind = RelationshipKind.ONE_TO_MANY

    def _default_on(self) -> dict[str, str]:
        primary_key = self.native_table.primary_key
        return {primary_key: primary_key}

    def stitch_records(self, records: Sequence[Record], custom: Custom = None) -> None:
        foreign_mapper = self.foreign_mapper
        for record, matches in self._match_by_native_key(records, custom):
            record.get_related()[self.name] = foreign_mapper.new_record_set(matches)
