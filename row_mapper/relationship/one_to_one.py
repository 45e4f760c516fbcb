"""One-to-one: one foreign row holds a key back to the native row."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from row_mapper.core.enums import RelationshipKind
from row_mapper.relationship.base import Relationship

if TYPE_CHECKING:
    from row_mapper.mapper.record import Record
    from row_mapper.relationship.base import Custom


class OneToOne(Relationship):
    """Assigns at most one foreign record, or None."""

    kind = RelationshipKind.ONE_TO_ONE

    def _default_on(self) -> dict[str, str]:
        primary_key = self.native_table.primary_key
        return {primary_key: primary_key}

    def stitch_records(self, records: Sequence[Record], custom: Custom = None) -> None:
        for record, matches in self._match_by_native_key(records, custom):
            record.get_related()[self.name] = matches[0] if matches else None
