"""Mappers: fetch and persist records for one table.

A mapper subclass declares the types it works with as class attributes and
its relationships in :meth:`Mapper.define_relationships`::

    class ThreadMapper(Mapper):
        table = Table("threads", ("thread_id", "author_id", "subject"), "thread_id")
        record_class = ThreadRecord

        def define_relationships(self, rel: MapperRelationships) -> None:
            rel.many_to_one("author", AuthorMapper)
            rel.one_to_many("replies", ReplyMapper)

Mappers are built by a MapperLocator, which supplies the table gateway
bound to the locator's identity map.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

import structlog

from row_mapper.core.exceptions import RecordTypeError
from row_mapper.mapper.plugin import Plugin
from row_mapper.mapper.record import Record
from row_mapper.mapper.record_set import RecordSet
from row_mapper.mapper.related import Related
from row_mapper.mapper.select import MapperSelect
from row_mapper.relationship.relationships import MapperRelationships
from row_mapper.table.row import Row
from row_mapper.table.table import Table

if TYPE_CHECKING:
    from row_mapper.mapper.locator import MapperLocator
    from row_mapper.relationship.relationships import WithSpec
    from row_mapper.table.gateway import TableGateway

logger = structlog.get_logger(__name__)


class Mapper:
    """Base class for table mappers."""

    table: ClassVar[Table]
    row_class: ClassVar[type[Row]] = Row
    record_class: ClassVar[type[Record]] = Record
    record_set_class: ClassVar[type[RecordSet]] = RecordSet

    def __init__(
        self,
        locator: MapperLocator,
        gateway: TableGateway,
        plugin: Plugin | None = None,
    ) -> None:
        if not issubclass(self.record_class, self.record_set_class.record_class):
            raise RecordTypeError(
                self.record_set_class.record_class.__name__, self.record_class
            )
        self._locator = locator
        self._gateway = gateway
        self._plugin = plugin if plugin is not None else Plugin()
        self._relationships = MapperRelationships(locator, type(self), self.table)
        self.define_relationships(self._relationships)

    def define_relationships(self, relationships: MapperRelationships) -> None:
        """Register this mapper's relationships. The default defines none."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(table={self.table.name!r})"

    @property
    def locator(self) -> MapperLocator:
        return self._locator

    @property
    def gateway(self) -> TableGateway:
        return self._gateway

    @property
    def plugin(self) -> Plugin:
        return self._plugin

    @property
    def relationships(self) -> MapperRelationships:
        return self._relationships

    # --- fetching ---

    def fetch_record(self, primary_value: Any, with_: WithSpec = None) -> Record | None:
        """Fetch one record by primary key; None when it does not exist."""
        row = self._gateway.select_row_by_primary(primary_value)
        if row is None:
            return None
        return self.new_record_from_row(row, with_)

    def fetch_record_by(
        self, cols_vals: Mapping[str, Any], with_: WithSpec = None
    ) -> Record | None:
        """Fetch the first record matching every column/value pair."""
        return self.select(cols_vals).with_(with_).fetch_record()

    def fetch_record_set(
        self, primary_values: Iterable[Any], with_: WithSpec = None
    ) -> RecordSet:
        """Fetch records by primary key, in the order the keys were given."""
        rows = self._gateway.select_rows_by_primary(primary_values)
        return self.new_record_set_from_rows(rows, with_)

    def fetch_record_set_by(
        self, cols_vals: Mapping[str, Any], with_: WithSpec = None
    ) -> RecordSet:
        return self.select(cols_vals).with_(with_).fetch_record_set()

    def select(self, cols_vals: Mapping[str, Any] | None = None) -> MapperSelect:
        return MapperSelect(self, self._gateway.new_select(cols_vals))

    # --- writing ---

    def insert(self, record: Record) -> bool:
        """Insert the record's row."""
        self._assert_own(record)
        self._plugin.before_insert(self, record)
        done = self._gateway.insert(
            record.get_row(),
            self._plugin.modify_insert,
            self._plugin.after_insert,
        )
        logger.debug("record_insert", mapper=type(self).__name__, done=done)
        return done

    def update(self, record: Record) -> bool:
        """Update the record's changed columns."""
        self._assert_own(record)
        self._plugin.before_update(self, record)
        done = self._gateway.update(
            record.get_row(),
            self._plugin.modify_update,
            self._plugin.after_update,
        )
        logger.debug("record_update", mapper=type(self).__name__, done=done)
        return done

    def delete(self, record: Record) -> bool:
        """Delete the record's row."""
        self._assert_own(record)
        self._plugin.before_delete(self, record)
        done = self._gateway.delete(
            record.get_row(),
            self._plugin.modify_delete,
            self._plugin.after_delete,
        )
        logger.debug("record_delete", mapper=type(self).__name__, done=done)
        return done

    def _assert_own(self, record: Any) -> None:
        if not isinstance(record, self.record_class):
            raise RecordTypeError(self.record_class.__name__, record)

    # --- factories ---

    def new_record(self, cols: Mapping[str, Any] | None = None) -> Record:
        """A new FOR_INSERT record, passed through ``modify_new_record``."""
        row = self._gateway.new_row(cols)
        record = self.new_record_from_row(row)
        self._plugin.modify_new_record(record)
        return record

    def new_record_from_row(self, row: Row, with_: WithSpec = None) -> Record:
        record = self.record_class(self, row, Related(self._relationships.fields))
        self._relationships.stitch_into_record(record, with_)
        return record

    def new_record_set(
        self, records: Iterable[Record] = (), with_: WithSpec = None
    ) -> RecordSet:
        record_set = self.record_set_class(records, self)
        self._relationships.stitch_into_record_set(record_set, with_)
        return record_set

    def new_record_set_from_rows(
        self, rows: Iterable[Row], with_: WithSpec = None
    ) -> RecordSet:
        records = [self.new_record_from_row(row) for row in rows]
        return self.new_record_set(records, with_)

    def get_selected_record(
        self, cols: Mapping[str, Any], with_: WithSpec = None
    ) -> Record:
        """Wrap already-selected column data, honouring the identity map."""
        row = self._gateway.get_identified_or_selected_row(cols)
        return self.new_record_from_row(row, with_)

    def get_selected_record_set(
        self, data: Iterable[Mapping[str, Any]], with_: WithSpec = None
    ) -> RecordSet:
        rows = [self._gateway.get_identified_or_selected_row(cols) for cols in data]
        return self.new_record_set_from_rows(rows, with_)
