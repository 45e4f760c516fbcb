"""Shared test fixtures.

The forum domain used throughout the unit tests:

    authors ──< threads ──< replies >── authors
                   │
                   ├── summaries (one per thread, keyed by thread_id)
                   └──< taggings >── tags
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import pytest

from row_mapper.core.connection import ConnectionConfig
from row_mapper.core.exceptions import StatementExecutionError
from row_mapper.core.statement import Delete, ExecutionResult, Insert, Select, Statement, Update
from row_mapper.mapper.locator import MapperLocator
from row_mapper.mapper.mapper import Mapper
from row_mapper.mapper.plugin import Plugin
from row_mapper.mapper.record import Record
from row_mapper.mapper.record_set import RecordSet
from row_mapper.relationship.relationships import MapperRelationships
from row_mapper.table.table import Table


class InMemoryExecutor:
    """Executor over lists of dicts that records every statement it sees."""

    def __init__(self, tables: dict[str, list[dict[str, Any]]], primary_keys: dict[str, str]):
        self.tables = copy.deepcopy(tables)
        self.primary_keys = primary_keys
        self.selects: list[Select] = []
        self.statements: list[Statement] = []
        self.rollbacks = 0

    def select(self, select: Select) -> list[dict[str, Any]]:
        self.selects.append(copy.deepcopy(select))
        rows = [row for row in self.tables[select.table] if _matches(row, select.filters)]
        for spec in reversed(select.order):
            col, _, direction = spec.partition(" ")
            rows.sort(key=lambda row: row.get(col), reverse=direction.upper() == "DESC")
        start = select.offset or 0
        stop = None if select.limit is None else start + select.limit
        return [{col: row.get(col) for col in select.columns} for row in rows[start:stop]]

    def execute(self, statement: Statement) -> ExecutionResult:
        self.statements.append(copy.deepcopy(statement))
        rows = self.tables[statement.table]
        if isinstance(statement, Insert):
            return self._insert(statement, rows)
        matched = [row for row in rows if _matches(row, statement.where)]
        if isinstance(statement, Update):
            for row in matched:
                row.update(statement.values)
        elif isinstance(statement, Delete):
            for row in matched:
                rows.remove(row)
        return ExecutionResult(rowcount=len(matched))

    def _insert(self, insert: Insert, rows: list[dict[str, Any]]) -> ExecutionResult:
        values = dict(insert.values)
        primary_key = self.primary_keys[insert.table]
        lastrowid = None
        if values.get(primary_key) is None:
            lastrowid = max((row[primary_key] for row in rows), default=0) + 1
            values[primary_key] = lastrowid
        if any(row[primary_key] == values[primary_key] for row in rows):
            raise StatementExecutionError(insert.table, "UNIQUE constraint failed")
        rows.append(values)
        return ExecutionResult(rowcount=1, lastrowid=lastrowid)

    @contextmanager
    def transaction(self) -> Iterator[InMemoryExecutor]:
        snapshot = copy.deepcopy(self.tables)
        try:
            yield self
        except BaseException:
            self.tables = snapshot
            self.rollbacks += 1
            raise

    def selects_against(self, table: str) -> list[Select]:
        return [select for select in self.selects if select.table == table]


def _matches(row: dict[str, Any], filters: dict[str, Any]) -> bool:
    for col, value in filters.items():
        if isinstance(value, (list, tuple, set, frozenset)):
            if row.get(col) not in value:
                return False
        elif row.get(col) != value:
            return False
    return True


# --- forum domain ---


class AuthorMapper(Mapper):
    table = Table("authors", ("author_id", "name"), "author_id", autoincrement=True)

    def define_relationships(self, rel: MapperRelationships) -> None:
        rel.one_to_many("threads", "ThreadMapper").on({"author_id": "author_id"})


class ThreadRecord(Record):
    def title(self) -> str:
        return self.subject.title()


class ThreadRecordSet(RecordSet):
    record_class = ThreadRecord


class ThreadMapper(Mapper):
    table = Table(
        "threads",
        ("thread_id", "author_id", "subject", "body"),
        "thread_id",
        autoincrement=True,
        defaults={"body": ""},
    )
    record_class = ThreadRecord
    record_set_class = ThreadRecordSet

    def define_relationships(self, rel: MapperRelationships) -> None:
        rel.many_to_one("author", AuthorMapper)
        rel.one_to_one("summary", "SummaryMapper")
        rel.one_to_many("replies", "ReplyMapper")
        rel.one_to_many("taggings", "TaggingMapper")
        rel.many_to_many("tags", "TagMapper", "taggings")


class ReplyMapper(Mapper):
    table = Table("replies", ("reply_id", "thread_id", "author_id", "body"), "reply_id", True)

    def define_relationships(self, rel: MapperRelationships) -> None:
        rel.many_to_one("author", AuthorMapper)
        rel.many_to_one("thread", ThreadMapper)


class SummaryMapper(Mapper):
    table = Table("summaries", ("thread_id", "reply_count"), "thread_id")


class TaggingMapper(Mapper):
    table = Table("taggings", ("tagging_id", "thread_id", "tag_id"), "tagging_id", True)

    def define_relationships(self, rel: MapperRelationships) -> None:
        rel.many_to_one("tag", "TagMapper")


class TagMapper(Mapper):
    table = Table("tags", ("tag_id", "name"), "tag_id", True)


FORUM_MAPPERS: tuple[type[Mapper], ...] = (
    AuthorMapper,
    ThreadMapper,
    ReplyMapper,
    SummaryMapper,
    TaggingMapper,
    TagMapper,
)

FORUM_DATA: dict[str, list[dict[str, Any]]] = {
    "authors": [
        {"author_id": 1, "name": "ada"},
        {"author_id": 2, "name": "brian"},
        {"author_id": 3, "name": "carla"},
    ],
    "threads": [
        {"thread_id": 1, "author_id": 1, "subject": "first post", "body": "hello"},
        {"thread_id": 2, "author_id": 1, "subject": "second post", "body": "again"},
        {"thread_id": 3, "author_id": 2, "subject": "third post", "body": "hi"},
    ],
    "replies": [
        {"reply_id": 1, "thread_id": 1, "author_id": 2, "body": "welcome"},
        {"reply_id": 2, "thread_id": 1, "author_id": 1, "body": "thanks"},
        {"reply_id": 3, "thread_id": 3, "author_id": 1, "body": "hi brian"},
    ],
    "summaries": [
        {"thread_id": 1, "reply_count": 2},
        {"thread_id": 3, "reply_count": 1},
    ],
    "taggings": [
        {"tagging_id": 1, "thread_id": 1, "tag_id": 1},
        {"tagging_id": 2, "thread_id": 1, "tag_id": 2},
        {"tagging_id": 3, "thread_id": 1, "tag_id": 1},
        {"tagging_id": 4, "thread_id": 3, "tag_id": 3},
    ],
    "tags": [
        {"tag_id": 1, "name": "python"},
        {"tag_id": 2, "name": "sql"},
        {"tag_id": 3, "name": "orm"},
    ],
}


@pytest.fixture
def executor() -> InMemoryExecutor:
    """In-memory executor seeded with the forum data."""
    primary_keys = {mapper.table.name: mapper.table.primary_key for mapper in FORUM_MAPPERS}
    return InMemoryExecutor(FORUM_DATA, primary_keys)


@pytest.fixture
def make_locator(executor: InMemoryExecutor):
    """Build a locator over the forum mappers, with plugins by mapper name.

    Usage:
        loc = make_locator({"ThreadMapper": plugin})
    """

    def _make(plugins: dict[str, Plugin] | None = None) -> MapperLocator:
        plugins = plugins or {}
        loc = MapperLocator(executor)
        for mapper_class in FORUM_MAPPERS:
            loc.register(mapper_class, plugins.get(mapper_class.__name__))
        return loc

    return _make


@pytest.fixture
def locator(make_locator) -> MapperLocator:
    """A locator with every forum mapper registered."""
    return make_locator()


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)
