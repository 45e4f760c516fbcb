"""Enumerations shared across the mapper layer."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"


class RowStatus(str, Enum):
    """Persistence lifecycle of a row."""

    FOR_INSERT = "for_insert"
    SELECTED = "selected"
    INSERTED = "inserted"
    MODIFIED = "modified"
    DELETED = "deleted"


class RelationshipKind(Enum):
    """The closed set of relationship variants."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"
