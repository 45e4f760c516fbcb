"""RowMapper - table data gateway and data mapper with batched relationship loading."""

from __future__ import annotations

from row_mapper.core.connection import ConnectionConfig, ConnectionManager
from row_mapper.core.engine import Engine
from row_mapper.core.enums import DatabaseBackend, RelationshipKind, RowStatus
from row_mapper.core.exceptions import (
    AdapterError,
    BadStatusError,
    DatabaseConnectionError,
    ExecutionError,
    ImmutableRowError,
    LifecycleError,
    MapperClassNotFoundError,
    MapperNotFoundError,
    ParameterBindingError,
    PluginError,
    PoolError,
    PriorWorkError,
    RecordTypeError,
    RelationshipError,
    RelationshipNotFoundError,
    RowMapperError,
    SchemaError,
    StatementExecutionError,
    TransactionError,
    TransactionStateError,
    UnexpectedStatusError,
    UnknownColumnError,
    UnknownRelatedFieldError,
)
from row_mapper.core.executor import Executor
from row_mapper.core.log import configure_logging
from row_mapper.core.statement import Delete, ExecutionResult, Insert, Select, Update
from row_mapper.core.transaction import JoinedTransaction, TransactionManager
from row_mapper.mapper import (
    NOT_LOADED,
    HookPlugin,
    Mapper,
    MapperLocator,
    MapperSelect,
    Plugin,
    Record,
    RecordSet,
    Related,
)
from row_mapper.relationship import MapperRelationships
from row_mapper.table import IdentityMap, Row, Table, TableGateway
from row_mapper.unit_of_work import Transaction
from row_mapper.work import Work

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Engine
    "Engine",
    "Executor",
    "TransactionManager",
    "JoinedTransaction",
    # Statements
    "Select",
    "Insert",
    "Update",
    "Delete",
    "ExecutionResult",
    # Table layer
    "Table",
    "Row",
    "IdentityMap",
    "TableGateway",
    # Mapper layer
    "Mapper",
    "MapperLocator",
    "MapperSelect",
    "MapperRelationships",
    "Record",
    "RecordSet",
    "Related",
    "NOT_LOADED",
    "Plugin",
    "HookPlugin",
    # Unit of work
    "Work",
    "Transaction",
    # Logging
    "configure_logging",
    # Enums
    "DatabaseBackend",
    "RowStatus",
    "RelationshipKind",
    # Exceptions
    "RowMapperError",
    "SchemaError",
    "UnknownColumnError",
    "LifecycleError",
    "ImmutableRowError",
    "BadStatusError",
    "UnexpectedStatusError",
    "PriorWorkError",
    "RelationshipError",
    "MapperClassNotFoundError",
    "RelationshipNotFoundError",
    "UnknownRelatedFieldError",
    "RecordTypeError",
    "MapperNotFoundError",
    "PluginError",
    "ExecutionError",
    "StatementExecutionError",
    "ParameterBindingError",
    "TransactionError",
    "TransactionStateError",
    "AdapterError",
    "DatabaseConnectionError",
    "PoolError",
]
