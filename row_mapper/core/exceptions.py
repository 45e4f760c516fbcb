"""RowMapper exception hierarchy.

All exceptions raised by the mapper layer are RowMapper-specific. Errors that
are also natural Python errors (unknown attribute, bad value, wrong type)
subclass the matching builtin so ordinary ``except`` clauses keep working.
"""

from __future__ import annotations


class RowMapperError(Exception):
    """Base exception for all RowMapper errors."""


# --- Schema ---


class SchemaError(RowMapperError):
    """Base for column/schema errors."""


class UnknownColumnError(SchemaError, AttributeError):
    """Raised when a row column that was never declared is accessed."""

    def __init__(self, owner: str, column: str) -> None:
        self.owner = owner
        self.column = column
        super().__init__(f"{owner}.{column} does not exist")


# --- Lifecycle ---


class LifecycleError(RowMapperError):
    """Base for row and work lifecycle violations."""


class ImmutableRowError(LifecycleError):
    """Raised when a deleted row is mutated."""

    def __init__(self, owner: str, column: str) -> None:
        self.owner = owner
        self.column = column
        super().__init__(f"{owner}.{column} is immutable once deleted")


class BadStatusError(LifecycleError, ValueError):
    """Raised when a row is given a status outside the lifecycle."""

    def __init__(self, status: object) -> None:
        self.status = status
        super().__init__(f"Expected valid row status, got {status!r} instead")


class UnexpectedStatusError(LifecycleError):
    """Raised when a write is attempted on a row in the wrong status."""

    def __init__(self, action: str, status: str) -> None:
        self.action = action
        self.status = status
        super().__init__(f"Cannot {action} a row with status '{status}'")


class PriorWorkError(LifecycleError):
    """Raised when a work item is invoked a second time."""

    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(f"Work '{label}' has already been invoked")


# --- Relationships ---


class RelationshipError(RowMapperError):
    """Base for relationship configuration errors."""


class MapperClassNotFoundError(RelationshipError):
    """Raised when a relationship names a foreign mapper that does not exist."""

    def __init__(self, mapper_class: object) -> None:
        self.mapper_class = mapper_class
        super().__init__(f"Mapper class {mapper_class!r} does not exist")


class RelationshipNotFoundError(RelationshipError):
    """Raised when a relationship name is not registered on a mapper."""

    def __init__(self, mapper: str, name: str) -> None:
        self.mapper = mapper
        self.name = name
        super().__init__(f"Relationship '{name}' does not exist on {mapper}")


class UnknownRelatedFieldError(RelationshipError, AttributeError):
    """Raised when a record field is neither a column nor a related field."""

    def __init__(self, owner: str, field: str) -> None:
        self.owner = owner
        self.field = field
        super().__init__(f"{owner} has no column or related field '{field}'")


# --- Records ---


class RecordTypeError(RowMapperError, TypeError):
    """Raised when a non-record value is placed into a RecordSet."""

    def __init__(self, expected: str, actual: object) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected}, got {type(actual).__name__} instead")


# --- Wiring ---


class MapperNotFoundError(RowMapperError):
    """Raised when a mapper is requested from a locator that does not know it."""

    def __init__(self, mapper: str) -> None:
        self.mapper = mapper
        super().__init__(f"Mapper '{mapper}' is not registered")


class PluginError(RowMapperError):
    """Raised on invalid plugin hook registration."""


# --- Execution ---


class ExecutionError(RowMapperError):
    """Base for statement execution errors."""


class StatementExecutionError(ExecutionError):
    """Raised when the driver rejects a statement."""

    def __init__(self, statement: str, detail: str) -> None:
        self.statement = statement
        super().__init__(f"Statement failed for {statement}: {detail}")


class ParameterBindingError(ExecutionError):
    """Raised when placeholders and parameters do not line up."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Parameter binding error: {detail}")


# --- Transaction ---


class TransactionError(RowMapperError):
    """Base for transaction errors."""


class TransactionStateError(TransactionError):
    """Raised on invalid transaction state transitions."""

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} transaction in state '{current_state}'")


# --- Adapter ---


class AdapterError(RowMapperError):
    """Base for adapter errors."""


class DatabaseConnectionError(AdapterError):
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
