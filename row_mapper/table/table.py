"""Table definitions.

Frozen dataclasses declaring a table's name, its fixed column list and its
primary key. Mappers declare one as a class attribute.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from row_mapper.core.exceptions import SchemaError, UnknownColumnError


@dataclass(frozen=True)
class Table:
    """Definition of a single table."""

    name: str
    columns: tuple[str, ...]
    primary_key: str
    autoincrement: bool = False
    defaults: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(set(self.columns)) != len(self.columns):
            raise SchemaError(f"Duplicate column names in table '{self.name}'")
        if self.primary_key not in self.columns:
            raise UnknownColumnError(self.name, self.primary_key)
        for col in self.defaults:
            if col not in self.columns:
                raise UnknownColumnError(self.name, col)

    def default_cols(self) -> dict[str, Any]:
        """A full column mapping holding the declared defaults (None elsewhere)."""
        return {col: self.defaults.get(col) for col in self.columns}

    def assert_column(self, col: str) -> None:
        if col not in self.columns:
            raise UnknownColumnError(self.name, col)
