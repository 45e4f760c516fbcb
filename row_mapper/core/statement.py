"""Statement specifications handed to the executor.

These are plain mutable dataclasses: plugin ``modify_*`` hooks receive them
before execution and may adjust values or conditions in place. Each renders
itself to ``(sql, params)`` using ``:name`` placeholders; the engine converts
placeholders to the adapter's paramstyle.

Filters are ``{column: value}`` mappings combined with AND:

* a scalar renders ``column = :param``
* ``None`` renders ``column IS NULL``
* a list, tuple or set renders ``column IN (...)`` (an empty one matches nothing)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from row_mapper.core.params import param_name


def _render_where(
    conditions: dict[str, Any], prefix: str
) -> tuple[str, dict[str, Any]]:
    """Render a filter mapping into a WHERE clause body and its params."""
    clauses: list[str] = []
    params: dict[str, Any] = {}
    for col, value in conditions.items():
        if value is None:
            clauses.append(f"{col} IS NULL")
        elif isinstance(value, (list, tuple, set, frozenset)):
            values = list(value)
            if not values:
                clauses.append("1 = 0")
                continue
            names = []
            for index, item in enumerate(values):
                name = param_name(prefix, col, index)
                params[name] = item
                names.append(f":{name}")
            clauses.append(f"{col} IN ({', '.join(names)})")
        else:
            name = param_name(prefix, col)
            params[name] = value
            clauses.append(f"{col} = :{name}")
    return " AND ".join(clauses), params


@dataclass
class Select:
    """A select against one table."""

    table: str
    columns: tuple[str, ...]
    filters: dict[str, Any] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    limit: int | None = None
    offset: int | None = None

    def where(self, column: str, value: Any) -> Select:
        """Add (or replace) a filter on ``column``."""
        self.filters[column] = value
        return self

    def order_by(self, *columns: str) -> Select:
        self.order.extend(columns)
        return self

    def to_sql(self) -> tuple[str, dict[str, Any]]:
        sql = f"SELECT {', '.join(self.columns)} FROM {self.table}"
        params: dict[str, Any] = {}
        if self.filters:
            where, params = _render_where(self.filters, "w")
            sql += f" WHERE {where}"
        if self.order:
            sql += f" ORDER BY {', '.join(self.order)}"
        if self.limit is not None:
            sql += f" LIMIT {int(self.limit)}"
        if self.offset is not None:
            if self.limit is None:
                sql += " LIMIT -1"
            sql += f" OFFSET {int(self.offset)}"
        return sql, params


@dataclass
class Insert:
    """An insert of a single row."""

    table: str
    values: dict[str, Any] = field(default_factory=dict)

    def to_sql(self) -> tuple[str, dict[str, Any]]:
        if not self.values:
            return f"INSERT INTO {self.table} DEFAULT VALUES", {}
        names = {col: param_name("v", col) for col in self.values}
        cols = ", ".join(self.values)
        placeholders = ", ".join(f":{names[col]}" for col in self.values)
        params = {names[col]: value for col, value in self.values.items()}
        return f"INSERT INTO {self.table} ({cols}) VALUES ({placeholders})", params


@dataclass
class Update:
    """An update of the columns in ``values`` for rows matching ``where``."""

    table: str
    values: dict[str, Any] = field(default_factory=dict)
    where: dict[str, Any] = field(default_factory=dict)

    def to_sql(self) -> tuple[str, dict[str, Any]]:
        params: dict[str, Any] = {}
        assignments = []
        for col, value in self.values.items():
            name = param_name("v", col)
            params[name] = value
            assignments.append(f"{col} = :{name}")
        sql = f"UPDATE {self.table} SET {', '.join(assignments)}"
        if self.where:
            where, where_params = _render_where(self.where, "w")
            params.update(where_params)
            sql += f" WHERE {where}"
        return sql, params


@dataclass
class Delete:
    """A delete of the rows matching ``where``."""

    table: str
    where: dict[str, Any] = field(default_factory=dict)

    def to_sql(self) -> tuple[str, dict[str, Any]]:
        sql = f"DELETE FROM {self.table}"
        params: dict[str, Any] = {}
        if self.where:
            where, params = _render_where(self.where, "w")
            sql += f" WHERE {where}"
        return sql, params


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of an executed write statement."""

    rowcount: int
    lastrowid: Any = None


Statement = Insert | Update | Delete
