"""SQL parameter binding.

Statements render ``:name`` placeholders. :func:`bind` rewrites them into a
driver's DB-API paramstyle and shapes the parameters to match: a mapping
for ``named``/``pyformat``, a positional tuple for ``qmark``/``numeric``.
Quoted string literals and PostgreSQL ``::typecast`` syntax are left alone.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from row_mapper.core.exceptions import ParameterBindingError

PARAMSTYLES = ("named", "pyformat", "qmark", "numeric")

# Matches :name but not ::typecast and not inside words
_PARAM_PATTERN = re.compile(r"(?<![:\w]):([a-zA-Z_]\w*)")

# Matches single-quoted string literals (with escaped quotes handled)
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'")

_IDENTIFIER_PATTERN = re.compile(r"[^a-zA-Z0-9_]")


def param_name(prefix: str, column: str, index: int | None = None) -> str:
    """Build a placeholder name that is safe for every paramstyle.

    Column names may contain characters that are not valid in a placeholder,
    so anything outside ``[a-zA-Z0-9_]`` is replaced.
    """
    name = f"{prefix}_{_IDENTIFIER_PATTERN.sub('_', column)}"
    if index is not None:
        name = f"{name}_{index}"
    return name


def bind(
    sql: str,
    params: Mapping[str, Any] | None,
    paramstyle: str,
) -> tuple[str, dict[str, Any] | tuple[Any, ...]]:
    """Convert ``:name`` SQL and its params for a driver's paramstyle.

    Raises:
        ParameterBindingError: on an unknown paramstyle, or when the SQL
            names a parameter that ``params`` does not supply.
    """
    if paramstyle not in PARAMSTYLES:
        raise ParameterBindingError(f"unsupported paramstyle '{paramstyle}'")
    values = dict(params or {})
    converted, names = _rewrite(sql, paramstyle)
    missing = sorted({name for name in names if name not in values})
    if missing:
        raise ParameterBindingError(f"missing values for {missing}")
    if paramstyle in ("named", "pyformat"):
        return converted, values
    return converted, tuple(values[name] for name in names)


@lru_cache(maxsize=256)
def _rewrite(sql: str, paramstyle: str) -> tuple[str, tuple[str, ...]]:
    """Rewrite placeholders outside string literals; also return their names in order."""
    names: list[str] = []

    def placeholder(match: re.Match[str]) -> str:
        names.append(match.group(1))
        if paramstyle == "named":
            return match.group()
        if paramstyle == "pyformat":
            return f"%({match.group(1)})s"
        if paramstyle == "qmark":
            return "?"
        return f":{len(names)}"

    parts: list[str] = []
    last_end = 0
    for match in _STRING_LITERAL_PATTERN.finditer(sql):
        start, end = match.span()
        parts.append(_PARAM_PATTERN.sub(placeholder, sql[last_end:start]))
        parts.append(match.group())
        last_end = end
    parts.append(_PARAM_PATTERN.sub(placeholder, sql[last_end:]))
    return "".join(parts), tuple(names)
