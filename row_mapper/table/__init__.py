"""Table layer - rows, identity map and table gateways."""

from __future__ import annotations

from row_mapper.table.gateway import TableGateway
from row_mapper.table.identity_map import IdentityMap
from row_mapper.table.row import Row, RowState
from row_mapper.table.table import Table

__all__ = [
    "Row",
    "RowState",
    "IdentityMap",
    "Table",
    "TableGateway",
]
