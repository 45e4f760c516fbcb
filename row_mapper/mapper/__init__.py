"""Mapper layer - records, record sets, plugins and the mapper locator."""

from __future__ import annotations

from row_mapper.mapper.locator import MapperLocator, MapperRef
from row_mapper.mapper.mapper import Mapper
from row_mapper.mapper.plugin import HOOK_NAMES, HookPlugin, Plugin
from row_mapper.mapper.record import Record
from row_mapper.mapper.record_set import RecordSet
from row_mapper.mapper.related import NOT_LOADED, Related
from row_mapper.mapper.select import MapperSelect

__all__ = [
    "Mapper",
    "MapperLocator",
    "MapperRef",
    "MapperSelect",
    "Record",
    "RecordSet",
    "Related",
    "NOT_LOADED",
    "Plugin",
    "HookPlugin",
    "HOOK_NAMES",
]
