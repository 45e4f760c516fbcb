"""Unit tests for MapperLocator."""

from __future__ import annotations

import pytest

from row_mapper.core.exceptions import MapperClassNotFoundError, MapperNotFoundError
from row_mapper.mapper.locator import MapperLocator
from row_mapper.mapper.mapper import Mapper
from row_mapper.table.identity_map import IdentityMap


class TestMapperLocator:
    def test_get_by_name_or_class_is_the_same_instance(self, locator: MapperLocator) -> None:
        threads = locator.get("ThreadMapper")
        assert locator.get(type(threads)) is threads
        assert locator.get("ThreadMapper") is threads

    def test_unregistered_mapper(self, locator: MapperLocator) -> None:
        with pytest.raises(MapperNotFoundError, match="GhostMapper"):
            locator.get("GhostMapper")

    def test_has(self, locator: MapperLocator) -> None:
        assert locator.has("TagMapper")
        assert locator.has(locator.resolve_class("TagMapper"))
        assert not locator.has("GhostMapper")

    def test_register_rejects_non_mappers(self, executor) -> None:
        with pytest.raises(MapperClassNotFoundError):
            MapperLocator(executor).register(dict)  # type: ignore[arg-type]

    def test_register_requires_a_table(self, executor) -> None:
        class TablelessMapper(Mapper):
            pass

        with pytest.raises(MapperClassNotFoundError, match="no table"):
            MapperLocator(executor).register(TablelessMapper)

    def test_explicit_identity_map(self, executor) -> None:
        identity_map = IdentityMap()
        loc = MapperLocator(executor, identity_map)
        assert loc.identity_map is identity_map
        assert loc.executor is executor

    def test_context_manager_closes_the_scope(self, locator: MapperLocator) -> None:
        with locator as scope:
            scope.get("AuthorMapper").fetch_record(1)
            assert len(scope.identity_map) == 1
        assert len(locator.identity_map) == 0
