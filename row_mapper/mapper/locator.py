"""Mapper registry scoped to one executor and one identity map."""

from __future__ import annotations

from types import TracebackType
from typing import TYPE_CHECKING

import structlog

from row_mapper.core.exceptions import MapperClassNotFoundError, MapperNotFoundError
from row_mapper.core.executor import Executor
from row_mapper.mapper.mapper import Mapper
from row_mapper.mapper.plugin import Plugin
from row_mapper.table.gateway import TableGateway
from row_mapper.table.identity_map import IdentityMap
from row_mapper.table.table import Table

if TYPE_CHECKING:
    from row_mapper.unit_of_work import Transaction

logger = structlog.get_logger(__name__)

#: A mapper class, or the name it was registered under.
MapperRef = type[Mapper] | str


class MapperLocator:
    """Builds mappers on first use and hands out the same instance after.

    Every mapper from one locator shares the locator's identity map, so a
    row fetched through any of them is represented by one Row object until
    :meth:`close` discards the scope.
    """

    def __init__(self, executor: Executor, identity_map: IdentityMap | None = None) -> None:
        self._executor = executor
        self._identity_map = identity_map if identity_map is not None else IdentityMap()
        self._classes: dict[str, type[Mapper]] = {}
        self._plugins: dict[type[Mapper], Plugin | None] = {}
        self._instances: dict[type[Mapper], Mapper] = {}

    @property
    def executor(self) -> Executor:
        return self._executor

    @property
    def identity_map(self) -> IdentityMap:
        return self._identity_map

    def register(self, mapper_class: type[Mapper], plugin: Plugin | None = None) -> None:
        if not (isinstance(mapper_class, type) and issubclass(mapper_class, Mapper)):
            raise MapperClassNotFoundError(mapper_class)
        if not isinstance(getattr(mapper_class, "table", None), Table):
            raise MapperClassNotFoundError(f"{mapper_class.__name__} (no table defined)")
        self._classes[mapper_class.__name__] = mapper_class
        self._plugins[mapper_class] = plugin
        self._instances.pop(mapper_class, None)

    def has(self, ref: MapperRef) -> bool:
        if isinstance(ref, str):
            return ref in self._classes
        return ref in self._plugins

    def resolve_class(self, ref: MapperRef) -> type[Mapper]:
        """Return the registered mapper class for a class or a name."""
        if isinstance(ref, str):
            try:
                return self._classes[ref]
            except KeyError:
                raise MapperClassNotFoundError(ref) from None
        if ref not in self._plugins:
            raise MapperClassNotFoundError(getattr(ref, "__name__", repr(ref)))
        return ref

    def get(self, ref: MapperRef) -> Mapper:
        try:
            mapper_class = self.resolve_class(ref)
        except MapperClassNotFoundError:
            name = ref if isinstance(ref, str) else getattr(ref, "__name__", repr(ref))
            raise MapperNotFoundError(name) from None

        mapper = self._instances.get(mapper_class)
        if mapper is None:
            gateway = TableGateway(
                mapper_class.table,
                self._executor,
                self._identity_map,
                mapper_class.row_class,
            )
            mapper = mapper_class(self, gateway, self._plugins[mapper_class])
            self._instances[mapper_class] = mapper
            logger.debug("mapper_created", mapper=mapper_class.__name__)
        return mapper

    def new_transaction(self) -> Transaction:
        from row_mapper.unit_of_work import Transaction

        return Transaction(self)

    def close(self) -> None:
        """End the identity scope: forget every tracked row."""
        self._identity_map.clear()

    def __enter__(self) -> MapperLocator:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
