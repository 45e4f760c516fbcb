"""Per-mapper relationship registry and with-spec dispatch."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from row_mapper.core.enums import RelationshipKind
from row_mapper.core.exceptions import RelationshipError, RelationshipNotFoundError
from row_mapper.relationship.base import Relationship
from row_mapper.relationship.many_to_many import ManyToMany
from row_mapper.relationship.many_to_one import ManyToOne
from row_mapper.relationship.one_to_many import OneToMany
from row_mapper.relationship.one_to_one import OneToOne

if TYPE_CHECKING:
    from row_mapper.mapper.locator import MapperLocator, MapperRef
    from row_mapper.mapper.mapper import Mapper
    from row_mapper.mapper.record import Record
    from row_mapper.mapper.record_set import RecordSet
    from row_mapper.table.table import Table

    #: Which relationship fields to load: a name, a sequence of names, or a
    #: mapping of name -> refinement (see ``Custom``).
    WithSpec = str | Sequence[Any] | Mapping[str, Any] | None

RELATIONSHIP_TYPES: dict[RelationshipKind, type[Relationship]] = {
    RelationshipKind.ONE_TO_ONE: OneToOne,
    RelationshipKind.ONE_TO_MANY: OneToMany,
    RelationshipKind.MANY_TO_ONE: ManyToOne,
    RelationshipKind.MANY_TO_MANY: ManyToMany,
}


def normalize_with(spec: WithSpec) -> dict[str, Any]:
    """Turn a with-spec into an ordered ``{name: refinement}`` mapping.

    ``["author", {"replies": ["author"]}]`` becomes
    ``{"author": None, "replies": ["author"]}``.
    """
    if spec is None:
        return {}
    if isinstance(spec, str):
        return {spec: None}
    if isinstance(spec, Mapping):
        return dict(spec)
    with_: dict[str, Any] = {}
    for item in spec:
        if isinstance(item, str):
            with_[item] = None
        elif isinstance(item, Mapping):
            with_.update(item)
        else:
            raise RelationshipError(f"Invalid with-spec entry: {item!r}")
    return with_


class MapperRelationships:
    """The relationships defined on one native mapper.

    Definitions are validated as they are registered: the foreign mapper
    must resolve to a mapper class, a many-to-many must name a relationship
    that is already registered here, and field names may not shadow columns.
    """

    def __init__(
        self,
        locator: MapperLocator,
        native_mapper_class: type[Mapper],
        native_table: Table,
    ) -> None:
        self._locator = locator
        self._native_mapper_class = native_mapper_class
        self._native_table = native_table
        self._relationships: dict[str, Relationship] = {}

    @property
    def fields(self) -> list[str]:
        return list(self._relationships)

    def __contains__(self, name: object) -> bool:
        return name in self._relationships

    def __iter__(self) -> Iterator[Relationship]:
        return iter(self._relationships.values())

    def __len__(self) -> int:
        return len(self._relationships)

    def get(self, name: str) -> Relationship:
        try:
            return self._relationships[name]
        except KeyError:
            raise RelationshipNotFoundError(self._native_mapper_class.__name__, name) from None

    def set(
        self,
        name: str,
        kind: RelationshipKind,
        foreign_mapper: MapperRef,
        through: str | None = None,
    ) -> Relationship:
        if name in self._relationships:
            raise RelationshipError(
                f"Relationship '{name}' is already defined on {self._native_mapper_class.__name__}"
            )
        if name in self._native_table.columns:
            raise RelationshipError(
                f"Relationship '{name}' conflicts with a column of table '{self._native_table.name}'"
            )

        foreign_mapper_class = self._locator.resolve_class(foreign_mapper)

        relationship: Relationship
        if kind is RelationshipKind.MANY_TO_MANY:
            if through is None or through not in self._relationships:
                raise RelationshipNotFoundError(
                    self._native_mapper_class.__name__, str(through)
                )
            relationship = ManyToMany(
                self._locator,
                self._native_mapper_class,
                self._native_table,
                name,
                foreign_mapper_class,
                self._relationships[through],
            )
        else:
            relationship = RELATIONSHIP_TYPES[kind](
                self._locator,
                self._native_mapper_class,
                self._native_table,
                name,
                foreign_mapper_class,
            )

        self._relationships[name] = relationship
        return relationship

    def one_to_one(self, name: str, foreign_mapper: MapperRef) -> Relationship:
        return self.set(name, RelationshipKind.ONE_TO_ONE, foreign_mapper)

    def one_to_many(self, name: str, foreign_mapper: MapperRef) -> Relationship:
        return self.set(name, RelationshipKind.ONE_TO_MANY, foreign_mapper)

    def many_to_one(self, name: str, foreign_mapper: MapperRef) -> Relationship:
        return self.set(name, RelationshipKind.MANY_TO_ONE, foreign_mapper)

    def many_to_many(self, name: str, foreign_mapper: MapperRef, through: str) -> Relationship:
        return self.set(name, RelationshipKind.MANY_TO_MANY, foreign_mapper, through)

    def _resolve_with(self, spec: WithSpec) -> list[tuple[Relationship, Any]]:
        """Validate every requested name before anything is fetched."""
        return [(self.get(name), custom) for name, custom in normalize_with(spec).items()]

    def stitch_into_record(self, record: Record, with_: WithSpec = None) -> None:
        for relationship, custom in self._resolve_with(with_):
            relationship.stitch_into_record(record, custom)

    def stitch_into_record_set(self, record_set: RecordSet, with_: WithSpec = None) -> None:
        for relationship, custom in self._resolve_with(with_):
            relationship.stitch_into_record_set(record_set, custom)
