"""Relationship engine - define and stitch related records."""

from __future__ import annotations

from row_mapper.relationship.base import Relationship
from row_mapper.relationship.many_to_many import ManyToMany
from row_mapper.relationship.many_to_one import ManyToOne
from row_mapper.relationship.one_to_many import OneToMany
from row_mapper.relationship.one_to_one import OneToOne
from row_mapper.relationship.relationships import (
    RELATIONSHIP_TYPES,
    MapperRelationships,
    normalize_with,
)

__all__ = [
    "Relationship",
    "OneToOne",
    "OneToMany",
    "ManyToOne",
    "ManyToMany",
    "MapperRelationships",
    "RELATIONSHIP_TYPES",
    "normalize_with",
]
