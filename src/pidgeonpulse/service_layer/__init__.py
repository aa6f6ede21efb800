"""Service layer for PidgeonPulse.

Implements the use-cases: grouping test units into collections, scheduling
them on a worker pool, aggregating their outcomes into reports, and the
registry that drives every collection.

Dependency rule: may import `pidgeonpulse.domain` and
`pidgeonpulse.interfaces`, but not `pidgeonpulse.adapters` or
`pidgeonpulse.entrypoints`. Concrete pools are injected by
`pidgeonpulse.bootstrap`.
"""

from .collection import TestCollection
from .errors import (
    CollectionError,
    CollectionNotFound,
    DuplicateCollectionError,
    DuplicateTestError,
    RegistryError,
)
from .registry import TestRegistry
from .report import REGISTRY_HEADER, CollectionStats

__all__ = [
    "REGISTRY_HEADER",
    "CollectionError",
    "CollectionNotFound",
    "CollectionStats",
    "DuplicateCollectionError",
    "DuplicateTestError",
    "RegistryError",
    "TestCollection",
    "TestRegistry",
]
