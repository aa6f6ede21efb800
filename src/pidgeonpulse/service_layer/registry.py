"""The test registry: owner of every test collection.

The registry is an ordinary object; nothing about it is global. The
process-wide default instance used by the command line lives in
`pidgeonpulse.bootstrap` (see `get_registry` / `reset_registry` there).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from types import TracebackType
from typing import TYPE_CHECKING

from .collection import TestCollection
from .errors import CollectionNotFound, DuplicateCollectionError
from .report import CollectionStats, render_registry_report

if TYPE_CHECKING:
    from pidgeonpulse.interfaces.worker_pool import WorkerPool

logger = logging.getLogger(__name__)

PoolFactory = Callable[[], "WorkerPool"]


class TestRegistry:
    """Owns named test collections; runs and reports on all of them.

    Collections are kept in registration order. Running is sequential across
    collections: each collection's units run in parallel on its own pool, but
    two collections never run at the same time.

    Args:
        pool_factory: Builds a fresh worker pool for each new collection.
    """

    __test__ = False  # keep pytest from collecting this class

    def __init__(self, pool_factory: PoolFactory) -> None:
        self._pool_factory = pool_factory
        self._collections: dict[str, TestCollection] = {}
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(collections={list(self._collections)!r})"

    # --- Collections ---

    def add_collection(self, name: str) -> TestCollection:
        """Create and register a new, empty collection.

        Raises:
            DuplicateCollectionError: If ``name`` is already registered.
        """
        with self._lock:
            if name in self._collections:
                raise DuplicateCollectionError(name)
            collection = TestCollection(name, self._pool_factory())
            self._collections[name] = collection
        logger.debug("Registered test collection %s", name)
        return collection

    def get_collection(self, name: str) -> TestCollection:
        """Look up a collection by name.

        Raises:
            CollectionNotFound: If no collection is registered under ``name``.
        """
        with self._lock:
            try:
                return self._collections[name]
            except KeyError as e:
                raise CollectionNotFound(name) from e

    @property
    def collections(self) -> tuple[TestCollection, ...]:
        """Registered collections, in registration order."""
        with self._lock:
            return tuple(self._collections.values())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._collections

    def __len__(self) -> int:
        with self._lock:
            return len(self._collections)

    # --- Execution & reporting ---

    def run_all(self) -> None:
        """Run every collection, one after the other, in registration order."""
        collections = self.collections
        logger.info("Running %d test collection(s)", len(collections))
        for collection in collections:
            collection.run()

    def generate_report(self) -> str:
        """Concatenate every collection's report under the registry header."""
        return render_registry_report(c.generate_report() for c in self.collections)

    def stats(self) -> list[CollectionStats]:
        """Per-collection pass/fail counts, in registration order."""
        return [collection.stats() for collection in self.collections]

    def total_failed(self) -> int:
        """Number of failed tests across all collections."""
        return sum(s.failed for s in self.stats())

    # --- Lifecycle ---

    def close(self) -> None:
        """Close and forget every collection."""
        with self._lock:
            collections = list(self._collections.values())
            self._collections.clear()
        for collection in collections:
            collection.close()
        logger.debug("Test registry closed (%d collection(s))", len(collections))

    def __enter__(self) -> TestRegistry:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
