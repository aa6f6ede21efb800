"""Named groups of test units executed on a worker pool."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent import futures
from types import TracebackType
from typing import TYPE_CHECKING, TypeVar, overload

from pidgeonpulse.domain.errors import AlreadyInvokedError
from pidgeonpulse.domain.state import TestState
from pidgeonpulse.domain.unit import FunctionTestUnit, TestUnit

from .errors import DuplicateTestError
from .report import CollectionStats, render_collection_report

if TYPE_CHECKING:
    from pidgeonpulse.interfaces.testable import Testable
    from pidgeonpulse.interfaces.worker_pool import CompletionHandle, WorkerPool

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="Testable")
TestBody = Callable[[TestUnit], object]


class TestCollection:
    """A named, ordered group of test units sharing one worker pool.

    Units are submitted to the pool as soon as they are added, but the pool is
    kept paused until `run` is called, so any number of tests can be
    registered before execution begins.

    Args:
        name: The collection name, unique within its registry.
        pool: The worker pool that will invoke the units. It is paused on
            construction and owned by the collection from then on.

    Note:
        No unit is ever invoked twice, and `run` blocks until every submitted
        unit has settled. There is no timeout: a hung test blocks `run`
        indefinitely.
    """

    __test__ = False  # keep pytest from collecting this class

    def __init__(self, name: str, pool: WorkerPool) -> None:
        self._name = name
        self._pool = pool
        self._pool.pause()
        self._units: list[Testable] = []
        self._handles: list[CompletionHandle] = []
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, tests={len(self._units)})"

    @property
    def name(self) -> str:
        """The collection name."""
        return self._name

    @property
    def units(self) -> tuple[Testable, ...]:
        """Registered units, in registration order."""
        return tuple(self._units)

    def __len__(self) -> int:
        return len(self._units)

    # --- Registration ---

    def add_test(self, unit: T) -> T:
        """Register ``unit`` and queue its invocation on the pool.

        Args:
            unit: A test that has not been invoked yet.

        Returns:
            The same unit, for chaining.

        Raises:
            DuplicateTestError: If ``unit`` is already part of this collection.
            AlreadyInvokedError: If ``unit`` has already been run.
            PoolClosedError: If the collection has been closed.
        """
        with self._lock:
            if any(existing is unit for existing in self._units):
                raise DuplicateTestError(self._name, unit.name)
            if unit.state is not TestState.NOT_RUN:
                raise AlreadyInvokedError(unit.name)
            handle = self._pool.submit(unit.invoke)
            self._units.append(unit)
            self._handles.append(handle)
        logger.debug("Queued test %s in collection %s", unit.name, self._name)
        return unit

    @overload
    def test(self, func: TestBody, *, name: str | None = None) -> TestBody: ...

    @overload
    def test(
        self, func: None = None, *, name: str | None = None
    ) -> Callable[[TestBody], TestBody]: ...

    def test(
        self, func: TestBody | None = None, *, name: str | None = None
    ) -> TestBody | Callable[[TestBody], TestBody]:
        """Register a function as a test, usable bare or with arguments.

        Example:
            ```py
            math = registry.add_collection("Math")

            @math.test
            def adds_correctly(t):
                t.assert_equal(2 + 2, 4)

            @math.test(name="DivByZero")
            def divides(t):
                t.assert_throws(lambda: 1 / 0, ZeroDivisionError)
            ```
        """

        def register(body: TestBody) -> TestBody:
            self.add_test(FunctionTestUnit(body, name=name))
            return body

        if func is None:
            return register
        return register(func)

    # --- Execution ---

    def is_complete(self) -> bool:
        """Whether every submitted unit has settled."""
        return not self._pending()

    def _pending(self) -> list[CompletionHandle]:
        with self._lock:
            return [handle for handle in self._handles if not handle.done()]

    def run(self) -> None:
        """Release the pool and block until every submitted unit has settled.

        Units that running tests add to this collection are waited for too.
        Calling it again only waits on units that have not settled yet, which
        is normally none, so repeated calls return immediately.
        """
        self._pool.resume()
        if not (pending := self._pending()):
            return
        logger.info("Running %d test(s) in collection %s", len(pending), self._name)
        while pending:
            futures.wait(pending)
            pending = self._pending()
        logger.debug("Collection %s settled", self._name)

    # --- Reporting ---

    def stats(self) -> CollectionStats:
        """Pass/fail counts, running the collection first if needed."""
        self._ensure_complete()
        return CollectionStats.from_units(self._name, self._units)

    def generate_report(self) -> str:
        """Render the collection report, running the collection first if needed.

        Raises:
            ResultNotReadyError: If a unit never ran because the collection
                was closed before it was run.
        """
        self._ensure_complete()
        return render_collection_report(self._name, self._units)

    def _ensure_complete(self) -> None:
        if not self.is_complete():
            self.run()

    # --- Lifecycle ---

    def close(self) -> None:
        """Cancel units that have not started and release the pool."""
        self._pool.shutdown(cancel_pending=True)

    def __enter__(self) -> TestCollection:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
