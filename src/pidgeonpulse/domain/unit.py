"""Test units: the per-test state machine and its assertion primitives.

A `TestUnit` is invoked exactly once. Invocation runs ``setup()``, then the
test body ``run()`` inside a recovery boundary, then ``teardown()``. Every
outcome of the body is recorded on the unit itself:

- a failing assertion appends a `FailureRecord` located at the calling line;
  fatal assertions (the default) also abort the rest of ``run()``, soft ones
  (``fatal=False``) let it continue;
- any other exception escaping ``run()`` is captured on a `FailureRecord` and
  the unit ends `TestState.FAILED_WITH_EXCEPTION`.

Nothing recorded inside a unit propagates past `TestUnit.invoke`.
"""

from __future__ import annotations

import abc
import inspect
import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from types import FrameType

from .errors import AlreadyInvokedError, InvalidStateError, ResultNotReadyError
from .failures import FailureRecord
from .state import TestState, transition

logger = logging.getLogger(__name__)

# pylint: disable=too-many-instance-attributes

ExpectedErrors = type[BaseException] | tuple[type[BaseException], ...]


class _FatalAbort(BaseException):
    """Unwinds a test body after a fatal assertion failure.

    Derives from `BaseException` so that ``except Exception`` blocks inside a
    test body cannot swallow it. Only the `TestUnit.invoke` boundary of the
    unit that raised it honors it.
    """

    def __init__(self, unit: TestUnit) -> None:
        super().__init__(unit.name)
        self.unit = unit


def _foreign_abort(unit: TestUnit, abort: _FatalAbort) -> InvalidStateError:
    """Describe another unit's fatal failure surfacing in ``unit``'s body."""
    return InvalidStateError(
        f"Test '{unit.name}' was aborted by a fatal assertion of test "
        f"'{abort.unit.name}'."
    )


def _caller_frame() -> FrameType | None:
    """Return the innermost frame that does not belong to this module."""
    frame = inspect.currentframe()
    while frame is not None and frame.f_code.co_filename == __file__:
        frame = frame.f_back
    return frame


class TestUnit(abc.ABC):
    """Base class for a single, independently invocable test.

    Subclasses implement `run` as a sequence of assertion calls and arbitrary
    logic, and may override `setup` and `teardown`.

    Example:
        ```py
        class AddsCorrectly(TestUnit):
            def run(self) -> None:
                self.assert_equal(2 + 2, 4)
        ```
    """

    __test__ = False  # keep pytest from collecting this class

    def __init__(self, name: str | None = None) -> None:
        self.name: str = name or type(self).__name__
        self._state = TestState.NOT_RUN
        self._invoked = False
        self._errored = False
        self._failures: list[FailureRecord] = []
        self._start_time: float | None = None
        self._end_time: float | None = None
        self._started_at: datetime | None = None
        self._finished_at: datetime | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, state={self._state.name})"

    # --- Hooks ---

    def setup(self) -> None:
        """Prepare the test. Called right before `run`; no-op by default."""

    def teardown(self) -> None:
        """Clean up after the test. Called right after `run`; no-op by default."""

    @abc.abstractmethod
    def run(self) -> None:
        """The test body."""

    # --- Invocation ---

    def invoke(self) -> None:
        """Run the unit once: ``setup()``, ``run()``, ``teardown()``.

        Records the start and end times, moves the unit through its state
        machine and leaves it in a terminal state. An error raised by
        ``setup()`` is captured like an error escaping ``run()``, and the body
        is skipped. An error raised by ``teardown()`` cannot change the
        settled outcome; it is logged instead.

        Raises:
            AlreadyInvokedError: If the unit has been invoked before.
        """
        if self._invoked:
            raise AlreadyInvokedError(self.name)
        self._invoked = True

        try:
            self.setup()
        except Exception as e:  # pylint: disable=broad-except
            self._begin()
            logger.debug("Setup of test %s raised %r", self.name, e)
            self._capture(e)
            self._finish()
            return

        self._begin()
        try:
            self.run()
        except _FatalAbort as abort:
            if abort.unit is not self:
                self._capture(_foreign_abort(self, abort))
        except Exception as e:  # pylint: disable=broad-except
            logger.debug("Test %s raised %r", self.name, e)
            self._capture(e)
        except BaseException as e:
            # KeyboardInterrupt, SystemExit: settle the unit, then let it go
            self._capture(e)
            self._finish()
            raise
        self._finish()

        try:
            self.teardown()
        except Exception:  # pylint: disable=broad-except
            logger.warning("Teardown of test %s raised", self.name, exc_info=True)

    def _begin(self) -> None:
        self._state = transition(self._state, TestState.IN_PROGRESS)
        self._started_at = datetime.now(timezone.utc)
        self._start_time = time.perf_counter()

    def _finish(self) -> None:
        self._end_time = time.perf_counter()
        self._finished_at = datetime.now(timezone.utc)
        if self._errored:
            outcome = TestState.FAILED_WITH_EXCEPTION
        elif self._failures:
            outcome = TestState.FAILED
        else:
            outcome = TestState.PASSED
        self._state = transition(self._state, outcome)
        elapsed = self._end_time - self._start_time  # type: ignore[operator]
        logger.debug("Test %s %s in %.6fs", self.name, outcome.value, elapsed)

    def _capture(self, error: BaseException) -> None:
        self._errored = True
        self._failures.append(FailureRecord.from_exception(error))

    def _fail(
        self, check: str, *, fatal: bool, captured_error: BaseException | None = None
    ) -> bool:
        """Record a failed check at the caller's location.

        Returns False for soft failures; fatal failures do not return.
        """
        if self._state is not TestState.IN_PROGRESS:
            raise InvalidStateError(
                f"Test '{self.name}' can only record failures while running "
                f"(state is {self._state.name})."
            )
        record = FailureRecord.from_frame(_caller_frame(), captured_error)
        self._failures.append(record)
        logger.debug(
            "Test %s: %s failed at %s%s",
            self.name,
            check,
            record.location or "<unknown>",
            "" if fatal else " (soft)",
        )
        if fatal:
            raise _FatalAbort(self)
        return False

    # --- Assertions ---

    def assert_true(self, condition: object, *, fatal: bool = True) -> bool:
        """Check that ``condition`` is truthy."""
        if condition:
            return True
        return self._fail("assert_true", fatal=fatal)

    def assert_false(self, condition: object, *, fatal: bool = True) -> bool:
        """Check that ``condition`` is falsy."""
        if not condition:
            return True
        return self._fail("assert_false", fatal=fatal)

    def assert_equal(
        self, actual: object, expected: object, *, fatal: bool = True
    ) -> bool:
        """Check that ``actual == expected``."""
        if actual == expected:
            return True
        return self._fail("assert_equal", fatal=fatal)

    def assert_not_equal(
        self, actual: object, unexpected: object, *, fatal: bool = True
    ) -> bool:
        """Check that ``actual != unexpected``."""
        if actual != unexpected:
            return True
        return self._fail("assert_not_equal", fatal=fatal)

    def assert_throws(
        self,
        func: Callable[[], object],
        expected: ExpectedErrors,
        *,
        fatal: bool = True,
    ) -> bool:
        """Check that calling ``func`` raises ``expected``.

        An error of a different type counts as a failure and is kept on the
        failure record so its message shows up in the report.
        """
        try:
            func()
        except _FatalAbort:
            raise
        except expected:
            return True
        except Exception as e:  # pylint: disable=broad-except
            return self._fail("assert_throws", fatal=fatal, captured_error=e)
        return self._fail("assert_throws", fatal=fatal)

    def assert_does_not_throw(
        self, func: Callable[[], object], *, fatal: bool = True
    ) -> bool:
        """Check that calling ``func`` raises nothing."""
        try:
            func()
        except _FatalAbort:
            raise
        except Exception as e:  # pylint: disable=broad-except
            return self._fail("assert_does_not_throw", fatal=fatal, captured_error=e)
        return True

    def assert_throws_any(
        self, func: Callable[[], object], *, fatal: bool = True
    ) -> bool:
        """Check that calling ``func`` raises some exception."""
        try:
            func()
        except _FatalAbort:
            raise
        except Exception:  # pylint: disable=broad-except
            return True
        return self._fail("assert_throws_any", fatal=fatal)

    # --- Results ---

    @property
    def state(self) -> TestState:
        """Current lifecycle state."""
        return self._state

    @property
    def failures(self) -> tuple[FailureRecord, ...]:
        """Failures recorded so far, in order."""
        return tuple(self._failures)

    def is_ready(self) -> bool:
        """Whether the unit has reached a terminal state."""
        return self._state.is_ready

    def passed(self) -> bool:
        """Whether the unit passed.

        Raises:
            ResultNotReadyError: If the unit has not finished yet.
        """
        self._require_ready("the result")
        return self._state is TestState.PASSED

    def duration(self) -> float:
        """Wall time spent in the test body, in seconds.

        Raises:
            ResultNotReadyError: If the unit has not finished yet.
        """
        self._require_ready("the duration")
        return self._end_time - self._start_time  # type: ignore[operator]

    @property
    def started_at(self) -> datetime:
        """UTC time the unit started running."""
        self._require_ready("the start time")
        return self._started_at  # type: ignore[return-value]

    @property
    def finished_at(self) -> datetime:
        """UTC time the unit finished running."""
        self._require_ready("the end time")
        return self._finished_at  # type: ignore[return-value]

    def _require_ready(self, attribute: str) -> None:
        if not self._state.is_ready:
            raise ResultNotReadyError(self.name, attribute)


class FunctionTestUnit(TestUnit):
    """A test unit whose body is a plain callable.

    The callable receives the unit so it can use the assertion methods:

        ```py
        def adds_correctly(t: TestUnit) -> None:
            t.assert_equal(2 + 2, 4)

        unit = FunctionTestUnit(adds_correctly)
        ```

    Args:
        body: The test body, called with the unit as its only argument.
        name: Test name; defaults to ``body.__name__``.
        setup: Optional hook called with the unit before the body.
        teardown: Optional hook called with the unit after the body.
    """

    def __init__(
        self,
        body: Callable[[TestUnit], object],
        name: str | None = None,
        *,
        setup: Callable[[TestUnit], object] | None = None,
        teardown: Callable[[TestUnit], object] | None = None,
    ) -> None:
        super().__init__(name or getattr(body, "__name__", None))
        self._body = body
        self._setup_hook = setup
        self._teardown_hook = teardown

    def setup(self) -> None:
        if self._setup_hook is not None:
            self._setup_hook(self)

    def teardown(self) -> None:
        if self._teardown_hook is not None:
            self._teardown_hook(self)

    def run(self) -> None:
        self._body(self)
