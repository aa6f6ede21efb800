"""Test unit lifecycle states and the transition table between them."""

from enum import Enum

from .errors import IllegalTransitionError


class TestState(Enum):
    """Lifecycle of a single test unit.

    A unit starts in ``NOT_RUN``, moves to ``IN_PROGRESS`` when invoked and
    settles in exactly one of the three terminal states.
    """

    __test__ = False  # keep pytest from collecting this class

    NOT_RUN = "not run"
    IN_PROGRESS = "in progress"
    PASSED = "passed"
    FAILED = "failed"
    FAILED_WITH_EXCEPTION = "failed with exception"

    @property
    def is_ready(self) -> bool:
        """Whether this is a terminal state."""
        return self in TERMINAL_STATES

    @property
    def is_failure(self) -> bool:
        """Whether this is one of the failed terminal states."""
        return self in {TestState.FAILED, TestState.FAILED_WITH_EXCEPTION}


TERMINAL_STATES = frozenset(
    {TestState.PASSED, TestState.FAILED, TestState.FAILED_WITH_EXCEPTION}
)

ALLOWED_TRANSITIONS: dict[TestState, frozenset[TestState]] = {
    TestState.NOT_RUN: frozenset({TestState.IN_PROGRESS}),
    TestState.IN_PROGRESS: TERMINAL_STATES,
    TestState.PASSED: frozenset(),
    TestState.FAILED: frozenset(),
    TestState.FAILED_WITH_EXCEPTION: frozenset(),
}


def transition(current: TestState, target: TestState) -> TestState:
    """Validate a state change and return the new state.

    Args:
        current: The state the unit is in now.
        target: The state the unit wants to move to.

    Returns:
        TestState: ``target``, once the move has been checked.

    Raises:
        IllegalTransitionError: If ``target`` is not reachable from ``current``.
    """
    if target not in ALLOWED_TRANSITIONS[current]:
        raise IllegalTransitionError(current.name, target.name)
    return target
