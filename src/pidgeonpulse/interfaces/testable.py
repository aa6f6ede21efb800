"""Capability set required of anything a test collection can schedule."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pidgeonpulse.domain.failures import FailureRecord
    from pidgeonpulse.domain.state import TestState


@runtime_checkable
class Testable(Protocol):
    """A test that can be invoked once and queried for its outcome.

    `pidgeonpulse.domain.TestUnit` is the stock implementation, but a
    collection relies only on this surface.
    """

    name: str

    @property
    def state(self) -> TestState:
        """Current lifecycle state."""
        ...  # pylint: disable=unnecessary-ellipsis

    @property
    def failures(self) -> tuple[FailureRecord, ...]:
        """Failures recorded by the test, in order."""
        ...  # pylint: disable=unnecessary-ellipsis

    def invoke(self) -> None:
        """Run the test once, recording its outcome."""

    def is_ready(self) -> bool:
        """Whether the test has finished."""
        ...  # pylint: disable=unnecessary-ellipsis

    def passed(self) -> bool:
        """Whether the test passed; only valid once it is ready."""
        ...  # pylint: disable=unnecessary-ellipsis
