"""Plain-text rendering of test outcomes.

The report is meant for humans; its structure is stable but it is not a
machine-readable format:

    PidgeonPulse Unit Test:
    Test Collection: Math
    \tTest failed: DivByZero
    \t File: test_math.py:42
    \t Exception: ZeroDivisionError: division by zero

    Stats: failed 1 of 2 tests

File and exception lines are left out when unknown.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pidgeonpulse.interfaces.testable import Testable

REGISTRY_HEADER = "PidgeonPulse Unit Test:"


@dataclass(frozen=True, slots=True)
class CollectionStats:
    """Pass/fail counts for one collection."""

    name: str
    total: int
    failed: int

    @property
    def passed(self) -> int:
        """Number of tests that passed."""
        return self.total - self.failed

    @property
    def summary_line(self) -> str:
        """The ``Stats: ...`` line closing a collection report."""
        return f"Stats: failed {self.failed} of {self.total} tests"

    @classmethod
    def from_units(cls, name: str, units: Sequence[Testable]) -> CollectionStats:
        """Count the failed units in ``units``; every unit must be ready."""
        failed = sum(1 for unit in units if not unit.passed())
        return cls(name=name, total=len(units), failed=failed)


def render_failure_block(unit: Testable) -> str:
    """Render the block describing one failed unit."""
    lines = [f"\tTest failed: {unit.name}"]
    for failure in unit.failures:
        if location := failure.location:
            lines.append(f"\t File: {location}")
        if message := failure.error_message:
            lines.append(f"\t Exception: {message}")
        lines.append("")
    return "\n".join(lines) + "\n"


def render_collection_report(name: str, units: Sequence[Testable]) -> str:
    """Render a collection's report; every unit must be ready."""
    parts = [f"Test Collection: {name}\n"]
    parts.extend(render_failure_block(unit) for unit in units if not unit.passed())
    parts.append(CollectionStats.from_units(name, units).summary_line + "\n")
    return "".join(parts)


def render_registry_report(collection_reports: Iterable[str]) -> str:
    """Concatenate collection reports under the registry header."""
    return REGISTRY_HEADER + "\n" + "".join(collection_reports)
