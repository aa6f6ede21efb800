"""Unit tests for TestRegistry."""

from __future__ import annotations

import pytest

from pidgeonpulse.service_layer.errors import (
    CollectionNotFound,
    DuplicateCollectionError,
)
from tests.helpers.units import AddsCorrectly, FatalFailure, Raises, Records

# pylint: disable=magic-value-comparison


def test_math_scenario_report(registry):
    """One passing and one failing test produce the documented report."""
    math = registry.add_collection("Math")
    math.add_test(AddsCorrectly())
    div = math.add_test(FatalFailure("DivByZero"))

    registry.run_all()

    assert registry.generate_report() == (
        "PidgeonPulse Unit Test:\n"
        "Test Collection: Math\n"
        "\tTest failed: DivByZero\n"
        f"\t File: units.py:{div.failing_line}\n"
        "\n"
        "Stats: failed 1 of 2 tests\n"
    )


def test_empty_registry_report(registry):
    """With no collections the report is just the header."""
    assert registry.generate_report() == "PidgeonPulse Unit Test:\n"


def test_report_concatenates_collections_in_order(registry):
    """Collection reports follow each other in registration order."""
    registry.add_collection("B").add_test(AddsCorrectly())
    registry.add_collection("A").add_test(Raises("Explodes"))
    report = registry.generate_report()
    assert report.index("Test Collection: B") < report.index("Test Collection: A")
    assert report.endswith("Stats: failed 1 of 1 tests\n")


def test_add_and_get_collection(registry):
    """Collections are retrievable by name."""
    math = registry.add_collection("Math")
    assert registry.get_collection("Math") is math
    assert "Math" in registry
    assert len(registry) == 1
    assert registry.collections == (math,)


def test_missing_collection(registry):
    """Looking up an unknown name raises CollectionNotFound."""
    with pytest.raises(CollectionNotFound) as exc_info:
        registry.get_collection("Physics")
    assert exc_info.value.name == "Physics"
    assert "Physics" not in registry


def test_duplicate_collection_name(registry):
    """A name can only be registered once; the original is kept."""
    math = registry.add_collection("Math")
    with pytest.raises(DuplicateCollectionError):
        registry.add_collection("Math")
    assert registry.get_collection("Math") is math


def test_collections_run_one_after_another(registry):
    """No unit of a later collection starts before an earlier one finished."""
    log: list[tuple[str, str]] = []
    for tag in ("first", "second", "third"):
        coll = registry.add_collection(tag)
        for i in range(4):
            coll.add_test(Records(log, tag, f"{tag}-{i}"))

    registry.run_all()

    tags = [tag for tag, _ in log]
    assert tags == ["first"] * 4 + ["second"] * 4 + ["third"] * 4


def test_stats_and_total_failed(registry):
    """Stats are per collection and total_failed sums them."""
    registry.add_collection("Math").add_test(FatalFailure())
    physics = registry.add_collection("Physics")
    physics.add_test(AddsCorrectly())
    physics.add_test(Raises())

    stats = registry.stats()

    assert [(s.name, s.total, s.failed) for s in stats] == [
        ("Math", 1, 1),
        ("Physics", 2, 1),
    ]
    assert registry.total_failed() == 2


def test_close_forgets_collections(registry):
    """A closed registry is empty and names can be reused."""
    registry.add_collection("Math").add_test(AddsCorrectly())
    registry.close()
    assert len(registry) == 0
    assert "Math" not in registry
    registry.add_collection("Math")
    assert len(registry) == 1
