"""Default marks and shared fixtures for tests under `tests/unit/`."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from pidgeonpulse.adapters.worker_pool import ThreadWorkerPool
from pidgeonpulse.service_layer.collection import TestCollection

# pylint: disable=unused-argument

UNIT_ROOT = Path(__file__).parent.resolve()
MARKER_NAME = "unit"


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Add default `unit` marks to items in `tests/unit/`."""
    for item in items:
        path = item.path.resolve()
        if UNIT_ROOT in path.parents:
            if not any(marker.name == MARKER_NAME for marker in item.iter_markers()):
                item.add_marker(pytest.mark.unit)


@pytest.fixture
def collection() -> Iterator[TestCollection]:
    """A standalone collection named ``Math`` backed by four worker threads."""
    with TestCollection("Math", ThreadWorkerPool(max_workers=4)) as coll:
        yield coll
