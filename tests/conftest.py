"""Global pytest fixtures for PidgeonPulse."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from pidgeonpulse.bootstrap import build_registry, reset_registry
from pidgeonpulse.service_layer.registry import TestRegistry

# pylint: disable=redefined-outer-name


@pytest.fixture(autouse=True)
def _isolated_default_registry() -> Iterator[None]:
    """Make sure no test leaks collections into the process-wide registry."""
    reset_registry()
    yield
    reset_registry()


@pytest.fixture
def registry() -> Iterator[TestRegistry]:
    """A fresh registry with small thread pools, closed after the test."""
    with build_registry(max_workers=4) as reg:
        yield reg
