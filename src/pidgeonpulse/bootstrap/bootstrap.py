"""Build test registries and manage the process-wide default one."""

from __future__ import annotations

import logging
import threading
from functools import partial

from pidgeonpulse import config
from pidgeonpulse.adapters.worker_pool import ThreadWorkerPool
from pidgeonpulse.service_layer.registry import TestRegistry

logger = logging.getLogger(__name__)

_default_registry: TestRegistry | None = None
_default_lock = threading.Lock()


def build_registry(max_workers: int | None = None) -> TestRegistry:
    """Build a registry whose collections each get a paused thread pool.

    Args:
        max_workers: Worker threads per collection; ``None`` for the pool default.
    """
    return TestRegistry(
        pool_factory=partial(ThreadWorkerPool, max_workers, paused=True)
    )


def get_registry() -> TestRegistry:
    """Return the process-wide default registry, creating it on first use.

    The pool size comes from `config.get_max_workers` when the registry is
    first created.

    Raises:
        InvalidConfigError: If `PIDGEONPULSE_MAX_WORKERS` is malformed.
    """
    global _default_registry  # pylint: disable=global-statement
    with _default_lock:
        if _default_registry is None:
            max_workers = config.get_max_workers()
            _default_registry = build_registry(max_workers)
            logger.debug("Created default test registry (max_workers=%s)", max_workers)
        return _default_registry


def reset_registry() -> None:
    """Close the default registry and all its collections.

    The next `get_registry` call starts from an empty registry.
    """
    global _default_registry  # pylint: disable=global-statement
    with _default_lock:
        registry, _default_registry = _default_registry, None
    if registry is not None:
        registry.close()


def init_registry(max_workers: int | None = None) -> TestRegistry:
    """Start a fresh default registry, closing any previous one.

    Use this instead of relying on first-use creation when the pool size must
    be chosen explicitly (the command line does this before importing test
    modules).

    Args:
        max_workers: Worker threads per collection; ``None`` for the pool default.

    Returns:
        TestRegistry: The new default registry.
    """
    global _default_registry  # pylint: disable=global-statement
    registry = build_registry(max_workers)
    with _default_lock:
        previous, _default_registry = _default_registry, registry
    if previous is not None:
        previous.close()
    logger.debug("Initialized default test registry (max_workers=%s)", max_workers)
    return registry
