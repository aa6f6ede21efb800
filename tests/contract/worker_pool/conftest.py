"""Fixtures for worker_pool contract tests."""

from collections.abc import Callable, Iterator

import pytest

from pidgeonpulse.adapters.worker_pool import ThreadWorkerPool
from pidgeonpulse.interfaces.worker_pool import WorkerPool

PoolFactory = Callable[..., WorkerPool]


@pytest.fixture(params=["thread"])
def pool_factory(request: pytest.FixtureRequest) -> Iterator[PoolFactory]:
    """Return a factory building WorkerPool instances for the requested backend.

    Supported params:
      - `"thread"` → ThreadWorkerPool

    The factory accepts ``max_workers`` and ``paused``. Every pool it builds
    is shut down (cancelling leftovers) when the test ends.
    """
    pools: list[WorkerPool] = []

    def _make(max_workers: int = 4, *, paused: bool = False) -> WorkerPool:
        match request.param:
            case "thread":
                pool = ThreadWorkerPool(max_workers, paused=paused)
            case _:
                raise ValueError(f"unknown worker pool type: {request.param}")
        pools.append(pool)
        return pool

    yield _make
    for pool in pools:
        pool.shutdown(cancel_pending=True)
