"""Worker pool interface definitions.

A worker pool accepts jobs, runs them on a bounded set of workers and hands
back a completion handle per job. Pools can be paused so that jobs queue
without starting, which lets callers register any number of jobs before
execution begins.
"""

from __future__ import annotations

import abc
from collections.abc import Callable
from concurrent.futures import Future
from types import TracebackType
from typing import Any, TypeAlias

from pidgeonpulse.domain.errors import PidgeonPulseError

Job: TypeAlias = Callable[[], Any]
CompletionHandle: TypeAlias = Future[Any]


class WorkerPoolError(PidgeonPulseError):
    """Base class for worker pool errors."""


class PoolClosedError(WorkerPoolError):
    """Raised when a job is submitted to a pool that has been shut down."""

    def __init__(self) -> None:
        super().__init__("Cannot submit jobs to a worker pool that has been shut down.")


class WorkerPool(abc.ABC):
    """Abstract base class for job execution pools."""

    # --- Core Operations ---

    @abc.abstractmethod
    def submit(self, job: Job) -> CompletionHandle:
        """Queue a job for execution.

        If the pool is paused the job is held until `resume` is called.
        Ordering across workers is best-effort FIFO; only completion is
        guaranteed to be observable through the returned handle.

        Args:
            job: A zero-argument callable.

        Returns:
            CompletionHandle: A future that completes once ``job`` has returned
            (or raised). The job's exception, if any, is set on the future.

        Raises:
            PoolClosedError: If the pool has been shut down.
        """

    @abc.abstractmethod
    def pause(self) -> None:
        """Stop handing queued jobs to workers. Running jobs are unaffected."""

    @abc.abstractmethod
    def resume(self) -> None:
        """Hand all held jobs to workers and keep doing so for new ones."""

    @property
    @abc.abstractmethod
    def is_paused(self) -> bool:
        """Whether the pool is currently holding jobs back."""

    @abc.abstractmethod
    def has_pending_work(self) -> bool:
        """Whether any submitted job has not completed yet."""

    @abc.abstractmethod
    def shutdown(self, *, cancel_pending: bool = False) -> None:
        """Release the pool's workers.

        Args:
            cancel_pending: When True, jobs that have not started are cancelled.
                Otherwise held jobs are released and the call blocks until
                every submitted job has completed.
        """

    # --- Context manager ---

    def __enter__(self) -> WorkerPool:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown(cancel_pending=exc_type is not None)
