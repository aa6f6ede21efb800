"""Thread-backed worker pool.

`ThreadWorkerPool` implements `pidgeonpulse.interfaces.WorkerPool` on top of
`concurrent.futures.ThreadPoolExecutor`, adding the pause/resume gate the
executor lacks.

Key behaviors
-------------
- **Paused submission**: while paused, submitted jobs are held in FIFO order
  and only handed to the executor on `resume()`. Nothing starts running in
  the meantime.
- **Own completion handles**: `submit()` returns a `Future` created by the
  pool, so a held job already has a handle before the executor sees it.
- **Errors**: an exception raised by a job is logged and set on its future;
  it never kills a worker thread.
- **Thread-safety**: submit/pause/resume/shutdown are serialized by an
  `RLock`; they are safe to call from any thread.

Typical usage
-------------
    with ThreadWorkerPool(max_workers=4, paused=True) as pool:
        handles = [pool.submit(job) for job in jobs]
        pool.resume()
        concurrent.futures.wait(handles)
"""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor

from pidgeonpulse.config import WORKER_THREAD_PREFIX
from pidgeonpulse.interfaces.worker_pool import (
    CompletionHandle,
    Job,
    PoolClosedError,
    WorkerPool,
)

__all__ = ["ThreadWorkerPool"]

logger = logging.getLogger(__name__)


class ThreadWorkerPool(WorkerPool):
    """Worker pool running jobs on a bounded set of threads.

    Args:
        max_workers: Number of worker threads. ``None`` uses the executor's
            default (``min(32, os.cpu_count() + 4)``).
        paused: Start in the paused state, holding submitted jobs.
        thread_name_prefix: Prefix for worker thread names.
    """

    def __init__(
        self,
        max_workers: int | None = None,
        *,
        paused: bool = False,
        thread_name_prefix: str = WORKER_THREAD_PREFIX,
    ) -> None:
        if max_workers is None:
            max_workers = min(32, (os.cpu_count() or 1) + 4)
        self._max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=thread_name_prefix
        )
        self._lock = threading.RLock()
        self._paused = paused
        self._closed = False
        self._held: deque[tuple[Job, CompletionHandle]] = deque()
        self._outstanding: list[CompletionHandle] = []

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(max_workers={self.max_workers}, "
            f"paused={self._paused}, closed={self._closed})"
        )

    @property
    def max_workers(self) -> int:
        """Upper bound on concurrently running jobs."""
        return self._max_workers

    # ---- WorkerPool ----

    def submit(self, job: Job) -> CompletionHandle:
        future: CompletionHandle = Future()
        with self._lock:
            if self._closed:
                raise PoolClosedError
            self._outstanding.append(future)
            if self._paused:
                self._held.append((job, future))
                logger.debug("Holding job %r (%d held)", job, len(self._held))
            else:
                self._dispatch(job, future)
        return future

    def pause(self) -> None:
        with self._lock:
            self._paused = True

    def resume(self) -> None:
        with self._lock:
            self._paused = False
            if self._held:
                logger.debug("Releasing %d held job(s)", len(self._held))
            while self._held:
                self._dispatch(*self._held.popleft())

    @property
    def is_paused(self) -> bool:
        with self._lock:
            return self._paused

    def has_pending_work(self) -> bool:
        with self._lock:
            self._outstanding = [f for f in self._outstanding if not f.done()]
            return bool(self._outstanding)

    def shutdown(self, *, cancel_pending: bool = False) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if cancel_pending:
                for _, future in self._held:
                    future.cancel()
                self._held.clear()
            else:
                self.resume()
        self._executor.shutdown(wait=True, cancel_futures=cancel_pending)
        # jobs dropped from the executor queue never started; settle their handles
        with self._lock:
            for future in self._outstanding:
                future.cancel()
            self._outstanding.clear()
        logger.debug("Worker pool shut down (cancel_pending=%s)", cancel_pending)

    # ---- internals ----

    def _dispatch(self, job: Job, future: CompletionHandle) -> None:
        self._executor.submit(_execute, job, future)


def _execute(job: Job, future: CompletionHandle) -> None:
    """Run ``job`` on a worker thread and settle ``future`` with its outcome."""
    if not future.set_running_or_notify_cancel():
        return
    try:
        result = job()
    except BaseException as e:  # pylint: disable=broad-exception-caught
        # the handle carries the error to whoever waits on it
        logger.exception("Job %r raised", job)
        future.set_exception(e)
    else:
        future.set_result(result)
