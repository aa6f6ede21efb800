"""Interfaces (application boundary) for PidgeonPulse.

Defines the contracts the service layer depends on: the worker pool that
executes jobs, and the capability set a test must provide to be scheduled
and reported. Business rules stay out of this package.

Dependency rule: this package may import `pidgeonpulse.domain` value types
only. It may be imported by `pidgeonpulse.service_layer`,
`pidgeonpulse.adapters` and `pidgeonpulse.bootstrap`.
"""

from .testable import Testable
from .worker_pool import (
    CompletionHandle,
    Job,
    PoolClosedError,
    WorkerPool,
    WorkerPoolError,
)

__all__ = [
    "CompletionHandle",
    "Job",
    "PoolClosedError",
    "Testable",
    "WorkerPool",
    "WorkerPoolError",
]
