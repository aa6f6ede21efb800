"""Configuration utilities for PidgeonPulse.

This module centralizes constants and environment lookups related to
application configuration.
"""

import os
from pathlib import Path

from pidgeonpulse.domain.errors import PidgeonPulseError

MAX_WORKERS_ENV = "PIDGEONPULSE_MAX_WORKERS"  # pragma: no mutate
REPORT_PATH_ENV = "PIDGEONPULSE_REPORT_PATH"  # pragma: no mutate

REPORT_FILENAME = "test.report"

# worker threads are named f"{WORKER_THREAD_PREFIX}_{n}"
WORKER_THREAD_PREFIX = "pidgeonpulse-worker"  # pragma: no mutate


class InvalidConfigError(PidgeonPulseError):
    """Raised when an environment variable holds an unusable value."""

    def __init__(self, variable: str, value: str, reason: str) -> None:
        super().__init__(f"Invalid value {value!r} for {variable}: {reason}")
        self.variable = variable
        self.value = value


def get_max_workers() -> int | None:
    """Get the worker pool size from the environment.

    Returns:
        The value of `PIDGEONPULSE_MAX_WORKERS`, or ``None`` when it is unset
        or blank (meaning: use the pool's default size).

    Raises:
        InvalidConfigError: If the value is not a positive integer.
    """
    if not (raw := os.environ.get(MAX_WORKERS_ENV, "").strip()):
        return None
    try:
        value = int(raw)
    except ValueError as e:
        raise InvalidConfigError(MAX_WORKERS_ENV, raw, "not an integer") from e
    if value < 1:
        raise InvalidConfigError(MAX_WORKERS_ENV, raw, "must be at least 1")
    return value


def get_report_path() -> Path:
    """Get the report destination from the environment.

    Returns:
        The value of `PIDGEONPULSE_REPORT_PATH`, or `REPORT_FILENAME` in the
        current directory when it is unset.
    """
    return Path(os.environ.get(REPORT_PATH_ENV) or REPORT_FILENAME)
