"""Logging setup for the PidgeonPulse command line.

Two handlers hang off the root logger:

- a Rich console handler whose threshold follows ``-v``/``-q``. Test bodies
  run on pool worker threads, so console lines are tagged with the worker
  that emitted them (``[worker 3]``) and with the top-level package of
  loggers outside this project (``[urllib3]``, or the code under test);
- a "flight recorder": a `MemoryHandler` keeping the last records at DEBUG
  granularity and writing them to a file when a WARNING is logged, when a
  run ends with failed tests (see `dump_flight_recorder`) or, with
  ``force_flush``, on exit.

`configure_logging` installs both from a `LoggingSettings`.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

from rich.console import Console
from rich.logging import RichHandler

from pidgeonpulse.config import WORKER_THREAD_PREFIX

if TYPE_CHECKING:
    from logging import Logger

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "pidgeonpulse"

# Keep consistent with click-extra's --color / --no-color option
ColorSystem: TypeAlias = Literal["auto", "standard", "256", "truecolor", "windows"]

CONSOLE_FORMAT = "%(origin)s%(message)s"
DEBUG_CONSOLE_FORMAT = "%(asctime)s %(threadName)s %(name)s: %(message)s"
RECORDER_FORMAT = (
    "[%(asctime)s] [%(threadName)s] %(levelname)s %(name)s:%(lineno)d: %(message)s"
)

# key under which the CLI group leaves its LoggingSettings in ``ctx.meta``
SETTINGS_META_KEY = "pidgeonpulse.logging_settings"


def verbosity_level(verbose: int, quiet: int, base: int = logging.WARNING) -> int:
    """Console threshold after ``verbose`` ``-v`` and ``quiet`` ``-q`` flags.

    Each flag moves one standard level; the result stays within DEBUG..CRITICAL.
    """
    level = base - 10 * verbose + 10 * quiet
    return max(logging.DEBUG, min(logging.CRITICAL, level))


@dataclass(frozen=True)
class LoggingSettings:
    """Everything the CLI group decides about logging.

    Attributes:
        level: Console threshold (ignored in debug mode, which shows DEBUG).
        debug: Show timestamps, thread names and source paths on the console.
        color: Allow colored console output.
        log_path: Flight recorder destination; ``None`` disables the recorder.
        flight_capacity: Records kept in the flight recorder buffer.
        force_flush: Write the buffer on exit even if nothing went wrong.
        flush_on_failure: Write the buffer when a run has failed tests.
        logger_levels: Minimum level per logger name.
    """

    level: int = logging.WARNING
    debug: bool = False
    color: bool = True
    log_path: Path | None = None
    flight_capacity: int = 2000
    force_flush: bool = False
    flush_on_failure: bool = True
    logger_levels: Mapping[str, int] = field(default_factory=dict)

    @property
    def flight_recorder(self) -> bool:
        """Whether a flight recorder is configured."""
        return self.log_path is not None


class OriginFilter(logging.Filter):
    """Tag console records with where they came from.

    Sets ``record.origin`` to ``"[worker N] "`` for records emitted on a pool
    worker thread and prepends ``"[pkg] "`` for loggers outside this project.
    Never drops a record.
    """

    def __init__(self, worker_prefix: str = WORKER_THREAD_PREFIX) -> None:
        super().__init__()
        self._worker_prefix = f"{worker_prefix}_"

    def filter(self, record: logging.LogRecord) -> bool:
        tags = []
        if not record.name.startswith(PROJECT_PREFIX):
            tags.append(f"[{record.name.split('.')[0]}]")
        thread_name = record.threadName or ""
        if thread_name.startswith(self._worker_prefix):
            tags.append(f"[worker {thread_name.removeprefix(self._worker_prefix)}]")
        record.origin = "".join(f"{tag} " for tag in tags)
        return True


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Build the Rich handler writing to stderr.

    In debug mode the threshold drops to DEBUG and lines carry a timestamp,
    the thread name and the source path; otherwise they carry the
    `OriginFilter` tags.
    """
    color_system: ColorSystem | None = "auto" if color else None
    handler = RichHandler(
        level=logging.DEBUG if debug_mode else level,
        console=Console(color_system=color_system, stderr=True),
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    if debug_mode:
        handler.setFormatter(logging.Formatter(fmt=DEBUG_CONSOLE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
        handler.addFilter(OriginFilter())
    return handler


def config_flight_recorder(
    path: Path,
    capacity: int = 2000,
    flush_level: int = logging.WARNING,
    flush_on_close: bool = False,
) -> MemoryHandler:
    """Build the flight recorder: a memory buffer in front of a lazy file.

    The file at ``path`` is only created (and truncated) by the first flush.

    Args:
        path: Destination file for flushed records.
        capacity: Number of records to buffer.
        flush_level: Records at or above this level flush the buffer.
        flush_on_close: Also flush when the handler is closed.
    """
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8", delay=True)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(RECORDER_FORMAT))
    return MemoryHandler(
        capacity=capacity,
        flushLevel=flush_level,
        target=file_handler,
        flushOnClose=flush_on_close,
    )


def configure_logging(settings: LoggingSettings) -> list[logging.Handler]:
    """Replace the root logger's handlers according to ``settings``.

    The root logger passes everything; each handler applies its own
    threshold. Per-logger minimum levels from ``settings.logger_levels``
    apply to both handlers.

    Returns:
        list[logging.Handler]: The installed handlers, console first.
    """
    handlers: list[logging.Handler] = [
        config_console_handler(
            level=settings.level, debug_mode=settings.debug, color=settings.color
        )
    ]
    if settings.log_path is not None:
        handlers.append(
            config_flight_recorder(
                path=settings.log_path,
                capacity=settings.flight_capacity,
                flush_on_close=settings.force_flush,
            )
        )
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    for name, level in settings.logger_levels.items():
        logging.getLogger(name).setLevel(level)
    return handlers


def dump_flight_recorder() -> bool:
    """Write what the flight recorder holds to its file now.

    Returns:
        bool: False if no flight recorder is installed on the root logger.
    """
    recorders = [
        handler
        for handler in logging.getLogger().handlers
        if isinstance(handler, MemoryHandler)
    ]
    for recorder in recorders:
        recorder.flush()
    return bool(recorders)


def log_startup(logger: Logger, settings: LoggingSettings, *, app_version: str) -> None:
    """Log a one-line INFO summary, then DEBUG diagnostics about the process."""
    logger.info(
        "PIDGEONPULSE %s - console=%s, flight-recorder=%s",
        app_version,
        "DEBUG" if settings.debug else logging.getLevelName(settings.level),
        settings.log_path if settings.flight_recorder else "OFF",
    )
    logger.debug(
        "Python %s on %s %s, pid %s, %s CPU(s), cwd %s",
        sys.version.split()[0],
        platform.system(),
        platform.release(),
        os.getpid(),
        os.cpu_count(),
        Path.cwd(),
    )
    if settings.flight_recorder:
        logger.debug(
            "Flight recorder: capacity=%s, flush on exit=%s, flush on failed tests=%s",
            settings.flight_capacity,
            settings.force_flush,
            settings.flush_on_failure,
        )
    logger.debug(
        "Logger levels: %s",
        {name: logging.getLevelName(lvl) for name, lvl in settings.logger_levels.items()}
        or "<none>",
    )
