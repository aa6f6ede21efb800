"""``pidgeonpulse run`` — execute registered test collections.

Behavior
- Starts a fresh default registry (see `pidgeonpulse.bootstrap`), then imports
  every TARGET. A target is either a dotted module name or a path to a
  ``.py`` file; importing it is what registers its collections. Nothing is
  discovered implicitly.
- Runs all collections sequentially (tests within a collection run in
  parallel), writes the registry report to ``--report-path`` and prints a
  one-line summary to stderr.
- When tests failed, writes the flight recorder to its log file unless the
  group was given ``--no-flush-on-failure``.

Configuration
- ``--report-path`` and ``--workers`` fall back to
  `pidgeonpulse.config.get_report_path` and `pidgeonpulse.config.get_max_workers`.

Exit status
- 0 whether or not tests failed, unless ``--fail-on-error`` is given, in
  which case any failed test exits with status 1.

Failure modes
- A target that cannot be imported → ``ClickException`` naming the target.
- The report cannot be written → ``ClickException`` naming the path.
- An unusable configuration variable → ``UsageError`` (exit status 2).
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING

import click

from pidgeonpulse import config
from pidgeonpulse.bootstrap import init_registry, reset_registry
from pidgeonpulse.config import InvalidConfigError
from pidgeonpulse.logging import (
    SETTINGS_META_KEY,
    LoggingSettings,
    dump_flight_recorder,
)

from .helpers import error, success, warn

if TYPE_CHECKING:
    from pidgeonpulse.service_layer.registry import TestRegistry

logger = logging.getLogger(__name__)

FAILED_EXIT_CODE = 1


def _load_target(target: str) -> ModuleType:
    """Import a dotted module name or execute a ``.py`` file as a module."""
    path = Path(target)
    if path.suffix != ".py":
        return importlib.import_module(target)
    if not path.is_file():
        raise FileNotFoundError(f"No such file: {target}")
    module_name = f"pidgeonpulse_run_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load {target} as a module")
    module = importlib.util.module_from_spec(spec)
    # must be importable by name while it executes
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


@click.command()
@click.argument("targets", nargs=-1, required=True)
@click.option(
    "--report-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=(
        f"Where to write the test report [default: ${config.REPORT_PATH_ENV} "
        f"or {config.REPORT_FILENAME}]."
    ),
)
@click.option(
    "--workers",
    "-j",
    "max_workers",
    type=click.IntRange(min=1),
    default=None,
    help=(
        f"Worker threads per collection [default: ${config.MAX_WORKERS_ENV} "
        "or the thread pool's own default]."
    ),
)
@click.option(
    "--fail-on-error/--no-fail-on-error",
    default=False,
    show_default=True,
    help="Exit with status 1 when any test failed.",
)
@click.option(
    "--print-report/--no-print-report",
    default=False,
    show_default=True,
    help="Also write the report to stdout.",
)
@click.pass_context
def run(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    targets: tuple[str, ...],
    report_path: Path | None,
    max_workers: int | None,
    fail_on_error: bool,
    print_report: bool,
) -> None:
    """Import TARGETS, run their test collections and write the report."""
    if report_path is None:
        report_path = config.get_report_path()
    if max_workers is None:
        try:
            max_workers = config.get_max_workers()
        except InvalidConfigError as e:
            raise click.UsageError(str(e), ctx) from e
    logger.info(
        "Running %d target(s) with %s worker(s) per collection; report: %s",
        len(targets),
        max_workers or "default",
        report_path,
    )

    registry = init_registry(max_workers)
    try:  # pylint: disable=too-many-try-statements
        for target in targets:
            try:
                _load_target(target)
            except Exception as e:  # pylint: disable=broad-except
                logger.debug("Importing %s failed", target, exc_info=True)
                raise click.ClickException(f"Cannot import {target}: {e}") from e
            logger.debug("Imported test target %s", target)

        if not registry:
            warn("No test collections were registered.")

        registry.run_all()
        report = registry.generate_report()
        stats = registry.stats()
        _log_failures(registry)
    finally:
        reset_registry()

    try:
        report_path.write_text(report, encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Cannot write report to {report_path}: {e}") from e
    logger.info("Report written to %s", report_path)

    if print_report:
        click.echo(report, nl=False)

    total = sum(s.total for s in stats)
    failed = sum(s.failed for s in stats)
    if failed:
        _dump_on_failure(ctx)
        error(f"{failed} of {total} tests failed. Report: {report_path}")
    else:
        success(f"All {total} tests passed. Report: {report_path}")

    if failed and fail_on_error:
        ctx.exit(FAILED_EXIT_CODE)


def _log_failures(registry: TestRegistry) -> None:
    """Log one DEBUG line per recorded failure, for the flight recorder."""
    for collection in registry.collections:
        for unit in collection.units:
            for failure in unit.failures:
                logger.debug(
                    "%s / %s failed at %s: %s",
                    collection.name,
                    unit.name,
                    failure.location or "<unknown location>",
                    failure.error_message or "assertion failed",
                )


def _dump_on_failure(ctx: click.Context) -> None:
    settings: LoggingSettings | None = ctx.meta.get(SETTINGS_META_KEY)
    if settings is None or not settings.flush_on_failure:
        return
    if dump_flight_recorder():
        logger.debug("Flight recorder written to %s", settings.log_path)
