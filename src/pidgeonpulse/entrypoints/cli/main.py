"""PidgeonPulse CLI entry point.

Defines the top-level ``pidgeonpulse`` group (via Click-Extra). The group
only deals with logging: it turns its options into a
`pidgeonpulse.logging.LoggingSettings`, installs the console handler and the
flight recorder, and leaves the settings in ``ctx.meta`` for subcommands.

Commands
- ``pidgeonpulse run`` — import test modules, run every registered collection
  and write the report.

Examples
    $ pidgeonpulse --version
    $ pidgeonpulse -v run tests/math_tests.py
    $ pidgeonpulse --log-path run.log --force-flush run -j 4 math_tests.py
"""

import logging
from pathlib import Path

import click
import click_extra as clickx
from platformdirs import user_log_dir

from pidgeonpulse import __version__
from pidgeonpulse.logging import (
    SETTINGS_META_KEY,
    LoggingSettings,
    configure_logging,
    log_startup,
    verbosity_level,
)

from .helpers.log_level_parser import parse_log_level
from .run import run as run_command

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = (
    Path(user_log_dir("pidgeonpulse", appauthor=False, ensure_exists=True))
    / "latest.log"
)

HELP = """PidgeonPulse command-line interface.

    PidgeonPulse is a small unit-test execution engine. Test modules register
    named collections of test units; the runner executes each collection on a
    pool of worker threads and writes an aggregated plain-text report.
    """


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    default=0,
    help="Show more on the console: -v adds run progress, -vv every test event.",
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    default=0,
    help="Show less on the console: -q keeps errors only, -qq critical only.",
)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Log everything with timestamps, worker thread names and source paths.",
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_LOG_PATH,
    envvar="PIDGEONPULSE_LOG_PATH",
    show_default=True,
    show_envvar=True,
    help="File the flight recorder writes to.",
)
@click.option(
    "--flight-recorder-capacity",
    type=click.IntRange(min=1),
    default=2000,
    hidden=True,
    envvar="PIDGEONPULSE_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Number of log records the flight recorder keeps.",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    default=True,
    show_envvar=True,
    help=(
        "Keep recent DEBUG records in memory (whatever -v/-q say) and write "
        "them to --log-path on a WARNING, when tests fail, or on exit with "
        "--force-flush."
    ),
)
@click.option(
    "--flush-on-failure/--no-flush-on-failure",
    default=True,
    show_default=True,
    show_envvar=True,
    help="Write the flight recorder to --log-path when a run has failed tests.",
)
@click.option(
    "--force-flush/--no-force-flush",
    default=False,
    show_default=True,
    show_envvar=True,
    help="Always write the flight recorder to --log-path on exit.",
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    default=("asyncio=WARNING", "concurrent=WARNING"),
    show_default=True,
    show_envvar=True,
    help=(
        "Minimum level for a logger, as NAME=LEVEL, for both the console and "
        "the flight recorder. Use it to quiet libraries the tests exercise "
        "(e.g. -L urllib3=INFO). Repeatable."
    ),
)
@clickx.pass_context
def pidgeonpulse(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    flush_on_failure: bool,
    force_flush: bool,
    logger_levels: dict[str, int],
) -> None:
    """PidgeonPulse command-line interface."""
    settings = LoggingSettings(
        level=verbosity_level(verbose_count, quiet_count),
        debug=debug,
        color=ctx.color is not False,
        log_path=log_path if flight_recorder else None,
        flight_capacity=flight_recorder_capacity,
        force_flush=force_flush,
        flush_on_failure=flush_on_failure,
        logger_levels=logger_levels,
    )
    configure_logging(settings)
    log_startup(logger, settings, app_version=__version__)

    ctx.meta[SETTINGS_META_KEY] = settings
    ctx.call_on_close(logging.shutdown)


pidgeonpulse.add_command(run_command)
