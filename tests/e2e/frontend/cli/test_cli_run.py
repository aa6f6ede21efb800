"""End-to-end tests for ``pidgeonpulse run``.

Each test writes small test modules into an isolated directory, runs them
through the CLI and checks the exit status, the summary line and the report
written to disk.
"""

import re
from pathlib import Path

import pytest

from pidgeonpulse.bootstrap import get_registry
from pidgeonpulse.entrypoints.cli.main import pidgeonpulse
from tests.helpers.modules import MATH_FAILING_LINE, MATH_MODULE, PASSING_MODULE

# pylint: disable=unused-argument,magic-value-comparison

MATH_REPORT = (
    "PidgeonPulse Unit Test:\n"
    "Test Collection: Math\n"
    "\tTest failed: DivByZero\n"
    f"\t File: math_tests.py:{MATH_FAILING_LINE}\n"
    "\n"
    "Stats: failed 1 of 2 tests\n"
)


def test_run_writes_report(runner, write_module):
    """Failures are reported in the file; the exit status stays 0 by default."""
    write_module("math_tests", MATH_MODULE)
    result = runner.invoke(pidgeonpulse, ["run", "math_tests.py"])
    assert result.exit_code == 0, result.output
    assert Path("test.report").read_text(encoding="utf-8") == MATH_REPORT
    assert "1 of 2 tests failed. Report: test.report" in result.output


def test_fail_on_error_sets_exit_status(runner, write_module):
    """--fail-on-error turns failed tests into exit status 1."""
    write_module("math_tests", MATH_MODULE)
    result = runner.invoke(pidgeonpulse, ["run", "--fail-on-error", "math_tests.py"])
    assert result.exit_code == 1
    assert Path("test.report").exists()


def test_all_passing(runner, write_module):
    """A passing run says so and exits 0 even with --fail-on-error."""
    write_module("checks", PASSING_MODULE.format(name="Checks"))
    result = runner.invoke(pidgeonpulse, ["run", "--fail-on-error", "checks.py"])
    assert result.exit_code == 0, result.output
    assert "All 1 tests passed." in result.output
    assert Path("test.report").read_text(encoding="utf-8") == (
        "PidgeonPulse Unit Test:\nTest Collection: Checks\nStats: failed 0 of 1 tests\n"
    )


@pytest.mark.parametrize("use_env", [False, True])
def test_report_path(runner, write_module, use_env):
    """The report destination comes from --report-path or the environment."""
    write_module("checks", PASSING_MODULE.format(name="Checks"))
    Path("out").mkdir()
    if use_env:
        args, env = ["run", "checks.py"], {"PIDGEONPULSE_REPORT_PATH": "out/r.txt"}
    else:
        args, env = ["run", "--report-path", "out/r.txt", "checks.py"], {}
    result = runner.invoke(pidgeonpulse, args, env=env)
    assert result.exit_code == 0, result.output
    assert Path("out/r.txt").exists()
    assert not Path("test.report").exists()


def test_unwritable_report_path(runner, write_module):
    """A report that cannot be written is a usage-level error naming the path."""
    write_module("checks", PASSING_MODULE.format(name="Checks"))
    result = runner.invoke(
        pidgeonpulse, ["run", "--report-path", "missing/dir/r.txt", "checks.py"]
    )
    assert result.exit_code == 1
    assert "Cannot write report to missing/dir/r.txt" in result.output


def test_print_report(runner, write_module):
    """--print-report echoes the report as well as writing it."""
    write_module("math_tests", MATH_MODULE)
    result = runner.invoke(pidgeonpulse, ["run", "--print-report", "math_tests.py"])
    assert result.exit_code == 0, result.output
    assert MATH_REPORT in result.output


def test_collections_from_several_targets(runner, write_module):
    """Targets are imported in order and their collections reported in order."""
    write_module("first", PASSING_MODULE.format(name="First"))
    write_module("second", PASSING_MODULE.format(name="Second"))
    result = runner.invoke(pidgeonpulse, ["run", "first.py", "second.py"])
    assert result.exit_code == 0, result.output
    report = Path("test.report").read_text(encoding="utf-8")
    assert re.search(r"Collection: First\n.*Collection: Second\n", report, re.DOTALL)
    assert "All 2 tests passed." in result.output


def test_dotted_module_target(runner, write_module, monkeypatch):
    """A target without a .py suffix is imported as a module name."""
    write_module("pp_e2e_dotted_checks", PASSING_MODULE.format(name="Dotted"))
    monkeypatch.syspath_prepend(str(Path.cwd()))
    result = runner.invoke(pidgeonpulse, ["run", "pp_e2e_dotted_checks"])
    assert result.exit_code == 0, result.output
    assert "Test Collection: Dotted" in Path("test.report").read_text(encoding="utf-8")


def test_missing_target(runner, fs):
    """A missing file is reported with the target name."""
    result = runner.invoke(pidgeonpulse, ["run", "nope.py"])
    assert result.exit_code == 1
    assert "Cannot import nope.py" in result.output
    assert not Path("test.report").exists()


def test_broken_target(runner, write_module):
    """Errors raised while importing a target are reported, not tracebacked."""
    write_module("broken", "raise RuntimeError('cannot set up')\n")
    result = runner.invoke(pidgeonpulse, ["run", "broken.py"])
    assert result.exit_code == 1
    assert "Cannot import broken.py: cannot set up" in result.output


def test_no_collections(runner, write_module):
    """A target that registers nothing yields a warning and an empty report."""
    write_module("empty", "VALUE = 1\n")
    result = runner.invoke(pidgeonpulse, ["run", "empty.py"])
    assert result.exit_code == 0, result.output
    assert "No test collections were registered." in result.output
    report = Path("test.report").read_text(encoding="utf-8")
    assert report == "PidgeonPulse Unit Test:\n"


def test_targets_are_required(runner, fs):
    """Running without targets is a usage error."""
    result = runner.invoke(pidgeonpulse, ["run"])
    assert result.exit_code == 2


@pytest.mark.parametrize("value", ["0", "many"])
def test_invalid_worker_count(runner, write_module, value):
    """The worker count must be a positive integer."""
    write_module("checks", PASSING_MODULE.format(name="Checks"))
    result = runner.invoke(pidgeonpulse, ["run", "--workers", value, "checks.py"])
    assert result.exit_code == 2


def test_registry_is_released_after_run(runner, write_module):
    """The default registry does not keep the run's collections."""
    write_module("checks", PASSING_MODULE.format(name="Checks"))
    result = runner.invoke(pidgeonpulse, ["run", "-j", "1", "checks.py"])
    assert result.exit_code == 0, result.output
    assert "Checks" not in get_registry()


@pytest.mark.parametrize("value", ["0", "many"])
def test_invalid_worker_count_from_env(runner, write_module, value):
    """A bad PIDGEONPULSE_MAX_WORKERS is a usage error naming the variable."""
    write_module("checks", PASSING_MODULE.format(name="Checks"))
    result = runner.invoke(
        pidgeonpulse, ["run", "checks.py"], env={"PIDGEONPULSE_MAX_WORKERS": value}
    )
    assert result.exit_code == 2
    assert "PIDGEONPULSE_MAX_WORKERS" in result.output
    assert not Path("test.report").exists()


def test_workers_option_overrides_env(runner, write_module):
    """--workers wins over the environment, even an invalid one."""
    write_module("checks", PASSING_MODULE.format(name="Checks"))
    result = runner.invoke(
        pidgeonpulse,
        ["-v", "run", "-j", "3", "checks.py"],
        env={"PIDGEONPULSE_MAX_WORKERS": "many"},
    )
    assert result.exit_code == 0, result.output
    assert re.search(r"Running 1 target\(s\) with 3 worker\(s\)", result.output)


def test_verbose_logs_run_settings(runner, write_module):
    """-v logs the worker count and report path the run resolved."""
    write_module("checks", PASSING_MODULE.format(name="Checks"))
    result = runner.invoke(
        pidgeonpulse,
        ["-v", "run", "checks.py"],
        env={"PIDGEONPULSE_MAX_WORKERS": "2", "PIDGEONPULSE_REPORT_PATH": "r.txt"},
    )
    assert result.exit_code == 0, result.output
    assert re.search(
        r"Running 1 target\(s\) with 2 worker\(s\) per collection; report: r\.txt",
        result.output,
    )
    assert Path("r.txt").exists()
