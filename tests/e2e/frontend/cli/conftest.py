"""Fixtures and test helpers for end-to-end CLI tests.

Provides a CliRunner, an isolated filesystem per test and a helper that
writes small test modules for ``pidgeonpulse run`` to import.
"""

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

# pylint: disable=redefined-outer-name


@pytest.fixture
def runner():
    """Return a Click CliRunner for invoking CLI commands in tests."""
    return CliRunner()


@pytest.fixture
def fs(runner, monkeypatch, tmp_path):
    """Provide an isolated filesystem context for tests using CliRunner.

    The flight recorder is pointed into the test's temporary directory so no
    test writes to the user's log directory.
    """
    monkeypatch.setenv("PIDGEONPULSE_LOG_PATH", str(tmp_path / "latest.log"))
    monkeypatch.delenv("PIDGEONPULSE_REPORT_PATH", raising=False)
    monkeypatch.delenv("PIDGEONPULSE_MAX_WORKERS", raising=False)
    with runner.isolated_filesystem(temp_dir=tmp_path):
        yield


@pytest.fixture
def write_module(fs) -> Callable[[str, str], Path]:
    """Return a helper writing ``source`` to ``<name>.py`` in the current directory."""

    def _write(name: str, source: str) -> Path:
        path = Path(f"{name}.py")
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write
