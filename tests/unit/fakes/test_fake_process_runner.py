"""Tests for FakeProcessRunner test infrastructure."""

import pytest

from rtconfig_runner.core.invocation import Invocation
from rtconfig_runner.core.result import Completed, LaunchFailed, TimedOut
from rtconfig_runner.core.runner.fake import FakeProcessRunner

INVOCATION = Invocation(executable="/usr/local/bin/RtConfig", arguments=())


def test_fake_runner_defaults_to_clean_exit() -> None:
    """Test that an unconfigured fake reports exit 0 with no output."""
    runner = FakeProcessRunner()

    result = runner.run(INVOCATION, b"input")

    assert result.outcome == Completed(exit_code=0)
    assert result.stdout == b""
    assert result.stderr == b""
    assert result.invocation == INVOCATION


def test_fake_runner_records_runs() -> None:
    """Test that every run is tracked for assertions."""
    runner = FakeProcessRunner()

    runner.run(INVOCATION, b"first")
    runner.run(INVOCATION, b"second", timeout_seconds=3.0)

    assert runner.runs == [(INVOCATION, b"first", None), (INVOCATION, b"second", 3.0)]


def test_fake_runner_launch_failure_has_no_process() -> None:
    """Test that simulated launch failures have no pid or output."""
    runner = FakeProcessRunner(stdout=b"ignored", launch_failure="Permission denied")

    result = runner.run(INVOCATION, b"")

    assert result.outcome == LaunchFailed(reason="/usr/local/bin/RtConfig: Permission denied")
    assert result.pid is None
    assert result.stdout == b""


def test_fake_runner_timeout_reports_deadline() -> None:
    """Test that simulated timeouts carry the requested deadline."""
    runner = FakeProcessRunner(time_out=True)

    result = runner.run(INVOCATION, b"", timeout_seconds=0.25)

    assert result.outcome == TimedOut(timeout_seconds=0.25)


def test_fake_runner_rejects_conflicting_outcomes() -> None:
    """Test that launch failure and timeout cannot both be simulated."""
    with pytest.raises(ValueError, match="Cannot specify both"):
        FakeProcessRunner(launch_failure="x", time_out=True)
