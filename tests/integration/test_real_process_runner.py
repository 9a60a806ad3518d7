"""Integration tests for RealProcessRunner against real child processes.

The external tool is stood in for by small Python programs run with the
current interpreter.
"""

import os
import signal
import stat
import subprocess
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from rtconfig_runner.core.invocation import Invocation
from rtconfig_runner.core.result import Completed, LaunchFailed, TimedOut
from rtconfig_runner.core.runner import real
from rtconfig_runner.core.runner.real import RealProcessRunner


def python_stub(code: str, *args: str) -> Invocation:
    """Build an invocation that runs code with the current interpreter."""
    return Invocation(executable=sys.executable, arguments=("-c", code, *args))


ECHO = "import sys; sys.stdout.buffer.write(sys.stdin.buffer.read())"


def test_echo_stub_returns_input_on_stdout() -> None:
    """Test that stdin reaches the tool byte-for-byte and stdout is captured."""
    source = b"@RtConfig set cisco_map_name = \"AS%d-EXPORT\"\r\n\x00\xff"

    result = RealProcessRunner().run(python_stub(ECHO), source)

    assert result.outcome == Completed(exit_code=0)
    assert result.stdout == source
    assert result.stderr == b""
    assert result.pid is not None


def test_stderr_stub_exit_code_is_captured() -> None:
    """Test that stderr and a non-zero status are reported as a completed run."""
    code = "import sys; sys.stderr.write('Error: unknown as-set AS-FOO\\n'); sys.exit(3)"

    result = RealProcessRunner().run(python_stub(code), b"@RtConfig export AS64500\n")

    assert result.outcome == Completed(exit_code=3)
    assert result.stderr == b"Error: unknown as-set AS-FOO\n"
    assert result.stdout == b""


def test_arguments_are_passed_without_shell_interpretation() -> None:
    """Test that each argument arrives intact, metacharacters included."""
    code = "import sys; sys.stdout.write('\\n'.join(sys.argv[1:]))"
    args = ("-s", "RADB; echo pwned", "-h", "$(whoami)", "-f", "/tmp/my file.db")

    result = RealProcessRunner().run(python_stub(code, *args), b"")

    assert result.outcome == Completed(exit_code=0)
    assert result.stdout.decode().split("\n") == list(args)


def test_missing_executable_is_launch_failure(tmp_path: Path) -> None:
    """Test that a nonexistent binary fails to launch without a process."""
    invocation = Invocation(executable=str(tmp_path / "no-such-RtConfig"), arguments=())

    result = RealProcessRunner().run(invocation, b"@RtConfig export AS64500\n")

    assert isinstance(result.outcome, LaunchFailed)
    assert str(tmp_path / "no-such-RtConfig") in result.outcome.reason
    assert result.pid is None
    assert result.stdout == b""
    assert result.stderr == b""


def test_non_executable_file_is_launch_failure(tmp_path: Path) -> None:
    """Test that a binary without execute permission fails to launch."""
    script = tmp_path / "RtConfig"
    script.write_text("#!/bin/sh\necho hi\n", encoding="utf-8")
    script.chmod(stat.S_IRUSR | stat.S_IWUSR)

    result = RealProcessRunner().run(Invocation(executable=str(script), arguments=()), b"")

    assert isinstance(result.outcome, LaunchFailed)
    assert result.pid is None


def test_large_output_on_both_streams_does_not_deadlock() -> None:
    """Test that stdout and stderr are drained concurrently."""
    code = (
        "import sys\n"
        "data = sys.stdin.buffer.read()\n"
        "sys.stderr.buffer.write(b'e' * 1_000_000)\n"
        "sys.stdout.buffer.write(data)\n"
    )
    source = b"x" * 1_000_000

    result = RealProcessRunner().run(python_stub(code), source, timeout_seconds=30)

    assert result.outcome == Completed(exit_code=0)
    assert result.stdout == source
    assert len(result.stderr) == 1_000_000


def test_output_before_reading_input_does_not_deadlock() -> None:
    """Test that input is written while output is drained."""
    code = (
        "import sys\n"
        "sys.stdout.buffer.write(b'o' * 1_000_000)\n"
        "sys.stdout.flush()\n"
        "data = sys.stdin.buffer.read()\n"
        "sys.stderr.write(str(len(data)))\n"
    )

    result = RealProcessRunner().run(python_stub(code), b"i" * 1_000_000, timeout_seconds=30)

    assert result.outcome == Completed(exit_code=0)
    assert len(result.stdout) == 1_000_000
    assert result.stderr == b"1000000"


def test_tool_that_ignores_input_still_completes() -> None:
    """Test that an unread stdin is not treated as a failure."""
    code = "print('ok')"

    result = RealProcessRunner().run(python_stub(code), b"i" * 1_000_000, timeout_seconds=30)

    assert result.outcome == Completed(exit_code=0)
    assert result.stdout.strip() == b"ok"


def test_never_terminating_stub_times_out_and_is_killed() -> None:
    """Test that the deadline kills the tool and returns promptly."""
    code = "import time; time.sleep(60)"

    start = time.monotonic()
    result = RealProcessRunner().run(python_stub(code), b"", timeout_seconds=0.1)
    elapsed = time.monotonic() - start

    assert result.outcome == TimedOut(timeout_seconds=0.1)
    assert elapsed < 10
    assert result.pid is not None
    with pytest.raises(ProcessLookupError):
        os.kill(result.pid, 0)


def test_timeout_also_kills_children_holding_the_pipes() -> None:
    """Test that grandchildren keeping stdout open do not block the runner."""
    code = (
        "import subprocess, sys, time\n"
        "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(60)'])\n"
        "time.sleep(60)\n"
    )

    start = time.monotonic()
    result = RealProcessRunner().run(python_stub(code), b"", timeout_seconds=0.5)
    elapsed = time.monotonic() - start

    assert isinstance(result.outcome, TimedOut)
    assert elapsed < 10


def test_output_written_before_timeout_is_kept() -> None:
    """Test that partial output is returned with the timeout outcome."""
    code = "import sys, time; sys.stdout.write('partial'); sys.stdout.flush(); time.sleep(60)"

    result = RealProcessRunner().run(python_stub(code), b"", timeout_seconds=2)

    assert isinstance(result.outcome, TimedOut)
    assert result.stdout == b"partial"


def test_concurrent_runs_do_not_share_buffers() -> None:
    """Test that each run captures only its own output."""
    runner = RealProcessRunner()
    inputs = [f"policy-{i}".encode() for i in range(8)]

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda data: runner.run(python_stub(ECHO), data, 30), inputs))

    assert [r.stdout for r in results] == inputs


@pytest.mark.parametrize("timeout_seconds", [float("inf"), 1e10])
def test_timeout_beyond_wait_limit_runs_without_deadline(timeout_seconds: float) -> None:
    """Test that a timeout too large to wait on still completes normally."""
    result = RealProcessRunner().run(python_stub(ECHO), b"ok", timeout_seconds=timeout_seconds)

    assert result.outcome == Completed(exit_code=0)
    assert result.stdout == b"ok"


def test_exception_while_waiting_kills_and_reaps_process(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that an error during the wait leaves no process behind."""
    pids: list[int] = []

    def failing_wait(
        self: RealProcessRunner, process: subprocess.Popen[bytes], *args: object
    ) -> int | None:
        pids.append(process.pid)
        raise RuntimeError("wait failed")

    monkeypatch.setattr(RealProcessRunner, "_wait", failing_wait)

    with pytest.raises(RuntimeError, match="wait failed"):
        RealProcessRunner().run(python_stub("import time; time.sleep(60)"), b"")

    assert len(pids) == 1
    with pytest.raises(ProcessLookupError):
        os.kill(pids[0], 0)


def test_timeout_returns_when_detached_child_keeps_pipes_open(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that a child outside the process group cannot hold the runner."""
    monkeypatch.setattr(real, "_KILL_GRACE_SECONDS", 0.2)
    code = (
        "import subprocess, sys, time\n"
        "subprocess.Popen(\n"
        "    [sys.executable, '-c',\n"
        "     'import os, time; print(os.getpid(), flush=True); time.sleep(60)'],\n"
        "    start_new_session=True,\n"
        ")\n"
        "time.sleep(60)\n"
    )

    start = time.monotonic()
    result = RealProcessRunner().run(python_stub(code), b"", timeout_seconds=3)
    elapsed = time.monotonic() - start

    try:
        assert isinstance(result.outcome, TimedOut)
        assert elapsed < 10
        assert result.stdout.strip().isdigit()
    finally:
        if result.stdout.strip().isdigit():
            os.kill(int(result.stdout.strip()), signal.SIGKILL)
