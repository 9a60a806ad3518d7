"""Fake process runner for testing.

FakeProcessRunner is an in-memory implementation that accepts its simulated
outcome in the constructor and records every run for assertions.
"""

from rtconfig_runner.core.invocation import Invocation
from rtconfig_runner.core.result import Completed, ExecutionResult, LaunchFailed, TimedOut
from rtconfig_runner.core.runner.abc import ProcessRunner


class FakeProcessRunner(ProcessRunner):
    """In-memory fake implementation of ProcessRunner.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults (exit 0, empty output).

    Examples:
        >>> runner = FakeProcessRunner(stdout=b"router bgp 64500\\n")
        >>> result = runner.run(invocation, b"@RtConfig set cisco_map_name = ...")
        >>> assert runner.runs[0][1].startswith(b"@RtConfig")

        >>> runner = FakeProcessRunner(launch_failure="No such file or directory")
        >>> assert isinstance(runner.run(invocation, b"").outcome, LaunchFailed)
    """

    def __init__(
        self,
        *,
        stdout: bytes = b"",
        stderr: bytes = b"",
        exit_code: int = 0,
        launch_failure: str | None = None,
        time_out: bool = False,
    ) -> None:
        """Create FakeProcessRunner with a predetermined outcome.

        Args:
            stdout: Bytes reported as captured stdout
            stderr: Bytes reported as captured stderr
            exit_code: Exit code reported for completed runs
            launch_failure: If set, every run fails to launch with this reason
            time_out: If True, every run reports a timeout
        """
        if launch_failure is not None and time_out:
            msg = "Cannot specify both launch_failure and time_out"
            raise ValueError(msg)
        self._stdout = stdout
        self._stderr = stderr
        self._exit_code = exit_code
        self._launch_failure = launch_failure
        self._time_out = time_out
        self._runs: list[tuple[Invocation, bytes, float | None]] = []

    @property
    def runs(self) -> list[tuple[Invocation, bytes, float | None]]:
        """Read-only access to (invocation, input_bytes, timeout_seconds) per run."""
        return self._runs

    def run(
        self,
        invocation: Invocation,
        input_bytes: bytes,
        timeout_seconds: float | None = None,
    ) -> ExecutionResult:
        self._runs.append((invocation, input_bytes, timeout_seconds))

        if self._launch_failure is not None:
            return ExecutionResult(
                invocation=invocation,
                outcome=LaunchFailed(reason=f"{invocation.executable}: {self._launch_failure}"),
            )

        if self._time_out:
            return ExecutionResult(
                invocation=invocation,
                outcome=TimedOut(timeout_seconds=timeout_seconds or 0.0),
                stdout=self._stdout,
                stderr=self._stderr,
                pid=4242,
            )

        return ExecutionResult(
            invocation=invocation,
            outcome=Completed(exit_code=self._exit_code),
            stdout=self._stdout,
            stderr=self._stderr,
            pid=4242,
        )
