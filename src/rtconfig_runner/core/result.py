"""Structured outcome of running one RtConfig invocation."""

from dataclasses import dataclass

from rtconfig_runner.core.errors import ExecutionTimeout, LaunchError, NonZeroExit
from rtconfig_runner.core.invocation import Invocation


@dataclass(frozen=True)
class Completed:
    """The process ran to completion. Any exit code, including non-zero."""

    exit_code: int


@dataclass(frozen=True)
class LaunchFailed:
    """The process could not be started."""

    reason: str


@dataclass(frozen=True)
class TimedOut:
    """The process exceeded its deadline and was killed."""

    timeout_seconds: float


Outcome = Completed | LaunchFailed | TimedOut


@dataclass(frozen=True)
class ExecutionResult:
    """Result of one invocation.

    Attributes:
        invocation: The exact invocation that was attempted
        outcome: How the run ended
        stdout: Captured standard output (empty if launch failed)
        stderr: Captured standard error (empty if launch failed)
        pid: Process id, None if the process never started
        duration_seconds: Wall-clock time from launch to reaping
    """

    invocation: Invocation
    outcome: Outcome
    stdout: bytes = b""
    stderr: bytes = b""
    pid: int | None = None
    duration_seconds: float = 0.0

    @property
    def exit_code(self) -> int | None:
        """Exit code when the process completed, None otherwise."""
        if isinstance(self.outcome, Completed):
            return self.outcome.exit_code
        return None

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def check(self) -> "ExecutionResult":
        """Raise the matching error unless the process completed with status 0.

        Returns:
            self, to allow ``runner.run(...).check()`` chaining

        Raises:
            LaunchError: If the process could not start
            ExecutionTimeout: If the deadline expired
            NonZeroExit: If the process exited with a non-zero status
        """
        outcome = self.outcome
        if isinstance(outcome, LaunchFailed):
            raise LaunchError(self.invocation, outcome.reason)
        if isinstance(outcome, TimedOut):
            raise ExecutionTimeout(self.invocation, outcome.timeout_seconds, self.stderr)
        if outcome.exit_code != 0:
            raise NonZeroExit(self.invocation, outcome.exit_code, self.stderr)
        return self
