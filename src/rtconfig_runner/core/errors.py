"""Error taxonomy for RtConfig invocations.

ConfigurationError is raised before any process is spawned. The remaining
errors describe how a run ended; the runner reports them as outcome values
and only ExecutionResult.check() raises them.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rtconfig_runner.core.invocation import Invocation


class RtConfigError(Exception):
    """Base class for all rtconfig-runner errors."""


class ConfigurationError(RtConfigError):
    """Configuration is missing or malformed."""


class LaunchError(RtConfigError):
    """The external tool could not be started."""

    def __init__(self, invocation: "Invocation", reason: str) -> None:
        self.invocation = invocation
        self.reason = reason
        error_msg = f"Failed to launch {invocation.executable}: {reason}"
        error_msg += f"\nCommand: {invocation.command_line}"
        super().__init__(error_msg)


class ExecutionTimeout(RtConfigError):
    """The external tool did not finish before the deadline and was killed."""

    def __init__(self, invocation: "Invocation", timeout_seconds: float, stderr: bytes) -> None:
        self.invocation = invocation
        self.timeout_seconds = timeout_seconds
        self.stderr = stderr
        error_msg = f"Execution timed out after {timeout_seconds:g}s"
        error_msg += f"\nCommand: {invocation.command_line}"
        super().__init__(error_msg)


class NonZeroExit(RtConfigError):
    """The external tool ran to completion but exited with a non-zero status."""

    def __init__(self, invocation: "Invocation", exit_code: int, stderr: bytes) -> None:
        self.invocation = invocation
        self.exit_code = exit_code
        self.stderr = stderr

        error_msg = f"{invocation.executable} returned a non-zero exit status"
        error_msg += f"\nCommand: {invocation.command_line}"
        error_msg += f"\nExit code: {exit_code}"
        stderr_stripped = stderr.decode("utf-8", errors="replace").strip()
        if stderr_stripped:
            error_msg += f"\nstderr: {stderr_stripped}"
        super().__init__(error_msg)
