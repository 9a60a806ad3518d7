"""Process runner abstraction.

Running the external tool is an injectable dependency so that callers can be
tested with FakeProcessRunner instead of mock.patch.
"""

from abc import ABC, abstractmethod

from rtconfig_runner.core.invocation import Invocation
from rtconfig_runner.core.result import ExecutionResult


class ProcessRunner(ABC):
    """Abstract interface for running one invocation to completion."""

    @abstractmethod
    def run(
        self,
        invocation: Invocation,
        input_bytes: bytes,
        timeout_seconds: float | None = None,
    ) -> ExecutionResult:
        """Run the invocation, feeding input_bytes to its stdin.

        Never raises for launch failures, timeouts or non-zero exits; these are
        reported through ExecutionResult.outcome. Use ExecutionResult.check()
        to turn them into exceptions.

        Args:
            invocation: Executable and arguments to run
            input_bytes: Bytes written to the process's stdin before closing it
            timeout_seconds: Deadline for the whole run, None for no deadline

        Returns:
            ExecutionResult with captured stdout, stderr and outcome
        """
        ...
