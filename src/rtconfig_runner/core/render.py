"""Render routing-policy source text through RtConfig.

Composes the invocation builder and a ProcessRunner for a single request.
Presentation (terminal, JSON, HTML) is left to the caller.
"""

import logging
from dataclasses import dataclass

from rtconfig_runner.core.invocation import build_invocation
from rtconfig_runner.core.result import Completed, ExecutionResult, LaunchFailed, TimedOut
from rtconfig_runner.core.runner.abc import ProcessRunner
from rtconfig_runner.core.settings import RtConfigSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """Outcome of rendering one policy document.

    Attributes:
        execution: Result of running RtConfig
        debug: Whether diagnostic detail was requested
        debug_input: The raw input bytes, only populated in debug mode
    """

    execution: ExecutionResult
    debug: bool
    debug_input: bytes | None

    @property
    def succeeded(self) -> bool:
        return self.execution.succeeded

    @property
    def output_text(self) -> str:
        return self.execution.stdout.decode("utf-8", errors="replace")

    @property
    def error_text(self) -> str:
        return self.execution.stderr.decode("utf-8", errors="replace")


def render_policy(
    runner: ProcessRunner,
    settings: RtConfigSettings | None,
    source: str | bytes,
    timeout_seconds: float | None = None,
) -> RenderResult:
    """Run RtConfig over a policy document.

    Args:
        runner: Process runner used to execute RtConfig
        settings: RtConfig settings
        source: Policy text; str is encoded as UTF-8, bytes are passed verbatim
        timeout_seconds: Deadline override; falls back to settings.timeout_seconds

    Returns:
        RenderResult wrapping the execution result

    Raises:
        ConfigurationError: If settings is None
    """
    invocation = build_invocation(settings)
    assert settings is not None

    input_bytes = source.encode("utf-8") if isinstance(source, str) else source
    if timeout_seconds is None:
        timeout_seconds = settings.timeout_seconds

    execution = runner.run(invocation, input_bytes, timeout_seconds)

    outcome = execution.outcome
    if isinstance(outcome, LaunchFailed):
        logger.warning("RtConfig could not be launched: %s", outcome.reason)
    elif isinstance(outcome, TimedOut):
        logger.warning(
            "RtConfig timed out after %ss: %s", outcome.timeout_seconds, invocation.command_line
        )
    elif isinstance(outcome, Completed) and outcome.exit_code != 0:
        logger.warning("RtConfig exited with %d: %s", outcome.exit_code, invocation.command_line)

    return RenderResult(
        execution=execution,
        debug=settings.debug,
        debug_input=input_bytes if settings.debug else None,
    )
