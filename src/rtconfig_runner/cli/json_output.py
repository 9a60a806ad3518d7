"""JSON output for CLI commands with machine-parseable output."""

import json
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from rtconfig_runner.cli.output import machine_output
from rtconfig_runner.core.render import RenderResult
from rtconfig_runner.core.result import Completed, LaunchFailed, TimedOut


class ExecutionReport(BaseModel):
    """Pydantic model for `render --json` documents.

    Attributes:
        status: How the run ended
        exit_code: Tool exit code, passed through unmodified (completed runs only)
        reason: Launch failure reason (launch_failed only)
        timeout_seconds: Deadline that expired (timed_out only)
        stdout: Captured standard output
        stderr: Captured standard error
        argv: Argument vector that was executed
        command_line: Shell-quoted argv, for display
        duration_seconds: Wall-clock duration of the run
        input: Raw input text (debug mode only)
    """

    model_config = ConfigDict(strict=True)

    status: Literal["completed", "launch_failed", "timed_out"]
    exit_code: int | None = None
    reason: str | None = None
    timeout_seconds: float | None = None
    stdout: str
    stderr: str
    argv: list[str]
    command_line: str
    duration_seconds: float = Field(ge=0)
    input: str | None = None


def build_execution_report(result: RenderResult) -> ExecutionReport:
    """Convert a RenderResult into its JSON report model."""
    execution = result.execution
    outcome = execution.outcome

    exit_code: int | None = None
    reason: str | None = None
    timeout_seconds: float | None = None
    status: Literal["completed", "launch_failed", "timed_out"]
    if isinstance(outcome, Completed):
        status = "completed"
        exit_code = outcome.exit_code
    elif isinstance(outcome, LaunchFailed):
        status = "launch_failed"
        reason = outcome.reason
    elif isinstance(outcome, TimedOut):
        status = "timed_out"
        timeout_seconds = outcome.timeout_seconds

    return ExecutionReport(
        status=status,
        exit_code=exit_code,
        reason=reason,
        timeout_seconds=timeout_seconds,
        stdout=result.output_text,
        stderr=result.error_text,
        argv=execution.invocation.argv,
        command_line=execution.invocation.command_line,
        duration_seconds=execution.duration_seconds,
        input=(
            result.debug_input.decode("utf-8", errors="replace")
            if result.debug_input is not None
            else None
        ),
    )


def emit_report(report: ExecutionReport) -> None:
    """Output the report as JSON on stdout."""
    machine_output(json.dumps(report.model_dump(mode="json"), indent=2))
