"""Output utilities for CLI commands with clear intent.

user_output goes to stderr (messages for humans), machine_output goes to
stdout (generated router configuration, JSON). Keeping the streams apart lets
`rtconfig-runner render policy.rpsl > router.cfg` capture only the config.
"""

import signal

import click
from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from rtconfig_runner.core.render import RenderResult
from rtconfig_runner.core.result import Completed, LaunchFailed, TimedOut


def user_output(message: str = "", nl: bool = True) -> None:
    """Write a human-facing message to stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(data: str | bytes, nl: bool = True) -> None:
    """Write machine-consumable data to stdout.

    bytes are written verbatim to the binary stream.
    """
    click.echo(data, nl=nl)


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


def describe_failure(result: RenderResult) -> str | None:
    """Describe why a render did not succeed, None if it did."""
    execution = result.execution
    outcome = execution.outcome
    if isinstance(outcome, LaunchFailed):
        return (
            f"Failed to launch RtConfig, check whether the path {execution.invocation.executable} "
            f"is valid and executable ({outcome.reason})"
        )
    if isinstance(outcome, TimedOut):
        return (
            f"RtConfig did not finish within {outcome.timeout_seconds:g}s and was killed.\n"
            f"Command line: {execution.invocation.command_line}"
        )
    if outcome.exit_code != 0:
        message = (
            "RtConfig returned an error, please double check the options that were passed "
            "to the RtConfig binary.\n"
            f"Command line: {execution.invocation.command_line}\n"
            f"Exit code: {outcome.exit_code}"
        )
        if outcome.exit_code < 0:
            message += f" (killed by {_signal_name(-outcome.exit_code)})"
        error_text = result.error_text.strip()
        if error_text:
            message += f"\nRtConfig said:\n{error_text}"
        return message
    return None


def format_debug_panel(result: RenderResult) -> Panel:
    """Format command line, raw input and stderr of a render for display."""
    execution = result.execution
    outcome = execution.outcome

    sections: list[Text] = [
        Text("Command line:", style="bold"),
        Text(execution.invocation.command_line),
    ]

    if isinstance(outcome, Completed):
        status = f"exited with {outcome.exit_code}"
    elif isinstance(outcome, TimedOut):
        status = f"timed out after {outcome.timeout_seconds:g}s"
    else:
        status = "failed to launch"
    sections.append(Text(f"Status: {status} ({execution.duration_seconds:.3f}s)", style="dim"))

    if result.debug_input is not None:
        sections.append(Text("Input:", style="bold"))
        sections.append(Text(result.debug_input.decode("utf-8", errors="replace")))

    if execution.stderr:
        sections.append(Text("stderr:", style="bold"))
        sections.append(Text(result.error_text, style="red"))

    return Panel(Group(*sections), title="Debug", border_style="yellow", padding=(0, 1))


def print_debug_panel(result: RenderResult) -> None:
    """Render the debug panel on stderr."""
    console = Console(stderr=True, highlight=False)
    console.print(format_debug_panel(result))
