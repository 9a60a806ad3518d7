"""Render a routing-policy document through RtConfig."""

import dataclasses
import logging
import threading
from typing import BinaryIO

import click

from rtconfig_runner.cli.constants import DEFAULT_TIMEOUT_SECONDS
from rtconfig_runner.cli.ensure import Ensure
from rtconfig_runner.cli.json_output import build_execution_report, emit_report
from rtconfig_runner.cli.output import (
    describe_failure,
    machine_output,
    print_debug_panel,
    user_output,
)
from rtconfig_runner.core.context import RtConfigContext
from rtconfig_runner.core.render import render_policy

logger = logging.getLogger(__name__)


@click.command("render")
@click.argument("source", type=click.File("rb"), default="-")
@click.option(
    "--timeout",
    "timeout_seconds",
    type=click.FloatRange(min=0, min_open=True, max=threading.TIMEOUT_MAX),
    default=None,
    help=(
        "Kill RtConfig after this many seconds "
        f"(default: config value or {DEFAULT_TIMEOUT_SECONDS:g})."
    ),
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Emit a JSON report instead of the raw configuration.",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Show the command line, input and stderr of the RtConfig run.",
)
@click.pass_obj
def render_cmd(
    ctx: RtConfigContext,
    source: BinaryIO,
    timeout_seconds: float | None,
    output_json: bool,
    debug: bool,
) -> None:
    """Render SOURCE (a policy file, or - for stdin) into router configuration.

    The generated configuration is written to stdout. Diagnostics go to stderr,
    and a non-zero RtConfig exit code becomes the exit code of this command.
    """
    settings = Ensure.settings_loaded(ctx)
    if debug:
        settings = dataclasses.replace(settings, debug=True)

    if timeout_seconds is None and settings.timeout_seconds is None:
        timeout_seconds = DEFAULT_TIMEOUT_SECONDS

    source_bytes = source.read()
    logger.debug("Read %d bytes of policy input", len(source_bytes))

    result = render_policy(ctx.runner, settings, source_bytes, timeout_seconds)

    if output_json:
        emit_report(build_execution_report(result))
        return

    if result.execution.stdout:
        machine_output(result.execution.stdout, nl=False)

    if result.debug:
        print_debug_panel(result)

    failure = describe_failure(result)
    if failure is None:
        return

    user_output(click.style("Error: ", fg="red") + failure)
    raise SystemExit(_command_exit_code(result.execution.exit_code))


def _command_exit_code(tool_exit_code: int | None) -> int:
    """Exit status for a failed render.

    A tool killed by signal N (reported as -N) maps to 128 + N like a shell does.
    Launch failures and timeouts have no tool exit code and map to 1.
    """
    if not tool_exit_code:
        return 1
    if tool_exit_code < 0:
        return 128 - tool_exit_code
    return tool_exit_code
