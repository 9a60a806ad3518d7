import logging
import os
from pathlib import Path

import click

from rtconfig_runner.cli.commands.config import config_group
from rtconfig_runner.cli.commands.render import render_cmd
from rtconfig_runner.cli.constants import DEBUG_ENV_VAR
from rtconfig_runner.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

# Enable debug logging if RTCONFIG_DEBUG environment variable is set
if os.getenv(DEBUG_ENV_VAR):
    logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="rtconfig-runner")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: $RTCONFIG_CONFIG or ~/.rtconfig/config.toml).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """Render routing policies into router configuration with RtConfig."""
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(config_path)


cli.add_command(config_group)
cli.add_command(render_cmd)


def main() -> None:
    """CLI entry point used by the `rtconfig-runner` console script."""
    cli()
