"""Inspect and create RtConfig settings files."""

from pathlib import Path

import click

from rtconfig_runner.cli.ensure import Ensure
from rtconfig_runner.cli.output import machine_output, user_output
from rtconfig_runner.core.context import RtConfigContext
from rtconfig_runner.core.invocation import build_invocation
from rtconfig_runner.core.settings import (
    DEFAULT_COMMAND,
    FilesystemSettingsStore,
    RtConfigSettings,
    SettingsStore,
    settings_to_mapping,
)


@click.group("config")
def config_group() -> None:
    """Manage RtConfig settings."""


@config_group.command("show")
@click.pass_obj
def show_cmd(ctx: RtConfigContext) -> None:
    """Show effective settings and the RtConfig command line they produce."""
    settings = Ensure.settings_loaded(ctx)

    source = ctx.settings_store.path()
    if not ctx.settings_store.exists():
        source_note = f"{source} (not found, using defaults)"
    else:
        source_note = str(source)
    user_output(f"Settings: {source_note}")

    configured = settings_to_mapping(settings)
    if "command" not in configured:
        machine_output(f"command = {DEFAULT_COMMAND} (default)")
    for key, value in configured.items():
        machine_output(f"{key} = {value!r}")

    machine_output(f"Command line: {build_invocation(settings).command_line}")


@config_group.command("init")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path), required=False)
@click.option("-f", "--force", is_flag=True, help="Overwrite an existing settings file.")
@click.pass_obj
def init_cmd(ctx: RtConfigContext, path: Path | None, force: bool) -> None:
    """Write a settings template to PATH (default: the active settings file)."""
    store: SettingsStore = ctx.settings_store if path is None else FilesystemSettingsStore(path)

    Ensure.invariant(
        force or not store.exists(),
        f"Settings file already exists: {store.path()}\nUse --force to overwrite it.",
    )

    try:
        store.save(RtConfigSettings(command=DEFAULT_COMMAND))
    except PermissionError as e:
        Ensure.invariant(False, str(e))

    user_output(click.style("✓ ", fg="green") + f"Wrote settings template to {store.path()}")
