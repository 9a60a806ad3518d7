"""CLI error handling utilities with styled output.

The Ensure class asserts invariants in CLI commands with consistent,
user-friendly error messages. All errors use a red "Error:" prefix.
"""

import click

from rtconfig_runner.cli.output import user_output
from rtconfig_runner.core.context import RtConfigContext
from rtconfig_runner.core.errors import ConfigurationError
from rtconfig_runner.core.settings import RtConfigSettings


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(1)

    @staticmethod
    def settings_loaded(ctx: RtConfigContext) -> RtConfigSettings:
        """Load settings from the context's store, exiting on configuration errors.

        A missing settings file is only an error when it was named explicitly;
        otherwise all settings are left unset.

        Raises:
            SystemExit: If settings are missing or malformed (with exit code 1)
        """
        store = ctx.settings_store
        try:
            if ctx.explicit_config:
                return store.load()
            return store.load_or_default()
        except ConfigurationError as e:
            user_output(click.style("Error: ", fg="red") + str(e))
            raise SystemExit(1) from e
