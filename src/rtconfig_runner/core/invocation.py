"""Translate RtConfig settings into an argument vector.

The argument vector is handed straight to process creation. No shell is
involved, so flag values never need quoting; ``Invocation.command_line`` is a
quoted rendering for display only.
"""

import logging
import shlex
from dataclasses import dataclass

from rtconfig_runner.core.errors import ConfigurationError
from rtconfig_runner.core.settings import DEFAULT_COMMAND, RtConfigSettings

logger = logging.getLogger(__name__)

INCLUDE_FILE_FLAG = "-f"
SOURCE_LIST_FLAG = "-s"
OUTPUT_FORMAT_FLAG = "-config"
WHOIS_HOST_FLAG = "-h"
WHOIS_PORT_FLAG = "-p"
WHOIS_PROTOCOL_FLAG = "-protocol"

# Emission order is fixed; the spellings are the ones RtConfig accepts.
TOGGLE_FLAGS: tuple[tuple[str, str], ...] = (
    ("report_errors", "-report_errors"),
    ("ignore_errors", "-ignore_errors"),
    ("no_match_ip_inbound", "-no_match_ip_inbound"),
    ("disable_access_list_cache", "-disable_access_list_cache"),
    ("suppress_martians", "-supress_martian"),
    ("no_compress_acls", "-cisco_no_compress_acls"),
    ("use_prefix_lists", "-cisco_use_prefix_lists"),
    ("eliminate_dup_map_parts", "-cisco_eliminate_dup_map_parts"),
    ("skip_route_maps", "-cisco_skip_route_maps"),
    ("force_tilde", "-cisco_force_tilda"),
    ("empty_lists", "-cisco_empty_lists"),
)


@dataclass(frozen=True)
class Invocation:
    """Executable path plus ordered arguments for one RtConfig run."""

    executable: str
    arguments: tuple[str, ...]

    @property
    def argv(self) -> list[str]:
        """Full argument vector, executable first."""
        return [self.executable, *self.arguments]

    @property
    def command_line(self) -> str:
        """Shell-quoted rendering of argv for diagnostics.

        ``shlex.split(command_line) == argv`` always holds.
        """
        return shlex.join(self.argv)


def build_invocation(settings: RtConfigSettings | None) -> Invocation:
    """Build the RtConfig invocation for the given settings.

    Args:
        settings: Settings to translate

    Returns:
        Invocation with flags in a fixed, deterministic order

    Raises:
        ConfigurationError: If settings is None
    """
    if settings is None:
        raise ConfigurationError("RtConfig settings are required to build an invocation")

    executable = settings.command if settings.command else DEFAULT_COMMAND

    arguments: list[str] = []
    for path in settings.include_files:
        arguments.extend([INCLUDE_FILE_FLAG, path])

    if settings.source_list is not None:
        arguments.extend([SOURCE_LIST_FLAG, settings.source_list])
    if settings.output_format is not None:
        arguments.extend([OUTPUT_FORMAT_FLAG, settings.output_format])
    if settings.whois_host is not None:
        arguments.extend([WHOIS_HOST_FLAG, settings.whois_host])
    if settings.whois_port is not None:
        arguments.extend([WHOIS_PORT_FLAG, str(settings.whois_port)])
    if settings.whois_protocol is not None:
        arguments.extend([WHOIS_PROTOCOL_FLAG, settings.whois_protocol])

    for field_name, flag in TOGGLE_FLAGS:
        if getattr(settings, field_name):
            arguments.append(flag)

    invocation = Invocation(executable=executable, arguments=tuple(arguments))
    logger.debug("Built invocation: %s", invocation.command_line)
    return invocation
