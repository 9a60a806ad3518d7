"""RtConfig settings data structures and loading.

Provides immutable settings loaded from a TOML file (default
~/.rtconfig/config.toml). Keys use the names existing deployments already
configure (``includeFiles``, ``whoisPort``, ``use-prefix-lists``...), either at
the top level or inside an ``[rtconfig]`` table.
"""

import os
import threading
import tomllib
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import tomlkit

from rtconfig_runner.core.errors import ConfigurationError

DEFAULT_COMMAND = "/usr/local/bin/RtConfig"
CONFIG_ENV_VAR = "RTCONFIG_CONFIG"
CONFIG_TABLE = "rtconfig"


@dataclass(frozen=True)
class RtConfigSettings:
    """Immutable RtConfig settings.

    Every field is independently optional. ``None`` means "not configured" and
    is distinct from falsy values: ``whois_port=0`` is configured, while
    ``whois_port=None`` is not. Only ``command`` has a built-in default,
    applied when the invocation is built.
    """

    command: str | None = None
    include_files: tuple[str, ...] = ()
    source_list: str | None = None
    output_format: str | None = None
    whois_host: str | None = None
    whois_port: int | None = None
    whois_protocol: str | None = None
    report_errors: bool = False
    ignore_errors: bool = False
    no_match_ip_inbound: bool = False
    disable_access_list_cache: bool = False
    suppress_martians: bool = False
    no_compress_acls: bool = False
    use_prefix_lists: bool = False
    eliminate_dup_map_parts: bool = False
    skip_route_maps: bool = False
    force_tilde: bool = False
    empty_lists: bool = False
    debug: bool = False
    timeout_seconds: float | None = None


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_int(value: Any) -> bool:
    # bool is a subclass of int; `whoisPort = true` is a mistake, not port 1
    return isinstance(value, int) and not isinstance(value, bool)


def _is_timeout(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    return 0 < value <= threading.TIMEOUT_MAX


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


# Config file key -> (dataclass field, validator, expected type description)
_KEYS: dict[str, tuple[str, Callable[[Any], bool], str]] = {
    "command": ("command", _is_str, "a string"),
    "includeFiles": ("include_files", _is_str_list, "a list of strings"),
    "sourceList": ("source_list", _is_str, "a string"),
    "outputFormat": ("output_format", _is_str, "a string"),
    "whoisHost": ("whois_host", _is_str, "a string"),
    "whoisPort": ("whois_port", _is_int, "an integer"),
    "whoisProtocol": ("whois_protocol", _is_str, "a string"),
    "report-errors": ("report_errors", _is_bool, "a boolean"),
    "ignore-errors": ("ignore_errors", _is_bool, "a boolean"),
    "no-match-ip-inbound": ("no_match_ip_inbound", _is_bool, "a boolean"),
    "disable-access-list-cache": ("disable_access_list_cache", _is_bool, "a boolean"),
    "suppress-martians": ("suppress_martians", _is_bool, "a boolean"),
    "no-compress-acls": ("no_compress_acls", _is_bool, "a boolean"),
    "use-prefix-lists": ("use_prefix_lists", _is_bool, "a boolean"),
    "eliminate-dup-map-parts": ("eliminate_dup_map_parts", _is_bool, "a boolean"),
    "skip-route-maps": ("skip_route_maps", _is_bool, "a boolean"),
    "force-tilde": ("force_tilde", _is_bool, "a boolean"),
    "empty-lists": ("empty_lists", _is_bool, "a boolean"),
    "debug": ("debug", _is_bool, "a boolean"),
    "timeout": ("timeout_seconds", _is_timeout, "a positive number of seconds"),
}

_FIELD_TO_KEY = {field_name: key for key, (field_name, _, _) in _KEYS.items()}


def settings_from_mapping(data: Mapping[str, Any], source: str) -> RtConfigSettings:
    """Build settings from parsed config data.

    Args:
        data: Mapping of config file keys to values. Keys may be nested in an
            ``[rtconfig]`` table.
        source: Where the data came from, used in error messages

    Returns:
        RtConfigSettings with every key present in data applied

    Raises:
        ConfigurationError: If a key is unknown or a value has the wrong type
    """
    if CONFIG_TABLE in data:
        table = data[CONFIG_TABLE]
        if not isinstance(table, Mapping):
            raise ConfigurationError(f"'{CONFIG_TABLE}' in {source} must be a table")
        extra = sorted(key for key in data if key != CONFIG_TABLE)
        if extra:
            raise ConfigurationError(
                f"Unexpected top-level keys in {source} next to [{CONFIG_TABLE}]: "
                + ", ".join(extra)
            )
        data = table

    values: dict[str, Any] = {}
    for key, value in data.items():
        if key not in _KEYS:
            raise ConfigurationError(f"Unknown setting '{key}' in {source}")
        field_name, is_valid, expected = _KEYS[key]
        if not is_valid(value):
            raise ConfigurationError(
                f"Setting '{key}' in {source} must be {expected}, got {value!r}"
            )
        if field_name == "include_files":
            value = tuple(value)
        elif field_name == "timeout_seconds":
            value = float(value)
        values[field_name] = value

    return RtConfigSettings(**values)


def settings_to_mapping(settings: RtConfigSettings) -> dict[str, Any]:
    """Convert settings back to config file keys, omitting unset fields."""
    defaults = RtConfigSettings()
    result: dict[str, Any] = {}
    for field in fields(RtConfigSettings):
        value = getattr(settings, field.name)
        if value is None or value == getattr(defaults, field.name):
            continue
        if field.name == "include_files":
            value = list(value)
        result[_FIELD_TO_KEY[field.name]] = value
    return result


def load_settings_file(path: Path) -> RtConfigSettings:
    """Load settings from a TOML file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or malformed
    """
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    return settings_from_mapping(data, str(path))


def build_settings_document(settings: RtConfigSettings) -> tomlkit.TOMLDocument:
    """Render settings as a commented TOML document.

    Configured values are written as keys; unconfigured ones are listed as
    comments so the generated file doubles as a reference.
    """
    doc = tomlkit.document()
    doc.add(tomlkit.comment("RtConfig settings. Unset keys are omitted from the command line."))

    table = tomlkit.table()
    configured = settings_to_mapping(settings)
    for key in _KEYS:
        if key in configured:
            table[key] = configured[key]
        else:
            table.add(tomlkit.comment(f"{key} = ..."))
    doc[CONFIG_TABLE] = table
    return doc


class SettingsStore(ABC):
    """Abstract interface for settings access.

    Enables in-memory implementations for tests without touching the filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if a settings file exists."""
        ...

    @abstractmethod
    def load(self) -> RtConfigSettings:
        """Load settings.

        Raises:
            ConfigurationError: If settings don't exist or are malformed
        """
        ...

    @abstractmethod
    def save(self, settings: RtConfigSettings) -> None:
        """Persist settings."""
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path of the settings file (for messages)."""
        ...

    def load_or_default(self) -> RtConfigSettings:
        """Load settings when present, otherwise return all-unset settings."""
        if not self.exists():
            return RtConfigSettings()
        return self.load()


class FilesystemSettingsStore(SettingsStore):
    """Production implementation reading and writing a TOML file."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path = config_path

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> RtConfigSettings:
        return load_settings_file(self.path())

    def save(self, settings: RtConfigSettings) -> None:
        """Write settings as TOML, creating the parent directory.

        Raises:
            PermissionError: If the directory or file cannot be written
        """
        config_path = self.path()
        parent = config_path.parent

        if parent.exists() and not os.access(parent, os.W_OK):
            raise PermissionError(
                f"Cannot write to directory: {parent}\n"
                f"The directory exists but is not writable."
            )
        parent.mkdir(parents=True, exist_ok=True)

        config_path.write_text(tomlkit.dumps(build_settings_document(settings)), encoding="utf-8")

    def path(self) -> Path:
        """Get the settings path.

        Returns the explicit path if one was given, then $RTCONFIG_CONFIG,
        then ~/.rtconfig/config.toml.
        """
        if self._config_path is not None:
            return self._config_path
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path).expanduser()
        return Path.home() / ".rtconfig" / "config.toml"


class InMemorySettingsStore(SettingsStore):
    """Test implementation that keeps settings in memory."""

    def __init__(self, settings: RtConfigSettings | None = None) -> None:
        """Initialize in-memory store.

        Args:
            settings: Initial settings (None = no settings file)
        """
        self._settings = settings

    def exists(self) -> bool:
        return self._settings is not None

    def load(self) -> RtConfigSettings:
        if self._settings is None:
            raise ConfigurationError(f"Config file not found: {self.path()}")
        return self._settings

    def save(self, settings: RtConfigSettings) -> None:
        self._settings = settings

    def path(self) -> Path:
        return Path("/fake/rtconfig/config.toml")
