"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from rtconfig_runner.core.runner.abc import ProcessRunner
from rtconfig_runner.core.runner.real import RealProcessRunner
from rtconfig_runner.core.settings import FilesystemSettingsStore, SettingsStore


@dataclass(frozen=True)
class RtConfigContext:
    """Immutable context holding all dependencies for rtconfig-runner commands.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    runner: ProcessRunner
    settings_store: SettingsStore
    explicit_config: bool

    @staticmethod
    def for_test(
        runner: ProcessRunner | None = None,
        settings_store: SettingsStore | None = None,
        explicit_config: bool = False,
    ) -> "RtConfigContext":
        """Create test context with fake defaults for unspecified dependencies.

        Args:
            runner: Optional ProcessRunner. If None, creates FakeProcessRunner().
            settings_store: Optional SettingsStore. If None, creates an empty
                InMemorySettingsStore.
            explicit_config: Whether the settings file was named explicitly

        Returns:
            RtConfigContext configured for tests
        """
        from rtconfig_runner.core.runner.fake import FakeProcessRunner
        from rtconfig_runner.core.settings import InMemorySettingsStore

        return RtConfigContext(
            runner=runner if runner is not None else FakeProcessRunner(),
            settings_store=(
                settings_store if settings_store is not None else InMemorySettingsStore()
            ),
            explicit_config=explicit_config,
        )


def create_context(config_path: Path | None) -> RtConfigContext:
    """Create production context with real implementations.

    Args:
        config_path: Settings file given on the command line, None to use
            $RTCONFIG_CONFIG or ~/.rtconfig/config.toml

    Returns:
        RtConfigContext with real implementations
    """
    return RtConfigContext(
        runner=RealProcessRunner(),
        settings_store=FilesystemSettingsStore(config_path),
        explicit_config=config_path is not None,
    )
