"""Constants shared by CLI commands."""

# Deadline applied by `render` when neither --timeout nor the config sets one
DEFAULT_TIMEOUT_SECONDS = 60.0

DEBUG_ENV_VAR = "RTCONFIG_DEBUG"
