from rtconfig_runner.core.runner.abc import ProcessRunner
from rtconfig_runner.core.runner.real import RealProcessRunner

__all__ = [
    "ProcessRunner",
    "RealProcessRunner",
]
