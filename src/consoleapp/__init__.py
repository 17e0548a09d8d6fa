"""
consoleapp - a scaffold for single-instance console processes.

Parses command-line options, reads configuration, keeps a PID lock so only
one instance runs at a time, and guarantees the lock is released and a stop
entry logged on normal exit, termination signals and fatal errors.
"""

__version__ = "1.0.0"

# Main exports
from consoleapp.core import AppState, ConsoleApp, derive_app_name
from consoleapp.errors import (
    ArgumentError,
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConsoleAppError,
    ConsoleEnvironmentError,
    DirectoryNotFoundError,
    LockError,
    LockHeldError,
    ShutdownRequested,
)
from consoleapp.utils.instance import LockManager

__all__ = [
    "AppState",
    "ConsoleApp",
    "derive_app_name",
    "LockManager",
    "ArgumentError",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConsoleAppError",
    "ConsoleEnvironmentError",
    "DirectoryNotFoundError",
    "LockError",
    "LockHeldError",
    "ShutdownRequested",
]
