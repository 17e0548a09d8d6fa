"""Exceptions raised by consoleapp."""

from typing import Optional


class ConsoleAppError(Exception):
    """Base exception for consoleapp."""


class ArgumentError(ConsoleAppError):
    """Raised when command-line arguments cannot be parsed."""


class ConfigError(ConsoleAppError):
    """Raised when a configuration file cannot be used."""

    def __init__(self, message, path=None):
        super().__init__(f'{message} "{path}"' if path else message)
        self.path = path


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested configuration file does not exist."""


class ConfigParseError(ConfigError):
    """Raised when a configuration file exists but cannot be read."""


class ConsoleEnvironmentError(ConsoleAppError):
    """Raised when a console-only app is started without a console."""


class DirectoryNotFoundError(ConsoleAppError):
    """Raised when a configured lock or log directory does not exist."""

    def __init__(self, path):
        super().__init__(f'"{path}" is not a directory')
        self.path = path


class LockError(ConsoleAppError):
    """Base class for instance lock failures."""


class LockHeldError(LockError):
    """Raised when a live process already holds the instance lock."""

    def __init__(self, path, pid: Optional[int] = None):
        message = f"Could not lock {path}"
        if pid is not None:
            message += f" (held by pid {pid})"
        super().__init__(message)
        self.path = path
        self.pid = pid


class ShutdownRequested(SystemExit):
    """Raised out of a signal handler once teardown has completed.

    ``except Exception`` blocks inside ``run()`` let it through, and if no
    driver catches it the interpreter exits quietly with ``code``.
    """

    def __init__(self, signum=None, code=1):
        super().__init__(code)
        self.signum = signum
