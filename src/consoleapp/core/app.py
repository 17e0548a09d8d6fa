"""
Console application lifecycle.

A concrete app subclasses ``ConsoleApp`` and implements ``run()``. The
constructor parses arguments, reads configuration, takes the instance lock
and installs signal and fatal-error handlers; ``shutdown()`` releases the lock
and logs the stop entry exactly once, whichever way the process ends.
"""

import abc
import atexit
import enum
import logging
import re
import signal
import sys
from types import MappingProxyType

from colorama import Fore, Style

from consoleapp.errors import (
    ArgumentError,
    ConfigError,
    ConsoleAppError,
    ConsoleEnvironmentError,
    ShutdownRequested,
)
from consoleapp.utils.config import load_config, resolve_config_path
from consoleapp.utils.instance import LockManager, is_console_process
from consoleapp.utils.logging import setup_logging
from consoleapp.utils.options import OptionParser
from consoleapp.utils.paths import get_lock_file_name, get_log_file_name

logger = logging.getLogger(__name__)

_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z0-9]|$)|[A-Z]?[a-z0-9]+|[A-Z]+")


def derive_app_name(class_name):
    """Turn a class name into a hyphenated app name.

    ``MyConsoleApp`` and ``My_Console_App`` both become ``my-console-app``.
    """
    words = []
    for segment in class_name.split("_"):
        words.extend(word.lower() for word in _WORD.findall(segment))
    return "-".join(words)


def _signal_name(signum):
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


def _exit_code(code):
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


class AppState(enum.Enum):
    CONSTRUCTING = "constructing"
    READY = "ready"
    RUNNING = "running"
    TERMINATING = "terminating"
    TERMINATED = "terminated"


class ConsoleApp(abc.ABC):
    """Base class for single-purpose console applications.

    Subclasses get argument parsing, configuration, logging, single-instance
    locking and a guaranteed stop entry for free. Use ``launch()`` as the
    process entry point::

        class ReportBuilder(ConsoleApp):
            def run(self):
                ...

        if __name__ == "__main__":
            sys.exit(ReportBuilder.launch())
    """

    # Explicit identity; derived from the class name when left unset
    app_name = None

    signals_to_catch = ("SIGTERM", "SIGINT", "SIGHUP", "SIGQUIT")

    def __init__(self, argv=None, *, name=None, prog=None):
        self.state = AppState.CONSTRUCTING
        self.shutdown_requested = False
        self.pending_signals = []
        self.logger = None
        self.lock_manager = LockManager()
        self.lock_file = None
        self._previous_handlers = {}
        self._previous_excepthook = None

        self.app_name = name or type(self).app_name or derive_app_name(type(self).__name__)

        self.option_parser = self.get_option_parser(prog)
        try:
            self.options = self.option_parser.parse(argv)
        except ArgumentError as e:
            print(f"{Fore.RED}{e}{Style.RESET_ALL}", file=sys.stderr)
            print(self.option_parser.usage(), file=sys.stderr)
            raise SystemExit(1)
        if self.options.help:
            print(self.option_parser.usage())
            raise SystemExit(0)

        self.config_path = resolve_config_path(self.app_name, self.options.config)
        self.config = MappingProxyType(self.read_config(self.config_path))

        if self.config.get("consoleOnly") and not is_console_process():
            raise ConsoleEnvironmentError(f"{self.app_name} must be run from a console")

        # Resolved before locking so a bad logDir cannot leave a lock behind
        self.set_logger(self.get_logger(self.config))

        if self.config.get("oneInstanceOnly"):
            self.lock_file = get_lock_file_name(self.app_name, self.config)
            self.lock_manager.lock(self.lock_file)

        # Ready before any handler can fire, so a signal here still tears down
        self.state = AppState.READY
        self._attach_handlers()
        self.log(f"Starting {self.app_name}")

    @abc.abstractmethod
    def run(self):
        """Do the actual work of the app."""

    @classmethod
    def launch(cls, argv=None, **kwargs):
        """Construct the app, run it and tear it down.

        Returns:
            int: Process exit code. 0 after a normal return, 1 after a caught
            signal, a fatal error in ``run()`` or a startup failure.
        """
        try:
            app = cls(argv, **kwargs)
        except SystemExit as e:
            return _exit_code(e.code)
        except ConsoleAppError as e:
            print(f"{Fore.RED}{e}{Style.RESET_ALL}", file=sys.stderr)
            if isinstance(e, ConfigError):
                print(cls.get_option_parser(kwargs.get("prog")).usage(), file=sys.stderr)
            return 1

        exit_code = 0
        app.state = AppState.RUNNING
        try:
            app.run()
        except SystemExit as e:
            # Includes ShutdownRequested raised by a signal handler
            exit_code = _exit_code(e.code)
        except Exception as e:
            app.log(f"Fatal error: {e}", logging.CRITICAL, exc_info=True)
            exit_code = 1
        finally:
            app.shutdown()

        if app.pending_signals and exit_code == 0:
            exit_code = 1
        return exit_code

    def __enter__(self):
        self.state = AppState.RUNNING
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None and issubclass(exc_type, Exception):
            self.log(f"Fatal error: {exc}", logging.CRITICAL, exc_info=(exc_type, exc, tb))
        self.shutdown()
        return False

    def shutdown(self):
        """Release the lock and log the stop entry.

        Safe to call any number of times from any entry point; only the first
        call after a completed construction does anything.
        """
        if self.state in (AppState.CONSTRUCTING, AppState.TERMINATING, AppState.TERMINATED):
            return
        self.state = AppState.TERMINATING
        try:
            if self.config.get("oneInstanceOnly"):
                self.lock_manager.unlock()
            self.log(f"Stopping {self.app_name}")
        finally:
            self._detach_handlers()
            self._close_logger()
            self.state = AppState.TERMINATED

    @classmethod
    def get_option_parser(cls, prog=None):
        """Build the parser for the options this app accepts.

        Override to add app-specific options with ``add_option()``.
        """
        return OptionParser(prog=prog)

    def read_config(self, path=None):
        """Read configuration, by default from ``<app_name>.ini`` if present."""
        if path is None:
            path = resolve_config_path(self.app_name)
        return load_config(path)

    def get_logger(self, config):
        """Build the app logger: stdout plus the resolved log file."""
        return setup_logging(self.app_name, get_log_file_name(self.app_name, config))

    def set_logger(self, app_logger):
        self.logger = app_logger

    def log(self, message, level=logging.INFO, **kwargs):
        if self.logger is None:
            self.set_logger(self.get_logger(self.config))
        self.logger.log(level, message, **kwargs)

    def _close_logger(self):
        if self.logger is None:
            return
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        # log() reopens lazily if anything is written after teardown
        self.logger = None

    def _attach_handlers(self):
        for name in self.signals_to_catch:
            signum = getattr(signal, name, None)
            if signum is None:
                continue
            try:
                self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)
            except (ValueError, OSError) as e:
                # Not the main thread, or the platform refuses this signal
                logger.debug("Cannot handle %s: %s", name, e)

        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._handle_fatal_error
        atexit.register(self.shutdown)

    def _detach_handlers(self):
        for signum, handler in self._previous_handlers.items():
            try:
                signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
            except (ValueError, OSError) as e:
                logger.debug("Cannot restore handler for %s: %s", _signal_name(signum), e)
        self._previous_handlers = {}

        if sys.excepthook == self._handle_fatal_error:
            sys.excepthook = self._previous_excepthook or sys.__excepthook__
        atexit.unregister(self.shutdown)

    def _handle_signal(self, signum, frame):
        name = _signal_name(signum)
        if self.state in (AppState.TERMINATING, AppState.TERMINATED):
            self.pending_signals.append(signum)
            self.log(f"Caught signal {name} during shutdown", logging.WARNING)
            return

        self.log(f"Caught signal {name}", logging.WARNING)
        self.shutdown_requested = True
        self.shutdown()
        raise ShutdownRequested(signum)

    def _handle_fatal_error(self, exc_type, exc, tb):
        previous = self._previous_excepthook or sys.__excepthook__
        self.log(f"Fatal error: {exc}", logging.CRITICAL, exc_info=(exc_type, exc, tb))
        self.shutdown()
        previous(exc_type, exc, tb)
