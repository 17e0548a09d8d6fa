"""Instance management utilities for consoleapp.

The lock is a plain PID file. Acquisition checks whether the PID stored in an
existing file still belongs to a running process and reclaims the file if it
does not, so a crashed instance never wedges the next start.

Known limitation: the check and the write are two separate steps. Two
processes that both find a stale lock at the same moment will both write it,
and the later write wins. Locking is advisory and single-host only.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import psutil

from consoleapp.errors import LockHeldError

logger = logging.getLogger(__name__)


def current_pid():
    """Return the PID of the current process."""
    return os.getpid()


def is_process_running(pid):
    """Check if a process with the given PID is currently running.

    Args:
        pid (int): Process ID to check.

    Returns:
        bool: True if the process is running, False otherwise.
    """
    if pid is None or pid <= 0:
        return False
    try:
        process = psutil.Process(pid)
        return process.is_running() and process.status() != psutil.STATUS_ZOMBIE
    except (psutil.NoSuchProcess, psutil.ZombieProcess):
        return False
    except psutil.AccessDenied:
        # The process exists, it just belongs to someone else
        return True


def is_console_process():
    """Check whether the interpreter runs attached to a console.

    Windowless launchers such as ``pythonw.exe`` leave the standard streams
    set to None, and embedded interpreters have no ``sys.argv``.

    Returns:
        bool: True if the process has console streams and a command line.
    """
    if sys.stdout is None or sys.stderr is None:
        return False
    return bool(getattr(sys, "argv", None))


def read_pid(lock_file):
    """Read the PID stored in a lock file.

    Returns:
        int or None: The stored PID, or None if the file is missing or
        does not hold an integer.
    """
    try:
        return int(Path(lock_file).read_text(encoding="utf-8").strip())
    except (ValueError, OSError):
        return None


class LockManager:
    """Owns at most one PID lock file for the current process."""

    def __init__(self):
        self._lock_file: Optional[Path] = None

    @property
    def locked_path(self) -> Optional[Path]:
        return self._lock_file

    def lock(self, path) -> None:
        """Acquire the lock at ``path`` by writing the current PID to it.

        Raises:
            LockHeldError: if the file names a process that is still alive.
        """
        lock_file = Path(path)
        if self._lock_file is not None and self._lock_file != lock_file:
            self.unlock()

        if lock_file.exists():
            pid = read_pid(lock_file)
            if is_process_running(pid):
                raise LockHeldError(lock_file, pid)
            logger.debug("Reclaiming stale lock %s (pid %s)", lock_file, pid)

        lock_file.write_text(str(current_pid()), encoding="utf-8")
        self._lock_file = lock_file

    def unlock(self) -> None:
        """Remove the lock file, but only if it still holds our PID."""
        lock_file = self._lock_file
        self._lock_file = None
        if lock_file is None or not lock_file.exists():
            return
        if read_pid(lock_file) != current_pid():
            logger.debug("Lock %s is owned by another process, leaving it", lock_file)
            return
        try:
            lock_file.unlink()
        except FileNotFoundError:
            pass
