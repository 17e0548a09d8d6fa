"""Path utilities for consoleapp - resolves lock and log file locations."""

import tempfile
from pathlib import Path

from consoleapp.errors import DirectoryNotFoundError


def get_temp_file_name(app_name, directory=None):
    """Build a path to a per-app file used for locking or logging.

    Args:
        app_name (str): Name of the app, used as the file stem.
        directory (str, optional): Directory to put the file in. Defaults to
            the system temp directory.

    Returns:
        Path: ``<directory>/<app_name>`` with the directory fully resolved.

    Raises:
        DirectoryNotFoundError: if ``directory`` is given but is not a directory.
    """
    if directory:
        base = Path(directory)
        if not base.is_dir():
            raise DirectoryNotFoundError(directory)
    else:
        base = Path(tempfile.gettempdir())
    return base.resolve() / app_name


def get_lock_file_name(app_name, config):
    """Get the lock file path.

    Returns:
        Path: ``lockFile`` if configured, else ``<lockDir or temp>/<app_name>.lock``
    """
    if config.get("lockFile"):
        return Path(config["lockFile"])
    stem = get_temp_file_name(app_name, config.get("lockDir"))
    return stem.with_name(stem.name + ".lock")


def get_log_file_name(app_name, config):
    """Get the log file path.

    Returns:
        Path: ``logFile`` if configured, else ``<logDir or temp>/<app_name>.log``
    """
    if config.get("logFile"):
        return Path(config["logFile"])
    stem = get_temp_file_name(app_name, config.get("logDir"))
    return stem.with_name(stem.name + ".log")
