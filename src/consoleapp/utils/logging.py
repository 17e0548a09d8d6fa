"""Logging configuration for consoleapp."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(name, log_file, stream=None, level=logging.INFO):
    """Configure an app logger writing to a stream and to a file.

    Calling it again for the same name replaces the previous handlers.

    Args:
        name (str): Logger name, normally the app name.
        log_file (Path): File the log lines are appended to.
        stream: Console stream. Defaults to ``sys.stdout``; pass ``False``
            to log to the file only.
        level (int): Logger level.

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [logging.FileHandler(log_file, mode="a", encoding="utf-8")]
    if stream is not False:
        handlers.append(logging.StreamHandler(stream or sys.stdout))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False
    return logger
