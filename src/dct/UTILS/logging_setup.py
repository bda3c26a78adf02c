"""
Logging configuration for command line use.
"""
import logging
import sys
from typing import Optional, TextIO

PACKAGE_LOGGER = "dct"


def configure_logging(verbose: bool = False, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Sends the package's log records to stderr, keeping stdout for container logs.

    :param verbose: Log debug records instead of warnings and errors only.
    :param stream: Stream to write to. Defaults to sys.stderr.
    :return: The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger
