"""Console logging for the ``dokapi`` command."""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "dokapi"
RED = "\x1b[31m"
RESET = "\x1b[0m"


class ConsoleFormatter(logging.Formatter):
    """Prefix progress messages with ``*`` and highlight errors in red."""

    def __init__(self, *, color: bool = True) -> None:
        super().__init__("%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            return f"{RED}{message}{RESET}" if self.color else message
        if record.levelno == logging.INFO:
            return f" * {message}"
        return f"[{record.levelname}] {message}"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Install a single console handler on the ``dokapi`` logger.

    Calling this again replaces the previous handler, so repeated CLI
    invocations in one process do not duplicate output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ConsoleFormatter(color=sys.stderr.isatty()))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger


__all__ = ["ConsoleFormatter", "configure_logging"]
