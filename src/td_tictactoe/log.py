"""Logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "td_tictactoe"


def configure_logging(level: str = "INFO", console: Console | None = None) -> logging.Logger:
    """
    Route the package logger through a rich handler.

    Calling this again replaces the previously installed handler. Records
    do not propagate to the root logger.

    Args:
        level: Log level name
        console: Console to write to (defaults to stderr)

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger
