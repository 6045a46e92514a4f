"""
Logging for the scraped package.

Every module gets its logger from get_logger(__name__); output goes through
a single rich handler so CLI runs and library use share one format.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

# Logs go to stderr so JSON printed on stdout stays clean
console = Console(stderr=True)

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level() -> int:
    level_str = os.getenv("SCRAPED_LOG_LEVEL", "INFO").upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger configured with the shared rich handler.

    Args:
        name: Logger name, normally the caller's __name__

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # get_logger is called once per module; don't stack handlers
    if logger.handlers:
        return logger

    log_level = get_log_level()
    logger.setLevel(log_level)

    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    rich_handler.setLevel(log_level)
    rich_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(rich_handler)
    logger.propagate = False

    return logger


def set_level(level: str) -> None:
    """Change the level of every scraped logger already created."""
    log_level = LOG_LEVEL_MAP.get(level.upper(), logging.INFO)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith("scraped") and isinstance(logger, logging.Logger):
            logger.setLevel(log_level)
            for handler in logger.handlers:
                handler.setLevel(log_level)
