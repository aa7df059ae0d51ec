"""
Logging configuration for the ansible-make CLI.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "ANSIBLE_MAKE_LOG_LEVEL"
DEFAULT_LEVEL = "WARNING"


def configure_logging(verbose: bool = False, environ: dict | None = None) -> None:
    """
    Route ``ansible_make`` loggers through a stderr RichHandler.

    The level is DEBUG with ``verbose``, otherwise $ANSIBLE_MAKE_LOG_LEVEL,
    otherwise WARNING. Calling this twice does not add a second handler.

    Args:
        verbose: Force DEBUG level
        environ: Environment mapping (defaults to os.environ)
    """
    environ = os.environ if environ is None else environ
    level = "DEBUG" if verbose else environ.get(LOG_LEVEL_ENV, DEFAULT_LEVEL).upper()
    if level == "WARN":
        level = "WARNING"

    logger = logging.getLogger("ansible_make")
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(name)s %(message)s"))
        logger.addHandler(handler)

    try:
        logger.setLevel(level)
    except ValueError:
        logger.setLevel(DEFAULT_LEVEL)
        logger.warning(f"Unknown log level {level!r} in ${LOG_LEVEL_ENV}, using {DEFAULT_LEVEL}")
