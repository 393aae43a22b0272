"""Logging setup for the command line front end."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Route the jglossurl loggers to a rich handler on stderr."""
    logger = logging.getLogger("jglossurl")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
