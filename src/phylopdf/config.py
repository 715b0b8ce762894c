"""Logging configuration for the command line tools."""

import logging
from typing import Optional

VERBOSITY_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


def setup_logging(verbosity: int = 0, log_file: Optional[str] = None) -> None:
    """Configure the root logger; messages go to stderr so that ``-`` outputs stay clean."""
    level = VERBOSITY_LEVELS.get(verbosity, logging.DEBUG)

    if verbosity >= 2:
        fmt = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
    elif verbosity >= 1:
        fmt = "%(levelname)s: %(message)s"
    else:
        fmt = "%(message)s"

    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=fmt,
        handlers=handlers,
        force=True,
    )
