"""Package logger and level helpers.

Modules take a child of the package logger:

    from assetgraph.log import logger

    logger = logger.getChild(__name__)
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

LOG_FORMAT = "level=%(levelname)s msg=%(message)s"

logger = logging.getLogger("assetgraph")


class StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is at emit time."""

    def __init__(self):
        super().__init__(sys.stderr)

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def setup(level: int = logging.INFO) -> None:
    """Attach a stderr handler to the package logger (idempotent)."""
    if not any(isinstance(h, StderrHandler) for h in logger.handlers):
        handler = StderrHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)


@contextmanager
def set_loggers_level(level: int) -> Iterator[None]:
    """Temporarily set the package logger level, restoring it on exit."""
    previous = logger.level
    logger.setLevel(level)
    try:
        yield
    finally:
        logger.setLevel(previous)
