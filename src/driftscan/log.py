"""Logging setup for driftscan.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
configure_logging() once to attach a handler to the package logger.
"""

import logging
import sys

DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int = logging.WARNING, fmt: str = DEFAULT_FORMAT, stream=None) -> logging.Logger:
    """Attach a single stream handler to the ``driftscan`` logger.

    Safe to call repeatedly: the handler is only added once, later calls
    just adjust the level.
    """
    logger = logging.getLogger("driftscan")
    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
