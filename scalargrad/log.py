"""
Logging setup for scalargrad.

Example:
    >>> from scalargrad.log import get_logger
    >>> logger = get_logger("xval")
    >>> logger.info("starting search")
"""

from __future__ import annotations
import logging
from typing import Optional

_LOGGER_NAME = "scalargrad"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Return the scalargrad logger, or one of its children.

    The base logger gets a single stream handler the first time it is
    requested. Child loggers propagate to it.

    Args:
        name: Optional child logger name (e.g. "train", "xval").
        level: Level set on the base logger when it is first configured.

    Returns:
        logging.Logger: Configured logger instance.
    """
    base = logging.getLogger(_LOGGER_NAME)

    # Configure only once
    if not base.handlers:
        base.setLevel(level)
        base.propagate = False

        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        base.addHandler(handler)

    if name is None:
        return base
    return base.getChild(name)


def set_level(level: int) -> None:
    """Change the level of the base scalargrad logger."""
    get_logger().setLevel(level)
