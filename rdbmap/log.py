"""Logging setup for scripts and case studies.

Library modules only create module loggers; handlers are left to the
application. ``configure_logging`` is a convenience for command-line use.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single stream handler to the ``rdbmap`` logger."""
    logger = logging.getLogger("rdbmap")
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger