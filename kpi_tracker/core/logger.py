"""
Logging setup shared across the application.
"""

import logging
import sys

from kpi_tracker.core.config import get_settings

_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def setup_logger(name: str) -> logging.Logger:
    """
    Get a logger with the application's handler and level applied.

    Calling this repeatedly for the same name does not add duplicate handlers.
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        log.addHandler(handler)
        log.propagate = False
    log.setLevel(get_settings().LOG_LEVEL.upper())
    return log


logger = setup_logger("kpi_tracker")
