"""
Logging setup for the Ledger API.

Every module logs through a module-level logger:

    logger = logging.getLogger(__name__)

and setup_logging() is called once when the application is imported, so
all of them share a single console handler and format.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the root logger and return the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Returns:
        The "ledger" logger.
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logger = logging.getLogger("ledger")
    logger.setLevel(level.upper())
    return logger
