"""
Logging setup for fm-smt.

Every module logs through ``logging.getLogger(__name__)``; this module only
decides where the ``fm_smt`` logger tree writes to and at which level.
"""
import logging
from typing import Optional, Union

ROOT_LOGGER_NAME = "fm_smt"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_handler: Optional[logging.Handler] = None


def configure_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """
    Attach a single stream handler to the package logger and set its level.

    Calling this again only changes the level.

    Args:
        level: Logging level name or number

    Returns:
        The package root logger
    """
    global _handler
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
    return logger
