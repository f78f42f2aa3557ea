"""Provides loggers configured for the friendnet services."""

import logging
import sys
from typing import IO

from .context import get_application_config

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def getLogger(name: str, stream: IO = sys.stderr) -> logging.Logger:
    """
    Wrapper for :func:`logging.getLogger` that applies configuration.

    The level and optional log file are read from ``LOGLEVEL`` and ``LOGFILE``
    in the application config (or the environment, outside of an app).

    Parameters
    ----------
    name : str
    stream : file-like
        Where log messages go if no ``LOGFILE`` is configured.

    Returns
    -------
    :class:`logging.Logger`
    """
    config = get_application_config()
    level = config.get('LOGLEVEL', logging.INFO)
    try:
        level = int(level)
    except (TypeError, ValueError):
        level = logging.getLevelName(str(level).upper())
        if not isinstance(level, int):
            level = logging.INFO
    logfile = config.get('LOGFILE')

    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not logger.handlers:
        if logfile:
            handler: logging.Handler = logging.FileHandler(logfile)
        else:
            handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
