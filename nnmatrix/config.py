"""
config.py
~~~~~~~~~

Package-wide constants and logging setup.
"""

import os
import logging
from typing import Optional, Union

import numpy as np

# Storage and wire formats
DTYPE = np.float32
WIRE_DTYPE = '>f4'  # big-endian IEEE-754 single precision
FLOAT_SIZE = 4

# Maximum fraction digits shown by Matrix.print
PRINT_DECIMALS = 5

LOG_LEVEL_ENV = 'NNMATRIX_LOG_LEVEL'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def resolve_log_level(level: Optional[Union[str, int]] = None) -> int:
    """
    Turn a level name or number into a logging level.

    Falls back to the NNMATRIX_LOG_LEVEL environment variable when no
    level is given, and to INFO when the name is unknown.

    Args:
        level: Level name ('DEBUG', 'info', ...) or numeric level

    Returns:
        int: A logging module level
    """
    if isinstance(level, int):
        return level

    level_str = (level or os.getenv(LOG_LEVEL_ENV, 'INFO')).upper()
    resolved = getattr(logging, level_str, None)
    if not isinstance(resolved, int):
        return logging.INFO
    return resolved


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """
    Set up logging for applications embedding nnmatrix.

    The library itself never calls this; importing nnmatrix stays silent
    until the host opts in.

    Args:
        level: Level name or number; defaults to NNMATRIX_LOG_LEVEL or INFO
    """
    log_level = resolve_log_level(level)

    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    logging.getLogger('nnmatrix').setLevel(log_level)
