"""
Logging utility for Aster.

STDOUT is reserved for reports (text or JSON) so that output can be piped;
all log records go to STDERR.
"""

import os
import sys

from loguru import logger as loguru_logger

LOG_FORMAT = "<level>{level: <8}</level> | {name}:{function}:{line} - {message}"


def is_debug_enabled() -> bool:
    """Check if debug mode is enabled."""
    return os.environ.get("DEBUG", "").lower() == "true"


def configure_logging(verbose: bool = False) -> None:
    """Route loguru output to stderr at a level chosen by verbosity.

    Args:
        verbose: Emit DEBUG records instead of only warnings and errors.
    """
    level = "DEBUG" if verbose or is_debug_enabled() else "WARNING"
    loguru_logger.remove()
    loguru_logger.add(sys.stderr, level=level, format=LOG_FORMAT)


# Export loguru logger for direct use
logger = loguru_logger
