"""
Logging setup for signoff.

Log output goes to stderr only: stdout belongs to the CLI report and to the
MCP transport.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional


DEBUG_MODE = os.environ.get("SIGNOFF_DEBUG", "").lower() in ("1", "true", "yes")

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"


def setup_logging(
    level: Optional[int] = None,
    log_file: Optional[Path] = None,
    quiet: bool = False,
) -> logging.Logger:
    """Configure the ``signoff`` logger.

    Args:
        level: Logging level (default: DEBUG if SIGNOFF_DEBUG, else WARNING)
        log_file: Optional path to a log file (always DEBUG)
        quiet: If True, suppress console output

    Returns:
        The configured package logger
    """
    if level is None:
        level = logging.DEBUG if DEBUG_MODE else logging.WARNING

    logger = logging.getLogger("signoff")
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.handlers.clear()

    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(DEBUG_FORMAT if DEBUG_MODE else CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger
