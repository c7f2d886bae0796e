"""
logging_config.py — Centralized Logging Configuration

This module configures unified logging behavior for the order workflow and
the demo runner. All modules log through loggers obtained from `get_logger()`.

Features:
    • Console output on stderr, so demo output on stdout stays readable
    • Optional persistent log file
    • Process ID tagging for multi-process visibility
    • Standardized log format for all modules
    • Reduced verbosity for external dependencies (e.g., httpx)
"""

import logging
import sys
from typing import Optional

from .config import Config

LOG_FORMAT = '%(asctime)s - %(levelname)s - [PID:%(process)d] - %(message)s'


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    """
    Configures the global logging system for the application.

    Args:
        level (str, optional): Log level name. Defaults to `Config.LOG_LEVEL`.
        log_file (str, optional): Path of a log file. Defaults to `Config.LOG_FILE`;
            an empty value disables file output.
    """
    level = (level or Config.LOG_LEVEL).upper()
    log_file = Config.LOG_FILE if log_file is None else log_file

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    # Reduce verbosity from external libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name):
    """
    Returns a logger for a given module or component name.

    Args:
        name (str): The logger name, typically the module's __name__.
    """
    return logging.getLogger(name)
