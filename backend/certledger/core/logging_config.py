"""
Logging configuration for the application.

Attaches a console handler (and optionally a file handler) to the
``certledger`` logger so service log lines are emitted regardless of how
the server process configures the root logger. Configured at most once.
"""

import logging
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """
    Configure the ``certledger`` logger.

    Args:
        level: Logging level name, case insensitive
        logfile: Optional path of a file to log to as well
    """
    logger = logging.getLogger("certledger")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if logger.handlers:
        return

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
