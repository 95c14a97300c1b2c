"""
logging_setup.py - Logging Configuration

Console output for everyday use, plus an optional rotating log file.
"""

from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional
import logging

CONSOLE_FORMAT = "[%(levelname)s] %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: int = logging.WARNING,
    log_file: Optional[Path] = None,
    file_level: int = logging.INFO,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> logging.Logger:
    """
    Configure application-wide logging

    Args:
        level: Level for the console handler
        log_file: Optional path of a rotating log file
        file_level: Level for the file handler
        max_bytes: Max size in bytes for rotating file
        backup_count: Number of backup log files to keep

    Returns:
        The root logger
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)  # Accept all logs; handlers will filter

    # Replace handlers from an earlier call
    for handler in list(root.handlers):
        if getattr(handler, "_rule_renamer", False):
            root.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler._rule_renamer = True
    root.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        file_handler._rule_renamer = True
        root.addHandler(file_handler)

    return root
