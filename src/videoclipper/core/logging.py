"""Structured logging setup for videoclipper."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_FILE_NAME = "videoclipper.log"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
MAX_LOG_BYTES = 5 * 1024 * 1024
KEPT_SESSIONS = 2


def verbosity_to_level(verbose: int = 0, quiet: bool = False) -> int:
    """Map -v/-q counts to a logging level."""
    if quiet:
        return logging.WARNING
    if verbose <= 0:
        return logging.INFO
    if verbose == 1:
        return logging.DEBUG
    return TRACE


def setup_logging(level: int | str = logging.INFO, log_dir: Path | None = None) -> Path | None:
    """Configure console logging and, at debug verbosity, a per-session log file.

    Returns the log file path when one is written.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        log_time_format="%H:%M:%S",
    )
    console_handler.setLevel(level)
    root.addHandler(console_handler)

    if level > logging.DEBUG or log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_BYTES,
        backupCount=KEPT_SESSIONS,
        encoding="utf-8",
        delay=True,
    )
    # one file per session
    if log_file.exists() and log_file.stat().st_size > 0:
        file_handler.doRollover()
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    file_handler.setLevel(level)
    root.addHandler(file_handler)
    logging.getLogger(__name__).debug(f"Writing session log to {log_file}")
    return log_file
