# utils/logging_utils.py

"""
Lightweight logging utilities for the sphere-streams project.

This helper gives you:

    - a single place to configure log format / level,
    - automatic creation of the log directory,
    - a simple `get_logger(__name__)` function.

Usage:

    from utils.logging_utils import get_logger

    logger = get_logger(__name__)
    logger.info("Checkpoint %s saved", ordinal)
"""

from __future__ import annotations

import logging
from logging import Logger
from pathlib import Path
from typing import Optional

from config import LOGS_DIR


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Multiple calls with the same name return the same logger instance.
_LOGGER_CACHE: dict[str, Logger] = {}


def _ensure_log_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def configure_root_logger(
    level: int = logging.INFO,
    log_to_file: bool = False,
    log_to_stdout: bool = True,
    filename: str = "sphere_streams.log",
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure the root logger for the entire project.

    Call this once near the start of main.py. If you never call it, no
    handler is installed and Python only prints WARNING and above, so the
    INFO progress messages of the library modules are not shown.

    Args:
        level:
            Logging level (e.g., logging.INFO, logging.DEBUG).
        log_to_file:
            If True, write logs to `log_dir / filename`.
        log_to_stdout:
            If True, also log to stderr.
        filename:
            Name of the log file.
        log_dir:
            Directory for the log file; defaults to config.LOGS_DIR.
    """
    root = logging.getLogger()
    if root.handlers:
        # Already configured; only adjust the level
        root.setLevel(level)
        return

    handlers: list[logging.Handler] = []
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_to_file:
        directory = log_dir or LOGS_DIR
        _ensure_log_dir(directory)
        fh = logging.FileHandler(directory / filename, encoding="utf-8")
        fh.setFormatter(formatter)
        handlers.append(fh)

    if log_to_stdout:
        sh = logging.StreamHandler()
        sh.setFormatter(formatter)
        handlers.append(sh)

    logging.basicConfig(level=level, handlers=handlers)


def get_logger(name: Optional[str] = None) -> Logger:
    """
    Get a (cached) logger for `name`, usually the caller's __name__.

    Levels are left to the root logger so `configure_root_logger(level=...)`
    controls verbosity everywhere.
    """
    if name is None:
        name = "__main__"

    if name in _LOGGER_CACHE:
        return _LOGGER_CACHE[name]

    logger = logging.getLogger(name)
    _LOGGER_CACHE[name] = logger
    return logger
