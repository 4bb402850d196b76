"""
Logging configuration for the guidedAL library.

Every module logs through ``get_logger(__name__)``; one ``setup_logging()``
call attaches handlers to the ``guidedAL`` logger and so configures the whole
tree. Each setting is taken from the argument if given, else from its
``GAL_LOG_*`` environment variable, else from the module default.
"""

import logging
import logging.handlers
import os
import sys
import time
from pathlib import Path
from typing import Optional, Dict, Any


ROOT_LOGGER_NAME = "guidedAL"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

ENV_LOG_LEVEL = "GAL_LOG_LEVEL"
ENV_LOG_FILE = "GAL_LOG_FILE"
ENV_LOG_CONSOLE = "GAL_LOG_CONSOLE"

# third-party loggers set to these levels whenever guidedAL logging is configured
EXTERNAL_LOG_LEVELS = {
    "networkit": "WARNING",
    "numba": "WARNING",
}


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a guidedAL module.

    Examples
    --------
    >>> logger = get_logger(__name__)
    >>> logger.debug("Picked node %s", 12)
    """
    return logging.getLogger(name)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name, "").strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


def _level_number(name: str) -> int:
    number = logging.getLevelName(str(name).upper())
    if not isinstance(number, int):
        raise ValueError(f"Invalid logging level: {name}")
    return number


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    console: Optional[bool] = None,
    force_setup: bool = False
) -> logging.Logger:
    """
    Attach handlers to the ``guidedAL`` logger.

    Parameters
    ----------
    level : str, optional
        Level name; GAL_LOG_LEVEL, then INFO
    log_file : str, optional
        Rotating log file; GAL_LOG_FILE, otherwise no file is written
    console : bool, optional
        Log to stdout; GAL_LOG_CONSOLE, then True
    force_setup : bool, default False
        Replace handlers from an earlier call. Without it a configured
        logger is returned unchanged.

    Returns
    -------
    logging.Logger
        The ``guidedAL`` logger

    Raises
    ------
    ValueError
        If the level name is not a logging level

    Examples
    --------
    >>> logger = setup_logging(level="DEBUG", log_file="/tmp/al-logs/guidedAL.log")
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.handlers:
        if not force_setup:
            return root
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()

    level = level or os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)
    log_file = log_file or os.getenv(ENV_LOG_FILE)
    if console is None:
        console = _env_flag(ENV_LOG_CONSOLE, True)

    root.setLevel(_level_number(level))
    formatter = logging.Formatter(DEFAULT_LOG_FORMAT, DEFAULT_DATE_FORMAT)

    handlers: list = []
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8"
        ))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.propagate = False

    configure_external_library_logging()
    root.info("Logging configured: level=%s console=%s file=%s", level, console, log_file)
    return root


def configure_external_library_logging(levels: Optional[Dict[str, str]] = None) -> None:
    """Set third-party loggers to the given levels, EXTERNAL_LOG_LEVELS by default."""
    for name, level in (levels or EXTERNAL_LOG_LEVELS).items():
        logging.getLogger(name).setLevel(_level_number(level))


def log_function_entry(func_name: str, **kwargs) -> None:
    """
    Log a function call and its arguments at DEBUG level.

    Examples
    --------
    >>> log_function_entry("pick", max_picks=5)
    """
    logger = get_logger(f"{ROOT_LOGGER_NAME}.debug")
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Entering %s(%s)", func_name, ", ".join(f"{k}={v}" for k, v in kwargs.items()))


def log_performance_metric(
    operation: str,
    duration: float,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """Report how long an operation took on ``guidedAL.performance``."""
    message = f"Performance: {operation} completed in {duration:.3f}s"
    if details:
        message += " (" + ", ".join(f"{k}={v}" for k, v in details.items()) + ")"
    get_logger(f"{ROOT_LOGGER_NAME}.performance").info(
        message, extra={"operation": operation, "duration": duration}
    )


class LoggingTimer:
    """
    Context manager that reports the wall time of its block.

    Examples
    --------
    >>> with LoggingTimer("build_hierarchy", {"nodes": 1000}):
    ...     pass
    """

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.details = details or {}
        self.start_time: Optional[float] = None

    def __enter__(self) -> 'LoggingTimer':
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is not None:
            log_performance_metric(self.operation, time.perf_counter() - self.start_time, self.details)
