"""
Logging for mincurv.

This module provides:
- Configurable log levels via environment variables
- JSON formatting option
- Performance profiling utilities used to report setup and solve times
"""

from __future__ import annotations

import logging
import os
import sys
import time
from contextlib import contextmanager
from typing import Optional

# =============================================================================
# Log Level Configuration
# =============================================================================

LOG_LEVEL_ENV = "MINCURV_LOG_LEVEL"
LOG_FORMAT_ENV = "MINCURV_LOG_FORMAT"
LOG_FILE_ENV = "MINCURV_LOG_FILE"

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'

ROOT_LOGGER_NAME = "mincurv"


def get_log_level() -> int:
    """Get log level from environment variable."""
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def get_log_format() -> str:
    """Get log format from environment variable."""
    format_type = os.environ.get(LOG_FORMAT_ENV, "default").lower()
    if format_type == "json":
        return JSON_FORMAT
    return DEFAULT_FORMAT


def get_log_file() -> Optional[str]:
    """Get log file path from environment variable."""
    return os.environ.get(LOG_FILE_ENV)


# =============================================================================
# Logger Setup
# =============================================================================

_root_logger: Optional[logging.Logger] = None
_handlers: list = []


def setup_logging(
    level: Optional[int] = None,
    format_str: Optional[str] = None,
    log_file: Optional[str] = None,
    force: bool = False,
) -> logging.Logger:
    """Setup the mincurv logging system.

    Args:
        level: Log level (default: from env or INFO).
        format_str: Log format string (default: from env or DEFAULT_FORMAT).
        log_file: Optional file to write logs to.
        force: Force reconfiguration even if already setup.

    Returns:
        Configured root logger.
    """
    global _root_logger, _handlers

    if _root_logger is not None and not force:
        return _root_logger

    if _root_logger is not None:
        for handler in _handlers:
            _root_logger.removeHandler(handler)
            handler.close()
    _handlers = []

    _root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    _root_logger.setLevel(level or get_log_level())

    formatter = logging.Formatter(format_str or get_log_format())

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    _root_logger.addHandler(console_handler)
    _handlers.append(console_handler)

    file_path = log_file or get_log_file()
    if file_path:
        file_handler = logging.FileHandler(file_path)
        file_handler.setFormatter(formatter)
        _root_logger.addHandler(file_handler)
        _handlers.append(file_handler)

    return _root_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (will be prefixed with 'mincurv.').
              If None, returns the root mincurv logger.

    Returns:
        Logger instance.
    """
    if _root_logger is None:
        setup_logging()

    if name:
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return _root_logger


# =============================================================================
# Performance Profiling
# =============================================================================


@contextmanager
def profile_scope(name: str, log_level: int = logging.DEBUG, logger: Optional[logging.Logger] = None):
    """Context manager for profiling code execution time.

    Args:
        name: Name of the profiled scope.
        log_level: Log level for the timing message.
        logger: Logger to report to (default: root mincurv logger).

    Example:
        with profile_scope("setup"):
            optimizer.prepare()
    """
    start_time = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start_time) * 1000.0
        (logger or get_logger()).log(log_level, "%s took %.3f ms", name, elapsed_ms)


class TimeTracker:
    """Track execution times for performance analysis.

    Example:
        tracker = TimeTracker("solve")
        with tracker.measure():
            optimizer.solve(output)
        mean_ms, max_ms, count = tracker.get_stats()
    """

    def __init__(self, name: str):
        self.name = name
        self._times: list[float] = []

    def add(self, timing_ms: float) -> None:
        """Add a timing measurement in milliseconds."""
        self._times.append(timing_ms)

    @contextmanager
    def measure(self):
        """Context manager measuring the enclosed block in milliseconds."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self._times.append((time.perf_counter() - start) * 1000.0)

    @property
    def last(self) -> Optional[float]:
        """Most recent measurement in milliseconds, if any."""
        return self._times[-1] if self._times else None

    def get_stats(self) -> tuple[float, float, int]:
        """Get timing statistics.

        Returns:
            Tuple of (mean_ms, max_ms, count).
        """
        if not self._times:
            return 0.0, 0.0, 0

        import numpy as np

        return float(np.mean(self._times)), float(np.max(self._times)), len(self._times)

    def reset(self) -> None:
        """Reset timing data."""
        self._times = []


setup_logging()
