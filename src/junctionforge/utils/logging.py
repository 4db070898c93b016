"""Logging configuration for junctionforge.

This module provides logging setup for junctionforge, with rich console
output and optional file output.

Features:
    - Rich-formatted console logging
    - File logging for debugging
    - Configurable verbosity levels
    - Progress logging over junction streams
    - Timing of whole runs

Example:
    >>> from junctionforge.utils.logging import setup_logging, get_logger
    >>> setup_logging(verbosity=2)
    >>> logger = get_logger(__name__)
    >>> logger.info("Annotation started")
"""

import logging
import time
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

# =============================================================================
# Constants
# =============================================================================

LOGGER_NAME = "junctionforge"

# Default log format
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Rich console format (when using rich handler)
RICH_FORMAT = "%(message)s"

# Log levels by verbosity
VERBOSITY_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


# =============================================================================
# Setup Functions
# =============================================================================


def setup_logging(
    verbosity: int = 1,
    log_file: Path | str | None = None,
    use_rich: bool = True,
) -> None:
    """Configure logging for junctionforge.

    Args:
        verbosity: Verbosity level (0=warning, 1=info, 2=debug).
        log_file: Optional file to log to.
        use_rich: Use rich for console output.
    """
    level = VERBOSITY_LEVELS.get(verbosity, logging.DEBUG)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else level)

    # Remove existing handlers
    logger.handlers.clear()

    if use_rich:
        console_handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=False,
            show_path=False,
        )
        console_handler.setFormatter(logging.Formatter(RICH_FORMAT))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))

    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        file_handler.setLevel(logging.DEBUG)  # Always log debug to file
        logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Module name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


# =============================================================================
# Progress Logging
# =============================================================================


class ProgressLogger:
    """Periodic progress messages over a stream of unknown length.

    Junction files are read lazily, so unlike a fixed-size batch the total
    is usually unknown; when it is None only the running count is logged.

    Example:
        >>> progress = ProgressLogger(logger, interval=10000)
        >>> for junction in junctions:
        ...     annotate(junction)
        ...     progress.update()
        >>> progress.finish()
    """

    def __init__(
        self,
        logger: logging.Logger,
        total: int | None = None,
        interval: int = 10000,
        description: str = "Annotated",
    ) -> None:
        self.logger = logger
        self.total = total
        self.interval = interval
        self.description = description
        self.count = 0

    def update(self, n: int = 1) -> None:
        """Update progress counter.

        Args:
            n: Number of items completed.
        """
        self.count += n
        if self.count % self.interval != 0:
            return
        if self.total:
            pct = 100 * self.count / self.total
            self.logger.info(f"{self.description}: {self.count:,}/{self.total:,} ({pct:.1f}%)")
        else:
            self.logger.info(f"{self.description}: {self.count:,} junctions")

    def finish(self) -> None:
        """Mark progress as complete."""
        self.logger.info(f"{self.description}: complete ({self.count:,} junctions)")


# =============================================================================
# Timing Utilities
# =============================================================================


class Timer:
    """Context manager for timing operations.

    Example:
        >>> with Timer("Annotation", logger):
        ...     run()
        # Logs: "Annotation completed in 1.23s"
    """

    def __init__(self, description: str, logger: logging.Logger | None = None) -> None:
        self.description = description
        self.logger = logger or logging.getLogger(LOGGER_NAME)
        self.start_time: float = 0
        self.elapsed: float = 0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.elapsed = time.perf_counter() - self.start_time
        self.logger.info(f"{self.description} completed in {self.elapsed:.2f}s")
