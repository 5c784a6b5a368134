"""Logging configuration for v4l-saver.

Operator-facing progress goes to stderr through the root logger so that
listing output on stdout stays machine-readable. An optional log file gets
the detailed, millisecond-stamped format.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Optional, TextIO

DETAILED_FORMAT = (
    "%(asctime)s [%(threadName)-15s] %(levelname)-5s %(filename)s:%(lineno)d - %(message)s"
)
CONSOLE_FORMAT = "%(levelname)-5s %(message)s"


class MillisecondFormatter(logging.Formatter):
    """Formatter whose timestamps keep milliseconds under a custom datefmt."""

    def formatTime(self, record, datefmt=None):
        stamp = time.strftime(datefmt or "%Y-%m-%d %H:%M:%S", self.converter(record.created))
        return f"{stamp}.{int(record.msecs):03d}"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure application-wide logging.

    Log file format: YYYY-MM-DD HH:MM:SS.mmm [ThreadName     ] LEVEL  filename.py:line - message
    Console format:  LEVEL message

    Args:
        log_level: Logging level for the console (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file that receives everything at DEBUG
        stream: Console stream (default: sys.stderr)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = []

    if log_file is not None:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                MillisecondFormatter(fmt=DETAILED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
            )
            handlers.append(file_handler)
        except OSError as e:
            print(f"Warning: Could not create log file {log_file}: {e}", file=sys.stderr)

    stream_handler = logging.StreamHandler(stream or sys.stderr)
    stream_handler.setLevel(numeric_level)
    stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handlers.append(stream_handler)

    # Repeated calls replace earlier handlers
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG)

    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging initialized at level {log_level}")
    if log_file is not None:
        logger.debug(f"Log file: {Path(log_file).absolute()}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Saving /dev/video0")
    """
    return logging.getLogger(name)
