"""
Logging for the validation bot.

Two layers live here: the console logger of the `nalanda_bot` package
(with one-glyph prefixes per kind of line), and RunLogger, the per-run
event stream that also pushes LogEntry objects to the caller's callbacks.
"""

import logging
import sys
from dataclasses import dataclass
from typing import Callable, Optional

from .models import LogEntry


LOGGER_NAME = 'nalanda_bot'
LOG_FORMAT = '%(asctime)s %(levelname)-8s | %(message)s'
DATE_FORMAT = '%H:%M:%S'

# Prefix glyph and stdlib level per kind of console line
PREFIXES = {
    'step': ('→', logging.INFO),
    'success': ('✓', logging.INFO),
    'warning': ('⚠', logging.WARNING),
    'error': ('✗', logging.ERROR),
}


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name on a terminal."""

    COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.COLORS.get(record.levelno)
        if color is None:
            return super().format(record)

        levelname = record.levelname
        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers see the record unchanged
            record.levelname = levelname


def setup_logging(verbose: bool = False, use_colors: bool = True) -> logging.Logger:
    """
    Configure the application logger for console output.

    Safe to call repeatedly: existing handlers are replaced, not stacked.

    Args:
        verbose: DEBUG level when True, INFO otherwise
        use_colors: Color level names when stdout is a terminal

    Returns:
        The configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    logger.handlers.clear()

    formatter_class = ColoredFormatter if use_colors and sys.stdout.isatty() else logging.Formatter
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter_class(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _log_prefixed(kind: str, message: str, logger: Optional[logging.Logger]):
    glyph, level = PREFIXES[kind]
    (logger or get_logger()).log(level, f"{glyph} {message}")


def log_section(title: str, logger: Optional[logging.Logger] = None):
    """Log a banner that opens a section of console output."""
    logger = logger or get_logger()
    logger.info("")
    logger.info("=" * 60)
    logger.info(f"  {title}")
    logger.info("=" * 60)


def log_step(step: str, logger: Optional[logging.Logger] = None):
    _log_prefixed('step', step, logger)


def log_success(message: str, logger: Optional[logging.Logger] = None):
    _log_prefixed('success', message, logger)


def log_warning(warning: str, logger: Optional[logging.Logger] = None):
    _log_prefixed('warning', warning, logger)


def log_error(error: str, logger: Optional[logging.Logger] = None):
    _log_prefixed('error', error, logger)


@dataclass
class AutomationCallbacks:
    """
    Caller-supplied sinks for one run.

    Attributes:
        on_log: Receives every LogEntry, synchronously and in emission order
        on_progress: Optionally receives a coarse progress percentage (0-100)
    """
    on_log: Callable[[LogEntry], None]
    on_progress: Optional[Callable[[int], None]] = None


class RunLogger:
    """
    Event stream of a single run.

    Every entry is mirrored to the application logger and pushed to the
    caller's on_log callback. A RunLogger is one-shot: a new run gets a new one.
    """

    _MIRRORS = {
        'info': log_step,
        'success': log_success,
        'warning': log_warning,
        'error': log_error,
    }

    def __init__(self, callbacks: Optional[AutomationCallbacks] = None,
                 logger: Optional[logging.Logger] = None):
        self.callbacks = callbacks
        self.logger = logger or get_logger()

    def emit(self, level: str, message: str) -> LogEntry:
        entry = LogEntry(level=level, message=message)
        self._MIRRORS[level](message, self.logger)
        if self.callbacks is not None:
            self.callbacks.on_log(entry)
        return entry

    def info(self, message: str) -> LogEntry:
        return self.emit('info', message)

    def success(self, message: str) -> LogEntry:
        return self.emit('success', message)

    def warning(self, message: str) -> LogEntry:
        return self.emit('warning', message)

    def error(self, message: str) -> LogEntry:
        return self.emit('error', message)

    def debug(self, message: str):
        """Debug lines go to the application logger only, never to the audit stream."""
        self.logger.debug(message)

    def progress(self, percent: int):
        percent = max(0, min(100, int(percent)))
        self.logger.debug(f"Progress: {percent}%")
        if self.callbacks is not None and self.callbacks.on_progress is not None:
            self.callbacks.on_progress(percent)
