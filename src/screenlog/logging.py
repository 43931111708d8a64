"""Structured JSON logging for screenlog.

Provides audit-friendly logging with contextual fields for screenshot
writes, skips, failures and run loop state changes.

Usage:
    from screenlog.logging import setup_logging, get_logger

    setup_logging("INFO")
    log = get_logger("screenlog.engine")
    log.info("screenshot_written", extra={"path": "/tmp/x.png", "file_size": 50000})
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pythonjsonlogger import jsonlogger

from screenlog import __version__


class ScreenlogJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that adds application context to all log records."""

    def add_fields(
        self,
        log_record: dict,
        record: logging.LogRecord,
        message_dict: dict,
    ) -> None:
        """Add standard fields to every log record."""
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["app_version"] = __version__

        if "message" not in log_record and record.getMessage():
            log_record["message"] = record.getMessage()

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        """Format time as ISO 8601."""
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.isoformat()


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    max_bytes: int = 10_000_000,  # 10MB
    backup_count: int = 5,
) -> None:
    """Configure root logger with JSON formatting.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path for rotating file handler
        max_bytes: Max size per log file for rotation
        backup_count: Number of backup files to keep
    """
    formatter = ScreenlogJsonFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # JSON to stderr so stdout stays free for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


@lru_cache(maxsize=32)
def get_logger(name: str) -> logging.Logger:
    """Get a named logger.

    Args:
        name: Logger name (e.g., 'screenlog.engine', 'screenlog.capture')

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


# --- Audit Event Functions ---


def log_screenshot_written(
    logger: logging.Logger,
    path: Path,
    file_size: int,
) -> None:
    """Log a screenshot that was written to disk.

    Args:
        logger: Logger instance
        path: Full path of the written image
        file_size: Size of the image in bytes
    """
    logger.info(
        "Wrote screenshot %s",
        path,
        extra={
            "event": "screenshot_written",
            "path": str(path),
            "file_size": file_size,
        },
    )


def log_screenshot_skipped(
    logger: logging.Logger,
    reason: str,
    file_size: int | None = None,
) -> None:
    """Log a capture that was not written.

    Args:
        logger: Logger instance
        reason: Why the capture was skipped (duplicate)
        file_size: Optional size of the discarded frame
    """
    extra = {
        "event": "screenshot_skipped",
        "reason": reason,
    }
    if file_size is not None:
        extra["file_size"] = file_size
    logger.info("Screenshot skipped", extra=extra)


def log_capture_failed(
    logger: logging.Logger,
    error: str,
    iteration: int,
) -> None:
    """Log a capture provider failure.

    Args:
        logger: Logger instance
        error: Error message
        iteration: One-based iteration number of the run loop
    """
    logger.warning(
        "Capture failed",
        extra={
            "event": "capture_failed",
            "error": error,
            "iteration": iteration,
        },
    )


def log_write_failed(
    logger: logging.Logger,
    error: str,
    iteration: int,
    path: Path | None = None,
) -> None:
    """Log a filesystem failure while persisting a screenshot.

    Args:
        logger: Logger instance
        error: Error message
        iteration: One-based iteration number of the run loop
        path: Directory or file that could not be written, when known
    """
    extra = {
        "event": "write_failed",
        "error": error,
        "iteration": iteration,
    }
    if path is not None:
        extra["path"] = str(path)
    logger.error("Screenshot write failed", extra=extra)


def log_state_change(
    logger: logging.Logger,
    old_state: str,
    new_state: str,
    trigger: str | None = None,
) -> None:
    """Log a run loop state transition.

    Args:
        logger: Logger instance
        old_state: Previous state
        new_state: New state
        trigger: What triggered the change
    """
    extra = {
        "event": "state_change",
        "old_state": old_state,
        "new_state": new_state,
    }
    if trigger:
        extra["trigger"] = trigger
    logger.debug("State changed", extra=extra)


def log_run_finished(
    logger: logging.Logger,
    iterations: int,
    written: int,
    skipped: int,
    failed: int,
    cancelled: bool,
) -> None:
    """Log the end of a capture run with its totals."""
    logger.info(
        "Capture run finished",
        extra={
            "event": "run_finished",
            "iterations": iterations,
            "written": written,
            "skipped": skipped,
            "failed": failed,
            "cancelled": cancelled,
        },
    )
