"""Structured logging infrastructure for the application.

Generation outcomes travel as ``extra={"extra_fields": {...}}``. Build that
mapping with :func:`log_fields` so the JSON formatter can emit each field at
the top level and the console formatter can append the outcome fields.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

# Shown by the console formatter when a record carries them
OUTCOME_FIELDS = ("generation_status", "attempt", "state", "severity", "iterations")


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def log_fields(**fields: Any) -> dict[str, dict[str, Any]]:
    """Build the ``extra`` argument for a log call.

    Args:
        **fields: Values to attach to the record; None values are dropped
            and enums are reduced to their values

    Returns:
        Mapping suitable for ``logger.info(..., extra=...)``
    """
    return {
        "extra_fields": {key: _plain(value) for key, value in fields.items() if value is not None}
    }


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add custom fields from extra
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class SimpleFormatter(logging.Formatter):
    """Simple console formatter with colors."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors.

        Outcome fields carried in ``extra_fields`` are appended as
        ``key=value`` pairs; other extra fields only reach the JSON output.

        Args:
            record: Log record to format

        Returns:
            Colored log string
        """
        color = self.COLORS.get(record.levelname, "")
        reset = self.RESET

        # Format: [LEVEL] logger_name: message (key=value ...)
        formatted = f"{color}[{record.levelname}]{reset} {record.name}: {record.getMessage()}"

        extra = getattr(record, "extra_fields", None) or {}
        outcome = [f"{key}={extra[key]}" for key in OUTCOME_FIELDS if key in extra]
        if outcome:
            formatted += f" ({' '.join(outcome)})"

        # Add exception if present
        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def setup_logging(
    log_level: str = "INFO",
    log_file: str | None = None,
    structured: bool = False,
    quiet: bool = False,
) -> None:
    """Set up application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for file logging
        structured: Use structured JSON logging on the console
        quiet: If True, only warnings and errors from lexbound are shown
    """
    # Get root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    root_logger.handlers.clear()

    # Console handler; stdout is reserved for CLI answers
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(StructuredFormatter() if structured else SimpleFormatter())
    root_logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(StructuredFormatter())  # Always use JSON for files
        root_logger.addHandler(file_handler)

    # Set library log levels
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)

    # In quiet mode, suppress verbose internal logs
    if quiet:
        logging.getLogger("lexbound").setLevel(logging.WARNING)
    else:
        root_logger.info(f"Logging initialized at {log_level} level")
