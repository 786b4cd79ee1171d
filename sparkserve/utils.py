"""
Utility functions for sparkserve.

Includes logging setup and the JSON log formatter.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler


def setup_logging(
    log_level: str = "INFO",
    dev_mode: bool = False,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up logging for the server process.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        dev_mode: Human-readable rich console output instead of JSON lines
        log_file: Optional file that receives structured (JSON) records

    Returns:
        Configured "sparkserve" logger
    """
    logger = logging.getLogger("sparkserve")
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.handlers = []  # Clear existing handlers
    logger.propagate = False

    # Console handler
    if dev_mode:
        console_handler = RichHandler(rich_tracebacks=True, show_path=False)
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(StructuredFormatter())
    logger.addHandler(console_handler)

    # File handler
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        if hasattr(record, "event"):
            log_data["event"] = record.event
        if hasattr(record, "metadata"):
            log_data["metadata"] = record.metadata

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)
