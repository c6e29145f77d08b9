"""Logging configuration and utilities."""
import json
import logging
import logging.handlers
import os
import re
import sys
from datetime import datetime, timezone
from typing import Optional

_SECRET_PATTERN = re.compile(r"((?:Basic|Bearer)\s+)[A-Za-z0-9+/=._-]+", re.IGNORECASE)
_HEADER_PATTERN = re.compile(r"(['\"]?Authorization['\"]?\s*[:=]\s*['\"]?)[^'\",}]+", re.IGNORECASE)


def redact(text: str) -> str:
    """Mask Authorization header values and Basic/Bearer tokens in text."""
    text = _HEADER_PATTERN.sub(r"\1<redacted>", text)
    return _SECRET_PATTERN.sub(r"\1<redacted>", text)


class RedactingFilter(logging.Filter):
    """Keep credentials out of every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "lineno": record.lineno,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    max_bytes: int = 10_485_760,  # 10MB
    backup_count: int = 5,
    log_json: bool = False,
) -> None:
    """Configure logging for applications embedding the client.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, logs to stderr only.
        log_format: Optional custom log format. Uses default if None.
        max_bytes: Maximum size of each log file before rotation.
        backup_count: Number of backup log files to keep.
        log_json: Emit one JSON object per record instead of text.
    """
    if log_format is None:
        log_format = "%(asctime)s - %(levelname)-8s - [%(name)s:%(lineno)d] - %(message)s"

    if log_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(log_format)

    redacting_filter = RedactingFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level.upper())
    root_logger.handlers = []

    # stdout carries command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(redacting_filter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(redacting_filter)
        root_logger.addHandler(file_handler)

    # httpx logs full request lines at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name.

    Args:
        name: Name for the logger, typically __name__

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
