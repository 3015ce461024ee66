"""
Logging configuration for the candlefeed datafeed.

Provides structured JSON logging with optional per-subsystem log files,
log rotation, and masking of upstream credentials.
"""

import json
import logging
import logging.handlers
import os
import re
from datetime import datetime, timezone
from typing import Any, Dict


class SensitiveDataFilter(logging.Filter):
    """Filter to mask bearer tokens and API keys in logs."""

    SENSITIVE_KEYS = {
        "api_key",
        "apikey",
        "secret",
        "token",
        "authorization",
    }

    _BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE)
    _KEY_VALUE = re.compile(
        r"((?:api_key|apikey|secret|token|authorization)\s*[=:]\s*)['\"]?[^\s,'\"&]+",
        re.IGNORECASE,
    )

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask sensitive data in log records."""
        if isinstance(record.msg, str):
            record.msg = self._mask_sensitive_data(record.msg)
        if isinstance(record.args, dict):
            record.args = self._mask_dict(record.args)
        return True

    def _mask_sensitive_data(self, text: str) -> str:
        text = self._BEARER.sub(r"\1***MASKED***", text)
        return self._KEY_VALUE.sub(r"\1***MASKED***", text)

    def _mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        masked = {}
        for key, value in data.items():
            if any(sensitive in key.lower() for sensitive in self.SENSITIVE_KEYS):
                masked[key] = "***MASKED***"
            elif isinstance(value, dict):
                masked[key] = self._mask_dict(value)
            else:
                masked[key] = value
        return masked


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs logs in JSON format."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_data["context"] = record.extra_data

        return json.dumps(log_data)


# logger name -> file under LOG_DIR
LOG_FILES = {
    "candlefeed": "app.log",
    "candlefeed.services.history": "history.log",
    "candlefeed.services.history.client": "upstream.log",
}


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JSONFormatter()
    return logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def setup_logging(config: Any) -> None:
    """
    Set up logging configuration.

    Args:
        config: Configuration object with logging settings
    """
    level = getattr(logging, config.LOG_LEVEL.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    sensitive_filter = SensitiveDataFilter()

    # Console handler (stdout)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.addFilter(sensitive_filter)
    console_handler.setFormatter(_build_formatter(config.LOG_FORMAT))
    root_logger.addHandler(console_handler)

    if not config.LOG_TO_FILE:
        return

    os.makedirs(config.LOG_DIR, exist_ok=True)

    def _rotating(filename: str, handler_level: int) -> logging.Handler:
        # 100MB per file, 10 backups
        handler = logging.handlers.RotatingFileHandler(
            os.path.join(config.LOG_DIR, filename),
            maxBytes=100 * 1024 * 1024,
            backupCount=10,
        )
        handler.setLevel(handler_level)
        handler.addFilter(sensitive_filter)
        handler.setFormatter(_build_formatter(config.LOG_FORMAT))
        return handler

    for logger_name, filename in LOG_FILES.items():
        logger = logging.getLogger(logger_name)
        logger.addHandler(_rotating(filename, level))
        logger.setLevel(level)

    root_logger.addHandler(_rotating("errors.log", logging.ERROR))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(name)
