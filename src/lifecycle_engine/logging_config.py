"""
Logging Configuration for the Lifecycle Engine.

Provides structured logging with:
- JSON formatting for production
- Human-readable formatting for development
- Context adapter carrying extra fields (entity kind, request ID, ...)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Dict, Optional


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs logs as JSON objects for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ReadableFormatter(logging.Formatter):
    """Human-readable log formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        level = f"{color}{record.levelname:8s}{reset}"

        message = f"{timestamp} {level} [{record.name}] {record.getMessage()}"

        if hasattr(record, "extra_data") and record.extra_data:
            extras = " | ".join(f"{k}={v}" for k, v in record.extra_data.items())
            message += f" | {extras}"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that attaches its context to every record as extra_data."""

    def process(self, msg: str, kwargs: Dict) -> tuple:
        extra = kwargs.get("extra", {})
        extra_data = dict(self.extra)
        extra_data.update(extra.get("extra_data", {}))
        extra["extra_data"] = extra_data
        kwargs["extra"] = extra
        return msg, kwargs


def configure_logging(level: str = "INFO", json_output: bool = False, stream=None) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON formatted logs
        stream: Output stream; defaults to stderr so stdout stays clean for CLI output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else ReadableFormatter())
    root_logger.addHandler(handler)


def get_logger(name: str, **extra) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__)
        **extra: Additional context to include in all logs
    """
    return ContextLogger(logging.getLogger(name), extra)


def configure_from_settings(
    settings: Optional[object] = None,
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Apply log level and format from EngineSettings.

    Args:
        settings: Settings to read; defaults to get_settings()
        level: Overrides settings.log_level when given
        json_output: Overrides settings.log_json when given
    """
    if settings is None:
        from .config.settings import get_settings
        settings = get_settings()
    configure_logging(
        level=level or settings.log_level,
        json_output=settings.log_json if json_output is None else json_output,
    )
