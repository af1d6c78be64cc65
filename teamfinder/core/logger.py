"""
Centralized logging configuration for the Team Finder services.

Provides a unified logging interface with:
- Structured logging with correlation IDs
- JSON output for production and colored console output for development
- Optional file output
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from teamfinder.core.config import config
from teamfinder.core.correlation_id import peek_correlation_id

# Attributes present on every LogRecord; anything else came in through `extra`
_RESERVED_RECORD_KEYS = {
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "message", "pathname", "process",
    "processName", "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "taskName",
}


class StructuredLogger:
    """
    Logger with structured metadata and correlation ID support.
    """

    def __init__(self, name: str = "teamfinder"):
        self.service_name = config.service_name
        self.environment = config.environment
        self.log_format = config.log_format.lower()
        self._logger = logging.getLogger(name)
        self._setup_logging()

    def _setup_logging(self):
        """Configure Python logging with handlers"""
        level = getattr(logging, config.log_level.upper(), logging.INFO)
        self._logger.handlers.clear()
        self._logger.setLevel(level)
        self._logger.propagate = False

        if config.log_to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            if self.log_format == "json":
                console_handler.setFormatter(JSONFormatter())
            else:
                console_handler.setFormatter(ConsoleFormatter())
            self._logger.addHandler(console_handler)

        if config.log_to_file:
            log_file_path = config.log_file_path or f"logs/{self.service_name}.log"
            os.makedirs(os.path.dirname(log_file_path) or ".", exist_ok=True)

            file_handler = logging.FileHandler(log_file_path)
            file_handler.setLevel(level)
            file_handler.setFormatter(JSONFormatter())  # Always JSON for files
            self._logger.addHandler(file_handler)

    def _build_log_entry(
        self,
        level: str,
        message: str,
        correlation_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Build structured log entry"""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "service": self.service_name,
            "environment": self.environment,
            "message": message,
            "correlationId": correlation_id or peek_correlation_id(),
        }
        if metadata:
            entry["metadata"] = metadata
        return entry

    def _log(
        self,
        level: str,
        message: str,
        correlation_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        error: Optional[Union[str, Exception]] = None,
    ):
        """Internal logging method"""
        if error is not None:
            metadata = dict(metadata or {})
            if isinstance(error, Exception):
                metadata["error"] = {"type": type(error).__name__, "message": str(error)}
            else:
                metadata["error"] = {"message": str(error)}

        log_entry = self._build_log_entry(level, message, correlation_id, metadata)
        # Don't pass 'message' in extra to avoid conflict with LogRecord
        extra_data = {k: v for k, v in log_entry.items() if k != "message"}
        self._logger.log(getattr(logging, level), message, extra=extra_data)

    def debug(self, message: str, correlation_id: Optional[str] = None,
              metadata: Optional[Dict[str, Any]] = None):
        """Debug level logging"""
        self._log("DEBUG", message, correlation_id, metadata)

    def info(self, message: str, correlation_id: Optional[str] = None,
             metadata: Optional[Dict[str, Any]] = None):
        """Info level logging"""
        self._log("INFO", message, correlation_id, metadata)

    def warning(self, message: str, correlation_id: Optional[str] = None,
                metadata: Optional[Dict[str, Any]] = None,
                error: Optional[Union[str, Exception]] = None):
        """Warning level logging"""
        self._log("WARNING", message, correlation_id, metadata, error)

    def error(self, message: str, correlation_id: Optional[str] = None,
              metadata: Optional[Dict[str, Any]] = None,
              error: Optional[Union[str, Exception]] = None):
        """Error level logging"""
        self._log("ERROR", message, correlation_id, metadata, error)

    def critical(self, message: str, correlation_id: Optional[str] = None,
                 metadata: Optional[Dict[str, Any]] = None,
                 error: Optional[Union[str, Exception]] = None):
        """Critical level logging"""
        self._log("CRITICAL", message, correlation_id, metadata, error)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value
        return json.dumps(log_data, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for development"""

    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        correlation_id = getattr(record, "correlationId", None) or "no-correlation"

        line = f"{color}[{timestamp}] {record.levelname}{reset} [{correlation_id}] - {record.getMessage()}"
        metadata = getattr(record, "metadata", None)
        if metadata:
            line += f" | {json.dumps(metadata, default=str)}"
        return line


# Create and export the logger instance
logger = StructuredLogger()
