#!/usr/bin/env python3
"""
Structured Logging for the Signage Client
JSON-line records with an event name, message and context, written to a rotating file and the console
"""

import json
import logging
import os
import threading
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from logging.handlers import RotatingFileHandler
from typing import Dict, Any, Optional

_LOGGER_NAME = "signage"
_DEFAULT_LOG_DIR = "logs"
_LOG_FILENAME = "signage.log"


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class LogEntry:
    """Structured log entry"""
    timestamp: str
    level: str
    event: str
    message: str
    context: Dict[str, Any]
    component: Optional[str] = None


class StructuredLogger:
    """
    Writes structured entries through a stdlib logger so handlers (and pytest's caplog) see them
    """

    def __init__(self, log_dir: str = _DEFAULT_LOG_DIR, max_file_size: int = 5 * 1024 * 1024,
                 backup_count: int = 3, console: bool = True):
        self.log_dir = log_dir
        self.max_file_size = max_file_size
        self.backup_count = backup_count
        self.console = console
        self._logger: Optional[logging.Logger] = None
        self.lock = threading.Lock()

    def _get_logger(self) -> logging.Logger:
        if self._logger is not None:
            return self._logger

        logger = logging.getLogger(_LOGGER_NAME)
        if not logger.handlers:
            logger.setLevel(logging.INFO)
            try:
                os.makedirs(self.log_dir, exist_ok=True)
                handler = RotatingFileHandler(
                    os.path.join(self.log_dir, _LOG_FILENAME),
                    maxBytes=self.max_file_size,
                    backupCount=self.backup_count,
                    encoding="utf-8",
                )
                # Entries are pre-serialized JSON
                handler.setFormatter(logging.Formatter('%(message)s'))
                logger.addHandler(handler)
            except OSError as e:
                print(f"⚠️ Unable to open log file in {self.log_dir}: {e}")

            if self.console:
                stream = logging.StreamHandler()
                stream.setFormatter(logging.Formatter('%(message)s'))
                logger.addHandler(stream)

        self._logger = logger
        return logger

    def set_level(self, level_name: str):
        level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
        self._get_logger().setLevel(level)

    def _create_log_entry(self, level: LogLevel, event: str, message: str,
                          context: Dict[str, Any] = None) -> LogEntry:
        return LogEntry(
            timestamp=datetime.now().isoformat(timespec="seconds"),
            level=level.value,
            event=event,
            message=message,
            context=context or {},
            component=event.split('.', 1)[0] if '.' in event else None,
        )

    def log(self, level: LogLevel, event: str, message: str, context: Dict[str, Any] = None):
        """Log a message with structured data"""
        try:
            entry = self._create_log_entry(level, event, message, context)
            msg = json.dumps(asdict(entry), ensure_ascii=False, default=str)
            with self.lock:
                self._get_logger().log(getattr(logging, level.value), msg)
        except Exception:
            # Never fail business logic due to logging
            pass

    def debug(self, event: str, message: str, context: Dict[str, Any] = None):
        self.log(LogLevel.DEBUG, event, message, context)

    def info(self, event: str, message: str, context: Dict[str, Any] = None):
        self.log(LogLevel.INFO, event, message, context)

    def warning(self, event: str, message: str, context: Dict[str, Any] = None):
        self.log(LogLevel.WARNING, event, message, context)

    def error(self, event: str, message: str, context: Dict[str, Any] = None):
        self.log(LogLevel.ERROR, event, message, context)


# Global structured logger instance
structured_logger = StructuredLogger()


def get_structured_logger() -> StructuredLogger:
    """Get global structured logger instance"""
    return structured_logger


def set_log_level(level_name: str):
    structured_logger.set_level(level_name)


# Convenience functions
def log_debug(event: str, message: Optional[str] = None, context: Dict[str, Any] = None, **kwargs):
    if kwargs:
        context = {**(context or {}), **kwargs}
    structured_logger.debug(event, message or "", context)


def log_info(event: str, message: Optional[str] = None, context: Dict[str, Any] = None, **kwargs):
    """Log info message (flexible: accepts event+message or event+kwargs as context)"""
    if kwargs:
        context = {**(context or {}), **kwargs}
    structured_logger.info(event, message or "", context)


def log_warning(event: str, message: Optional[str] = None, context: Dict[str, Any] = None, **kwargs):
    """Log warning message (flexible: accepts event+message or event+kwargs as context)"""
    if kwargs:
        context = {**(context or {}), **kwargs}
    structured_logger.warning(event, message or "", context)


def log_error(event: str, message: Optional[str] = None, context: Dict[str, Any] = None, **kwargs):
    """Log error message (flexible: accepts event+message or event+kwargs as context)"""
    if kwargs:
        context = {**(context or {}), **kwargs}
    structured_logger.error(event, message or "", context)
