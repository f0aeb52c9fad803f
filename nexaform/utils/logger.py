"""
NexaForm Logger
===============

Structured logging for the validation engine.
"""

from __future__ import annotations

import logging
import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, List, Optional

import orjson


class LogLevel(IntEnum):
    """Log levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


@dataclass
class LogRecord:
    """
    Structured log record.

    Attributes:
        level: Log level
        message: Log message
        timestamp: Record timestamp
        context: Additional context
        exception: Exception info
    """

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[BaseException] = None
    logger_name: str = "nexaform"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "message": self.message,
            "logger": self.logger_name,
        }

        if self.context:
            data["context"] = self.context

        if self.exception:
            data["exception"] = {
                "type": type(self.exception).__name__,
                "message": str(self.exception),
            }

        return data

    def to_json(self) -> str:
        """Convert to JSON string."""
        return orjson.dumps(self.to_dict(), default=str).decode("utf-8")


class LogFormatter:
    """Base log formatter."""

    def format(self, record: LogRecord) -> str:
        """Format log record."""
        raise NotImplementedError


class TextFormatter(LogFormatter):
    """
    Plain text formatter.

    Example output:
        2024-01-15 10:30:45 [INFO] Rule failed field=email rule=RequiredRule
    """

    def __init__(
        self,
        format_string: Optional[str] = None,
        date_format: str = "%Y-%m-%d %H:%M:%S",
    ):
        self.format_string = format_string or "{timestamp} [{level}] {logger}: {message}"
        self.date_format = date_format

    def format(self, record: LogRecord) -> str:
        """Format as text."""
        message = record.message

        # Add context as key=value pairs
        if record.context:
            context_str = " ".join(
                f"{k}={v}" for k, v in record.context.items()
            )
            message = f"{message} {context_str}"

        output = self.format_string.format(
            timestamp=record.timestamp.strftime(self.date_format),
            level=record.level.name,
            message=message,
            logger=record.logger_name,
        )

        if record.exception:
            output += "\n" + "".join(
                traceback.format_exception(
                    type(record.exception),
                    record.exception,
                    record.exception.__traceback__,
                )
            )

        return output


class JsonFormatter(LogFormatter):
    """JSON formatter for log shippers."""

    def format(self, record: LogRecord) -> str:
        return record.to_json()


class StreamHandler:
    """Writes formatted records to a stream (stderr by default)."""

    def __init__(
        self,
        stream: Any = None,
        formatter: Optional[LogFormatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ):
        self.stream = stream
        self.formatter = formatter or TextFormatter()
        self.level = level

    def handle(self, record: LogRecord) -> None:
        """Handle log record."""
        if record.level >= self.level:
            stream = self.stream or sys.stderr
            stream.write(self.formatter.format(record) + "\n")
            stream.flush()


class Logger:
    """
    Structured logger.

    Example:
        logger = get_logger("nexaform.validator")
        logger.info("Rule failed", field="email", rule="RequiredRule")

        # With context
        logger = logger.with_context(form="SignupForm")
        logger.debug("Form bound")
    """

    def __init__(
        self,
        name: str = "nexaform",
        level: LogLevel = LogLevel.WARNING,
        handlers: Optional[List[StreamHandler]] = None,
    ):
        self.name = name
        self.level = level
        self._handlers = handlers if handlers is not None else []
        self._context: Dict[str, Any] = {}

    def add_handler(self, handler: StreamHandler) -> "Logger":
        """Add log handler."""
        self._handlers.append(handler)
        return self

    def with_context(self, **context: Any) -> "Logger":
        """Create logger sharing handlers with additional context."""
        new_logger = Logger(
            name=self.name,
            level=self.level,
            handlers=self._handlers,
        )
        new_logger._context = {**self._context, **context}
        return new_logger

    def _log(
        self,
        level: LogLevel,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        if level < self.level:
            return

        record = LogRecord(
            level=level,
            message=message,
            context={**self._context, **context},
            exception=exception,
            logger_name=self.name,
        )

        for handler in self._handlers:
            handler.handle(record)

    def debug(self, message: str, **context: Any) -> None:
        self._log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(LogLevel.WARNING, message, **context)

    def error(
        self,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        self._log(LogLevel.ERROR, message, exception, **context)


# Logger registry, one instance per dotted name
_loggers: Dict[str, Logger] = {}
_default_level = LogLevel.WARNING
_default_handlers: List[StreamHandler] = [StreamHandler()]


def get_logger(name: str = "nexaform") -> Logger:
    """
    Get or create logger.

    Loggers share the handlers installed by `configure_logging`.
    """
    if name not in _loggers:
        _loggers[name] = Logger(
            name=name,
            level=_default_level,
            handlers=_default_handlers,
        )

    return _loggers[name]


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    format: str = "text",
    stream: Any = None,
) -> None:
    """
    Configure logging for every nexaform logger.

    Args:
        level: Minimum level
        format: Output format ("text" or "json")
        stream: Target stream (stderr by default)
    """
    global _default_level

    formatter = JsonFormatter() if format == "json" else TextFormatter()

    _default_level = level
    _default_handlers[:] = [StreamHandler(stream, formatter=formatter, level=level)]

    for logger in _loggers.values():
        logger.level = level
