"""
Structured logging module.

Provides JSON-formatted logging with correlation IDs and separate log
channels for fund events (audit) and authorization outcomes (security).
"""

import json
import logging
import os
import sys
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar, Union

# Context variables for correlation tracking
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
account_var: ContextVar[Optional[str]] = ContextVar("account", default=None)

F = TypeVar("F", bound=Callable[..., Any])


class LogChannel(Enum):
    """Log channels for different purposes."""

    APPLICATION = "application"
    AUDIT = "audit"
    SECURITY = "security"


class EventType(Enum):
    """Standard event types for structured logging."""

    # Fund events
    FUND_EVENT = "fund.event"
    OPERATION_FAILED = "fund.operation_failed"

    # Security events
    AUTH_SUCCESS = "auth.success"
    AUTH_FAILURE = "auth.failure"
    SIGNER_ROTATED = "auth.signer_rotated"


@dataclass
class StructuredLogRecord:
    """Structured log record for JSON output."""

    timestamp: str
    level: str
    channel: str
    event_type: str
    message: str
    logger_name: str
    context: Dict[str, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "level": self.level,
            "channel": self.channel,
            "event_type": self.event_type,
            "message": self.message,
            "logger": self.logger_name,
            "context": self.context,
            "data": self.data,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class JSONFormatter(logging.Formatter):
    """Formatter that outputs JSON structured logs."""

    def __init__(self, channel: LogChannel = LogChannel.APPLICATION):
        super().__init__()
        self._channel = channel

    def format(self, record: logging.LogRecord) -> str:
        context = {
            "correlation_id": correlation_id_var.get(),
            "account": account_var.get(),
        }
        context = {k: v for k, v in context.items() if v is not None}

        event_type = getattr(record, "event_type", "log.message")
        if isinstance(event_type, EventType):
            event_type = event_type.value

        data = getattr(record, "data", {})
        if not isinstance(data, dict):
            data = {"value": data}

        structured = StructuredLogRecord(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=record.levelname,
            channel=self._channel.value,
            event_type=event_type,
            message=record.getMessage(),
            logger_name=record.name,
            context=context,
            data=data,
        )
        return structured.to_json()


class StructuredLogger:
    """
    Structured logger with JSON output and correlation ID support.

    Records are written as JSON lines to ``<log_dir>/<channel>.jsonl`` when a
    log directory is given (or ``FUNDVAULT_LOG_DIR`` is set), and to stdout
    when ``LOG_JSON_CONSOLE=true``. With neither, records are dropped.
    """

    def __init__(
        self,
        name: str,
        channel: LogChannel = LogChannel.APPLICATION,
        level: int = logging.INFO,
        log_dir: Optional[Path] = None,
    ):
        self._name = name
        self._channel = channel
        self._logger = logging.getLogger(f"structured.{channel.value}.{name}")
        self._logger.setLevel(level)
        self._logger.propagate = False

        if log_dir is None and os.getenv("FUNDVAULT_LOG_DIR"):
            log_dir = Path(os.environ["FUNDVAULT_LOG_DIR"])

        if not self._logger.handlers:
            if log_dir is not None:
                log_dir = Path(log_dir)
                log_dir.mkdir(parents=True, exist_ok=True)
                file_handler = RotatingFileHandler(
                    log_dir / f"{channel.value}.jsonl",
                    maxBytes=50 * 1024 * 1024,  # 50 MB
                    backupCount=10,
                    encoding="utf-8",
                )
                file_handler.setFormatter(JSONFormatter(channel))
                self._logger.addHandler(file_handler)

            if os.getenv("LOG_JSON_CONSOLE", "false").lower() == "true":
                console_handler = logging.StreamHandler(sys.stdout)
                console_handler.setFormatter(JSONFormatter(channel))
                self._logger.addHandler(console_handler)

            if not self._logger.handlers:
                self._logger.addHandler(logging.NullHandler())

    def _log(
        self,
        level: int,
        event_type: Union[str, EventType],
        message: str,
        **data: Any,
    ) -> None:
        self._logger.log(level, message, extra={"event_type": event_type, "data": data})

    def info(self, event_type: Union[str, EventType], message: str, **data: Any) -> None:
        self._log(logging.INFO, event_type, message, **data)

    def warning(self, event_type: Union[str, EventType], message: str, **data: Any) -> None:
        self._log(logging.WARNING, event_type, message, **data)

    def error(self, event_type: Union[str, EventType], message: str, **data: Any) -> None:
        self._log(logging.ERROR, event_type, message, **data)


class AuditLogger(StructuredLogger):
    """Audit channel carrying every committed fund event."""

    def __init__(self, name: str, log_dir: Optional[Path] = None):
        super().__init__(name, LogChannel.AUDIT, log_dir=log_dir)

    def fund_event(self, event_name: str, **fields: Any) -> None:
        self.info(EventType.FUND_EVENT, f"Fund event: {event_name}", event=event_name, **fields)

    def operation_failed(self, operation: str, error: Exception) -> None:
        self.warning(
            EventType.OPERATION_FAILED,
            f"Operation {operation} reverted: {error}",
            operation=operation,
            error=error.__class__.__name__,
        )


class SecurityLogger(StructuredLogger):
    """Security channel for authorization outcomes."""

    def __init__(self, name: str, log_dir: Optional[Path] = None):
        super().__init__(name, LogChannel.SECURITY, log_dir=log_dir)

    def auth_success(self, action: str, account: str, nonce: int) -> None:
        self.info(
            EventType.AUTH_SUCCESS,
            f"Authorized {action} for {account}",
            action=action,
            account=account,
            nonce=nonce,
        )

    def auth_failure(self, action: str, account: str, reason: str) -> None:
        self.warning(
            EventType.AUTH_FAILURE,
            f"Rejected {action} for {account}: {reason}",
            action=action,
            account=account,
            reason=reason,
        )


# Correlation ID management
def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Set correlation ID in context, returns the ID used."""
    cid = correlation_id or generate_correlation_id()
    correlation_id_var.set(cid)
    return cid


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()


def with_correlation_id(func: F) -> F:
    """Decorator to ensure correlation ID is set."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if not get_correlation_id():
            set_correlation_id()
        return func(*args, **kwargs)

    return wrapper  # type: ignore


# Logger factory functions
_loggers: Dict[str, StructuredLogger] = {}


def get_audit_logger(name: str = "audit") -> AuditLogger:
    """Get or create an audit logger."""
    key = f"audit.{name}"
    if key not in _loggers:
        _loggers[key] = AuditLogger(name)
    return _loggers[key]  # type: ignore


def get_security_logger(name: str = "security") -> SecurityLogger:
    """Get or create a security logger."""
    key = f"security.{name}"
    if key not in _loggers:
        _loggers[key] = SecurityLogger(name)
    return _loggers[key]  # type: ignore
