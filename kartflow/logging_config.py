"""
Logging configuration for the KartFlow console.

Two context variables follow each page request through the async call
chain: the request id (also forwarded to the backend as ``X-Request-ID``)
and the username of the signed-in operator. Both are stamped onto every
log record, so an order status change or stock adjustment in the logs can
be traced back to who made it and to the backend calls it caused.

Structured context is passed as ``extra={"extra_fields": {...}}``.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional
from uuid import uuid4

DEFAULT_LOGGER = "kartflow-console"

request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
actor_context: ContextVar[Optional[str]] = ContextVar("actor", default=None)

QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "uvicorn.access", "multipart")


class StructuredFormatter(logging.Formatter):
    """
    JSON log formatter for production.

    One JSON object per line: timestamp, level, service, logger, message,
    source location, request id and actor when set, the exception text,
    and the record's ``extra_fields`` merged at the top level.
    """

    def __init__(self, service_name: str = DEFAULT_LOGGER, datefmt: Optional[str] = None) -> None:
        super().__init__(datefmt=datefmt)
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        request_id = request_id_context.get()
        if request_id:
            entry["request_id"] = request_id

        actor = actor_context.get()
        if actor:
            entry["actor"] = actor

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(getattr(record, "extra_fields", None) or {})
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored single-line formatter for local development."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, self.RESET)
        parts = [
            self.formatTime(record, self.datefmt),
            f"{color}{record.levelname:8}{self.RESET}",
            f"[{record.name}]",
        ]

        request_id = request_id_context.get()
        actor = actor_context.get()
        if request_id or actor:
            parts.append(f"[{(request_id or '-')[:8]} {actor or 'anonymous'}]")

        parts.append(record.getMessage())

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            parts.append(" ".join(f"{key}={value}" for key, value in extra_fields.items()))

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    service_name: str = DEFAULT_LOGGER,
    use_json: bool = False,
) -> logging.Logger:
    """
    Install a single stdout handler on the root logger.

    Args:
        log_level: Logging level name
        service_name: Service name stamped on JSON records
        use_json: JSON records instead of the colored development format

    Returns:
        The service logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    datefmt = "%Y-%m-%d %H:%M:%S"

    formatter: logging.Formatter
    if use_json:
        formatter = StructuredFormatter(service_name=service_name, datefmt=datefmt)
    else:
        formatter = ConsoleFormatter(datefmt=datefmt)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger(service_name)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or DEFAULT_LOGGER)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Bind a request id to the current context.

    Args:
        request_id: Incoming ``X-Request-ID``; a UUID4 is generated when None

    Returns:
        The bound request id
    """
    request_id = request_id or str(uuid4())
    request_id_context.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    return request_id_context.get()


def clear_request_id() -> None:
    request_id_context.set(None)
    actor_context.set(None)


def set_actor(username: Optional[str]) -> None:
    """Bind the signed-in operator's username to the current context."""
    actor_context.set(username)
