"""
Logging configuration module for the inventory dashboard.

Provides centralized logging setup with JSON or human-readable output,
a request ID carried through async calls, and redaction of credentials
(passwords, bearer tokens) that would otherwise end up in structured fields.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional
from uuid import uuid4

# Context variable for request ID tracking across async calls
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

SERVICE_NAME = "medinventory-ui"

REDACTED = "***"
SENSITIVE_KEYS = frozenset(
    {"password", "token", "authorization", "auth_token", "authtoken", "cookie"}
)


def redact(fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of ``fields`` with credential values masked.

    Nested dictionaries are redacted recursively. Empty values are kept as-is
    so that "password missing" stays visible in the logs.

    Args:
        fields: Structured log fields

    Returns:
        Redacted copy of the fields
    """
    cleaned: Dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, dict):
            cleaned[key] = redact(value)
        elif key.lower() in SENSITIVE_KEYS and value:
            cleaned[key] = REDACTED
        else:
            cleaned[key] = value
    return cleaned


class StructuredFormatter(logging.Formatter):
    """
    Log formatter that outputs one JSON object per record.

    Includes the request ID from context and any ``extra_fields`` passed
    through ``extra=``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_context.get()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(redact(extra_fields))

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Colored single-line formatter for local development.

    Structured fields are appended as ``key=value`` pairs.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        parts = [
            self.formatTime(record, self.datefmt),
            f"{color}{record.levelname:8}{reset}",
            f"[{record.name}]",
        ]

        request_id = request_id_context.get()
        if request_id:
            parts.append(f"[req:{request_id[:8]}]")

        parts.append(record.getMessage())

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            parts.append(
                " ".join(f"{key}={value}" for key, value in redact(extra_fields).items())
            )

        message = " ".join(parts)

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def setup_logging(
    log_level: str = "INFO",
    service_name: str = SERVICE_NAME,
    use_json: bool = False,
) -> logging.Logger:
    """
    Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service_name: Name of the service logger to return
        use_json: Use JSON structured logging instead of human-readable format

    Returns:
        Configured service logger
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    formatter: logging.Formatter
    if use_json:
        formatter = StructuredFormatter(datefmt="%Y-%m-%d %H:%M:%S")
    else:
        formatter = HumanReadableFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    for noisy in ("httpx", "httpcore", "uvicorn.access", "multipart"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = logging.getLogger(service_name)
    logger.setLevel(numeric_level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger for a module (typically ``__name__``)."""
    return logging.getLogger(name or SERVICE_NAME)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set request ID in context, generating a UUID if none is given.

    Returns:
        The request ID that was set
    """
    if request_id is None:
        request_id = str(uuid4())
    request_id_context.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    """Get current request ID from context."""
    return request_id_context.get()


def clear_request_id() -> None:
    """Clear request ID from context."""
    request_id_context.set(None)
