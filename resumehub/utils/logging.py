"""
Logging Configuration

Plain-text logs in development, one JSON object per line in production.
Context passed through `extra=` (tenant, user, resume, event type) is kept
as top-level JSON fields.
"""
import logging
import sys
from typing import Any, Dict
import json
from datetime import datetime

# extra= keys copied into JSON records
CONTEXT_FIELDS = (
    "tenant_id",
    "user_id",
    "request_id",
    "resume_id",
    "event_type",
    "security_event",
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread": record.threadName,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """
    Configure the root logger. Call once at startup.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_format: emit JSON lines instead of plain text
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - [%(threadName)s] %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))

    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_security_event(
    event_type: str,
    details: Dict[str, Any],
    logger: logging.Logger,
    level: int = logging.WARNING
) -> None:
    """
    Log a security/audit event.

    Event types in use:
    - login_succeeded, login_failed, account_locked
    - tenant_isolation_violation: token used against another tenant
    """
    log_data = {
        "security_event": True,
        "event_type": event_type,
        **details
    }
    logger.log(level, f"SECURITY EVENT: {event_type}", extra=log_data)
