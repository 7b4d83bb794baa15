"""Structured logging for the uptime worker.

structlog renders JSON (or console output in development) with the current
OpenTelemetry trace and span ids attached. Credentials never reach the log:
secrets are masked and connection URLs keep everything except their password.
"""

import logging
import re
import sys
from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from opentelemetry import trace

from uptime_engine.infrastructure.config import get_settings

SECRET_KEYS = frozenset({"password", "secret", "token", "authorization"})
URL_KEYS = frozenset({"database_url", "redis_url", "dsn"})

# Libraries that log every job run or pool checkout at INFO
NOISY_LOGGERS = ("apscheduler", "asyncpg")

_URL_PASSWORD = re.compile(r"(?P<prefix>://[^:/@]*:)[^@]+(?P<suffix>@)")


def configure_logging() -> None:
    """Route stdlib logging through stdout and configure structlog on top of it.

    Use cases log through ``logging.getLogger``; infrastructure adapters use
    ``get_logger`` with key/value context. Both end up on stdout at the level
    set by OTEL_LOG_LEVEL.
    """
    otel_config = get_settings().observability
    level = getattr(logging, otel_config.log_level.upper())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_trace_context,
        _stringify_identifiers,
        _filter_sensitive_data,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if otel_config.log_json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _add_trace_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add trace_id and span_id of the current span, when there is one."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")
    return event_dict


def _stringify_identifiers(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Render service/organization UUIDs and timestamps as plain strings."""
    for key, value in event_dict.items():
        if isinstance(value, UUID):
            event_dict[key] = str(value)
        elif isinstance(value, datetime):
            event_dict[key] = value.isoformat()
    return event_dict


def mask_url(url: str) -> str:
    """Replace the password of a connection URL with ``***``.

    >>> mask_url("postgresql+asyncpg://uptime:s3cret@db:5432/uptime")
    'postgresql+asyncpg://uptime:***@db:5432/uptime'
    """
    return _URL_PASSWORD.sub(r"\g<prefix>***\g<suffix>", url)


def _mask_value(key: Any, value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _mask_value(k, v) for k, v in value.items()}
    if not isinstance(key, str):
        return value

    lowered = key.lower()
    if lowered in URL_KEYS and isinstance(value, str):
        return mask_url(value)
    if lowered in SECRET_KEYS:
        if isinstance(value, str) and len(value) > 4:
            return f"{value[:4]}{'*' * (len(value) - 4)}"
        return "***REDACTED***"
    return value


def _filter_sensitive_data(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    return {key: _mask_value(key, value) for key, value in event_dict.items()}


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to ``name``.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("status_changed", service_id="...", new_status="degraded")
    """
    return structlog.get_logger(name)
