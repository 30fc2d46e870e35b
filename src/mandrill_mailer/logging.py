"""Structured logging for Mandrill Mailer.

Every event is tagged with the ``mandrill`` category and has credentials
masked before rendering.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

LOG_CATEGORY = "mandrill"

# Event fields whose values are never written out
REDACTED_FIELDS = {"key", "api_key", "apikey", "authorization"}

REDACTED = "[REDACTED]"


def get_logger(**initial_values: Any) -> Any:
    """Return a lazy structlog logger tagged with the mailer category."""
    return structlog.get_logger(category=LOG_CATEGORY, **initial_values)


def add_log_level(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add upper-cased log level to event dict."""
    if method_name == "warn":
        method_name = "warning"
    event_dict["level"] = method_name.upper()
    return event_dict


def redact_credentials(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask API keys, including inside nested request payloads."""
    return _redact(event_dict)


def _redact(data: dict) -> dict:
    redacted = {}
    for field, value in data.items():
        if str(field).lower() in REDACTED_FIELDS:
            redacted[field] = REDACTED
        elif isinstance(value, dict):
            redacted[field] = _redact(value)
        else:
            redacted[field] = value
    return redacted


def build_processors(log_format: str = "json") -> list[Processor]:
    """Processor chain ending in a JSON or console renderer."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        redact_credentials,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if log_format == "console":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: ``json`` (default) or ``console``
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    # httpx logs every request at INFO
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
