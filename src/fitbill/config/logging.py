"""
Structured logging configuration using structlog.

JSON lines in staging and production, coloured console output in
development. Recipient addresses are masked and provider secrets are
dropped before any renderer sees them, since invoice delivery logs
the ``to`` address of every email it sends.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from fitbill.config.settings import Settings, get_settings

# Event keys whose values are email addresses
ADDRESS_KEYS = frozenset({"to", "client_email", "recipient", "from_address"})

# Event keys that must never reach a log sink
SECRET_KEYS = frozenset({"gmail_app_password", "resend_api_key", "api_key", "password"})

_configured = False


def mask_address(address: str) -> str:
    """``rahul@example.com`` -> ``r***@example.com``."""
    local, sep, domain = address.partition("@")
    if not sep or not local:
        return "***"
    return f"{local[0]}***@{domain}"


def redact_sensitive(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask recipient addresses and blank out provider secrets."""
    for key in event_dict.keys() & ADDRESS_KEYS:
        value = event_dict[key]
        if isinstance(value, str) and value:
            event_dict[key] = mask_address(value)
    for key in event_dict.keys() & SECRET_KEYS:
        event_dict[key] = "[redacted]"
    return event_dict


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment
    return event_dict


def build_processors(settings: Settings) -> list[Processor]:
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        redact_sensitive,
    ]

    if settings.environment == "development":
        return shared + [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return shared + [
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(settings: Settings | None = None, force: bool = False) -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call from both the app lifespan and the console entry points;
    only the first call takes effect unless ``force`` is set.
    """
    global _configured
    if _configured and not force:
        return

    settings = settings or get_settings()

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=settings.environment != "development",
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
        force=force,
    )

    # Provider clients and the PDF font subsetter are chatty at INFO
    for name in ("httpx", "httpcore", "fontTools", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
