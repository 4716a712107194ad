"""
Structured logging configuration using structlog.

JSON lines everywhere except local development, where the console renderer
is easier to read. Credential-bearing keys are masked before rendering.
"""
import logging
import sys
from typing import Any, Dict

import structlog

from tourdesk.config.settings import settings

# Keys whose values must never reach a log line
REDACTED_KEYS = frozenset({
    "password",
    "password_hash",
    "merchant_secret",
    "payhere_merchant_secret",
    "payhereMerchantSecret",
    "session",
    "token",
})

# Configure standard library logging
logging.basicConfig(
    format="%(message)s",
    stream=sys.stdout,
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
)


def add_app_context(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """Add application context to log entries."""
    event_dict['app'] = settings.APP_NAME
    event_dict['environment'] = settings.ENVIRONMENT
    return event_dict


def redact_secrets(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    for key in REDACTED_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = "***"
    return event_dict


def configure_logging(json_output: bool = True):
    """Configure structlog with processors."""
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            add_app_context,
            redact_secrets,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Initialize logging
configure_logging(json_output=settings.ENVIRONMENT != "development")


def get_logger(name: str = __name__):
    """Get a structured logger instance."""
    return structlog.get_logger(name)
