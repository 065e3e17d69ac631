"""
Structured Logging Utilities

structlog configuration for the catalog application. Every component obtains
its logger through ``get_logger`` and emits key/value events tagged with a
``category`` so audit, business and infrastructure events can be routed
separately.

Output is rendered as JSON when ``json_logs`` is enabled (production) and as
console key/value lines otherwise. structlog is routed through the standard
``logging`` module so pytest's ``caplog`` and Flask's handlers see the same
records.

Each request gets a correlation id, taken from the ``X-Request-ID`` header
when the caller sends one, attached to its log events and echoed on the
response.
"""

import logging
import secrets
import sys
from enum import Enum
from typing import Any, Optional

import structlog
from flask import Flask, g, has_request_context, request


class LogCategory(Enum):
    """Log categories for routing and filtering."""
    APPLICATION = "application"
    AUDIT = "audit"
    BUSINESS = "business"
    INFRASTRUCTURE = "infrastructure"


REQUEST_ID_HEADER = "X-Request-ID"


def _add_request_context(logger, method_name, event_dict):
    """Attach the active Flask request, if any, to the event."""
    if has_request_context():
        event_dict.setdefault("method", request.method)
        event_dict.setdefault("path", request.path)
        request_id = getattr(g, "request_id", None)
        if request_id:
            event_dict.setdefault("request_id", request_id)
    return event_dict


def _render_category(logger, method_name, event_dict):
    category = event_dict.get("category")
    if isinstance(category, LogCategory):
        event_dict["category"] = category.value
    return event_dict


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call more than once; the last call wins.

    Args:
        level: Minimum log level name (DEBUG, INFO, WARNING, ...)
        json_logs: Render events as JSON instead of console lines
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _add_request_context,
            _render_category,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None, **initial_values: Any):
    """Return a structlog logger bound to ``name`` and any initial values."""
    return structlog.get_logger(name, **initial_values)


def init_logging(app: Flask) -> None:
    """Configure logging from the Flask application configuration."""
    configure_logging(
        level=app.config.get("LOG_LEVEL", "INFO"),
        json_logs=app.config.get("LOG_JSON", False),
    )

    @app.before_request
    def assign_request_id():
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or secrets.token_hex(16)

    @app.after_request
    def echo_request_id(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers[REQUEST_ID_HEADER] = request_id
        return response

    get_logger(__name__).info(
        "Structured logging initialized",
        category=LogCategory.INFRASTRUCTURE,
        level=app.config.get("LOG_LEVEL", "INFO"),
        json_logs=app.config.get("LOG_JSON", False),
    )


__all__ = ["LogCategory", "REQUEST_ID_HEADER", "configure_logging", "get_logger", "init_logging"]
