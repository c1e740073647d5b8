"""Structured logging setup.

Uses structlog for structured JSON logging in production and
human-readable console output in development.
"""

from __future__ import annotations

import logging

import structlog

from src.contact_sync.config import Environment, get_settings


def configure_structlog() -> None:
    """Configure structlog for the configured LOG_LEVEL and environment.

    The stdlib root logger carries LOG_LEVEL and ``filter_by_level`` applies it
    to structlog events; the renderer is JSON in production, console otherwise.
    """
    settings = get_settings()

    logging.basicConfig(format="%(message)s")
    logging.getLogger().setLevel(settings.LOG_LEVEL.upper())

    shared_processors: list = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.ENVIRONMENT == Environment.production:
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
