"""
Structlog configuration.

Usage:
    from notification_center.core.logging import configure_logging

    configure_logging()
    logger = structlog.get_logger()
    logger.info("database_opened", url=url)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import structlog

from notification_center.core.config import Settings, get_settings


def add_app_name(app_name: str) -> Callable[[Any, str, dict[str, Any]], dict[str, Any]]:
    """
    Structlog processor that tags every log line with the application name.

    Explicit ``app_name`` passed to a log call wins.
    """

    def processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("app_name", app_name)
        return event_dict

    return processor


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog from settings (``log_format``: json or console text)."""
    settings = settings or get_settings()

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_app_name(settings.app_name),
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level)
        ),
        cache_logger_on_first_use=False,
    )
