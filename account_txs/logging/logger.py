"""
structlog setup for the indexer.

Every record carries an ISO timestamp, the level, the emitting module and an
``event_type`` (the snake_case event name passed as the first argument):

    logger.info("scanner_page_fetched", fetched=500, offset=0)

LOG_FORMAT=json (default) renders one JSON object per line on stdout; any
other value renders console lines. This module must not import other
account_txs modules: everything else imports it.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()


def _add_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog's ``event`` key becomes ``event_type``."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def _renderer(fmt: str) -> Any:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_structlog(level: str | None = None, fmt: str | None = None) -> None:
    """
    (Re)configure structlog. Runs at import with LOG_LEVEL / LOG_FORMAT from
    the process environment; the driver runs it again with Settings values.
    """
    level_value = getattr(logging, (level or DEFAULT_LEVEL).upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _add_timestamp,
            _event_type,
            _renderer((fmt or DEFAULT_FORMAT).strip().lower()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger for a module; ``name`` is emitted as the ``logger`` key."""
    return structlog.get_logger(name).bind(logger=name)
