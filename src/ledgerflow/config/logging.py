"""Structured logging for Ledgerflow.

Engine modules log report-level events (``cash_flow_computed``,
``ledger_entries_skipped``) with money and dates as plain strings, so the
JSON output can be loaded without a custom decoder.
"""

import logging
import sys
from collections.abc import MutableMapping
from datetime import date
from decimal import Decimal
from typing import Any, Literal, TextIO

import structlog

from ledgerflow.config.settings import get_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _plain_values(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Render Decimal amounts and dates as strings."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
        elif isinstance(value, date):
            event_dict[key] = value.isoformat()
    return event_dict


def configure_logging(
    level: LogLevel | None = None,
    format: LogFormat | None = None,
    stream: TextIO | None = None,
) -> None:
    """Route structlog through the stdlib root logger.

    Args:
        level: Overrides ``LOG_LEVEL``.
        format: Overrides ``LOG_FORMAT``.
        stream: Destination, stderr by default so report output on stdout
            stays clean.
    """
    settings = get_settings()
    stream = stream or sys.stderr
    log_format = format or settings.log_format

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, level or settings.log_level),
        force=True,
    )

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=stream.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            _plain_values,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def component_logger(name: str, component: str, **context: Any) -> Any:
    """Logger for a long-lived object, tagged with its ``component``."""
    return structlog.get_logger(name).bind(component=component, **context)
