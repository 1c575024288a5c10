"""Structured logging setup.

Configures structlog once at process start with:
- Run ID injection into every log entry
- Secret masking before rendering
- JSON or console output to stderr

Usage:
    from h1_watcher.observability.logging import configure_logging

    configure_logging(level="INFO", json_output=True, secrets=settings.secret_values())
"""

import logging
import sys
from typing import Any, Iterable, Optional, TextIO

import structlog
from structlog.typing import EventDict, WrappedLogger

from h1_watcher.observability.context import get_run_id
from h1_watcher.observability.redaction import SecretMasker


def add_run_id_processor(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds run_id when one is set."""
    run_id = get_run_id()
    if run_id:
        event_dict.setdefault("run_id", run_id)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    secrets: Iterable[Optional[str]] = (),
    add_timestamp: bool = True,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON. If False, use console format.
        secrets: Values replaced by a redaction marker in every entry.
        add_timestamp: If True, add ISO timestamp to each log entry.
        stream: Output stream, stderr by default.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_run_id_processor,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    # Mask after exception formatting so tracebacks are covered too
    processors.append(SecretMasker(secrets))

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=(stream or sys.stderr).isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def bind_context(**context: Any) -> None:
    """Bind context to all subsequent log entries in the current context."""
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    """Clear all bound context. Call at run boundaries."""
    structlog.contextvars.clear_contextvars()
