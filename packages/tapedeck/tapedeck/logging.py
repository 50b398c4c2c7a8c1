"""tapedeck — Structured logging configuration.

Uses structlog for structured, levelled logging with consistent key names
across the core.  All log entries include:
    - timestamp (ISO-8601)
    - level
    - module (Python logger name)
    - recording_id / recording_name (bound via context variables when available)
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar, Token
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

# Context variables, automatically injected into log records when set.
_ctx_recording_id: ContextVar[str | None] = ContextVar("recording_id", default=None)
_ctx_recording_name: ContextVar[str | None] = ContextVar("recording_name", default=None)


ContextTokens = list[tuple[ContextVar[Any], Token[Any]]]


def bind_recording_context(
    recording_id: str | None = None,
    recording_name: str | None = None,
) -> ContextTokens:
    """Bind recording identity to the current async task / thread.

    Returns the tokens to hand to :func:`reset_recording_context`, which
    restores whatever was bound before.
    """
    tokens: ContextTokens = []
    if recording_id is not None:
        tokens.append((_ctx_recording_id, _ctx_recording_id.set(recording_id)))
    if recording_name is not None:
        tokens.append((_ctx_recording_name, _ctx_recording_name.set(recording_name)))
    return tokens


def reset_recording_context(tokens: ContextTokens) -> None:
    for var, token in reversed(tokens):
        var.reset(token)


def clear_recording_context() -> None:
    _ctx_recording_id.set(None)
    _ctx_recording_name.set(None)


# ---------------------------------------------------------------------------
# Custom processors
# ---------------------------------------------------------------------------


def _inject_context_vars(
    _logger: WrappedLogger, _method: str, event_dict: EventDict
) -> EventDict:
    """Add ContextVar values to every log record."""
    if (recording_id := _ctx_recording_id.get()) is not None:
        event_dict.setdefault("recording_id", recording_id)
    if (recording_name := _ctx_recording_name.get()) is not None:
        event_dict.setdefault("recording_name", recording_name)
    return event_dict


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def configure_logging(
    level: str = "info",
    format: str = "console",
    log_file: str | None = None,
) -> None:
    """Configure structlog and stdlib logging.

    Call once at process startup, before any recording is created.

    Args:
        level:    One of debug, info, warning, error, critical.
        format:   ``"console"`` for human-readable output, ``"json"`` for
                  machine-readable structured logs.
        log_file: Optional path to write logs to in addition to stderr.
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _inject_context_vars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handlers: list[logging.Handler] = []

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.handlers = handlers
    root_logger.setLevel(level.upper())

    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger for *name*.

    Usage::

        log = get_logger(__name__)
        log.info("adapter_connected", adapter="http")
    """
    return structlog.get_logger(name)
