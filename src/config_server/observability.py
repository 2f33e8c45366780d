"""Structured logging helpers shared by the save path, poll path and transport.

Purpose
    Keep every emission of logging data predictable and contextual so request
    handling can be correlated across the save and poll flows without forcing
    a specific logging backend on the hosting process.

Contents
    - ``TRACE_ID``: context variable storing the active request identifier.
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``bind_trace_id``: binds or clears the active trace identifier.
    - ``log_debug`` / ``log_info`` / ``log_warning`` / ``log_error``: emit
      structured entries via a single private emitter.
    - ``make_event``: convenience builder for record-level event payloads.
    - ``configure_logging``: attach a stream handler for the ``serve`` command.

System Integration
    The HTTP middleware binds a trace identifier per request; the application
    services only call the ``log_*`` helpers and never touch handlers.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("config_server_trace_id", default=None)
"""Identifier of the request currently being handled, if any."""

_LOGGER: Final[logging.Logger] = logging.getLogger("config_server")
_LOGGER.addHandler(logging.NullHandler())

_LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s %(message)s %(context)s"


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    Examples
    --------
    >>> bind_trace_id('req-1')
    >>> TRACE_ID.get()
    'req-1'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug log entry that includes the trace context."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info log entry that includes the trace context."""

    _emit(logging.INFO, message, fields)


def log_warning(message: str, **fields: Any) -> None:
    """Emit a structured warning log entry that includes the trace context."""

    _emit(logging.WARNING, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error log entry that includes the trace context."""

    _emit(logging.ERROR, message, fields)


def make_event(
    service: str,
    namespace: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured logging payload for record lifecycle events.

    Examples
    --------
    >>> make_event('api-gateway', 'dev', {'profile': 'default'})
    {'service': 'api-gateway', 'namespace': 'dev', 'profile': 'default'}
    """

    event: dict[str, Any] = {"service": service, "namespace": namespace}
    if payload:
        event |= dict(payload)
    return event


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the package logger at *level*.

    Only used by long-running entry points; library use stays silent.
    """

    if not any(isinstance(handler, logging.StreamHandler) for handler in _LOGGER.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(_ContextFormatter(_LOG_FORMAT))
        _LOGGER.addHandler(handler)
    _LOGGER.setLevel(level.upper())


class _ContextFormatter(logging.Formatter):
    """Formatter tolerating records emitted without a ``context`` attribute."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "context"):
            record.context = {}
        return super().format(record)


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    _LOGGER.log(level, message, extra={"context": _with_trace(fields)})


def _with_trace(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Attach the current trace identifier to the provided structured fields."""

    context = {"trace_id": TRACE_ID.get()}
    context.update(fields)
    return context
