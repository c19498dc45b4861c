"""
Structured JSON logging for the selection kernel.

Every kernel logger lives under the ``selection_kernel`` namespace.  Each
record is rendered as one JSON object per line:

    envelope     ts, level, logger, message (the event name)
    context      request_id, resource, selector (whatever is bound)
    extra        the ``extra=`` fields of the logging call
    exception    exc_type, exc_message, exc_code and the public attributes
                 of the error (exc_status_code, exc_column ...), plus the
                 traceback

The resolver binds ``resource`` for a whole resolution and ``selector``
around each transformation, so every event raised while a selector runs
names both without repeating them at the call site.
"""

__all__ = [
    "LOGGER_NAMESPACE",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from typing import Any, TextIO

LOGGER_NAMESPACE = "selection_kernel"

# ---------------------------------------------------------------------------
# Resolution context
# ---------------------------------------------------------------------------

_CONTEXT: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"selection_log_{name}", default=None)
    for name in ("request_id", "resource", "selector")
}


class LogContext:
    """Resolution-scoped log fields, isolated per thread and per task."""

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set known fields.  None values and unknown names are ignored."""
        for name, value in fields.items():
            if value is not None and name in _CONTEXT:
                _CONTEXT[name].set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        return {
            name: var.get() for name, var in _CONTEXT.items() if var.get() is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _CONTEXT.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """Set fields for the duration of the block, then restore them."""
        tokens = [
            (_CONTEXT[name], _CONTEXT[name].set(value))
            for name, value in fields.items()
            if value is not None and name in _CONTEXT
        ]
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

_RECORD_ATTRIBUTES: frozenset[str] = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
}


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for key, value in vars(exc).items():
        if not key.startswith("_"):
            fields[f"exc_{key}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES and key not in payload:
                payload[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_lock = threading.Lock()
_installed: logging.Handler | None = None


def get_logger(name: str) -> logging.Logger:
    """Logger under the selection_kernel namespace, e.g. ``services.selection_resolver``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install the JSON handler on the ``selection_kernel`` logger.

    Only the first call has an effect, so engine initialization can call it
    unconditionally.  ``handler`` takes precedence over ``stream``; the
    default is a stream handler on stderr.
    """
    global _installed
    with _lock:
        if _installed is not None:
            return
        _installed = handler if handler is not None else logging.StreamHandler(
            stream or sys.stderr
        )
        _installed.setFormatter(StructuredFormatter())

    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.setLevel(level)
    namespace.propagate = False
    namespace.addHandler(_installed)


def reset_logging() -> None:
    """Remove the handler installed by configure_logging(). FOR TESTING ONLY."""
    global _installed
    with _lock:
        handler, _installed = _installed, None

    namespace = logging.getLogger(LOGGER_NAMESPACE)
    if handler is not None:
        namespace.removeHandler(handler)
    namespace.setLevel(logging.WARNING)
    namespace.propagate = True
