"""
Structured JSON logging for the document ledger.

Every record under the ``bizdocs`` logger namespace is written as one JSON
object per line.  Identifiers of the document, payment and business being
worked on travel in ``LogContext`` (context variables, so they are safe
across threads and asyncio tasks) and are merged into every record.

Event names are snake_case messages (``payment_recorded``,
``template_resolved``); data goes in ``extra=``.
"""

__all__ = [
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
from enum import Enum
from typing import Any

_NAMESPACE = "bizdocs"

CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "business_id",
    "document_id",
    "payment_id",
)

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"bizdocs_{name}", default=None) for name in CONTEXT_FIELDS
}


class LogContext:
    """Per-task identifiers merged into every log record."""

    @staticmethod
    def _var(name: str) -> ContextVar[str | None]:
        try:
            return _context_vars[name]
        except KeyError:
            raise ValueError(
                f"Unknown log context field {name!r}; expected one of {CONTEXT_FIELDS}"
            ) from None

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set context fields. None values leave the current value alone."""
        for name, value in fields.items():
            if value is not None:
                cls._var(name).set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {
            name: value
            for name, var in _context_vars.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _context_vars.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block, then restore them."""
        tokens = [
            (cls._var(name), cls._var(name).set(value))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """Type, message, error code and public attributes of a raised error."""
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and key not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger named ``bizdocs.<name>``."""
    return logging.getLogger(f"{_NAMESPACE}.{name}")


_setup_lock = threading.Lock()
_configured = False


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``bizdocs`` logger.

    Idempotent: only the first call in a process takes effect until
    ``reset_logging`` is called.  Records do not propagate to the root
    logger, so host application handlers never see them twice.
    """
    global _configured
    with _setup_lock:
        if _configured:
            return
        _configured = True

        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())

        namespace_logger = logging.getLogger(_NAMESPACE)
        namespace_logger.setLevel(level)
        namespace_logger.propagate = False
        namespace_logger.addHandler(handler)


def reset_logging() -> None:
    """Drop handlers and allow ``configure_logging`` again. Tests only."""
    global _configured
    with _setup_lock:
        _configured = False
        namespace_logger = logging.getLogger(_NAMESPACE)
        namespace_logger.handlers.clear()
        namespace_logger.setLevel(logging.WARNING)
