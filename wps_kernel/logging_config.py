"""
Structured Logging (``wps_kernel.logging_config``).

Responsibility
--------------
One JSON object per log line for everything under the ``wps_kernel``
logger namespace, with request-scoped context (who generated which batch's
file for which company) attached to every line automatically.

Conventions
-----------
* Messages are snake_case event names (``wage_file_encoded``); data goes in
  ``extra=``, never into the message text.
* ``WpsKernelError`` subclasses logged with ``exc_info`` contribute their
  ``code`` and structured attributes as ``exc_*`` keys.
* Context is held in a single ``ContextVar`` so that it follows threads and
  asyncio tasks without leaking between them.
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
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Iterator, Mapping
from uuid import UUID

LOGGER_NAMESPACE = "wps_kernel"


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("wps_log_context", default=_EMPTY)


class LogContext:
    """
    Request-scoped fields merged into every log line.

    Usage::

        with LogContext.bind(batch_id=batch.id, actor_id=actor_id):
            service.generate(...)
    """

    FIELDS = ("correlation_id", "actor_id", "batch_id", "company_id", "trace_id")

    @classmethod
    def _merged(cls, fields: dict[str, Any]) -> Mapping[str, str]:
        unknown = set(fields) - set(cls.FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context field(s): {', '.join(sorted(unknown))}")
        merged = dict(_context.get())
        merged.update({k: str(v) for k, v in fields.items() if v is not None})
        return MappingProxyType(merged)

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Update the given fields; None leaves a field unchanged."""
        _context.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a block, then restore the previous context."""
        token = _context.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return repr(value)


class StructuredFormatter(logging.Formatter):
    """Render a LogRecord as one line of JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))
        return json.dumps(payload, default=_json_default)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # Kernel errors keep their context as plain public attributes.
        fields.update(
            (f"exc_{name}", value)
            for name, value in vars(exc).items()
            if not name.startswith("_")
        )
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """``get_logger("modules.wage_file.encoder")`` -> ``wps_kernel.modules.wage_file.encoder``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_setup_lock = threading.Lock()
_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one structured handler to the ``wps_kernel`` logger.

    Idempotent: once a handler is installed, further calls do nothing until
    ``reset_logging()``.  ``level`` accepts a number or a level name.
    """
    global _handler
    with _setup_lock:
        if _handler is not None:
            return
        _handler = handler or logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(StructuredFormatter())

        namespace = logging.getLogger(LOGGER_NAMESPACE)
        namespace.setLevel(level.upper() if isinstance(level, str) else level)
        namespace.propagate = False
        namespace.addHandler(_handler)


def reset_logging() -> None:
    """Remove the installed handler and restore defaults. Used by tests."""
    global _handler
    with _setup_lock:
        namespace = logging.getLogger(LOGGER_NAMESPACE)
        if _handler is not None:
            namespace.removeHandler(_handler)
            _handler = None
        namespace.setLevel(logging.NOTSET)
        namespace.propagate = True
