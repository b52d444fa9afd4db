"""
Structured JSON logging for fragment readers.

One JSON object per line:

    {"ts": ..., "level": "INFO", "logger": "fragment.ingestion.reader",
     "message": "Reader opened",
     "reader_name": "trades", "resource": "file [trades.xml]",
     "reader_state": "opened", "restart_count": 40,
     "extra": {...},                    # any other extra= fields
     "error": {"type": ..., "code": ..., "message": ..., "fields": {...}},
     "traceback": "..."}

Reader fields (READER_FIELDS) are first-class keys in a fixed order. They
come from the record's ``extra`` or, failing that, from LogContext. Every
other ``extra`` value is nested under "extra" so it cannot shadow the
envelope or the reader fields.
"""

from __future__ import annotations

__all__ = [
    "READER_FIELDS",
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
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

READER_FIELDS: tuple[str, ...] = (
    "reader_name",
    "resource",
    "reader_state",
    "restart_count",
    "items_read",
)

# Fields that may be bound for a whole block of work
_CONTEXT_FIELDS = frozenset({"reader_name", "resource"})

_LOGGER_PREFIX = "fragment"


# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_bound: ContextVar[Mapping[str, str]] = ContextVar(
    "fragment_log_context", default=MappingProxyType({})
)


class LogContext:
    """Reader name and resource bound for every log line in a block.

    Backed by one ContextVar, so values follow threads and asyncio tasks.
    """

    @staticmethod
    def _check(fields: Mapping[str, Any]) -> None:
        unknown = set(fields) - _CONTEXT_FIELDS
        if unknown:
            raise ValueError(
                f"Unknown log context field(s) {sorted(unknown)}; "
                f"expected {sorted(_CONTEXT_FIELDS)}"
            )

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Update context fields. None values are ignored."""
        cls._check(fields)
        merged = dict(_bound.get())
        merged.update({k: v for k, v in fields.items() if v is not None})
        _bound.set(MappingProxyType(merged))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_bound.get())

    @classmethod
    def clear(cls) -> None:
        _bound.set(MappingProxyType({}))

    @classmethod
    def bind(cls, **fields: str | None) -> _Binding:
        """Context manager: set fields on entry, restore the previous ones on exit."""
        cls._check(fields)
        return _Binding({k: v for k, v in fields.items() if v is not None})


class _Binding:
    def __init__(self, fields: dict[str, str]):
        self._fields = fields
        self._token = None

    def __enter__(self) -> type[LogContext]:
        self._token = _bound.set(MappingProxyType({**_bound.get(), **self._fields}))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        _bound.reset(self._token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    return str(obj)


def _error_payload(exc: BaseException) -> dict[str, Any]:
    error: dict[str, Any] = {
        "type": type(exc).__name__,
        "message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        error["code"] = code
    fields = {k: v for k, v in vars(exc).items() if not k.startswith("_")}
    if fields:
        error["fields"] = fields
    return error


class StructuredFormatter(logging.Formatter):
    """Formats each record as a single JSON line with reader fields up front."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        bound = _bound.get()
        for name in READER_FIELDS:
            value = getattr(record, name, None)
            if value is None:
                value = bound.get(name)
            if value is not None:
                payload[name] = value

        extra = {
            key: val
            for key, val in vars(record).items()
            if key not in _RECORD_ATTRS and key not in READER_FIELDS
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info and record.exc_info[1] is not None:
            payload["error"] = _error_payload(record.exc_info[1])
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Logger factory and initialization
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``fragment`` namespace, e.g. ``fragment.ingestion.reader``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> logging.Handler | None:
    """Attach one JSON handler to the ``fragment`` logger.

    Only the first call has an effect; it returns the installed handler.
    Later calls return None. ``level`` accepts a level name ("DEBUG").
    """
    global _configured
    with _lock:
        if _configured:
            return None
        _configured = True

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    root.propagate = False

    installed = handler or logging.StreamHandler(stream or sys.stderr)
    installed.setFormatter(StructuredFormatter())
    root.addHandler(installed)
    return installed


def reset_logging() -> None:
    """Undo configure_logging() and clear LogContext. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True
    LogContext.clear()
