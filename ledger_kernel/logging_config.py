"""
Structured logging for the ledger kernel.

Responsibility:
    Renders every ``ledger_kernel.*`` record as one JSON line tagged with
    the voucher being posted, so a single posting (or cancellation) can be
    pulled out of a mixed log by correlation_id or voucher_no.

Architecture position:
    Kernel > Infrastructure -- stdlib ``logging`` only. Other kernel modules
    obtain loggers via get_logger() and pass structured fields through
    ``extra=``; they never format messages themselves.

Invariants enforced:
    - The voucher scope is a ContextVar, so concurrent postings on other
      threads or tasks never see each other's fields.
    - Leaving a bind() block restores the enclosing scope exactly.
    - Amounts are serialized as strings; a logged Decimal is never rounded
      through float.

Audit relevance:
    A LedgerKernelError attached to a record is flattened into ``error_*``
    fields (code, detail, and its structured attributes such as accounts,
    amounts and dates). A CollaboratorError additionally records the
    chained foreign exception as ``error_cause``.
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
import os
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any
from uuid import uuid4

from ledger_kernel.exceptions import LedgerKernelError

LOGGER_ROOT = "ledger_kernel"
LEVEL_ENV_VAR = "LEDGER_LOG_LEVEL"

CONTEXT_FIELDS = ("correlation_id", "voucher_type", "voucher_no", "company", "trace_id")

_EMPTY: Mapping[str, str] = MappingProxyType({})
_scope: ContextVar[Mapping[str, str]] = ContextVar("ledger_log_scope", default=_EMPTY)


# ---------------------------------------------------------------------------
# Voucher scope
# ---------------------------------------------------------------------------


class LogContext:
    """
    Per-posting log fields carried in a ContextVar.

    Only the names in CONTEXT_FIELDS are accepted; anything else raises
    TypeError so a misspelt field fails loudly instead of vanishing.
    """

    @staticmethod
    def _merged(fields: dict[str, str | None]) -> Mapping[str, str]:
        unknown = set(fields) - set(CONTEXT_FIELDS)
        if unknown:
            raise TypeError(f"Unknown log context field(s): {', '.join(sorted(unknown))}")
        merged = dict(_scope.get())
        merged.update({k: v for k, v in fields.items() if v is not None})
        return MappingProxyType(merged)

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Add fields to the current scope. None values are ignored."""
        _scope.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_scope.get())

    @classmethod
    def clear(cls) -> None:
        _scope.set(_EMPTY)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[None]:
        """Add fields for the duration of the block."""
        token = _scope.set(cls._merged(fields))
        try:
            yield
        finally:
            _scope.reset(token)

    @classmethod
    def bind_voucher(cls, voucher: Any, correlation_id: str | None = None):
        """
        Scope a block to one voucher.

        ``voucher`` is anything with voucher_type, voucher_no and company
        (a VoucherRef or a LedgerBatch). A fresh correlation_id is minted
        unless one is given.
        """
        return cls.bind(
            correlation_id=correlation_id or str(uuid4()),
            voucher_type=voucher.voucher_type or None,
            voucher_no=voucher.voucher_no or None,
            company=voucher.company or None,
        )


# ---------------------------------------------------------------------------
# JSON rendering
# ---------------------------------------------------------------------------

_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_value(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    # UUID, VoucherRef and anything else with a meaningful str()
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    if not isinstance(exc, LedgerKernelError):
        return {"exc_type": type(exc).__name__, "exc_message": str(exc)}

    fields: dict[str, Any] = {
        "error_code": exc.code,
        "error_type": type(exc).__name__,
        "error_detail": exc.detail,
    }
    for name, value in vars(exc).items():
        if not name.startswith("_"):
            fields[f"error_{name}"] = value
    cause = exc.__cause__
    if cause is not None:
        fields["error_cause"] = f"{type(cause).__name__}: {cause}"
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, voucher scope, extras, error."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_scope.get())

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in payload:
                payload[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_value)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger under the ledger_kernel namespace, e.g. ``services.posting``."""
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str | None = None,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ledger_kernel logger. Idempotent.

    ``level`` may be a number or a name; when omitted it is read from
    LEDGER_LOG_LEVEL and defaults to INFO.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR, "INFO")
    if isinstance(level, str):
        level = level.upper()

    root = logging.getLogger(LOGGER_ROOT)
    root.setLevel(level)
    root.propagate = False

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root.addHandler(h)


def reset_logging() -> None:
    """Detach handlers and allow configure_logging() again. Tests only."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(LOGGER_ROOT)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.propagate = True
