"""
ORM-level append-only enforcement for persisted ledger rows.

SQLAlchemy fires mapper events before UPDATE/DELETE statements reach the
database. The listeners registered here inspect attribute history and
raise ImmutabilityViolationError when a change touches anything other
than the row's lifecycle flag:

Entity                   | Mutable after insert     | Delete
-------------------------|--------------------------|--------
GLEntryModel             | is_cancelled (-> True)   | never
PaymentLedgerEntryModel  | delinked (-> True)       | never

Corrections to posted history are made with reversing entries, never by
editing rows.

Usage (create_tables() calls this for you):

    from ledger_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()
"""

from sqlalchemy import event, inspect

from ledger_kernel.exceptions import ImmutabilityViolationError
from ledger_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

GL_ENTRY_MUTABLE_FIELDS = frozenset({"is_cancelled"})
PAYMENT_LEDGER_MUTABLE_FIELDS = frozenset({"delinked"})


def _blocked(entity_type: str, target, operation: str, reason: str, field: str | None = None):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": target.name,
            "operation": operation,
            "field": field,
        },
    )
    return ImmutabilityViolationError(entity_type, target.name, reason)


def _check_update(entity_type: str, flag: str, mutable: frozenset[str], target) -> None:
    insp = inspect(target)
    for attr in insp.attrs:
        hist = attr.history
        if not hist.has_changes():
            continue
        if attr.key not in mutable:
            raise _blocked(
                entity_type, target, "UPDATE",
                f"field '{attr.key}' cannot change after posting", attr.key,
            )
        if attr.key == flag and hist.deleted and hist.deleted[0] and not getattr(target, flag):
            raise _blocked(
                entity_type, target, "UPDATE",
                f"'{flag}' cannot be reset once set", attr.key,
            )


def _check_gl_entry_update(mapper, connection, target):
    _check_update("GLEntry", "is_cancelled", GL_ENTRY_MUTABLE_FIELDS, target)


def _check_gl_entry_delete(mapper, connection, target):
    raise _blocked("GLEntry", target, "DELETE", "GL entries cannot be deleted")


def _check_payment_ledger_update(mapper, connection, target):
    _check_update("PaymentLedgerEntry", "delinked", PAYMENT_LEDGER_MUTABLE_FIELDS, target)


def _check_payment_ledger_delete(mapper, connection, target):
    raise _blocked(
        "PaymentLedgerEntry", target, "DELETE", "payment ledger entries cannot be deleted"
    )


_LISTENERS = (
    ("GLEntryModel", "before_update", _check_gl_entry_update),
    ("GLEntryModel", "before_delete", _check_gl_entry_delete),
    ("PaymentLedgerEntryModel", "before_update", _check_payment_ledger_update),
    ("PaymentLedgerEntryModel", "before_delete", _check_payment_ledger_delete),
)


def _models() -> dict[str, type]:
    from ledger_kernel.models import GLEntryModel, PaymentLedgerEntryModel

    return {
        "GLEntryModel": GLEntryModel,
        "PaymentLedgerEntryModel": PaymentLedgerEntryModel,
    }


def register_immutability_listeners() -> None:
    """Register the append-only listeners. Safe to call more than once."""
    models = _models()
    for model_name, event_name, listener in _LISTENERS:
        target = models[model_name]
        if not event.contains(target, event_name, listener):
            event.listen(target, event_name, listener)


def unregister_immutability_listeners() -> None:
    """
    Remove the append-only listeners.

    WARNING: Only use this in tests that must bypass the guard.
    """
    models = _models()
    for model_name, event_name, listener in _LISTENERS:
        target = models[model_name]
        if event.contains(target, event_name, listener):
            event.remove(target, event_name, listener)
