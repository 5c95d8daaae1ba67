"""Persistence adapters implementing the entry-store contracts."""

from ledger_kernel.stores.sqlalchemy_store import (
    SqlAlchemyGLEntryStore,
    SqlAlchemyPaymentLedgerStore,
)

__all__ = [
    "SqlAlchemyGLEntryStore",
    "SqlAlchemyPaymentLedgerStore",
]
