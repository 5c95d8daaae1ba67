"""SQLAlchemy ORM models for the ledger kernel."""

from ledger_kernel.models.gl_entry import GLEntryModel
from ledger_kernel.models.payment_ledger import PaymentLedgerEntryModel

__all__ = [
    "GLEntryModel",
    "PaymentLedgerEntryModel",
]
