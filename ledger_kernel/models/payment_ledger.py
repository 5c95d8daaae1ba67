"""
Module: ledger_kernel.models.payment_ledger
Responsibility: ORM persistence for party-ledger (payment ledger) entries,
    the per-party receivable/payable view derived from GL lines.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Append-only except for the delinked flag (see db/immutability.py).
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base


class PaymentLedgerEntryModel(Base):
    __tablename__ = "payment_ledger_entries"

    __table_args__ = (
        Index("idx_ple_voucher", "voucher_type", "voucher_no"),
        Index("idx_ple_party", "party_type", "party"),
        Index("idx_ple_against", "against_voucher_type", "against_voucher_no"),
    )

    name: Mapped[str] = mapped_column(String(140), nullable=False, unique=True)

    posting_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    company: Mapped[str] = mapped_column(String(140), nullable=False, default="")
    account: Mapped[str] = mapped_column(String(140), nullable=False, default="")
    account_currency: Mapped[str] = mapped_column(String(10), nullable=False, default="")
    party_type: Mapped[str] = mapped_column(String(140), nullable=False)
    party: Mapped[str] = mapped_column(String(140), nullable=False)

    voucher_type: Mapped[str] = mapped_column(String(140), nullable=False)
    voucher_no: Mapped[str] = mapped_column(String(140), nullable=False)
    voucher_detail_no: Mapped[str] = mapped_column(String(140), nullable=False, default="")
    against_voucher_type: Mapped[str] = mapped_column(String(140), nullable=False, default="")
    against_voucher_no: Mapped[str] = mapped_column(String(140), nullable=False, default="")

    amount: Mapped[Decimal] = mapped_column(nullable=False)
    amount_in_account_currency: Mapped[Decimal] = mapped_column(nullable=False)

    finance_book: Mapped[str] = mapped_column(String(140), nullable=False, default="")
    remarks: Mapped[str] = mapped_column(String(2000), nullable=False, default="")
    delinked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
