"""
Module: ledger_kernel.models.gl_entry
Responsibility: ORM persistence for general-ledger entries.  One row per
    GL line; a voucher's batch is the set of rows sharing
    (voucher_type, voucher_no).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - name is unique across the table.
    - Append-only: after insert only is_cancelled may change (False -> True),
      and rows are never deleted (see db/immutability.py).

Failure modes:
    - IntegrityError on duplicate name.
    - ImmutabilityViolationError on any other UPDATE or any DELETE.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base


def _text(length: int = 140):
    return mapped_column(String(length), nullable=False, default="")


def _amount():
    return mapped_column(nullable=False, default=Decimal("0"))


class GLEntryModel(Base):
    """
    Persisted GL line.

    Column names match ledger_kernel.domain.dtos.GLEntry field names, so
    conversion in both directions is a plain field copy.
    """

    __tablename__ = "gl_entries"

    __table_args__ = (
        Index("idx_gle_voucher", "voucher_type", "voucher_no"),
        Index("idx_gle_account_date", "account", "posting_date"),
        Index("idx_gle_party", "party_type", "party"),
        Index("idx_gle_company_date", "company", "posting_date"),
    )

    name: Mapped[str] = mapped_column(String(140), nullable=False, unique=True)

    posting_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    transaction_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    company: Mapped[str] = _text()
    fiscal_year: Mapped[str] = _text()
    account: Mapped[str] = _text()
    account_currency: Mapped[str] = _text(10)
    against: Mapped[str] = mapped_column(String(2000), nullable=False, default="")
    party_type: Mapped[str] = _text()
    party: Mapped[str] = _text()

    voucher_type: Mapped[str] = _text()
    voucher_no: Mapped[str] = _text()
    voucher_subtype: Mapped[str] = _text()
    voucher_detail_no: Mapped[str] = _text()
    against_voucher_type: Mapped[str] = _text()
    against_voucher: Mapped[str] = _text()

    debit: Mapped[Decimal] = _amount()
    credit: Mapped[Decimal] = _amount()
    debit_in_account_currency: Mapped[Decimal] = _amount()
    credit_in_account_currency: Mapped[Decimal] = _amount()
    transaction_currency: Mapped[str] = _text(10)
    transaction_exchange_rate: Mapped[Decimal] = _amount()
    debit_in_transaction_currency: Mapped[Decimal] = _amount()
    credit_in_transaction_currency: Mapped[Decimal] = _amount()

    cost_center: Mapped[str] = _text()
    project: Mapped[str] = _text()
    finance_book: Mapped[str] = _text()

    is_opening: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_advance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_cancelled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    remarks: Mapped[str] = mapped_column(String(2000), nullable=False, default="")

    def __repr__(self) -> str:
        return (
            f"<GLEntryModel {self.name} {self.voucher_type} {self.voucher_no} "
            f"{self.account} Dr {self.debit} Cr {self.credit}>"
        )
