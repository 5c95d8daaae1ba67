"""
DTOs -- Pure domain data transfer objects for the general ledger.

Responsibility:
    Defines the immutable records that flow through the posting engine:
    GLEntry (one debit/credit line of a voucher), PaymentLedgerEntry (the
    party-ledger projection of a GL line), the account-master and calendar
    views returned by collaborators, and PostingOptions.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods exist as boundary converters but are only
    invoked from the persistence adapters, never from domain logic.

Invariants enforced:
    - Every monetary field is a Decimal. Floats are coerced through their
      string form at construction, so no binary float reaches the ledger.
    - DTOs are frozen; every transform builds a new instance.

Failure modes:
    - ValueError when an amount cannot be interpreted as a decimal number.

Data flow:
    caller entries -> LedgerBatch -> pipeline -> GLEntryStore
                                             \\-> PaymentLedgerEntry -> PaymentLedgerStore
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from ledger_kernel.domain.values import ZERO, to_decimal

if TYPE_CHECKING:
    from ledger_kernel.models.gl_entry import GLEntryModel
    from ledger_kernel.models.payment_ledger import PaymentLedgerEntryModel


# (debit field, credit field) for each of the three currency views.
AMOUNT_VIEWS: tuple[tuple[str, str], ...] = (
    ("debit", "credit"),
    ("debit_in_account_currency", "credit_in_account_currency"),
    ("debit_in_transaction_currency", "credit_in_transaction_currency"),
)

_DECIMAL_FIELDS = frozenset(
    name for pair in AMOUNT_VIEWS for name in pair
) | {"transaction_exchange_rate"}


@dataclass(frozen=True)
class VoucherRef:
    """Identity of the source document a batch belongs to."""

    voucher_type: str
    voucher_no: str
    company: str = ""

    def __str__(self) -> str:
        return f"{self.voucher_type} {self.voucher_no}"


@dataclass(frozen=True)
class GLEntry:
    """
    One proposed or persisted general-ledger line.

    Contract:
        Carries the debit/credit pair in three currency views (company,
        account, transaction) plus the analytical dimensions used for
        merging and reporting.

    Guarantees:
        - All amount fields are Decimal after construction.
        - Immutable; use with_amounts() / dataclasses.replace() to derive.

    Non-goals:
        - Does NOT validate sign or balance; that is the pipeline's job.
    """

    account: str = ""
    posting_date: date | None = None
    company: str = ""
    voucher_type: str = ""
    voucher_no: str = ""
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    name: str = ""
    transaction_date: date | None = None
    due_date: date | None = None
    fiscal_year: str = ""
    voucher_subtype: str = ""
    voucher_detail_no: str = ""
    account_currency: str = ""
    against: str = ""
    party_type: str = ""
    party: str = ""
    against_voucher_type: str = ""
    against_voucher: str = ""
    debit_in_account_currency: Decimal = ZERO
    credit_in_account_currency: Decimal = ZERO
    transaction_currency: str = ""
    transaction_exchange_rate: Decimal = ZERO
    debit_in_transaction_currency: Decimal = ZERO
    credit_in_transaction_currency: Decimal = ZERO
    cost_center: str = ""
    project: str = ""
    finance_book: str = ""
    is_opening: bool = False
    is_advance: bool = False
    is_cancelled: bool = False
    remarks: str = ""

    def __post_init__(self) -> None:
        for name in _DECIMAL_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                object.__setattr__(self, name, to_decimal(value))

    @property
    def voucher(self) -> VoucherRef:
        return VoucherRef(self.voucher_type, self.voucher_no, self.company)

    @property
    def has_party(self) -> bool:
        return bool(self.party_type) and bool(self.party)

    def amounts(self) -> dict[str, Decimal]:
        """All six debit/credit amounts keyed by field name."""
        return {name: getattr(self, name) for pair in AMOUNT_VIEWS for name in pair}

    def with_amounts(self, **amounts: Decimal) -> GLEntry:
        """Copy with the given amount fields replaced."""
        return replace(self, **amounts)

    @classmethod
    def from_model(cls, model: GLEntryModel) -> GLEntry:
        """Create from ORM model. Used only by persistence adapters."""
        return cls(**{f.name: getattr(model, f.name) for f in fields(cls)})


@dataclass(frozen=True)
class PaymentLedgerEntry:
    """
    Party-ledger projection of a GL line.

    amount is signed: debit minus credit in company currency.
    """

    posting_date: date | None
    company: str
    account: str
    party_type: str
    party: str
    voucher_type: str
    voucher_no: str
    amount: Decimal
    amount_in_account_currency: Decimal
    account_currency: str = ""
    voucher_detail_no: str = ""
    against_voucher_type: str = ""
    against_voucher_no: str = ""
    due_date: date | None = None
    finance_book: str = ""
    remarks: str = ""
    delinked: bool = False
    name: str = ""

    def __post_init__(self) -> None:
        for name in ("amount", "amount_in_account_currency"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                object.__setattr__(self, name, to_decimal(value))

    @classmethod
    def from_model(cls, model: PaymentLedgerEntryModel) -> PaymentLedgerEntry:
        """Create from ORM model. Used only by persistence adapters."""
        return cls(**{f.name: getattr(model, f.name) for f in fields(cls)})


@dataclass(frozen=True)
class PostingOptions:
    """
    Per-call switches for GeneralLedgerOrchestrator.post().

    cancel:             reverse the voucher's stored entries instead of posting.
    adv_adj:            authorized adjustment; bypasses frozen-account and
                        frozen-till-date checks.
    merge_entries:      collapse entries sharing a merge key.
    update_outstanding: callers' hint for outstanding-amount refresh; carried
                        through to the result unchanged.
    from_repost:        reposting an existing voucher; skips the
                        already-posted check.
    """

    cancel: bool = False
    adv_adj: bool = False
    merge_entries: bool = True
    update_outstanding: bool = True
    from_repost: bool = False


@dataclass(frozen=True)
class Account:
    """Account-master view as returned by an AccountLookup."""

    name: str
    account_name: str = ""
    company: str = ""
    account_currency: str = ""
    is_group: bool = False
    disabled: bool = False
    freeze_account: bool = False
    balance_must_be: str = ""
    root_type: str = ""


@dataclass(frozen=True)
class AccountingDimension:
    """A dimension that requires balancing entries on its offsetting account."""

    fieldname: str
    name: str
    offsetting_account: str
    account_currency: str = ""


@dataclass(frozen=True)
class BudgetViolation:
    """A budget breach reported by a BudgetValidator."""

    account: str
    cost_center: str
    budget: Decimal
    actual: Decimal
    variance: Decimal


@dataclass(frozen=True)
class FiscalYear:
    name: str
    start_date: date
    end_date: date

    def contains(self, value: date) -> bool:
        return self.start_date <= value <= self.end_date
