"""
Collaborator contracts for the posting engine.

Responsibility:
    Declares the eight narrow capabilities the orchestrator depends on.
    Each is a runtime-checkable Protocol so any object with the right
    methods can be injected, and each can be omitted independently for a
    partial deployment (no budgets, no party ledger, ...).

Architecture position:
    Kernel > Contracts -- typing only. Implementations live outside the
    domain: ledger_kernel.stores for the SQLAlchemy adapters, test fakes
    for the rest.

Failure modes:
    - Implementations may raise LedgerKernelError subclasses, which the
      orchestrator reports unchanged. Any other exception is wrapped in
      CollaboratorError.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from datetime import date
from typing import Protocol, runtime_checkable

from ledger_kernel.domain.dtos import (
    Account,
    AccountingDimension,
    BudgetViolation,
    FiscalYear,
    GLEntry,
    PaymentLedgerEntry,
    VoucherRef,
)


@runtime_checkable
class AccountLookup(Protocol):
    """Read access to the chart of accounts."""

    def get_account(self, name: str) -> Account | None: ...

    def get_account_currency(self, name: str) -> str: ...

    def is_group(self, name: str) -> bool: ...

    def is_frozen(self, name: str) -> bool: ...

    def is_disabled(self, name: str) -> bool: ...

    def get_balance_must_be(self, name: str) -> str: ...


@runtime_checkable
class CompanySettings(Protocol):
    """Per-company posting settings. Optional dates return None when unset."""

    def get_default_currency(self, company: str) -> str: ...

    def get_round_off_account(self, company: str) -> str: ...

    def get_round_off_cost_center(self, company: str) -> str: ...

    def get_accounts_frozen_till_date(self, company: str) -> date | None: ...

    def get_book_closing_date(self, company: str) -> date | None: ...

    def get_exchange_gain_loss_account(self, company: str) -> str: ...


@runtime_checkable
class AccountingPeriodChecker(Protocol):
    def is_document_type_closed(
        self, company: str, document_type: str, posting_date: date
    ) -> bool: ...

    def get_closed_period_message(
        self, company: str, document_type: str, posting_date: date
    ) -> str: ...


@runtime_checkable
class FiscalYearLookup(Protocol):
    def get_fiscal_year(self, posting_date: date, company: str) -> FiscalYear | None: ...

    def get_fiscal_year_dates(
        self, fiscal_year: str, company: str
    ) -> tuple[date, date] | None: ...


@runtime_checkable
class GLEntryStore(Protocol):
    """
    Persistence for GL entries.

    atomic() returns a context manager delimiting one all-or-nothing unit:
    every write made inside it is kept only if the block exits normally.
    """

    def save(self, entry: GLEntry) -> GLEntry: ...

    def save_batch(self, entries: Sequence[GLEntry]) -> list[GLEntry]: ...

    def get_by_voucher(
        self, voucher: VoucherRef, include_cancelled: bool = False
    ) -> list[GLEntry]: ...

    def mark_cancelled(self, voucher: VoucherRef) -> int: ...

    def atomic(self) -> AbstractContextManager[None]: ...


@runtime_checkable
class PaymentLedgerStore(Protocol):
    def save(self, entry: PaymentLedgerEntry) -> PaymentLedgerEntry: ...

    def save_batch(self, entries: Sequence[PaymentLedgerEntry]) -> list[PaymentLedgerEntry]: ...

    def get_by_voucher(self, voucher: VoucherRef) -> list[PaymentLedgerEntry]: ...

    def delink(self, voucher: VoucherRef) -> int: ...


@runtime_checkable
class BudgetValidator(Protocol):
    def validate(self, entries: Sequence[GLEntry]) -> BudgetViolation | None: ...


@runtime_checkable
class AccountingDimensionProvider(Protocol):
    def get_dimensions_for_offsetting(
        self, entries: Sequence[GLEntry], company: str
    ) -> list[AccountingDimension]: ...
