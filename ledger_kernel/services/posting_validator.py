"""
PostingValidator -- precondition checks run before a batch is persisted.

Responsibility:
    Implements each gate of the posting pipeline as a step that takes a
    LedgerBatch and returns a StepResult: either the (possibly enriched)
    batch or the typed error that stops the posting. The orchestrator
    chains the steps and stops at the first failure.

Architecture position:
    Kernel > Services -- talks to the injected collaborators, never to a
    database directly. Any collaborator may be None; its checks are then
    skipped.

Invariants enforced:
    - Disabled and group accounts are reported all at once, deduplicated,
      in first-seen order.
    - Frozen-account and frozen-till checks are bypassed only for
      authorized adjustments (adv_adj).
    - A period-closing voucher skips the budget check.

Failure modes:
    - Steps return LedgerKernelError subclasses; they do not raise them.
    - Collaborator exceptions outside the kernel taxonomy are raised as
      CollaboratorError, chained to the original.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, TypeVar

from ledger_kernel.contracts import (
    AccountingPeriodChecker,
    AccountLookup,
    BudgetValidator,
    CompanySettings,
    FiscalYearLookup,
)
from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.domain.values import round_money
from ledger_kernel.exceptions import (
    AccountDisabledError,
    AccountFrozenError,
    AccountIsGroupError,
    AccountsFrozenTillDateError,
    BooksClosedError,
    BudgetExceededError,
    CollaboratorError,
    CurrencyMismatchError,
    FiscalYearNotFoundError,
    InsufficientEntriesError,
    InvalidAccountCurrencyError,
    LedgerKernelError,
    PeriodClosedError,
)
from ledger_kernel.logging_config import get_logger

logger = get_logger("services.posting_validator")

T = TypeVar("T")


def guarded(collaborator: str, operation: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Call a collaborator, wrapping foreign exceptions in CollaboratorError."""
    try:
        return fn(*args, **kwargs)
    except LedgerKernelError:
        raise
    except Exception as e:
        logger.error(
            "collaborator_failed",
            extra={"collaborator": collaborator, "operation": operation},
            exc_info=True,
        )
        raise CollaboratorError(collaborator, operation, str(e) or type(e).__name__) from e


@dataclass(frozen=True)
class StepResult:
    """Outcome of one pipeline step."""

    batch: LedgerBatch
    error: LedgerKernelError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, batch: LedgerBatch) -> StepResult:
        return cls(batch=batch)

    @classmethod
    def failure(cls, batch: LedgerBatch, error: LedgerKernelError) -> StepResult:
        return cls(batch=batch, error=error)


Step = Callable[[LedgerBatch], StepResult]


def run_steps(batch: LedgerBatch, steps: list[Step]) -> StepResult:
    """Apply steps in order, stopping at the first failure."""
    result = StepResult.success(batch)
    for step in steps:
        result = step(result.batch)
        if not result.ok:
            return result
    return result


class PostingValidator:
    """
    Precondition gates for GL posting.

    Contract:
        Every public check_* method is a Step: it accepts a LedgerBatch and
        returns a StepResult.

    Non-goals:
        - Does NOT persist anything.
        - Does NOT transform amounts (see ledger_kernel.domain.pipeline).
    """

    def __init__(
        self,
        accounts: AccountLookup | None = None,
        company: CompanySettings | None = None,
        periods: AccountingPeriodChecker | None = None,
        fiscal_years: FiscalYearLookup | None = None,
        budget: BudgetValidator | None = None,
        policy: PostingPolicy = DEFAULT_POLICY,
    ):
        self._accounts = accounts
        self._company = company
        self._periods = periods
        self._fiscal_years = fiscal_years
        self._budget = budget
        self._policy = policy

    # -- Budget ---------------------------------------------------------------

    def check_budget(self, batch: LedgerBatch) -> StepResult:
        if self._budget is None or batch.is_period_closing(self._policy):
            return StepResult.success(batch)
        violation = guarded("budget", "validate", self._budget.validate, list(batch))
        if violation is None:
            return StepResult.success(batch)
        return StepResult.failure(
            batch,
            BudgetExceededError(
                account=violation.account,
                cost_center=violation.cost_center,
                budget=violation.budget,
                actual=violation.actual,
                variance=violation.variance,
            ),
        )

    # -- Calendar -------------------------------------------------------------

    def check_period_closed(self, batch: LedgerBatch) -> StepResult:
        if self._periods is None:
            return StepResult.success(batch)
        company, doctype, posting_date = batch.company, batch.voucher_type, batch.posting_date
        closed = guarded(
            "periods", "is_document_type_closed",
            self._periods.is_document_type_closed, company, doctype, posting_date,
        )
        if not closed:
            return StepResult.success(batch)
        period_name = guarded(
            "periods", "get_closed_period_message",
            self._periods.get_closed_period_message, company, doctype, posting_date,
        )
        return StepResult.failure(
            batch, PeriodClosedError(company, doctype, posting_date, period_name or "")
        )

    def check_books_closed(self, batch: LedgerBatch) -> StepResult:
        if self._company is None:
            return StepResult.success(batch)
        closed_till = guarded(
            "company", "get_book_closing_date",
            self._company.get_book_closing_date, batch.company,
        )
        if closed_till is not None and batch.posting_date is not None and batch.posting_date <= closed_till:
            return StepResult.failure(
                batch, BooksClosedError(batch.company, batch.posting_date, closed_till)
            )
        return StepResult.success(batch)

    def assign_fiscal_year(self, batch: LedgerBatch) -> StepResult:
        """Resolve the fiscal year and stamp it onto entries that lack one."""
        if self._fiscal_years is None:
            return StepResult.success(batch)
        fiscal_year = guarded(
            "fiscal_years", "get_fiscal_year",
            self._fiscal_years.get_fiscal_year, batch.posting_date, batch.company,
        )
        if fiscal_year is None:
            return StepResult.failure(
                batch, FiscalYearNotFoundError(batch.company, batch.posting_date)
            )
        return StepResult.success(
            batch.replace(
                e if e.fiscal_year else replace(e, fiscal_year=fiscal_year.name)
                for e in batch
            )
        )

    def check_frozen_till_date(self, batch: LedgerBatch, adv_adj: bool = False) -> StepResult:
        if self._company is None or adv_adj:
            return StepResult.success(batch)
        frozen_till = guarded(
            "company", "get_accounts_frozen_till_date",
            self._company.get_accounts_frozen_till_date, batch.company,
        )
        if frozen_till is not None and batch.posting_date is not None and batch.posting_date < frozen_till:
            return StepResult.failure(
                batch,
                AccountsFrozenTillDateError(batch.company, batch.posting_date, frozen_till),
            )
        return StepResult.success(batch)

    # -- Accounts -------------------------------------------------------------

    def check_disabled_accounts(self, batch: LedgerBatch) -> StepResult:
        if self._accounts is None:
            return StepResult.success(batch)
        disabled = [
            name for name in batch.accounts()
            if guarded("accounts", "is_disabled", self._accounts.is_disabled, name)
        ]
        if disabled:
            return StepResult.failure(batch, AccountDisabledError(disabled))
        return StepResult.success(batch)

    def check_group_accounts(self, batch: LedgerBatch) -> StepResult:
        if self._accounts is None:
            return StepResult.success(batch)
        groups = [
            name for name in batch.accounts()
            if guarded("accounts", "is_group", self._accounts.is_group, name)
        ]
        if groups:
            return StepResult.failure(batch, AccountIsGroupError(groups))
        return StepResult.success(batch)

    def check_frozen_accounts(self, batch: LedgerBatch, adv_adj: bool = False) -> StepResult:
        if self._accounts is None or adv_adj:
            return StepResult.success(batch)
        for name in batch.accounts():
            if guarded("accounts", "is_frozen", self._accounts.is_frozen, name):
                return StepResult.failure(batch, AccountFrozenError(name))
        return StepResult.success(batch)

    def check_account_currency(self, batch: LedgerBatch) -> StepResult:
        """
        Fill blank account currencies from the account master and reject
        entries whose currency disagrees with it.

        For accounts held in the company's default currency, blank
        account-currency amounts are copied from the company amounts;
        non-blank ones must match them.
        """
        if self._accounts is None:
            return StepResult.success(batch)

        currencies: dict[str, str] = {}
        for name in batch.accounts():
            currencies[name] = guarded(
                "accounts", "get_account_currency",
                self._accounts.get_account_currency, name,
            ) or ""

        default_currency = ""
        if self._company is not None:
            default_currency = guarded(
                "company", "get_default_currency",
                self._company.get_default_currency, batch.company,
            ) or ""

        precision = self._policy.precision
        checked = []
        for entry in batch:
            master = currencies.get(entry.account, "")
            if master and entry.account_currency and entry.account_currency != master:
                return StepResult.failure(
                    batch,
                    InvalidAccountCurrencyError(entry.account, entry.account_currency, master),
                )
            if master and not entry.account_currency:
                entry = replace(entry, account_currency=master)

            if default_currency and entry.account_currency == default_currency:
                if not entry.debit_in_account_currency and not entry.credit_in_account_currency:
                    entry = entry.with_amounts(
                        debit_in_account_currency=entry.debit,
                        credit_in_account_currency=entry.credit,
                    )
                for company_field, account_field in (
                    ("debit", "debit_in_account_currency"),
                    ("credit", "credit_in_account_currency"),
                ):
                    company_amount = round_money(getattr(entry, company_field), precision)
                    account_amount = round_money(getattr(entry, account_field), precision)
                    if company_amount != account_amount:
                        return StepResult.failure(
                            batch,
                            CurrencyMismatchError(
                                entry.account, default_currency, company_amount, account_amount
                            ),
                        )
            checked.append(entry)
        return StepResult.success(batch.replace(checked))

    # -- Shape ----------------------------------------------------------------

    def check_entry_count(self, batch: LedgerBatch) -> StepResult:
        expected = self._policy.minimum_entries
        if len(batch) < expected:
            return StepResult.failure(batch, InsufficientEntriesError(expected, len(batch)))
        return StepResult.success(batch)
