"""
Typed exception hierarchy for the ledger kernel.

Every failure the posting engine can report is a subclass of
LedgerKernelError. Each class carries a stable ``code`` class attribute and
stores its context as attributes, so callers catch by type and read fields
rather than parsing messages.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- AccountError
    |   +-- AccountDisabledError
    |   +-- AccountFrozenError
    |   +-- AccountIsGroupError
    |
    +-- CurrencyError
    |   +-- InvalidAccountCurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- PostingError
    |   +-- DebitCreditMismatchError
    |   +-- InsufficientEntriesError
    |   +-- BudgetExceededError
    |
    +-- PeriodError
    |   +-- PeriodClosedError
    |   +-- FiscalYearNotFoundError
    |   +-- AccountsFrozenTillDateError
    |   +-- BooksClosedError
    |
    +-- VoucherError
    |   +-- VoucherNotFoundError
    |   +-- VoucherAlreadyPostedError
    |
    +-- CollaboratorError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Account         | ACCOUNT_DISABLED            | One or more accounts are disabled
                | ACCOUNT_FROZEN              | Posting to a frozen account
                | ACCOUNT_IS_GROUP            | Posting to a group (non-leaf) account
----------------|-----------------------------|-----------------------------------------
Currency        | INVALID_ACCOUNT_CURRENCY    | Entry currency != account master
                | CURRENCY_MISMATCH           | Company-currency views disagree
----------------|-----------------------------|-----------------------------------------
Posting         | DEBIT_CREDIT_MISMATCH       | Imbalance above the allowance
                | INSUFFICIENT_ENTRIES        | Fewer than two entries after processing
                | BUDGET_EXCEEDED             | Budget validator reported a violation
----------------|-----------------------------|-----------------------------------------
Period          | PERIOD_CLOSED               | Document type closed for the date
                | FISCAL_YEAR_NOT_FOUND       | No fiscal year covers the date
                | ACCOUNTS_FROZEN_TILL_DATE   | Date before accounts-frozen-till
                | BOOKS_CLOSED                | Date on/before book closing date
----------------|-----------------------------|-----------------------------------------
Voucher         | VOUCHER_NOT_FOUND           | Cancelling a voucher with no entries
                | VOUCHER_ALREADY_POSTED      | Voucher already has live entries
----------------|-----------------------------|-----------------------------------------
Collaborator    | COLLABORATOR_FAILURE        | A collaborator raised a foreign error
----------------|-----------------------------|-----------------------------------------
Persistence     | IMMUTABILITY_VIOLATION      | Stored GL history updated or deleted

===============================================================================
"""

from datetime import date
from decimal import Decimal


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must define a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"

    @property
    def detail(self) -> str:
        """Human-readable description of the failure."""
        return str(self)


# Account-related exceptions


class AccountError(LedgerKernelError):
    """Base exception for account master errors."""

    code: str = "ACCOUNT_ERROR"


class AccountDisabledError(AccountError):
    """
    One or more accounts referenced by the batch are disabled.

    Every offending account is reported, deduplicated, in the order it was
    first seen in the batch.
    """

    code: str = "ACCOUNT_DISABLED"

    def __init__(self, accounts: list[str]):
        self.accounts = list(accounts)
        if len(self.accounts) == 1:
            message = f"Cannot create accounting entries against disabled account: {self.accounts[0]}"
        else:
            message = (
                "Cannot create accounting entries against disabled accounts: "
                + ", ".join(self.accounts)
            )
        super().__init__(message)


class AccountFrozenError(AccountError):
    """Account is frozen and the posting is not an authorized adjustment."""

    code: str = "ACCOUNT_FROZEN"

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"Account {account} is frozen")


class AccountIsGroupError(AccountError):
    """Entries may only post to leaf accounts."""

    code: str = "ACCOUNT_IS_GROUP"

    def __init__(self, accounts: list[str]):
        self.accounts = list(accounts)
        super().__init__(
            "Cannot post to group accounts: " + ", ".join(self.accounts)
        )


# Currency-related exceptions


class CurrencyError(LedgerKernelError):
    """Base exception for currency errors."""

    code: str = "CURRENCY_ERROR"


class InvalidAccountCurrencyError(CurrencyError):
    """Entry account currency does not match the account master."""

    code: str = "INVALID_ACCOUNT_CURRENCY"

    def __init__(self, account: str, entry_currency: str, account_currency: str):
        self.account = account
        self.entry_currency = entry_currency
        self.account_currency = account_currency
        super().__init__(
            f"Account {account} is in {account_currency}, "
            f"entry uses {entry_currency}"
        )


class CurrencyMismatchError(CurrencyError):
    """
    Company-currency and account-currency amounts disagree.

    Raised when an account is held in the company's default currency but the
    two amount views on an entry differ.
    """

    code: str = "CURRENCY_MISMATCH"

    def __init__(
        self,
        account: str,
        currency: str,
        company_amount: Decimal,
        account_amount: Decimal,
    ):
        self.account = account
        self.currency = currency
        self.company_amount = company_amount
        self.account_amount = account_amount
        super().__init__(
            f"Account {account} ({currency}): company amount {company_amount} "
            f"does not match account-currency amount {account_amount}"
        )


# Posting-related exceptions


class PostingError(LedgerKernelError):
    """Base exception for posting errors."""

    code: str = "POSTING_ERROR"


class DebitCreditMismatchError(PostingError):
    """Batch imbalance exceeds the allowance for the voucher type."""

    code: str = "DEBIT_CREDIT_MISMATCH"

    def __init__(
        self,
        voucher_type: str,
        voucher_no: str,
        difference: Decimal,
        allowance: Decimal,
    ):
        self.voucher_type = voucher_type
        self.voucher_no = voucher_no
        self.difference = difference
        self.allowance = allowance
        super().__init__(
            f"Debit and Credit not equal for {voucher_type} #{voucher_no}. "
            f"Difference is {difference} (allowance {allowance})"
        )


class InsufficientEntriesError(PostingError):
    """Too few entries survived processing."""

    code: str = "INSUFFICIENT_ENTRIES"

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            "Incorrect number of General Ledger Entries found. "
            "You might have selected a wrong Account in the transaction. "
            f"(expected at least {expected}, got {actual})"
        )


class BudgetExceededError(PostingError):
    """Budget validator reported a violation."""

    code: str = "BUDGET_EXCEEDED"

    def __init__(
        self,
        account: str,
        cost_center: str,
        budget: Decimal,
        actual: Decimal,
        variance: Decimal,
    ):
        self.account = account
        self.cost_center = cost_center
        self.budget = budget
        self.actual = actual
        self.variance = variance
        super().__init__(
            f"Budget exceeded for account {account} in cost center {cost_center}: "
            f"budget {budget}, actual {actual}, variance {variance}"
        )


# Period-related exceptions


class PeriodError(LedgerKernelError):
    """Base exception for period and calendar errors."""

    code: str = "PERIOD_ERROR"


class PeriodClosedError(PeriodError):
    """The accounting period is closed for this document type."""

    code: str = "PERIOD_CLOSED"

    def __init__(
        self,
        company: str,
        document_type: str,
        posting_date: date,
        period_name: str = "",
    ):
        self.company = company
        self.document_type = document_type
        self.posting_date = posting_date
        self.period_name = period_name
        message = (
            f"Accounting period is closed for {document_type} "
            f"in {company} on {posting_date}"
        )
        if period_name:
            message = f"{message} ({period_name})"
        super().__init__(message)


class FiscalYearNotFoundError(PeriodError):
    """No fiscal year covers the posting date."""

    code: str = "FISCAL_YEAR_NOT_FOUND"

    def __init__(self, company: str, posting_date: date):
        self.company = company
        self.posting_date = posting_date
        super().__init__(
            f"No fiscal year found for {company} on {posting_date}"
        )


class AccountsFrozenTillDateError(PeriodError):
    """Posting date falls before the accounts-frozen-till date."""

    code: str = "ACCOUNTS_FROZEN_TILL_DATE"

    def __init__(self, company: str, posting_date: date, frozen_till: date):
        self.company = company
        self.posting_date = posting_date
        self.frozen_till = frozen_till
        super().__init__(
            f"Accounts for {company} are frozen till {frozen_till}; "
            f"cannot post on {posting_date}"
        )


class BooksClosedError(PeriodError):
    """Posting date falls on or before the book closing date."""

    code: str = "BOOKS_CLOSED"

    def __init__(self, company: str, posting_date: date, closed_till: date):
        self.company = company
        self.posting_date = posting_date
        self.closed_till = closed_till
        super().__init__(
            f"Books for {company} are closed till {closed_till}; "
            f"cannot post on {posting_date}"
        )


# Voucher-related exceptions


class VoucherError(LedgerKernelError):
    """Base exception for voucher state errors."""

    code: str = "VOUCHER_ERROR"


class VoucherNotFoundError(VoucherError):
    """No live ledger entries exist for the voucher."""

    code: str = "VOUCHER_NOT_FOUND"

    def __init__(self, voucher_type: str, voucher_no: str):
        self.voucher_type = voucher_type
        self.voucher_no = voucher_no
        super().__init__(f"No GL entries found for {voucher_type} {voucher_no}")


class VoucherAlreadyPostedError(VoucherError):
    """The voucher already has live ledger entries."""

    code: str = "VOUCHER_ALREADY_POSTED"

    def __init__(self, voucher_type: str, voucher_no: str, existing: int):
        self.voucher_type = voucher_type
        self.voucher_no = voucher_no
        self.existing = existing
        super().__init__(
            f"{voucher_type} {voucher_no} already has {existing} GL entries"
        )


# Collaborator failures


class CollaboratorError(LedgerKernelError):
    """
    A collaborator raised an exception outside the kernel taxonomy.

    The original exception is chained as ``__cause__``.
    """

    code: str = "COLLABORATOR_FAILURE"

    def __init__(self, collaborator: str, operation: str, reason: str):
        self.collaborator = collaborator
        self.operation = operation
        self.reason = reason
        super().__init__(f"{collaborator}.{operation} failed: {reason}")


# Persistence


class ImmutabilityError(LedgerKernelError):
    """Base exception for attempts to rewrite persisted ledger history."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """A persisted ledger row was updated or deleted outside its allowed fields."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(f"Cannot modify {entity_type} {entity_id}: {reason}")
