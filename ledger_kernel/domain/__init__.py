"""
Pure domain layer.

This package contains the ledger's data transfer objects and batch
transforms with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.dtos import (
    Account,
    AccountingDimension,
    BudgetViolation,
    FiscalYear,
    GLEntry,
    PaymentLedgerEntry,
    PostingOptions,
    VoucherRef,
)
from ledger_kernel.domain.merge import merge_key, merge_similar_entries
from ledger_kernel.domain.normalization import toggle_debit_credit_if_negative
from ledger_kernel.domain.offsetting import make_dimension_offsetting_entries
from ledger_kernel.domain.party_ledger import build_payment_ledger_entries
from ledger_kernel.domain.pipeline import process_gl_map
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.domain.reconciliation import (
    debit_credit_allowance,
    debit_credit_difference,
    make_round_off_entry,
)
from ledger_kernel.domain.reversal import reverse_entries
from ledger_kernel.domain.values import min_unit, round_money, to_decimal

__all__ = [
    # DTOs
    "Account",
    "AccountingDimension",
    "BudgetViolation",
    "FiscalYear",
    "GLEntry",
    "PaymentLedgerEntry",
    "PostingOptions",
    "VoucherRef",
    "LedgerBatch",
    # Policy
    "DEFAULT_POLICY",
    "PostingPolicy",
    # Transforms
    "build_payment_ledger_entries",
    "make_dimension_offsetting_entries",
    "merge_key",
    "merge_similar_entries",
    "process_gl_map",
    "reverse_entries",
    "toggle_debit_credit_if_negative",
    # Reconciliation
    "debit_credit_allowance",
    "debit_credit_difference",
    "make_round_off_entry",
    # Values
    "min_unit",
    "round_money",
    "to_decimal",
]
