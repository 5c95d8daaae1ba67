"""
Offsetting -- balance-neutral entries for accounting dimensions.

Responsibility:
    For every entry and every dimension that must balance independently,
    synthesizes a mirror entry on the dimension's offsetting account with
    debit and credit swapped and split evenly across the dimensions. The
    transaction-currency view is swapped and split from the entry's own
    transaction amounts; the account-currency view follows the company
    amounts, in the dimension's currency.

Architecture position:
    Kernel > Domain -- pure batch-to-batch transform, zero I/O.
    The orchestrator asks an AccountingDimensionProvider which dimensions
    apply and passes them in.

Invariants enforced:
    - Offsetting entries never carry party or against-voucher references.
    - Original entries are kept unchanged, offsetting entries are appended.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.dtos import AccountingDimension, GLEntry
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.domain.values import round_money


def _offsetting_entry(
    entry: GLEntry,
    dimension: AccountingDimension,
    count: int,
    policy: PostingPolicy,
) -> GLEntry:
    def share(amount: Decimal) -> Decimal:
        return round_money(round_money(amount, policy.precision) / Decimal(count), policy.precision)

    debit, credit = share(entry.credit), share(entry.debit)
    return replace(
        entry,
        name="",
        account=dimension.offsetting_account,
        # Blank is filled from the account master by the currency check.
        account_currency=dimension.account_currency,
        debit=debit,
        credit=credit,
        debit_in_account_currency=debit,
        credit_in_account_currency=credit,
        debit_in_transaction_currency=share(entry.credit_in_transaction_currency),
        credit_in_transaction_currency=share(entry.debit_in_transaction_currency),
        remarks=policy.offsetting_remark_for(dimension.name),
        party_type="",
        party="",
        against_voucher_type="",
        against_voucher="",
    )


def make_dimension_offsetting_entries(
    batch: LedgerBatch,
    dimensions: Sequence[AccountingDimension],
    policy: PostingPolicy = DEFAULT_POLICY,
) -> LedgerBatch:
    """Append one offsetting entry per (entry, dimension) pair."""
    if not dimensions:
        return batch
    count = len(dimensions)
    offsetting = [
        _offsetting_entry(entry, dimension, count, policy)
        for entry in batch
        for dimension in dimensions
    ]
    return batch.extend(offsetting)
