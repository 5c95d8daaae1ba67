"""
Normalization -- move negative debit/credit amounts to the opposite side.

Responsibility:
    Guarantees no entry leaves the pipeline with a negative amount in any
    of its three currency views. Always the last pipeline step.

Architecture position:
    Kernel > Domain -- pure batch-to-batch transform, zero I/O.
"""

from __future__ import annotations

from decimal import Decimal

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.dtos import AMOUNT_VIEWS, GLEntry
from ledger_kernel.domain.values import ZERO


def toggle_pair(debit: Decimal, credit: Decimal) -> tuple[Decimal, Decimal]:
    """
    Normalize one debit/credit pair.

    Equal negative amounts are negated in place. Otherwise a negative debit
    is absorbed into credit, then a negative credit into debit.
    """
    if debit < ZERO and credit < ZERO and debit == credit:
        return -debit, -credit
    if debit < ZERO:
        credit = credit - debit
        debit = ZERO
    if credit < ZERO:
        debit = debit - credit
        credit = ZERO
    return debit, credit


def normalize_entry(entry: GLEntry) -> GLEntry:
    changes: dict[str, Decimal] = {}
    for debit_field, credit_field in AMOUNT_VIEWS:
        debit = getattr(entry, debit_field)
        credit = getattr(entry, credit_field)
        new_debit, new_credit = toggle_pair(debit, credit)
        if new_debit != debit or new_credit != credit:
            changes[debit_field] = new_debit
            changes[credit_field] = new_credit
    return entry.with_amounts(**changes) if changes else entry


def toggle_debit_credit_if_negative(batch: LedgerBatch) -> LedgerBatch:
    return batch.replace(normalize_entry(e) for e in batch)
