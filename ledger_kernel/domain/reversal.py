"""Reversal -- the inverse batch used to cancel a posted voucher."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.dtos import AMOUNT_VIEWS, GLEntry
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy


def reverse_entry(entry: GLEntry, policy: PostingPolicy = DEFAULT_POLICY) -> GLEntry:
    swapped = {}
    for debit_field, credit_field in AMOUNT_VIEWS:
        swapped[debit_field] = getattr(entry, credit_field)
        swapped[credit_field] = getattr(entry, debit_field)
    return replace(
        entry,
        name="",
        remarks=f"{policy.reversal_remark_prefix}{entry.remarks}",
        is_cancelled=True,
        **swapped,
    )


def reverse_entries(
    entries: Iterable[GLEntry],
    policy: PostingPolicy = DEFAULT_POLICY,
) -> LedgerBatch:
    """
    Swap debit and credit in every currency view of every entry.

    Reversal rows are flagged cancelled alongside the originals they
    offset, so neither shows up as live history.
    """
    return LedgerBatch(tuple(reverse_entry(e, policy) for e in entries))
