"""
Pipeline -- the fixed-order processing applied to every posting batch.

Order: merge (unless disabled or the voucher is a period-closing voucher),
then negative-amount normalization (always, last). Dimension offsetting
runs earlier, before validation, in the orchestrator.
"""

from __future__ import annotations

from collections.abc import Iterable

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.merge import merge_similar_entries
from ledger_kernel.domain.normalization import toggle_debit_credit_if_negative
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy


def process_gl_map(
    batch: LedgerBatch,
    policy: PostingPolicy = DEFAULT_POLICY,
    merge_entries: bool = True,
    retain_zero_accounts: Iterable[str] = (),
) -> LedgerBatch:
    if not batch:
        return batch
    if merge_entries and not batch.is_period_closing(policy):
        batch = merge_similar_entries(batch, policy.precision, retain_zero_accounts)
    return toggle_debit_credit_if_negative(batch)
