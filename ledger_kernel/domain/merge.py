"""
Merge -- collapse GL entries that hit the same ledger position.

Responsibility:
    Groups entries by their merge key and sums debit and credit across
    all three currency views, then discards groups that net to zero.

Architecture position:
    Kernel > Domain -- pure batch-to-batch transform, zero I/O.

Invariants enforced:
    - No two surviving entries share a merge key.
    - Accumulation is exact Decimal addition, so input order never changes
      the summed amounts.
    - merge(merge(b)) == merge(b).
    - Surviving entries keep the non-key fields of the first entry seen for
      their key, in first-seen order.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.dtos import AMOUNT_VIEWS, GLEntry
from ledger_kernel.domain.values import DEFAULT_PRECISION, is_zero

MERGE_KEY_FIELDS: tuple[str, ...] = (
    "account",
    "cost_center",
    "party",
    "party_type",
    "voucher_detail_no",
    "against_voucher",
    "against_voucher_type",
    "project",
    "finance_book",
    "voucher_no",
)

_AMOUNT_FIELDS: tuple[str, ...] = tuple(name for pair in AMOUNT_VIEWS for name in pair)


def merge_key(entry: GLEntry) -> tuple[str, ...]:
    """Composite identity of an entry. None and "" compare equal."""
    return tuple(getattr(entry, name) or "" for name in MERGE_KEY_FIELDS)


def merge_similar_entries(
    batch: LedgerBatch,
    precision: int = DEFAULT_PRECISION,
    retain_zero_accounts: Iterable[str] = (),
) -> LedgerBatch:
    """
    Merge entries sharing a merge key into one entry per key.

    Entries whose merged debit and credit both round to zero at
    ``precision`` are dropped, unless their account is listed in
    ``retain_zero_accounts`` (exchange gain/loss accounts).
    """
    retained = frozenset(a for a in retain_zero_accounts if a)
    heads: dict[tuple[str, ...], GLEntry] = {}
    totals: dict[tuple[str, ...], dict[str, Decimal]] = {}

    for entry in batch:
        key = merge_key(entry)
        if key not in heads:
            heads[key] = entry
            totals[key] = entry.amounts()
            continue
        acc = totals[key]
        for name in _AMOUNT_FIELDS:
            acc[name] = acc[name] + getattr(entry, name)

    merged: list[GLEntry] = []
    for key, head in heads.items():
        entry = head.with_amounts(**totals[key])
        if (
            is_zero(entry.debit, precision)
            and is_zero(entry.credit, precision)
            and entry.account not in retained
        ):
            continue
        merged.append(entry)

    return batch.replace(merged)
