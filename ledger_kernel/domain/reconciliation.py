"""
Reconciliation -- debit/credit difference, allowance and round-off entries.

Responsibility:
    Computes the batch-wide rounding difference, decides whether it is
    within the voucher type's allowance, and builds the correcting entry
    that absorbs a small residual.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O. The orchestrator supplies
    the round-off account and cost center from CompanySettings.

Invariants enforced:
    - A round-off entry is built only when min_unit <= |diff| <= allowance.
    - A difference above the allowance is never corrected.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from enum import Enum

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.dtos import GLEntry
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.domain.values import ZERO, round_money


class DifferenceOutcome(str, Enum):
    """What the engine must do about a batch's rounding difference."""

    BALANCED = "balanced"
    ROUND_OFF = "round_off"
    MISMATCH = "mismatch"


def debit_credit_difference(batch: LedgerBatch, precision: int = 2) -> Decimal:
    """Sum of per-entry rounded debit minus rounded credit, rounded."""
    diff = ZERO
    for entry in batch:
        diff += round_money(entry.debit, precision) - round_money(entry.credit, precision)
    return round_money(diff, precision)


def debit_credit_allowance(
    voucher_type: str,
    policy: PostingPolicy = DEFAULT_POLICY,
) -> Decimal:
    return policy.allowance_for(voucher_type)


def classify_difference(
    difference: Decimal,
    allowance: Decimal,
    policy: PostingPolicy = DEFAULT_POLICY,
) -> DifferenceOutcome:
    magnitude = abs(difference)
    if magnitude > allowance:
        return DifferenceOutcome.MISMATCH
    if magnitude >= policy.min_unit:
        return DifferenceOutcome.ROUND_OFF
    return DifferenceOutcome.BALANCED


def make_round_off_entry(
    batch: LedgerBatch,
    difference: Decimal,
    round_off_account: str,
    round_off_cost_center: str = "",
    policy: PostingPolicy = DEFAULT_POLICY,
    company_currency: str = "",
) -> GLEntry:
    """
    Build the entry that absorbs ``difference``.

    Copies the first entry's voucher context. Credits the round-off
    account when debits exceed credits (difference > 0), debits it
    otherwise. The difference is in company currency, so the entry is
    held in ``company_currency`` and carries no transaction-currency view.
    """
    template = batch[0]
    if difference > ZERO:
        debit, credit = ZERO, difference
    else:
        debit, credit = -difference, ZERO
    return replace(
        template,
        name="",
        account=round_off_account,
        cost_center=round_off_cost_center,
        debit=debit,
        credit=credit,
        account_currency=company_currency,
        debit_in_account_currency=debit,
        credit_in_account_currency=credit,
        transaction_currency="",
        transaction_exchange_rate=ZERO,
        debit_in_transaction_currency=ZERO,
        credit_in_transaction_currency=ZERO,
        remarks=policy.round_off_remark,
        party_type="",
        party="",
        against_voucher_type="",
        against_voucher="",
    )
