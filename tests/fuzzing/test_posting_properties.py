"""
Property-based tests for the batch transforms and the orchestrator.

Hypothesis generates batches of GL entries over a small set of accounts,
cost centers and parties so that merge keys collide often.

Properties:
- Merge leaves one entry per merge key, is idempotent and preserves totals.
- Normalization leaves no negative amount and preserves each entry's net.
- Reversing a reversal restores every amount.
- Round-off is added iff min_unit <= |difference| <= allowance.
"""

from collections import Counter
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.merge import merge_key, merge_similar_entries
from ledger_kernel.domain.normalization import toggle_debit_credit_if_negative
from ledger_kernel.domain.reconciliation import debit_credit_difference
from ledger_kernel.domain.reversal import reverse_entries
from ledger_kernel.services.posting_orchestrator import (
    GeneralLedgerOrchestrator,
    PostingStatus,
)
from tests.fakes import FakeCompanySettings, gle

ACCOUNTS = ["Cash - AC", "Sales - AC", "Debtors - AC", "Tax - AC"]
COST_CENTERS = ["Main - AC", "Branch - AC"]

signed_amounts = st.decimals(
    min_value=Decimal("-10000"),
    max_value=Decimal("10000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
positive_amounts = st.decimals(
    min_value=Decimal("0.01"),
    max_value=Decimal("100000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)


@st.composite
def entries(draw, amounts=signed_amounts):
    return gle(
        draw(st.sampled_from(ACCOUNTS)),
        debit=draw(amounts),
        credit=draw(st.one_of(st.just(Decimal("0")), amounts)),
        cost_center=draw(st.sampled_from(COST_CENTERS)),
        party=draw(st.sampled_from(["", "CUST-001"])),
    )


batches = st.lists(entries(), min_size=1, max_size=25).map(LedgerBatch.of)


class TestMergeProperties:

    @given(batch=batches)
    def test_one_entry_per_key(self, batch):
        merged = merge_similar_entries(batch)
        counts = Counter(merge_key(e) for e in merged)
        assert all(c == 1 for c in counts.values())

    @given(batch=batches)
    def test_idempotent(self, batch):
        once = merge_similar_entries(batch)
        assert merge_similar_entries(once) == once

    @given(batch=batches)
    def test_net_preserved(self, batch):
        merged = merge_similar_entries(batch)
        before = batch.total_debit() - batch.total_credit()
        after = merged.total_debit() - merged.total_credit()
        # Dropped groups net to zero in both debit and credit.
        assert before == after


class TestNormalizationProperties:

    @given(batch=batches)
    def test_no_negative_amounts(self, batch):
        for entry in toggle_debit_credit_if_negative(batch):
            assert all(v >= 0 for v in entry.amounts().values())

    @given(batch=batches)
    def test_each_entry_net_preserved(self, batch):
        normalized = toggle_debit_credit_if_negative(batch)
        for before, after in zip(batch, normalized):
            assert before.debit - before.credit == after.debit - after.credit


class TestReversalProperties:

    @given(batch=batches)
    def test_double_reversal_restores_amounts(self, batch):
        twice = reverse_entries(reverse_entries(batch))
        assert [e.amounts() for e in twice] == [e.amounts() for e in batch]

    @given(batch=batches)
    def test_reversal_negates_net(self, batch):
        reversal = reverse_entries(batch)
        assert reversal.total_debit() - reversal.total_credit() == -(
            batch.total_debit() - batch.total_credit()
        )


class TestRoundOffProperty:

    @settings(suppress_health_check=[HealthCheck.too_slow], max_examples=60)
    @given(amount=positive_amounts, skew=st.integers(min_value=-80, max_value=80))
    def test_round_off_iff_within_allowance(self, amount, skew):
        difference = Decimal(skew) / 100
        batch = [
            gle("Cash - AC", debit=amount + difference),
            gle("Sales - AC", credit=amount),
        ]
        orchestrator = GeneralLedgerOrchestrator(company=FakeCompanySettings())

        result = orchestrator.post(batch)

        allowance = orchestrator.policy.allowance_for("Sales Invoice")
        if abs(difference) > allowance:
            assert result.code == "DEBIT_CREDIT_MISMATCH"
            return
        assert result.status == PostingStatus.POSTED
        posted = LedgerBatch.of(result.entries)
        has_round_off = any(e.account == "Round Off - AC" for e in posted)
        assert has_round_off == (difference != 0)
        assert debit_credit_difference(posted) == 0
