"""
Tests for merge_similar_entries.

Entries sharing a merge key collapse into one entry per key with amounts
summed across all three currency views; groups netting to zero are dropped.
"""

from decimal import Decimal

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.merge import merge_key, merge_similar_entries
from tests.fakes import gle


class TestMergeSimilarEntries:

    def test_three_revenue_lines_collapse(self):
        batch = LedgerBatch.of([
            gle("Debtors", debit="10000", party_type="Customer", party="CUST-001"),
            gle("Sales", credit="5000"),
            gle("Sales", credit="3000"),
            gle("Sales", credit="2000"),
        ])

        merged = merge_similar_entries(batch)

        assert len(merged) == 2
        sales = [e for e in merged if e.account == "Sales"]
        assert len(sales) == 1
        assert sales[0].credit == Decimal("10000")
        assert sales[0].credit_in_account_currency == Decimal("10000")

    def test_all_currency_views_summed(self):
        batch = LedgerBatch.of([
            gle("Sales", credit="10", credit_in_transaction_currency="8"),
            gle("Sales", credit="5", credit_in_transaction_currency="4"),
        ])
        (entry,) = merge_similar_entries(batch)
        assert entry.credit == Decimal("15")
        assert entry.credit_in_account_currency == Decimal("15")
        assert entry.credit_in_transaction_currency == Decimal("12")

    def test_first_seen_fields_and_order_kept(self):
        batch = LedgerBatch.of([
            gle("Sales", credit="1", remarks="first"),
            gle("Cash", debit="2"),
            gle("Sales", credit="1", remarks="second"),
        ])
        merged = merge_similar_entries(batch)
        assert [e.account for e in merged] == ["Sales", "Cash"]
        assert merged[0].remarks == "first"

    def test_keys_unique_after_merge(self):
        batch = LedgerBatch.of([
            gle("Sales", credit="1", cost_center="A"),
            gle("Sales", credit="1", cost_center="B"),
            gle("Sales", credit="1", cost_center="A"),
            gle("Cash", debit="3"),
        ])
        merged = merge_similar_entries(batch)
        keys = [merge_key(e) for e in merged]
        assert len(keys) == len(set(keys)) == 3

    def test_idempotent(self):
        batch = LedgerBatch.of([
            gle("Sales", credit="5000"),
            gle("Sales", credit="3000"),
            gle("Cash", debit="8000"),
        ])
        once = merge_similar_entries(batch)
        assert merge_similar_entries(once) == once

    def test_zero_net_group_dropped(self):
        batch = LedgerBatch.of([
            gle("Suspense", debit="100"),
            gle("Suspense", debit="-100"),
            gle("Cash", debit="50"),
            gle("Sales", credit="50"),
        ])
        merged = merge_similar_entries(batch)
        assert "Suspense" not in [e.account for e in merged]

    def test_sub_unit_residual_dropped(self):
        batch = LedgerBatch.of([gle("Sales", credit="0.004"), gle("Cash", debit="1")])
        merged = merge_similar_entries(batch, precision=2)
        assert [e.account for e in merged] == ["Cash"]

    def test_exchange_gain_loss_zero_retained(self):
        batch = LedgerBatch.of([
            gle("Exchange Gain/Loss", debit="0"),
            gle("Cash", debit="1"),
        ])
        merged = merge_similar_entries(batch, retain_zero_accounts=["Exchange Gain/Loss"])
        assert [e.account for e in merged] == ["Exchange Gain/Loss", "Cash"]

    def test_none_and_blank_dimensions_merge(self):
        batch = LedgerBatch.of([
            gle("Sales", credit="1", project=""),
            gle("Sales", credit="2", project=None),
        ])
        (entry,) = merge_similar_entries(batch)
        assert entry.credit == Decimal("3")

    def test_different_vouchers_not_merged(self):
        batch = LedgerBatch.of([
            gle("Sales", credit="1", voucher_no="A"),
            gle("Sales", credit="1", voucher_no="B"),
        ])
        assert len(merge_similar_entries(batch)) == 2

    def test_input_batch_unchanged(self):
        batch = LedgerBatch.of([gle("Sales", credit="1"), gle("Sales", credit="2")])
        merge_similar_entries(batch)
        assert len(batch) == 2
        assert batch[0].credit == Decimal("1")
