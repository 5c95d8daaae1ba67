"""Tests for accounting-dimension offsetting entries."""

from decimal import Decimal

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.dtos import AccountingDimension
from ledger_kernel.domain.offsetting import make_dimension_offsetting_entries
from ledger_kernel.domain.policy import PostingPolicy
from tests.fakes import gle

BRANCH = AccountingDimension("branch", "Branch", "Branch Clearing - AC")
REGION = AccountingDimension("region", "Region", "Region Clearing - AC", account_currency="EUR")


class TestOffsettingEntries:

    def test_no_dimensions_is_identity(self):
        batch = LedgerBatch.of([gle("Cash", debit="10")])
        assert make_dimension_offsetting_entries(batch, []) is batch

    def test_single_dimension_mirrors_each_entry(self):
        batch = LedgerBatch.of([
            gle("Debtors", debit="100", party_type="Customer", party="C1", against_voucher="SINV-0"),
            gle("Sales", credit="100"),
        ])
        result = make_dimension_offsetting_entries(batch, [BRANCH])

        assert len(result) == 4
        assert list(result)[:2] == list(batch)
        first, second = result[2], result[3]
        assert first.account == "Branch Clearing - AC"
        assert (first.debit, first.credit) == (Decimal("0.00"), Decimal("100.00"))
        assert (second.debit, second.credit) == (Decimal("100.00"), Decimal("0.00"))
        assert first.party == "" and first.party_type == ""
        assert first.against_voucher == ""
        assert first.remarks == "Offsetting for Accounting Dimension - Branch"

    def test_amounts_split_across_dimensions(self):
        batch = LedgerBatch.of([gle("Cash", debit="100")])
        result = make_dimension_offsetting_entries(batch, [BRANCH, REGION])

        offsets = list(result)[1:]
        assert [e.account for e in offsets] == ["Branch Clearing - AC", "Region Clearing - AC"]
        assert all(e.credit == Decimal("50.00") for e in offsets)
        assert offsets[1].account_currency == "EUR"
        assert offsets[0].account_currency == ""

    def test_currency_taken_from_dimension_not_entry(self):
        batch = LedgerBatch.of([gle("Debtors EUR", debit="110", account_currency="EUR")])
        (offset,) = list(make_dimension_offsetting_entries(batch, [BRANCH]))[1:]
        assert offset.account_currency == ""
        assert offset.credit_in_account_currency == Decimal("110.00")

    def test_transaction_view_swapped_from_entry_transaction_amounts(self):
        entry = gle(
            "Sales",
            credit="110",
            transaction_currency="EUR",
            credit_in_transaction_currency="100",
        )
        result = make_dimension_offsetting_entries(LedgerBatch.of([entry]), [BRANCH, REGION])

        for offset in list(result)[1:]:
            assert offset.transaction_currency == "EUR"
            assert offset.debit == Decimal("55.00")
            assert offset.debit_in_transaction_currency == Decimal("50.00")
            assert offset.credit_in_transaction_currency == Decimal("0")

    def test_split_rounded_to_precision(self):
        batch = LedgerBatch.of([gle("Cash", debit="100")])
        three = [BRANCH, REGION, AccountingDimension("dept", "Department", "Dept Clearing")]
        result = make_dimension_offsetting_entries(batch, three)
        assert all(e.credit == Decimal("33.33") for e in list(result)[1:])

    def test_remark_template_from_policy(self):
        policy = PostingPolicy(offsetting_remark="Mirror {dimension}")
        result = make_dimension_offsetting_entries(
            LedgerBatch.of([gle("Cash", debit="1")]), [BRANCH], policy
        )
        assert result[1].remarks == "Mirror Branch"
