"""
Party ledger -- project party-bearing GL entries onto the payment ledger.

Only entries with both party_type and party set produce a payment-ledger
row. The row's amount is signed (debit minus credit) so outstanding
balances can be summed directly.
"""

from __future__ import annotations

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.dtos import GLEntry, PaymentLedgerEntry


def payment_ledger_entry_for(entry: GLEntry) -> PaymentLedgerEntry:
    return PaymentLedgerEntry(
        posting_date=entry.posting_date,
        company=entry.company,
        account=entry.account,
        party_type=entry.party_type,
        party=entry.party,
        voucher_type=entry.voucher_type,
        voucher_no=entry.voucher_no,
        amount=entry.debit - entry.credit,
        amount_in_account_currency=(
            entry.debit_in_account_currency - entry.credit_in_account_currency
        ),
        account_currency=entry.account_currency,
        voucher_detail_no=entry.voucher_detail_no,
        against_voucher_type=entry.against_voucher_type,
        against_voucher_no=entry.against_voucher,
        due_date=entry.due_date,
        finance_book=entry.finance_book,
        remarks=entry.remarks,
    )


def build_payment_ledger_entries(batch: LedgerBatch) -> list[PaymentLedgerEntry]:
    return [payment_ledger_entry_for(e) for e in batch if e.has_party]
