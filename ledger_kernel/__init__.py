"""
Ledger Kernel - general ledger posting engine.

Takes the proposed debit/credit entries of one voucher and turns them into
a validated, balanced, persisted ledger transaction:
- Budget, period, fiscal-year and account-master checks
- Deterministic merge and negative-amount normalization
- Allowance-bounded round-off and accounting-dimension offsetting
- Party-ledger projection
- Cancellation by reversing entries
"""

__version__ = "0.1.0"
