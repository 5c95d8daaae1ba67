"""
LedgerBatch -- the ordered set of GL entries proposed for one voucher.

Responsibility:
    Wraps a tuple of GLEntry values and answers the questions the engine
    asks of a whole batch: totals, rounded difference, balance, and which
    voucher and accounts it touches.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Immutable. extend() and replace() return new batches; the caller's
      sequence is copied into a tuple on construction and never mutated.
    - is_balanced() agrees with total_debit() - total_credit() under the
      given tolerance.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ledger_kernel.domain.dtos import GLEntry, VoucherRef
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.domain.values import DEFAULT_PRECISION, ZERO, min_unit, round_money


@dataclass(frozen=True)
class LedgerBatch:
    """Immutable sequence of GL entries for a single voucher."""

    entries: tuple[GLEntry, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.entries, tuple):
            object.__setattr__(self, "entries", tuple(self.entries))

    @classmethod
    def of(cls, entries: Iterable[GLEntry]) -> LedgerBatch:
        if isinstance(entries, LedgerBatch):
            return entries
        return cls(tuple(entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[GLEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> GLEntry:
        return self.entries[index]

    def __bool__(self) -> bool:
        return bool(self.entries)

    # -- Totals ---------------------------------------------------------------

    def total_debit(self) -> Decimal:
        return sum((e.debit for e in self.entries), ZERO)

    def total_credit(self) -> Decimal:
        return sum((e.credit for e in self.entries), ZERO)

    def difference(self, precision: int = DEFAULT_PRECISION) -> Decimal:
        """Rounded total debit minus total credit."""
        return round_money(self.total_debit() - self.total_credit(), precision)

    def is_balanced(
        self,
        tolerance: Decimal | None = None,
        precision: int = DEFAULT_PRECISION,
    ) -> bool:
        """
        True when |round(total_debit - total_credit)| is below tolerance.

        The default tolerance is one minimum unit at ``precision``, so a
        batch is balanced only when its rounded difference is exactly zero.
        """
        if tolerance is None:
            tolerance = min_unit(precision)
        return abs(self.difference(precision)) < tolerance

    # -- Identity -------------------------------------------------------------

    @property
    def first(self) -> GLEntry | None:
        return self.entries[0] if self.entries else None

    @property
    def voucher(self) -> VoucherRef | None:
        return self.entries[0].voucher if self.entries else None

    @property
    def voucher_type(self) -> str:
        return self.entries[0].voucher_type if self.entries else ""

    @property
    def voucher_no(self) -> str:
        return self.entries[0].voucher_no if self.entries else ""

    @property
    def company(self) -> str:
        return self.entries[0].company if self.entries else ""

    @property
    def posting_date(self) -> date | None:
        return self.entries[0].posting_date if self.entries else None

    def is_period_closing(self, policy: PostingPolicy = DEFAULT_POLICY) -> bool:
        return policy.is_period_closing(self.voucher_type)

    def accounts(self) -> list[str]:
        """Distinct non-blank account names in first-seen order."""
        seen: dict[str, None] = {}
        for entry in self.entries:
            if entry.account and entry.account not in seen:
                seen[entry.account] = None
        return list(seen)

    # -- Derivation -----------------------------------------------------------

    def extend(self, entries: Iterable[GLEntry]) -> LedgerBatch:
        return LedgerBatch(self.entries + tuple(entries))

    def replace(self, entries: Iterable[GLEntry]) -> LedgerBatch:
        return LedgerBatch(tuple(entries))
