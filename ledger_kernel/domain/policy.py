"""
PostingPolicy -- tolerances and fixed strings that govern posting.

Responsibility:
    Holds the numeric precision, the per-voucher-type debit/credit
    allowances, the period-closing voucher type and the remark texts the
    engine writes onto synthesized entries. The kernel reads these values
    only from a PostingPolicy instance; ledger_config builds one from YAML.

Architecture position:
    Kernel > Domain -- pure data, zero I/O. Has no knowledge of where its
    values come from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from ledger_kernel.domain.values import DEFAULT_PRECISION, min_unit, to_decimal

DEFAULT_VOUCHER_ALLOWANCES: Mapping[str, Decimal] = MappingProxyType({
    "Journal Entry": Decimal("0.05"),
    "Payment Entry": Decimal("0.05"),
})


@dataclass(frozen=True)
class PostingPolicy:
    """
    Immutable posting configuration.

    Guarantees:
        - voucher_allowances is read-only after construction.
        - Allowances are Decimal.
    """

    precision: int = DEFAULT_PRECISION
    default_allowance: Decimal = Decimal("0.5")
    voucher_allowances: Mapping[str, Decimal] = field(
        default_factory=lambda: DEFAULT_VOUCHER_ALLOWANCES
    )
    period_closing_voucher_type: str = "Period Closing Voucher"
    minimum_entries: int = 2
    reversal_remark_prefix: str = "Cancelled: "
    round_off_remark: str = "Round Off"
    offsetting_remark: str = "Offsetting for Accounting Dimension - {dimension}"

    def __post_init__(self) -> None:
        if self.precision < 0:
            raise ValueError(f"precision must be non-negative, got {self.precision}")
        if self.minimum_entries < 1:
            raise ValueError(
                f"minimum_entries must be at least 1, got {self.minimum_entries}"
            )
        object.__setattr__(self, "default_allowance", to_decimal(self.default_allowance))
        object.__setattr__(
            self,
            "voucher_allowances",
            MappingProxyType(
                {k: to_decimal(v) for k, v in dict(self.voucher_allowances).items()}
            ),
        )

    @property
    def min_unit(self) -> Decimal:
        return min_unit(self.precision)

    def allowance_for(self, voucher_type: str) -> Decimal:
        return self.voucher_allowances.get(voucher_type, self.default_allowance)

    def is_period_closing(self, voucher_type: str) -> bool:
        return voucher_type == self.period_closing_voucher_type

    def offsetting_remark_for(self, dimension_name: str) -> str:
        return self.offsetting_remark.format(dimension=dimension_name)


DEFAULT_POLICY = PostingPolicy()
