"""
Configuration Schema (``ledger_config.schema``).

Responsibility
--------------
Frozen dataclasses describing the posting configuration as authored in
YAML.  These are the parsed form; ``ledger_config.bridges`` turns them
into the kernel's ``PostingPolicy``.

Architecture position
---------------------
**Config layer** -- pure data.  No dependency on the kernel.

Invariants enforced
-------------------
* Every class is frozen.
* Amounts are ``Decimal``; YAML floats are never used for tolerances.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class VoucherAllowance:
    """Debit/credit tolerance for one voucher type."""

    voucher_type: str
    allowance: Decimal


@dataclass(frozen=True)
class RemarkTemplates:
    """Remark texts written on engine-generated entries."""

    reversal_prefix: str = "Cancelled: "
    round_off: str = "Round Off"
    offsetting: str = "Offsetting for Accounting Dimension - {dimension}"


@dataclass(frozen=True)
class PostingConfig:
    """
    Root configuration object for GL posting.

    ``checksum`` is the SHA-256 of the canonical source data and identifies
    the exact configuration a posting ran under.
    """

    config_id: str
    version: int
    precision: int = 2
    default_allowance: Decimal = Decimal("0.5")
    voucher_allowances: tuple[VoucherAllowance, ...] = field(default_factory=tuple)
    period_closing_voucher_type: str = "Period Closing Voucher"
    minimum_entries: int = 2
    remarks: RemarkTemplates = field(default_factory=RemarkTemplates)
    checksum: str = ""

    def allowance_map(self) -> dict[str, Decimal]:
        return {va.voucher_type: va.allowance for va in self.voucher_allowances}
