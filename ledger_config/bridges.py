"""
Config -> Kernel Bridges.

Converts parsed configuration into kernel inputs. This lives in
ledger_config (the producer) because the kernel must never import
ledger_config.

Usage:
    from ledger_config.bridges import build_posting_policy

    config = load_posting_config(path)
    policy = build_posting_policy(config)
"""

from __future__ import annotations

from ledger_config.schema import PostingConfig
from ledger_kernel.domain.policy import PostingPolicy


def build_posting_policy(config: PostingConfig) -> PostingPolicy:
    """Build the kernel's PostingPolicy from a PostingConfig."""
    return PostingPolicy(
        precision=config.precision,
        default_allowance=config.default_allowance,
        voucher_allowances=config.allowance_map(),
        period_closing_voucher_type=config.period_closing_voucher_type,
        minimum_entries=config.minimum_entries,
        reversal_remark_prefix=config.remarks.reversal_prefix,
        round_off_remark=config.remarks.round_off,
        offsetting_remark=config.remarks.offsetting,
    )
