"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads the posting configuration YAML and parses it into the typed
``ledger_config.schema`` dataclasses.  Runtime callers go through
``ledger_config.get_posting_policy()`` rather than calling this directly.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; required keys have no silent defaults.
* Tolerances are parsed through ``str`` into ``Decimal``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``config_id`` / ``version``  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import PostingConfig, RemarkTemplates, VoucherAllowance


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, field_name: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"{field_name}: not a decimal number: {value!r}") from e
    if result < 0:
        raise ValueError(f"{field_name}: must not be negative, got {result}")
    return result


def parse_voucher_allowances(items: list[dict[str, Any]]) -> tuple[VoucherAllowance, ...]:
    allowances: list[VoucherAllowance] = []
    seen: set[str] = set()
    for item in items:
        voucher_type = item["voucher_type"]
        if voucher_type in seen:
            raise ValueError(f"Duplicate allowance for voucher type {voucher_type!r}")
        seen.add(voucher_type)
        allowances.append(
            VoucherAllowance(
                voucher_type=voucher_type,
                allowance=parse_decimal(item["allowance"], f"allowance[{voucher_type}]"),
            )
        )
    return tuple(allowances)


def parse_remarks(data: dict[str, Any]) -> RemarkTemplates:
    defaults = RemarkTemplates()
    remarks = RemarkTemplates(
        reversal_prefix=data.get("reversal_prefix", defaults.reversal_prefix),
        round_off=data.get("round_off", defaults.round_off),
        offsetting=data.get("offsetting", defaults.offsetting),
    )
    if "{dimension}" not in remarks.offsetting:
        raise ValueError(
            "remarks.offsetting must contain the '{dimension}' placeholder"
        )
    return remarks


def parse_posting_config(data: dict[str, Any]) -> PostingConfig:
    """
    Parse a ``PostingConfig`` from a dict.

    Raises:
        KeyError: if ``config_id`` or ``version`` is missing.
        ValueError: if a value is out of range.
    """
    precision = int(data.get("precision", 2))
    if precision < 0:
        raise ValueError(f"precision must not be negative, got {precision}")
    minimum_entries = int(data.get("minimum_entries", 2))
    if minimum_entries < 1:
        raise ValueError(f"minimum_entries must be at least 1, got {minimum_entries}")

    return PostingConfig(
        config_id=data["config_id"],
        version=int(data["version"]),
        precision=precision,
        default_allowance=parse_decimal(
            data.get("default_allowance", "0.5"), "default_allowance"
        ),
        voucher_allowances=parse_voucher_allowances(data.get("voucher_allowances", [])),
        period_closing_voucher_type=data.get(
            "period_closing_voucher_type", "Period Closing Voucher"
        ),
        minimum_entries=minimum_entries,
        remarks=parse_remarks(data.get("remarks", {})),
        checksum=compute_checksum(data),
    )


def load_posting_config(path: Path) -> PostingConfig:
    """Load and parse a posting configuration file."""
    return parse_posting_config(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
