"""
ledger_config -- single public entrypoint for posting configuration.

Responsibility:
    ``get_posting_policy()`` is the one way to obtain the kernel's
    ``PostingPolicy`` at runtime.  It reads the packaged
    ``defaults/posting.yaml`` unless a path is given.

Architecture position:
    Configuration -- sits above ``ledger_kernel``.  The kernel MUST NEVER
    import from ``ledger_config``; ``bridges`` translates parsed config
    into kernel inputs.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``KeyError`` / ``ValueError`` -- schema validation failures.

Audit relevance:
    Every successful call emits a ``LEDGER_CONFIG_TRACE`` log entry with
    the config_id, version and checksum, tying postings to the exact
    configuration that governed them.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ledger_config.bridges import build_posting_policy
from ledger_config.loader import load_posting_config
from ledger_config.schema import PostingConfig
from ledger_kernel.domain.policy import PostingPolicy

_logger = logging.getLogger("ledger_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "posting.yaml"


def get_posting_config(config_path: Path | None = None) -> PostingConfig:
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = load_posting_config(path)
    _logger.info(
        "LEDGER_CONFIG_TRACE",
        extra={
            "trace_type": "LEDGER_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "voucher_allowance_count": len(config.voucher_allowances),
        },
    )
    return config


def get_posting_policy(config_path: Path | None = None) -> PostingPolicy:
    """
    The public configuration entrypoint.

    Args:
        config_path: Override path to a posting YAML file.
            Defaults to ledger_config/defaults/posting.yaml.

    Returns:
        PostingPolicy ready to pass to GeneralLedgerOrchestrator.
    """
    return build_posting_policy(get_posting_config(config_path))


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "get_posting_config",
    "get_posting_policy",
]
