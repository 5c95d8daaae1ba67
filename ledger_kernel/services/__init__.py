"""Services for the ledger kernel (write side)."""

from ledger_kernel.services.posting_orchestrator import (
    GeneralLedgerOrchestrator,
    PostingResult,
    PostingStatus,
)
from ledger_kernel.services.posting_validator import PostingValidator, StepResult

__all__ = [
    "GeneralLedgerOrchestrator",
    "PostingResult",
    "PostingStatus",
    "PostingValidator",
    "StepResult",
]
