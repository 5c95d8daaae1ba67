"""
GeneralLedgerOrchestrator -- posts and cancels GL batches.

Responsibility:
    Drives one voucher's batch through validation, processing,
    reconciliation and persistence, or, in cancel mode, replaces the
    voucher's stored entries with their reversal. Returns a PostingResult
    for every outcome; rejected postings carry the typed error.

Architecture position:
    Kernel > Services -- the single public entry point of the engine.
    Depends only on the collaborator contracts in ledger_kernel.contracts;
    every collaborator is optional.

Invariants enforced:
    - Steps run in a fixed order and the first failure stops the posting.
    - Nothing is written until every check, reconciliation included, has
      passed.
    - Everything written for one voucher (party-ledger rows, GL rows,
      cancellation marks) happens inside one GLEntryStore.atomic() unit;
      a failure inside it leaves the store unchanged.
    - The caller's entries are never mutated.
    - No retries.

Failure modes:
    - Never raises LedgerKernelError; it is returned as
      PostingResult(status=REJECTED, error=...).
    - Foreign collaborator exceptions are returned as CollaboratorError.

Audit relevance:
    Every call logs posting_started and either posting_completed or
    posting_rejected, bound to the voucher via LogContext.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum
from functools import partial
from uuid import uuid4

from ledger_kernel.contracts import (
    AccountingDimensionProvider,
    AccountingPeriodChecker,
    AccountLookup,
    BudgetValidator,
    CompanySettings,
    FiscalYearLookup,
    GLEntryStore,
    PaymentLedgerStore,
)
from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.dtos import GLEntry, PaymentLedgerEntry, PostingOptions, VoucherRef
from ledger_kernel.domain.offsetting import make_dimension_offsetting_entries
from ledger_kernel.domain.party_ledger import build_payment_ledger_entries
from ledger_kernel.domain.pipeline import process_gl_map
from ledger_kernel.domain.policy import DEFAULT_POLICY, PostingPolicy
from ledger_kernel.domain.reconciliation import (
    DifferenceOutcome,
    classify_difference,
    debit_credit_allowance,
    debit_credit_difference,
    make_round_off_entry,
)
from ledger_kernel.domain.reversal import reverse_entries
from ledger_kernel.exceptions import (
    CollaboratorError,
    DebitCreditMismatchError,
    LedgerKernelError,
    VoucherAlreadyPostedError,
    VoucherNotFoundError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.services.posting_validator import (
    PostingValidator,
    StepResult,
    guarded,
    run_steps,
)

logger = get_logger("services.posting_orchestrator")


class PostingStatus(str, Enum):
    """Status of a posting operation."""

    POSTED = "posted"
    REVERSED = "reversed"
    EMPTY = "empty"
    REJECTED = "rejected"


@dataclass(frozen=True)
class PostingResult:
    """Result of a posting or cancellation."""

    status: PostingStatus
    voucher: VoucherRef | None = None
    entries: tuple[GLEntry, ...] = ()
    payment_ledger_entries: tuple[PaymentLedgerEntry, ...] = ()
    error: LedgerKernelError | None = None
    update_outstanding: bool = False

    @property
    def is_success(self) -> bool:
        return self.status is not PostingStatus.REJECTED

    @property
    def code(self) -> str | None:
        return self.error.code if self.error is not None else None

    @property
    def message(self) -> str | None:
        return self.error.detail if self.error is not None else None

    @classmethod
    def rejected(cls, voucher: VoucherRef | None, error: LedgerKernelError) -> PostingResult:
        return cls(status=PostingStatus.REJECTED, voucher=voucher, error=error)


def _raise_on_failure(result: StepResult) -> LedgerBatch:
    # Inside an atomic unit a failure must raise so the store rolls back.
    if result.error is not None:
        raise result.error
    return result.batch


class GeneralLedgerOrchestrator:
    """
    Posts a voucher's GL batch through the full pipeline.

    Contract:
        post(entries, options) -> PostingResult. Never raises for ledger
        errors or collaborator failures.

    Guarantees:
        - The first failing step stops the posting with nothing persisted.
        - Omitted collaborators disable the checks that need them; without
          an entry store the batch is validated and reconciled but not saved.

    Non-goals:
        - Does NOT commit; the store's owner controls the outer transaction.
        - Does NOT retry failed collaborator calls.
    """

    def __init__(
        self,
        *,
        accounts: AccountLookup | None = None,
        company: CompanySettings | None = None,
        periods: AccountingPeriodChecker | None = None,
        fiscal_years: FiscalYearLookup | None = None,
        entries: GLEntryStore | None = None,
        payment_ledger: PaymentLedgerStore | None = None,
        budget: BudgetValidator | None = None,
        dimensions: AccountingDimensionProvider | None = None,
        policy: PostingPolicy | None = None,
    ):
        self._company = company
        self._entries = entries
        self._payment_ledger = payment_ledger
        self._dimensions = dimensions
        self._policy = policy or DEFAULT_POLICY
        self._validator = PostingValidator(
            accounts=accounts,
            company=company,
            periods=periods,
            fiscal_years=fiscal_years,
            budget=budget,
            policy=self._policy,
        )

    @property
    def policy(self) -> PostingPolicy:
        return self._policy

    def post(
        self,
        entries: Iterable[GLEntry],
        options: PostingOptions | None = None,
    ) -> PostingResult:
        """
        Post (or, with options.cancel, reverse) one voucher's entries.

        An empty batch is a no-op and returns status EMPTY.
        """
        options = options or PostingOptions()
        batch = LedgerBatch.of(entries)
        if not batch:
            logger.debug("posting_skipped_empty")
            return PostingResult(status=PostingStatus.EMPTY)

        voucher = batch.voucher
        with LogContext.bind_voucher(batch):
            logger.info(
                "posting_started",
                extra={
                    "entry_count": len(batch),
                    "cancel": options.cancel,
                    "adv_adj": options.adv_adj,
                    "posting_date": batch.posting_date,
                },
            )
            t0 = time.monotonic()
            try:
                if options.cancel:
                    result = self._cancel(batch, options)
                else:
                    result = self._post(batch, options)
            except LedgerKernelError as e:
                result = PostingResult.rejected(voucher, e)

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            if result.is_success:
                logger.info(
                    "posting_completed",
                    extra={
                        "status": result.status.value,
                        "entry_count": len(result.entries),
                        "payment_ledger_count": len(result.payment_ledger_entries),
                        "duration_ms": duration_ms,
                    },
                )
            else:
                logger.warning(
                    "posting_rejected",
                    extra={
                        "status": result.status.value,
                        "code": result.code,
                        "reason": result.message,
                        "duration_ms": duration_ms,
                    },
                    exc_info=result.error,
                )
            return result

    # -- Posting --------------------------------------------------------------

    def _post(self, batch: LedgerBatch, options: PostingOptions) -> PostingResult:
        v = self._validator
        prepared = run_steps(batch, [
            v.check_budget,
            self._add_offsetting_entries,
            v.check_period_closed,
            v.check_books_closed,
            v.assign_fiscal_year,
            v.check_disabled_accounts,
            v.check_group_accounts,
            partial(v.check_frozen_accounts, adv_adj=options.adv_adj),
            v.check_account_currency,
            partial(self._process, merge_entries=options.merge_entries),
            v.check_entry_count,
        ])
        if not prepared.ok:
            return PostingResult.rejected(batch.voucher, prepared.error)
        batch = prepared.batch

        with self._atomic():
            if not options.from_repost:
                self._ensure_not_posted(batch)
            batch = _raise_on_failure(run_steps(batch, [
                self._reconcile,
                partial(v.check_frozen_till_date, adv_adj=options.adv_adj),
            ]))
            payment_entries = self._save_payment_ledger(batch)
            saved = self._save_entries(batch)

        return PostingResult(
            status=PostingStatus.POSTED,
            voucher=batch.voucher,
            entries=tuple(saved),
            payment_ledger_entries=tuple(payment_entries),
            update_outstanding=options.update_outstanding,
        )

    def _add_offsetting_entries(self, batch: LedgerBatch) -> StepResult:
        if self._dimensions is None or batch.is_period_closing(self._policy):
            return StepResult.success(batch)
        dimensions = guarded(
            "dimensions", "get_dimensions_for_offsetting",
            self._dimensions.get_dimensions_for_offsetting, list(batch), batch.company,
        )
        if not dimensions:
            return StepResult.success(batch)
        extended = make_dimension_offsetting_entries(batch, dimensions, self._policy)
        logger.debug(
            "offsetting_entries_added",
            extra={"dimension_count": len(dimensions), "added": len(extended) - len(batch)},
        )
        return StepResult.success(extended)

    def _process(self, batch: LedgerBatch, merge_entries: bool = True) -> StepResult:
        retain: tuple[str, ...] = ()
        if self._company is not None:
            fx_account = guarded(
                "company", "get_exchange_gain_loss_account",
                self._company.get_exchange_gain_loss_account, batch.company,
            )
            retain = (fx_account,) if fx_account else ()
        processed = process_gl_map(batch, self._policy, merge_entries, retain)
        logger.debug(
            "gl_map_processed",
            extra={"input_count": len(batch), "output_count": len(processed)},
        )
        return StepResult.success(processed)

    def _reconcile(self, batch: LedgerBatch) -> StepResult:
        precision = self._policy.precision
        difference = debit_credit_difference(batch, precision)
        allowance = debit_credit_allowance(batch.voucher_type, self._policy)
        outcome = classify_difference(difference, allowance, self._policy)

        if outcome is DifferenceOutcome.MISMATCH:
            return StepResult.failure(
                batch,
                DebitCreditMismatchError(
                    batch.voucher_type, batch.voucher_no, difference, allowance
                ),
            )
        if outcome is DifferenceOutcome.BALANCED or self._company is None:
            return StepResult.success(batch)

        account = guarded(
            "company", "get_round_off_account",
            self._company.get_round_off_account, batch.company,
        )
        if not account:
            logger.info("round_off_skipped", extra={"difference": difference})
            return StepResult.success(batch)
        cost_center = guarded(
            "company", "get_round_off_cost_center",
            self._company.get_round_off_cost_center, batch.company,
        )
        currency = guarded(
            "company", "get_default_currency",
            self._company.get_default_currency, batch.company,
        )
        entry = make_round_off_entry(
            batch, difference, account, cost_center or "", self._policy,
            company_currency=currency or "",
        )
        logger.info(
            "round_off_entry_added",
            extra={"difference": difference, "account": account},
        )
        return StepResult.success(batch.extend([entry]))

    # -- Cancellation ---------------------------------------------------------

    def _cancel(self, batch: LedgerBatch, options: PostingOptions) -> PostingResult:
        voucher = batch.voucher
        if self._entries is None:
            return PostingResult(status=PostingStatus.REVERSED, voucher=voucher)

        with self._atomic():
            existing = guarded(
                "entries", "get_by_voucher", self._entries.get_by_voucher, voucher
            )
            if not existing:
                raise VoucherNotFoundError(voucher.voucher_type, voucher.voucher_no)

            reversal = _raise_on_failure(
                self._validator.check_frozen_till_date(
                    reverse_entries(existing, self._policy), adv_adj=options.adv_adj
                )
            )
            cancelled = guarded(
                "entries", "mark_cancelled", self._entries.mark_cancelled, voucher
            )
            if self._payment_ledger is not None:
                guarded("payment_ledger", "delink", self._payment_ledger.delink, voucher)
            saved = self._save_entries(reversal)

        logger.info(
            "voucher_cancelled",
            extra={"cancelled_count": cancelled, "reversal_count": len(saved)},
        )
        return PostingResult(
            status=PostingStatus.REVERSED,
            voucher=voucher,
            entries=tuple(saved),
            update_outstanding=options.update_outstanding,
        )

    # -- Persistence ----------------------------------------------------------

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        if self._entries is None:
            yield
            return
        # Body calls are guarded already; anything foreign here comes from
        # opening or closing the unit itself.
        try:
            with self._entries.atomic():
                yield
        except LedgerKernelError:
            raise
        except Exception as e:
            logger.error(
                "collaborator_failed",
                extra={"collaborator": "entries", "operation": "atomic"},
                exc_info=True,
            )
            raise CollaboratorError("entries", "atomic", str(e) or type(e).__name__) from e

    def _ensure_not_posted(self, batch: LedgerBatch) -> None:
        if self._entries is None:
            return
        existing = guarded(
            "entries", "get_by_voucher", self._entries.get_by_voucher, batch.voucher
        )
        if existing:
            raise VoucherAlreadyPostedError(batch.voucher_type, batch.voucher_no, len(existing))

    def _save_payment_ledger(self, batch: LedgerBatch) -> list[PaymentLedgerEntry]:
        if self._payment_ledger is None or batch.is_period_closing(self._policy):
            return []
        payment_entries = build_payment_ledger_entries(batch)
        if not payment_entries:
            return []
        return guarded(
            "payment_ledger", "save_batch", self._payment_ledger.save_batch, payment_entries
        )

    def _save_entries(self, batch: LedgerBatch) -> list[GLEntry]:
        named = [e if e.name else replace(e, name=str(uuid4())) for e in batch]
        if self._entries is None:
            return named
        return guarded("entries", "save_batch", self._entries.save_batch, named)
