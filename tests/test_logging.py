"""
Tests for ledger_kernel.logging_config.

The posting tests read the JSON lines a real orchestrator run emits; the
formatter and setup tests drive the module directly on a private handler.
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from ledger_kernel.domain.batch import LedgerBatch
from ledger_kernel.domain.dtos import Account, PostingOptions, VoucherRef
from ledger_kernel.exceptions import CollaboratorError, DebitCreditMismatchError
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from ledger_kernel.services.posting_orchestrator import GeneralLedgerOrchestrator, PostingStatus
from tests.fakes import COMPANY, FakeAccountLookup, gle, invoice_entries


@pytest.fixture
def json_lines():
    """Reconfigure logging onto a private stream; restore the suite's setup after."""
    reset_logging()
    stream = StringIO()
    handler = logging.StreamHandler(stream)

    def install(**kwargs) -> None:
        configure_logging(handler=handler, **kwargs)

    def read() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    yield install, read
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())


def _lines(captured_logs, message):
    return [r for r in captured_logs() if r["message"] == message]


class TestPostingLogLines:

    def test_one_correlation_id_per_posting(self, orchestrator, captured_logs):
        orchestrator.post(invoice_entries())
        orchestrator.post(invoice_entries(voucher_no="SINV-0002"))

        by_voucher: dict[str, set[str]] = {}
        for record in captured_logs():
            if "voucher_no" in record:
                by_voucher.setdefault(record["voucher_no"], set()).add(record["correlation_id"])

        assert set(by_voucher) == {"SINV-0001", "SINV-0002"}
        assert all(len(ids) == 1 for ids in by_voucher.values())
        assert by_voucher["SINV-0001"] != by_voucher["SINV-0002"]

    def test_completed_line_carries_voucher_and_counts(self, orchestrator, captured_logs):
        orchestrator.post(invoice_entries())
        (record,) = _lines(captured_logs, "posting_completed")

        assert record["voucher_type"] == "Sales Invoice"
        assert record["company"] == COMPANY
        assert record["status"] == "posted"
        assert record["payment_ledger_count"] == 1
        assert "error_code" not in record

    def test_rejection_flattens_error_attributes(self, orchestrator, accounts, captured_logs):
        accounts.add(Account("Sales - AC", company=COMPANY, account_currency="USD", disabled=True))
        orchestrator.post(invoice_entries())
        (record,) = _lines(captured_logs, "posting_rejected")

        assert record["error_code"] == "ACCOUNT_DISABLED"
        assert record["error_type"] == "AccountDisabledError"
        assert record["error_accounts"] == ["Sales - AC"]
        assert "disabled account" in record["error_detail"]

    def test_mismatch_amounts_logged_as_strings(self, orchestrator, captured_logs):
        orchestrator.post([gle("Cash - AC", debit="100"), gle("Sales - AC", credit="99")])
        (record,) = _lines(captured_logs, "posting_rejected")

        assert record["error_difference"] == "1.00"
        assert record["error_allowance"] == "0.5"

    def test_collaborator_failure_records_cause(self, gl_store, captured_logs):
        orchestrator = GeneralLedgerOrchestrator(
            accounts=FakeAccountLookup(fail_on={"is_disabled"}), entries=gl_store
        )
        orchestrator.post(invoice_entries())

        (failed,) = _lines(captured_logs, "collaborator_failed")
        assert failed["level"] == "ERROR"
        assert failed["exc_type"] == "FailingCollaborator"
        assert failed["operation"] == "is_disabled"
        assert "traceback" in failed

        (rejected,) = _lines(captured_logs, "posting_rejected")
        assert rejected["error_code"] == "COLLABORATOR_FAILURE"
        assert rejected["error_collaborator"] == "accounts"
        assert rejected["error_cause"] == "FailingCollaborator: is_disabled unavailable"

    def test_cancellation_logged(self, orchestrator, captured_logs):
        orchestrator.post(invoice_entries())
        orchestrator.post(invoice_entries(), PostingOptions(cancel=True))

        (cancelled,) = _lines(captured_logs, "voucher_cancelled")
        assert cancelled["cancelled_count"] == 4
        assert cancelled["reversal_count"] == 4
        assert cancelled["voucher_no"] == "SINV-0001"


class TestVoucherScope:

    def test_bind_voucher_from_batch(self):
        batch = LedgerBatch.of(invoice_entries())
        with LogContext.bind_voucher(batch):
            scope = LogContext.get_all()
        assert scope["voucher_type"] == "Sales Invoice"
        assert scope["voucher_no"] == "SINV-0001"
        assert scope["company"] == COMPANY
        assert scope["correlation_id"]
        assert LogContext.get_all() == {}

    def test_bind_voucher_keeps_given_correlation_id(self):
        with LogContext.bind_voucher(VoucherRef("Journal Entry", "JV-1"), correlation_id="req-7"):
            scope = LogContext.get_all()
        assert scope["correlation_id"] == "req-7"
        # Blank company is left out rather than logged as "".
        assert "company" not in scope

    def test_nested_bind_restores_outer_scope(self):
        LogContext.set(trace_id="t-1")
        with LogContext.bind(voucher_no="JV-1"):
            with LogContext.bind(voucher_no="JV-2"):
                assert LogContext.get_all()["voucher_no"] == "JV-2"
            assert LogContext.get_all() == {"trace_id": "t-1", "voucher_no": "JV-1"}
        assert LogContext.get_all() == {"trace_id": "t-1"}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="voucher_number"):
            LogContext.set(voucher_number="JV-1")


class TestStructuredFormatter:

    def _format(self, exc=None, **extra) -> dict:
        record = logging.LogRecord("ledger_kernel.test", logging.INFO, __file__, 1, "evt", (), None)
        if exc is not None:
            record.exc_info = (type(exc), exc, exc.__traceback__)
        record.__dict__.update(extra)
        return json.loads(StructuredFormatter().format(record))

    def test_ledger_values_serialized(self):
        payload = self._format(
            amount=Decimal("0.10"),
            posting_date=date(2024, 6, 15),
            status=PostingStatus.REVERSED,
            voucher=VoucherRef("Sales Invoice", "SINV-0001", COMPANY),
        )
        assert payload["amount"] == "0.10"
        assert payload["posting_date"] == "2024-06-15"
        assert payload["status"] == "reversed"
        assert payload["voucher"] == "Sales Invoice SINV-0001"

    def test_foreign_exception_kept_as_exc_fields(self):
        payload = self._format(exc=ConnectionError("db down"))
        assert payload["exc_type"] == "ConnectionError"
        assert payload["exc_message"] == "db down"
        assert not any(key.startswith("error_") for key in payload)

    def test_chained_cause_of_kernel_error(self):
        try:
            try:
                raise TimeoutError("savepoint")
            except TimeoutError as e:
                raise CollaboratorError("entries", "atomic", "savepoint") from e
        except CollaboratorError as e:
            payload = self._format(exc=e)
        assert payload["error_operation"] == "atomic"
        assert payload["error_cause"] == "TimeoutError: savepoint"

    def test_scope_does_not_overwrite_envelope(self):
        err = DebitCreditMismatchError("Journal Entry", "JV-1", Decimal("1"), Decimal("0.05"))
        with LogContext.bind(voucher_no="JV-1"):
            payload = self._format(exc=err)
        assert payload["message"] == "evt"
        assert payload["voucher_no"] == "JV-1"
        assert payload["error_voucher_no"] == "JV-1"


class TestConfigureLogging:

    def test_level_from_environment(self, json_lines, monkeypatch):
        install, read = json_lines
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "warning")
        install()
        log = get_logger("services.posting_orchestrator")
        log.info("posting_started")
        log.warning("posting_rejected")

        assert [r["message"] for r in read()] == ["posting_rejected"]

    def test_explicit_level_wins(self, json_lines, monkeypatch):
        install, read = json_lines
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "ERROR")
        install(level=logging.DEBUG)
        get_logger("domain").debug("gl_map_processed")

        assert read()[0]["logger"] == "ledger_kernel.domain"

    def test_second_configure_is_ignored(self, json_lines):
        install, _ = json_lines
        install()
        configure_logging(handler=logging.StreamHandler(StringIO()))
        assert len(logging.getLogger("ledger_kernel").handlers) == 1
