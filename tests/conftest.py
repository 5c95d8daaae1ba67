"""
Pytest fixtures for the ledger kernel test suite.

Provides:
- Structured logging configured once per run, with per-test LogContext reset
- ``captured_logs`` for asserting on emitted JSON log records
- In-memory collaborators and a fully wired orchestrator
- A SQLite-backed SQLAlchemy session with per-test rollback

Environment Variables:
- LEDGER_DATABASE_URL: database for the SQLAlchemy store tests.
  Defaults to in-memory SQLite.
"""

import json
import logging
import os
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from ledger_kernel.db.engine import create_tables, drop_tables, init_engine_from_url, reset_engine
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.services.posting_orchestrator import GeneralLedgerOrchestrator
from tests.fakes import (
    FakeAccountLookup,
    FakeCompanySettings,
    FakeFiscalYearLookup,
    FakePeriodChecker,
    InMemoryBooks,
    InMemoryGLEntryStore,
    InMemoryPaymentLedgerStore,
)

DEFAULT_DATABASE_URL = "sqlite://"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, orchestrator):
            orchestrator.post(entries)
            logs = captured_logs()
            assert any(r["message"] == "posting_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# In-memory collaborators
# =============================================================================


@pytest.fixture
def books() -> InMemoryBooks:
    return InMemoryBooks()


@pytest.fixture
def gl_store(books) -> InMemoryGLEntryStore:
    return InMemoryGLEntryStore(books)


@pytest.fixture
def payment_store(books) -> InMemoryPaymentLedgerStore:
    return InMemoryPaymentLedgerStore(books)


@pytest.fixture
def accounts() -> FakeAccountLookup:
    return FakeAccountLookup()


@pytest.fixture
def company_settings() -> FakeCompanySettings:
    return FakeCompanySettings()


@pytest.fixture
def period_checker() -> FakePeriodChecker:
    return FakePeriodChecker()


@pytest.fixture
def fiscal_years() -> FakeFiscalYearLookup:
    return FakeFiscalYearLookup()


@pytest.fixture
def orchestrator(
    accounts, company_settings, period_checker, fiscal_years, gl_store, payment_store
) -> GeneralLedgerOrchestrator:
    """Orchestrator wired with every collaborator except budget and dimensions."""
    return GeneralLedgerOrchestrator(
        accounts=accounts,
        company=company_settings,
        periods=period_checker,
        fiscal_years=fiscal_years,
        entries=gl_store,
        payment_ledger=payment_store,
    )


# =============================================================================
# SQLAlchemy infrastructure (engine + tables once per suite)
# =============================================================================


def get_database_url() -> str:
    return os.environ.get("LEDGER_DATABASE_URL", DEFAULT_DATABASE_URL)


@pytest.fixture(scope="session")
def db_engine():
    engine = init_engine_from_url(get_database_url())
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """
    Provide a database session for testing.

    The session joins an outer transaction on a dedicated connection;
    ``session.commit()`` inside a test releases a savepoint, and the outer
    transaction is rolled back at teardown.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()
