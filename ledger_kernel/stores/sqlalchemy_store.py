"""
SQLAlchemy implementations of GLEntryStore and PaymentLedgerStore.

Both stores convert between the frozen domain DTOs and their ORM models
by plain field copy, flush on every write and leave commit to the owner
of the session.
"""

from collections.abc import Sequence
from dataclasses import asdict, replace
from uuid import uuid4

from sqlalchemy import select

from ledger_kernel.domain.dtos import GLEntry, PaymentLedgerEntry, VoucherRef
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.gl_entry import GLEntryModel
from ledger_kernel.models.payment_ledger import PaymentLedgerEntryModel
from ledger_kernel.stores.base import BaseStore

logger = get_logger("stores.sqlalchemy")


def _named(entry):
    return entry if entry.name else replace(entry, name=str(uuid4()))


class SqlAlchemyGLEntryStore(BaseStore[GLEntryModel]):
    """GLEntryStore backed by the gl_entries table."""

    def save(self, entry: GLEntry) -> GLEntry:
        return self.save_batch([entry])[0]

    def save_batch(self, entries: Sequence[GLEntry]) -> list[GLEntry]:
        named = [_named(e) for e in entries]
        self.session.add_all(GLEntryModel(**asdict(e)) for e in named)
        self.session.flush()
        logger.info(
            "gl_entries_saved",
            extra={"count": len(named)},
        )
        return named

    def _voucher_query(self, voucher: VoucherRef):
        stmt = select(GLEntryModel).where(
            GLEntryModel.voucher_type == voucher.voucher_type,
            GLEntryModel.voucher_no == voucher.voucher_no,
        )
        if voucher.company:
            stmt = stmt.where(GLEntryModel.company == voucher.company)
        return stmt

    def get_by_voucher(
        self, voucher: VoucherRef, include_cancelled: bool = False
    ) -> list[GLEntry]:
        stmt = self._voucher_query(voucher)
        if not include_cancelled:
            stmt = stmt.where(GLEntryModel.is_cancelled.is_(False))
        rows = self.session.scalars(stmt).all()
        return [GLEntry.from_model(row) for row in rows]

    def mark_cancelled(self, voucher: VoucherRef) -> int:
        stmt = self._voucher_query(voucher).where(GLEntryModel.is_cancelled.is_(False))
        rows = self.session.scalars(stmt).all()
        for row in rows:
            row.is_cancelled = True
        self.session.flush()
        logger.info(
            "gl_entries_cancelled",
            extra={"count": len(rows)},
        )
        return len(rows)


class SqlAlchemyPaymentLedgerStore(BaseStore[PaymentLedgerEntryModel]):
    """PaymentLedgerStore backed by the payment_ledger_entries table."""

    def save(self, entry: PaymentLedgerEntry) -> PaymentLedgerEntry:
        return self.save_batch([entry])[0]

    def save_batch(self, entries: Sequence[PaymentLedgerEntry]) -> list[PaymentLedgerEntry]:
        named = [_named(e) for e in entries]
        self.session.add_all(PaymentLedgerEntryModel(**asdict(e)) for e in named)
        self.session.flush()
        logger.info("payment_ledger_entries_saved", extra={"count": len(named)})
        return named

    def _voucher_query(self, voucher: VoucherRef):
        stmt = select(PaymentLedgerEntryModel).where(
            PaymentLedgerEntryModel.voucher_type == voucher.voucher_type,
            PaymentLedgerEntryModel.voucher_no == voucher.voucher_no,
        )
        if voucher.company:
            stmt = stmt.where(PaymentLedgerEntryModel.company == voucher.company)
        return stmt

    def get_by_voucher(self, voucher: VoucherRef) -> list[PaymentLedgerEntry]:
        rows = self.session.scalars(self._voucher_query(voucher)).all()
        return [PaymentLedgerEntry.from_model(row) for row in rows]

    def delink(self, voucher: VoucherRef) -> int:
        stmt = self._voucher_query(voucher).where(PaymentLedgerEntryModel.delinked.is_(False))
        rows = self.session.scalars(stmt).all()
        for row in rows:
            row.delinked = True
        self.session.flush()
        logger.info("payment_ledger_entries_delinked", extra={"count": len(rows)})
        return len(rows)
