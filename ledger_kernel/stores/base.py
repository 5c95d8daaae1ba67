"""
BaseStore -- abstract base for the SQLAlchemy-backed ledger stores.

Responsibility:
    Provides the common constructor and session-handling contract for the
    persistence adapters that implement GLEntryStore and
    PaymentLedgerStore.  Stores use ``session.flush()`` and never
    ``session.commit()``.

Architecture position:
    Kernel > Stores -- imperative shell.  Implements the contracts in
    ledger_kernel.contracts on top of ledger_kernel.models.

Invariants enforced:
    - Transaction boundaries belong to the caller (for example
      db.engine.session_scope()).  Stores flush within the caller's
      transaction; atomic() opens a SAVEPOINT inside it.

Failure modes:
    - A store that commits on its own breaks the all-or-nothing guarantee
      of a posting.
"""

from abc import ABC
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from ledger_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseStore(ABC, Generic[ModelType]):
    """
    Abstract base class for ledger stores.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller.  Stores sharing a
        session share its transaction, so a SAVEPOINT opened by one store's
        atomic() also covers the other's writes.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        All-or-nothing unit on the shared session.

        Every write made inside the block is released with the SAVEPOINT on
        normal exit and rolled back to it on exception.
        """
        with self.session.begin_nested():
            yield
