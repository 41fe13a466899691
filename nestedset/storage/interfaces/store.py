import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from nestedset.core.types import Clause, UpdatePlan
from nestedset.concurrency.transactions import Transaction, TransactionState

Row = Dict[str, Any]


class Store(ABC):
    """
    Abstract interface for the row storage backing a forest. 🗄️

    A Store keeps flat rows addressable by ``id`` and offers the three
    capabilities the tree code relies on:

    - Range/equality reads: ``select`` and ``count`` over a Clause 🔍
    - Batched conditional writes: ``bulk_update`` of an UpdatePlan ✍️
    - An atomic boundary: ``transaction`` 🔒

    Key Concepts:
    - Rows are plain dicts keyed by column name 📝
    - Returned rows are copies; mutating them never touches the store
    - Writers are serialized by a re-entrant lock held for the whole
      transaction; a nested ``transaction()`` joins the outer one 🔄
    """

    ID_COLUMN = "id"

    def __init__(self):
        self._write_lock = threading.RLock()
        self._local = threading.local()
        self._transactions_started = 0
        self._generation = 0

    @property
    def generation(self) -> int:
        """
        Number of committed transactions that wrote rows. 🔄

        Anything derived from stored rows and computed at generation ``n``
        is still valid while the generation is ``n``.
        """
        return self._generation

    @property
    def transactions_started(self) -> int:
        """Transactions opened on this store; also the last one's number."""
        return self._transactions_started

    @abstractmethod
    def get(self, node_id: int) -> Row:
        """
        Read one row by id. 📖

        Raises:
            NotFoundError: If no row has this id
        """
        pass

    @abstractmethod
    def insert(self, row: Row) -> Row:
        """
        Insert a row and return it with its assigned ``id``. ➕
        """
        pass

    @abstractmethod
    def select(self, clause: Clause, order_by: Optional[str] = None,
               descending: bool = False, limit: Optional[int] = None) -> List[Row]:
        """
        Return rows matching ``clause``. 🔍

        Args:
            clause: Filter to apply
            order_by: Column to sort by (ties broken by id)
            descending: Reverse the sort order
            limit: Maximum number of rows to return
        """
        pass

    @abstractmethod
    def count(self, clause: Clause) -> int:
        """Count rows matching ``clause``. 🔢"""
        pass

    @abstractmethod
    def bulk_update(self, plan: UpdatePlan) -> int:
        """
        Apply every patch of ``plan`` as one statement. ✍️

        All predicates and expressions are evaluated against the
        pre-update rows; see UpdatePlan for the exact semantics.

        Returns:
            Number of rows matched by the plan
        """
        pass

    def first(self, clause: Clause, order_by: Optional[str] = None,
              descending: bool = False) -> Optional[Row]:
        """Return the first matching row, or None."""
        rows = self.select(clause, order_by=order_by,
                           descending=descending, limit=1)
        return rows[0] if rows else None

    def current_transaction(self) -> Optional[Transaction]:
        """The transaction open on this thread, if any."""
        txn = getattr(self._local, "transaction", None)
        if txn is not None and txn.is_active():
            return txn
        return None

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """
        Scoped write transaction. 🔒

        Commits on normal exit and rolls back on any exception. When a
        transaction is already open on this thread, the block joins it
        and the outermost scope decides the outcome.

        Usage:
            with store.transaction() as txn:
                store.bulk_update(plan)
        """
        current = self.current_transaction()
        if current is not None:
            yield current
            return

        with self._write_lock:
            self._transactions_started += 1
            txn = Transaction(self, self._transactions_started)
            self._local.transaction = txn
            try:
                with txn:
                    yield txn
            finally:
                self._local.transaction = None
                if (txn.get_state() == TransactionState.COMMITTED and
                        txn.statements_executed):
                    self._generation += 1

    @abstractmethod
    def _begin(self, txn: Transaction) -> None:
        """Backend hook: open a transaction."""
        pass

    @abstractmethod
    def _commit(self, txn: Transaction) -> None:
        """Backend hook: make the transaction's writes durable and visible."""
        pass

    @abstractmethod
    def _rollback(self, txn: Transaction) -> None:
        """Backend hook: discard the transaction's writes."""
        pass
