import copy
from typing import Dict, List, Optional

from nestedset.core.exceptions import DbException, NotFoundError
from nestedset.core.types import Clause, UpdatePlan
from nestedset.concurrency.transactions import Transaction
from ..interfaces import Store, Row


class InMemoryStore(Store):
    """
    Store keeping every row in a dict keyed by id.

    Transactions snapshot the row table on begin and restore it on
    rollback. Reads take the writer lock as well, so a reader on another
    thread sees either the state before a transaction or the state after
    it, never the rows of a half-applied plan.
    """

    def __init__(self):
        super().__init__()
        self._rows: Dict[int, Row] = {}
        self._next_id = 1
        self._snapshot: Optional[tuple] = None

    def get(self, node_id: int) -> Row:
        with self._write_lock:
            row = self._rows.get(node_id)
            if row is None:
                raise NotFoundError(node_id)
            return dict(row)

    def insert(self, row: Row) -> Row:
        with self.transaction() as txn:
            row = dict(row)
            node_id = row.get(self.ID_COLUMN)
            if node_id is None:
                node_id = self._next_id
            elif node_id in self._rows:
                raise DbException(f"Duplicate id {node_id}")

            row[self.ID_COLUMN] = node_id
            self._next_id = max(self._next_id, node_id + 1)
            self._rows[node_id] = row
            txn.record_write(1)
            return dict(row)

    def select(self, clause: Clause, order_by: Optional[str] = None,
               descending: bool = False, limit: Optional[int] = None) -> List[Row]:
        # Copies are taken under the lock; sorting happens on the copies
        with self._write_lock:
            rows = [dict(row) for row in self._rows.values() if clause.matches(row)]

        if order_by is not None:
            rows.sort(key=lambda r: (r[order_by], r[self.ID_COLUMN]),
                      reverse=descending)
        else:
            rows.sort(key=lambda r: r[self.ID_COLUMN])

        if limit is not None:
            rows = rows[:limit]
        return rows

    def count(self, clause: Clause) -> int:
        with self._write_lock:
            return sum(1 for row in self._rows.values() if clause.matches(row))

    def bulk_update(self, plan: UpdatePlan) -> int:
        if plan.is_empty():
            return 0

        with self.transaction() as txn:
            target = plan.target_clause()

            # Evaluate everything against the pre-update rows first
            pending = [(row, plan.evaluate(row))
                       for row in self._rows.values() if target.matches(row)]

            for row, changes in pending:
                row.update(changes)

            txn.record_write(len(pending))
            return len(pending)

    def __len__(self) -> int:
        with self._write_lock:
            return len(self._rows)

    def _begin(self, txn: Transaction) -> None:
        self._snapshot = (copy.deepcopy(self._rows), self._next_id)

    def _commit(self, txn: Transaction) -> None:
        self._snapshot = None

    def _rollback(self, txn: Transaction) -> None:
        if self._snapshot is not None:
            self._rows, self._next_id = self._snapshot
            self._snapshot = None
