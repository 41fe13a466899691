import threading
import time
from typing import Optional, TYPE_CHECKING
from enum import Enum

from ...core.exceptions import DbException

if TYPE_CHECKING:
    from ...storage.interfaces import Store


class TransactionState(Enum):
    """States a transaction can be in during its lifecycle."""
    CREATED = "CREATED"
    ACTIVE = "ACTIVE"
    COMMITTED = "COMMITTED"
    ABORTED = "ABORTED"


class Transaction:
    """
    A write transaction on one store.

    The transaction owns the commit-or-rollback decision; the store
    supplies the mechanics through its ``_begin``/``_commit``/``_rollback``
    hooks. Used as a context manager it commits on normal exit and rolls
    back on every exception, so a failed tree mutation never leaves part
    of its patches visible.

    Features:
    - Explicit state machine (CREATED → ACTIVE → COMMITTED | ABORTED)
    - Write statistics (statements and rows)
    - Thread-safe state transitions
    """

    def __init__(self, store: 'Store', number: int):
        # position in the store's sequence of transactions, from 1
        self.number = number
        self.store = store
        self.state = TransactionState.CREATED
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self._lock = threading.RLock()

        # Statistics
        self.statements_executed = 0
        self.rows_written = 0

    def start(self) -> None:
        """Open the transaction on the store."""
        with self._lock:
            if self.state != TransactionState.CREATED:
                raise DbException(
                    f"Cannot start transaction in state {self.state}")

            try:
                self.store._begin(self)
            except Exception as e:
                self.state = TransactionState.ABORTED
                raise DbException(f"Failed to start transaction: {e}") from e

            self.state = TransactionState.ACTIVE
            self.start_time = time.time()

    def get_id(self) -> int:
        """Return this transaction's number on its store."""
        return self.number

    def get_state(self) -> TransactionState:
        """Return the current state of this transaction."""
        return self.state

    def is_active(self) -> bool:
        """Check if this transaction is currently active."""
        return self.state == TransactionState.ACTIVE

    def get_age(self) -> float:
        """Get the age of this transaction in seconds."""
        if self.start_time is None:
            return 0.0
        return time.time() - self.start_time

    def record_write(self, rows: int) -> None:
        """Record one executed write statement touching ``rows`` rows."""
        with self._lock:
            if self.state == TransactionState.ACTIVE:
                self.statements_executed += 1
                self.rows_written += rows

    def commit(self) -> None:
        """
        Make every write of this transaction visible.

        If the store fails to commit, the transaction is rolled back and
        the failure is re-raised as a DbException.
        """
        with self._lock:
            if self.state != TransactionState.ACTIVE:
                raise DbException(
                    f"Cannot commit transaction in state {self.state}")

            try:
                self.store._commit(self)
            except Exception as e:
                self._abort_internal(f"Commit failed: {e}")
                raise DbException(f"Transaction commit failed: {e}") from e

            self.state = TransactionState.COMMITTED
            self.end_time = time.time()

    def abort(self, reason: str = "Explicit abort requested") -> None:
        """Discard every write of this transaction."""
        with self._lock:
            if self.state in [TransactionState.COMMITTED, TransactionState.ABORTED]:
                return  # Already completed

            self._abort_internal(reason)

    def _abort_internal(self, reason: str) -> None:
        try:
            self.store._rollback(self)
        finally:
            self.state = TransactionState.ABORTED
            self.end_time = time.time()
            print(f"Transaction #{self.number} aborted: {reason}")

    def get_statistics(self) -> dict:
        """Get transaction statistics."""
        with self._lock:
            duration = 0.0
            if self.start_time:
                end_time = self.end_time or time.time()
                duration = end_time - self.start_time

            return {
                'transaction_id': self.number,
                'state': self.state.value,
                'duration': duration,
                'statements_executed': self.statements_executed,
                'rows_written': self.rows_written,
            }

    def __str__(self) -> str:
        return f"Transaction(#{self.number}, state={self.state.value}, age={self.get_age():.2f}s)"

    def __repr__(self) -> str:
        return self.__str__()

    def __enter__(self):
        """Context manager entry - start the transaction."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - commit or abort based on exception."""
        if exc_type is None:
            self.commit()
        else:
            self.abort(f"Exception occurred: {exc_val!r}")
        return False  # Don't suppress exceptions
