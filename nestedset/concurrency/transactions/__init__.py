"""Store transactions."""

from .transaction import Transaction, TransactionState

__all__ = ["Transaction", "TransactionState"]
