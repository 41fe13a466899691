from .interfaces import Store
from .memory import InMemoryStore
from .sqlite import SqliteStore

__all__ = ["Store", "InMemoryStore", "SqliteStore"]
