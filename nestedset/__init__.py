from .core import (
    DbException,
    NotFoundError,
    TreeException,
    CyclicReparentError,
    TreeConfig,
    Node,
)
from .storage import Store, InMemoryStore, SqliteStore
from .tree import TreeIndex, TreeValidator, render_forest, print_forest

__version__ = "0.1.0"

__all__ = [
    "DbException",
    "NotFoundError",
    "TreeException",
    "CyclicReparentError",
    "TreeConfig",
    "Node",
    "Store",
    "InMemoryStore",
    "SqliteStore",
    "TreeIndex",
    "TreeValidator",
    "render_forest",
    "print_forest",
]
