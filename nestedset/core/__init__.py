from .exceptions import (
    DbException,
    NotFoundError,
    TreeException,
    CyclicReparentError,
)
from .config import TreeConfig
from .node import Node
from .types import Predicate, Clause, Condition, Patch, UpdatePlan

__all__ = [
    "DbException",
    "NotFoundError",
    "TreeException",
    "CyclicReparentError",
    "TreeConfig",
    "Node",
    "Predicate",
    "Clause",
    "Condition",
    "Patch",
    "UpdatePlan",
]
