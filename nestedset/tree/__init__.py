from .allocator import RangeAllocator
from .planner import UpdatePlanner
from .tree_index import TreeIndex
from .validator import TreeValidator
from .display import render_forest, print_forest, outline

__all__ = [
    "RangeAllocator",
    "UpdatePlanner",
    "TreeIndex",
    "TreeValidator",
    "render_forest",
    "print_forest",
    "outline",
]
