from typing import Any, Optional, Tuple

from nestedset.core.config import TreeConfig
from nestedset.core.node import ID_COLUMN
from nestedset.core.types import And, eq, ne
from nestedset.primitives import NO_PARENT
from nestedset.storage.interfaces import Store
from .interval import root_slot


class RangeAllocator:
    """
    Hands out fresh ``[left, right]`` slots at the end of a scope's root list.

    New roots and promoted subtrees are placed after the root with the
    greatest right bound, so a slot never overlaps an existing root.
    """

    def __init__(self, store: Store, config: TreeConfig):
        self.store = store
        self.config = config

    def max_root_right(self, scope_key: Any = None,
                       exclude_id: Optional[int] = None) -> int:
        """Greatest right bound among the scope's roots, 0 if there are none."""
        cfg = self.config
        clause = And.of(cfg.scope_condition(scope_key),
                        eq(cfg.parent_column, NO_PARENT))
        if exclude_id is not None:
            clause = And.of(clause, ne(ID_COLUMN, exclude_id))

        last = self.store.first(clause, order_by=cfg.right_column, descending=True)
        return last[cfg.right_column] if last else 0

    def allocate_root_slot(self, scope_key: Any = None, width: int = 0,
                           exclude_id: Optional[int] = None) -> Tuple[int, int]:
        """
        Slot for a root with ``width`` interior values.

        Args:
            scope_key: Forest to allocate in
            width: Interior room to reserve (0 for a leaf)
            exclude_id: Node to ignore when finding the last root, used
                when the node being placed is itself already stored

        Returns:
            (left, right)
        """
        if width < 0 or width % 2:
            raise ValueError(f"Slot width must be even and >= 0, got {width}")
        return root_slot(self.max_root_right(scope_key, exclude_id), width)
