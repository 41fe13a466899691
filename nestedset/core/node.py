from dataclasses import dataclass, field
from typing import Any, Mapping

from .config import TreeConfig
from ..primitives import NO_PARENT

ID_COLUMN = "id"


@dataclass
class Node:
    """
    One row of a nested-set forest.

    A Node carries:
    1. Identity: ``id`` and the owning forest's ``scope_key``
    2. Structure: ``parent_id`` (0 for roots), ``root_id`` and ``depth``
    3. Position: the ``[left, right]`` interval

    Any other stored column is kept in ``attributes`` untouched.

    Nodes are snapshots. Every mutating tree operation changes stored
    intervals, so a Node read before the mutation is stale afterwards.
    """
    id: int
    parent_id: int
    root_id: int
    left: int
    right: int
    depth: int
    scope_key: Any = None
    attributes: dict = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], config: TreeConfig) -> 'Node':
        """Build a Node from a store row using the configured column names."""
        known = set(config.columns) | {ID_COLUMN}
        if config.scope:
            known.add(config.scope)

        return cls(
            id=row[ID_COLUMN],
            parent_id=row[config.parent_column] or NO_PARENT,
            root_id=row[config.root_column],
            left=row[config.left_column],
            right=row[config.right_column],
            depth=row[config.depth_column],
            scope_key=row.get(config.scope) if config.scope else None,
            attributes={k: v for k, v in row.items() if k not in known},
        )

    def is_root(self) -> bool:
        """Returns true if this is a root node."""
        return self.parent_id == NO_PARENT

    def is_child(self) -> bool:
        """Returns true if this node has a parent. Inverse of is_root."""
        return not self.is_root()

    @property
    def level(self) -> int:
        return self.depth

    @property
    def width(self) -> int:
        """``right - left``; always odd for a valid node."""
        return self.right - self.left

    def might_have_descendants(self) -> bool:
        """
        Cheap test before issuing a descendant query.

        False means there is nothing to look for. True only means the
        interval leaves room for descendants: orphaned ranges make it
        unreliable as a test for their presence.
        """
        return self.width > 1

    def get(self, key: str, default: Any = None) -> Any:
        """Look up an extra column value."""
        return self.attributes.get(key, default)

    def __str__(self) -> str:
        name = self.attributes.get("name")
        label = f"{name!r} " if name is not None else ""
        return f"Node({label}#{self.id} [{self.left},{self.right}] depth={self.depth})"
