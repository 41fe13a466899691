from collections import defaultdict
from typing import Any, Dict, List, Sequence

from nestedset.core.config import TreeConfig
from nestedset.core.node import Node
from nestedset.primitives import NO_PARENT
from nestedset.storage.interfaces import Store
from . import interval


class TreeValidator:
    """🔍 Checks that stored rows form a consistent nested-set forest.

    📏 Every interval is well formed
    🌳 Roots and parents agree with root ids and depths
    🔗 Parent links agree with interval containment
    🧱 Siblings never overlap and no bound is used twice
    """

    def __init__(self, config: TreeConfig = None):
        """
        🎬 Initialize validator with empty error list.
        """
        self.config = config or TreeConfig()
        self.validation_errors: List[str] = []

    def validate_store(self, store: Store, scope_key: Any = None) -> bool:
        """
        🔍 Validate every node of one scope.

        Args:
            store: Store holding the forest
            scope_key: Forest to check

        Returns:
            True if valid, False otherwise
        """
        rows = store.select(self.config.scope_condition(scope_key),
                            order_by=self.config.left_column)
        return self.validate([Node.from_row(row, self.config) for row in rows])

    def validate(self, nodes: Sequence[Node]) -> bool:
        """
        Validate a set of nodes belonging to one scope.

        Returns:
            True if valid, False otherwise
        """
        self.validation_errors.clear()
        by_id = {node.id: node for node in nodes}

        for node in nodes:
            self._validate_interval(node)
            if node.is_root():
                self._validate_root(node)
            else:
                self._validate_parent(node, by_id)

        self._validate_unique_bounds(nodes)
        self._validate_siblings(nodes)
        self._validate_ancestry(nodes, by_id)
        return len(self.validation_errors) == 0

    def get_validation_errors(self) -> List[str]:
        """
        📋 Get list of validation errors from last validation.
        """
        return self.validation_errors.copy()

    def _validate_interval(self, node: Node) -> None:
        if node.left >= node.right:
            self.validation_errors.append(
                f"{node} has left bound {node.left} >= right bound {node.right}")
        elif node.width % 2 == 0:
            self.validation_errors.append(f"{node} has an even interval width")

    def _validate_root(self, node: Node) -> None:
        if node.root_id != node.id:
            self.validation_errors.append(
                f"Root {node} has root id {node.root_id}")
        if node.depth != 0:
            self.validation_errors.append(
                f"Root {node} has depth {node.depth}")

    def _validate_parent(self, node: Node, by_id: Dict[int, Node]) -> None:
        parent = by_id.get(node.parent_id)
        if parent is None:
            self.validation_errors.append(
                f"{node} references missing parent {node.parent_id}")
            return

        if node.root_id != parent.root_id:
            self.validation_errors.append(
                f"{node} has root id {node.root_id}, parent has {parent.root_id}")
        if node.depth != parent.depth + 1:
            self.validation_errors.append(
                f"{node} has depth {node.depth}, parent has {parent.depth}")
        if not interval.contains(parent, node):
            self.validation_errors.append(
                f"{node} is not inside its parent {parent}")

    def _validate_unique_bounds(self, nodes: Sequence[Node]) -> None:
        seen: Dict[int, Node] = {}
        for node in nodes:
            for bound in (node.left, node.right):
                other = seen.get(bound)
                if other is not None and other.id != node.id:
                    self.validation_errors.append(
                        f"Bound {bound} used by both {other} and {node}")
                seen[bound] = node

    def _validate_siblings(self, nodes: Sequence[Node]) -> None:
        families = defaultdict(list)
        for node in nodes:
            families[node.parent_id].append(node)

        for siblings in families.values():
            siblings = sorted(siblings, key=lambda n: n.left)
            for before, after in zip(siblings, siblings[1:]):
                if before.right >= after.left:
                    self.validation_errors.append(
                        f"Siblings {before} and {after} overlap")

    def _validate_ancestry(self, nodes: Sequence[Node], by_id: Dict[int, Node]) -> None:
        # Following parent links must find exactly the containing nodes
        for node in nodes:
            ancestors = set()
            current = node
            while current.parent_id != NO_PARENT and current.parent_id in by_id:
                if current.parent_id in ancestors:
                    self.validation_errors.append(f"{node} has a parent cycle")
                    break
                ancestors.add(current.parent_id)
                current = by_id[current.parent_id]

            containing = {other.id for other in nodes
                          if interval.contains(other, node)}
            if containing != ancestors:
                self.validation_errors.append(
                    f"{node} has ancestors {sorted(ancestors)} by parent "
                    f"but {sorted(containing)} by interval")
