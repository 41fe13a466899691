import threading
from typing import Any, List, Optional, Union

from cachetools import LRUCache

from nestedset.core.config import TreeConfig
from nestedset.core.exceptions import CyclicReparentError, TreeException
from nestedset.core.node import Node, ID_COLUMN
from nestedset.core.types import And, Clause, ALWAYS, eq, ne, gt, lt
from nestedset.primitives import NO_PARENT
from nestedset.storage.interfaces import Store
from . import interval
from .allocator import RangeAllocator
from .planner import UpdatePlanner

NodeRef = Union[Node, int]


class TreeIndex:
    """
    Ordered forests stored as nested sets in a flat row store.

    The TreeIndex is the public face of the package. It composes:

    1. **RangeAllocator**: fresh root slots at the end of a scope
    2. **Interval algebra**: offsets and containment from snapshots
    3. **UpdatePlanner**: patches realizing each structural change
    4. **Store**: rows, range queries and the transaction boundary

    Every mutation re-reads the nodes it is given, computes its patches
    from that snapshot and applies them inside one store transaction, so
    either all of them become visible or none does. Node objects handed
    in are only used for their id; after a mutation the caller should
    re-read any Node it keeps.

    Writers of the same scope must be serialized by the caller. The
    offsets are computed from a snapshot and a concurrent structural
    change between that read and the write is not detected.

    Operations accept either a Node or a node id.
    """

    def __init__(self, store: Store, config: Optional[TreeConfig] = None,
                 cache_size: int = 1024):
        self.store = store
        self.config = config or TreeConfig()
        self.allocator = RangeAllocator(store, self.config)
        self.planner = UpdatePlanner(self.config)

        # Memoized per-node counters, keyed by store generation
        self._memo: LRUCache = LRUCache(maxsize=cache_size)
        self._memo_lock = threading.RLock()

    # ------------------------------------------------------------------
    # Reads of single nodes

    def get(self, node: NodeRef) -> Node:
        """Read the stored state of a node."""
        node_id = node.id if isinstance(node, Node) else node
        return Node.from_row(self.store.get(node_id), self.config)

    def reload(self, *nodes: NodeRef) -> List[Node]:
        """Re-read several nodes at once."""
        return [self.get(node) for node in nodes]

    def is_root(self, node: NodeRef) -> bool:
        """Whether the stored node has no parent."""
        return self.get(node).is_root()

    def is_child(self, node: NodeRef) -> bool:
        """Whether the stored node has a parent."""
        return self.get(node).is_child()

    def level(self, node: NodeRef) -> int:
        """Number of strict ancestors of the node (0 for a root)."""
        return self.get(node).depth

    # ------------------------------------------------------------------
    # Creation

    def create_node(self, scope_key: Any = None, parent: Optional[NodeRef] = None,
                    **attributes) -> Node:
        """
        Store a new node.

        The node is born as a singleton root at the end of the scope's
        root list. When ``parent`` is given it is then attached as the
        parent's last child, in the same transaction.

        Args:
            scope_key: Forest the node belongs to; inherited from the
                parent when omitted
            parent: Optional parent node or id
            **attributes: Extra column values stored with the node
        """
        cfg = self.config
        with self.store.transaction():
            parent_node = None
            if parent is not None and parent != NO_PARENT:
                parent_node = self.get(parent)
                if scope_key is None:
                    scope_key = parent_node.scope_key

            left, right = self.allocator.allocate_root_slot(scope_key)
            row = dict(attributes)
            row.update({
                cfg.root_column: NO_PARENT,
                cfg.parent_column: NO_PARENT,
                cfg.left_column: left,
                cfg.right_column: right,
                cfg.depth_column: 0,
            })
            if cfg.scope:
                row[cfg.scope] = scope_key

            node_id = self.store.insert(row)[ID_COLUMN]
            self.store.bulk_update(self.planner.plan_new_root(
                node_id, left, right, cfg.scope_condition(scope_key)))

            if parent_node is not None:
                self.attach_child(parent_node, node_id)

        self.invalidate()
        return self.get(node_id)

    # ------------------------------------------------------------------
    # Reparenting

    def child_can_be_attached(self, parent: NodeRef, child: NodeRef) -> bool:
        """Tells whether attaching ``child`` under ``parent`` is possible."""
        parent, child = self.get(parent), self.get(child)
        return interval.can_attach(parent, child)

    def attach_child(self, parent: NodeRef, child: NodeRef) -> bool:
        """
        Make ``child`` (with its subtree) the last child of ``parent``.

        Issues exactly four patches in one statement; see
        ``UpdatePlanner.plan_attach``. Re-attaching a node to its current
        parent is accepted.

        Raises:
            CyclicReparentError: If ``child`` is ``parent`` or one of its
                ancestors
            TreeException: If the nodes live in different scopes
            NotFoundError: If either node does not exist
        """
        cfg = self.config
        with self.store.transaction():
            parent, child = self.get(parent), self.get(child)

            if not interval.can_attach(parent, child):
                raise CyclicReparentError(
                    f"Cannot reparent {child} onto its own descendant {parent}",
                    parent_id=parent.id, child_id=child.id)
            if parent.scope_key != child.scope_key:
                raise TreeException(
                    f"Cannot attach {child} from scope {child.scope_key!r} "
                    f"under {parent} in scope {parent.scope_key!r}")

            last_other = self.store.first(
                And.of(cfg.scope_condition(parent.scope_key),
                       eq(cfg.parent_column, parent.id),
                       ne(ID_COLUMN, child.id)),
                order_by=cfg.right_column, descending=True)
            last_other = Node.from_row(last_other, cfg) if last_other else None

            new_left = interval.insertion_point(parent, last_other)
            move = interval.relocation(
                child, new_left, (parent.depth + 1) - child.depth)

            plan = self.planner.plan_attach(
                parent, child, move, cfg.scope_condition(parent.scope_key))
            self.store.bulk_update(plan)

        self.invalidate()
        return True

    def add_child(self, parent: NodeRef, child: NodeRef) -> bool:
        """
        Like attach_child, but reports an impossible move by returning
        False instead of raising.
        """
        if not self.child_can_be_attached(parent, child):
            return False
        try:
            return self.attach_child(parent, child)
        except CyclicReparentError:
            return False

    def promote_to_root(self, node: NodeRef) -> bool:
        """
        Make ``node`` a root, moving its subtree to the end of the root list.

        The range it leaves behind stays inside its former ancestors as
        an orphaned range.
        """
        cfg = self.config
        with self.store.transaction():
            node = self.get(node)
            new_left, new_right = self.allocator.allocate_root_slot(
                node.scope_key, node.right - node.left - 1, exclude_id=node.id)

            plan = self.planner.plan_promote(
                node, new_left, new_right, cfg.scope_condition(node.scope_key))
            self.store.bulk_update(plan)

        self.invalidate()
        return True

    def set_parent(self, node: NodeRef, parent: Optional[NodeRef]) -> bool:
        """
        Move ``node`` under ``parent``, or to the root list when ``parent``
        is None or 0. Nothing happens when the parent does not change.
        """
        node = self.get(node)
        if parent is None:
            parent = NO_PARENT
        parent_id = parent.id if isinstance(parent, Node) else parent

        if parent_id == node.parent_id:
            return True
        if parent_id == NO_PARENT:
            return self.promote_to_root(node)
        return self.attach_child(parent_id, node)

    # ------------------------------------------------------------------
    # Sibling order

    def move_to(self, node: NodeRef, target_index: int) -> bool:
        """
        Move a node to ``target_index`` among its siblings.

        Negative indices count from the end (``-1`` is the last slot) and
        out-of-range indices clamp. Only siblings whose position changes
        are written, with their subtrees, in one batched statement.
        """
        cfg = self.config
        with self.store.transaction():
            node = self.get(node)
            siblings = self.siblings_and_self(node)
            if len(siblings) == 1:
                return True

            current = next(i for i, s in enumerate(siblings) if s.id == node.id)
            desired = [s for s in siblings if s.id != node.id]
            position = interval.normalize_index(target_index, len(desired))
            if position == current:
                return True

            desired.insert(position, siblings[current])
            shifts = interval.reorder_shifts(desired, siblings[0].left)
            if not shifts:
                return True

            scope = cfg.scope_condition(node.scope_key)
            if node.is_child():
                scope = And.of(scope, eq(cfg.root_column, node.root_id))
            self.store.bulk_update(self.planner.plan_reorder(shifts, scope))

        self.invalidate()
        return True

    def move_up(self, node: NodeRef) -> bool:
        """Move the node one position towards the start of its siblings."""
        index = self.index_in_parent(node)
        if index == 0:
            return True
        return self.move_to(node, index - 1)

    def move_down(self, node: NodeRef) -> bool:
        """Move the node one position towards the end of its siblings."""
        return self.move_to(node, self.index_in_parent(node) + 1)

    def move_to_top(self, node: NodeRef) -> bool:
        """Make the node the first of its siblings."""
        return self.move_to(node, 0)

    def move_to_bottom(self, node: NodeRef) -> bool:
        """Make the node the last of its siblings."""
        return self.move_to(node, -1)

    # ------------------------------------------------------------------
    # Queries

    def roots(self, scope_key: Any = None) -> List[Node]:
        """Root nodes of a scope, in order."""
        cfg = self.config
        return self._select(And.of(cfg.scope_condition(scope_key),
                                   eq(cfg.parent_column, NO_PARENT)))

    def descendants(self, node: NodeRef, extra: Clause = ALWAYS) -> List[Node]:
        """
        Children and nested children of ``node``, ordered by left bound.

        Args:
            extra: Additional clause narrowing the result
        """
        node = self.get(node)
        if not node.might_have_descendants():
            return []
        return self._select(And.of(self._branch_clause(node), extra))

    all_children = descendants

    def full_set(self, node: NodeRef, extra: Clause = ALWAYS) -> List[Node]:
        """The node itself followed by its descendants."""
        node = self.get(node)
        return [node] + self.descendants(node, extra)

    all_children_and_self = full_set

    def child_count(self, node: NodeRef) -> int:
        """Number of children and nested children, by range query."""
        node = self.get(node)
        if not node.might_have_descendants():
            return 0
        key = ("child_count", node.id, node.root_id, node.left, node.right)
        return self._memoized(key, lambda: self.store.count(self._branch_clause(node)))

    children_count = child_count

    def direct_children(self, node: NodeRef, extra: Clause = ALWAYS) -> List[Node]:
        """Immediate children of ``node``, in order."""
        cfg = self.config
        node = self.get(node)
        if not node.might_have_descendants():
            return []
        return self._select(And.of(cfg.scope_condition(node.scope_key),
                                   eq(cfg.parent_column, node.id), extra))

    def siblings(self, node: NodeRef, extra: Clause = ALWAYS) -> List[Node]:
        """Nodes sharing ``node``'s parent (roots of the scope for a root), in order."""
        node = self.get(node)
        return self._select(And.of(self._sibling_clause(node),
                                   ne(ID_COLUMN, node.id), extra))

    def siblings_and_self(self, node: NodeRef, extra: Clause = ALWAYS) -> List[Node]:
        node = self.get(node)
        return self._select(And.of(self._sibling_clause(node), extra))

    def index_in_parent(self, node: NodeRef) -> int:
        """Zero-based position of the node among its siblings."""
        cfg = self.config
        node = self.get(node)
        key = ("index_in_parent", node.id, node.parent_id, node.left)
        return self._memoized(key, lambda: self.store.count(
            And.of(self._sibling_clause(node), lt(cfg.right_column, node.left))))

    def might_have_descendants(self, node: NodeRef) -> bool:
        """Interval test on the stored node; see Node.might_have_descendants."""
        return self.get(node).might_have_descendants()

    def invalidate(self) -> None:
        """Forget memoized counters."""
        with self._memo_lock:
            self._memo.clear()

    # ------------------------------------------------------------------
    # Helpers

    def _select(self, clause: Clause) -> List[Node]:
        rows = self.store.select(clause, order_by=self.config.left_column)
        return [Node.from_row(row, self.config) for row in rows]

    def _branch_clause(self, node: Node) -> Clause:
        cfg = self.config
        return And.of(cfg.scope_condition(node.scope_key),
                      eq(cfg.root_column, node.root_id),
                      gt(cfg.depth_column, node.depth),
                      gt(cfg.left_column, node.left),
                      lt(cfg.right_column, node.right))

    def _sibling_clause(self, node: Node) -> Clause:
        cfg = self.config
        return And.of(cfg.scope_condition(node.scope_key),
                      eq(cfg.parent_column, node.parent_id))

    def _memoized(self, key: tuple, compute) -> Any:
        # Uncommitted rows of an open transaction are never memoized
        if self.store.current_transaction() is not None:
            return compute()

        key = (self.store.generation,) + key
        with self._memo_lock:
            if key in self._memo:
                return self._memo[key]
        value = compute()
        with self._memo_lock:
            self._memo[key] = value
        return value
