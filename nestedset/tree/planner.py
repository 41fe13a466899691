from typing import Sequence, Tuple

from nestedset.core.config import TreeConfig
from nestedset.core.node import Node, ID_COLUMN
from nestedset.core.types import (
    And, Clause, Patch, UpdatePlan, Assign, Increment, eq, ge, le, between,
)
from nestedset.primitives import NO_PARENT
from .interval import Relocation


class UpdatePlanner:
    """
    Turns a structural change into an UpdatePlan.

    Each ``plan_*`` method receives snapshots and offsets computed by the
    interval algebra and returns the patches that realize the change.
    Predicates always describe the rows as they are before the plan runs;
    stores apply a plan as one statement, so patches never see each
    other's effects.
    """

    def __init__(self, config: TreeConfig):
        self.config = config

    def subtree_clause(self, node: Node) -> Clause:
        """Rows of ``node``'s subtree, including ``node`` itself."""
        cfg = self.config
        return And.of(eq(cfg.root_column, node.root_id),
                      ge(cfg.left_column, node.left),
                      le(cfg.right_column, node.right))

    def plan_attach(self, parent: Node, child: Node, move: Relocation,
                    scope: Clause) -> UpdatePlan:
        """
        Four patches that make ``child`` the last child of ``parent``.

        1. the child's subtree: new root, depth and position
        2. the child row: new parent id
        3. rows with a right bound inside the displaced band
        4. rows with a left bound inside the displaced band
        """
        cfg = self.config
        plan = UpdatePlan(scope=scope)

        plan.add(Patch(
            self.subtree_clause(child),
            {
                cfg.root_column: Assign(parent.root_id),
                cfg.depth_column: Increment(move.depth_delta),
                cfg.left_column: Increment(move.shift),
                cfg.right_column: Increment(move.shift),
            },
            label="move subtree",
        ))
        plan.add(Patch(
            eq(ID_COLUMN, child.id),
            {cfg.parent_column: Assign(parent.id)},
            label="reparent",
        ))
        plan.add(Patch(
            between(cfg.right_column, move.band_low, move.band_high),
            {cfg.right_column: Increment(move.band_delta)},
            label="resize enclosing",
        ))
        plan.add(Patch(
            between(cfg.left_column, move.band_low, move.band_high),
            {cfg.left_column: Increment(move.band_delta)},
            label="shift following",
        ))
        return plan

    def plan_reorder(self, shifts: Sequence[Tuple[Node, int]],
                     scope: Clause) -> UpdatePlan:
        """
        One patch per sibling that changes position.

        A sibling's patch covers its whole subtree by interval alone;
        ``scope`` restricts the batch to the right forest and root.
        """
        cfg = self.config
        plan = UpdatePlan(scope=scope)
        for element, shift in shifts:
            plan.add(Patch(
                And.of(ge(cfg.left_column, element.left),
                       le(cfg.right_column, element.right)),
                {
                    cfg.left_column: Increment(shift),
                    cfg.right_column: Increment(shift),
                },
                label=f"move #{element.id}",
            ))
        return plan

    def plan_promote(self, node: Node, new_left: int, new_right: int,
                     scope: Clause) -> UpdatePlan:
        """
        Two patches relocating ``node``'s subtree to a fresh root slot.

        The second patch sets the node row explicitly and, coming last,
        overrides the generic shift of the first for that row.
        """
        cfg = self.config
        shift = new_left - node.left
        plan = UpdatePlan(scope=scope)

        plan.add(Patch(
            self.subtree_clause(node),
            {
                cfg.depth_column: Increment(-node.depth),
                cfg.root_column: Assign(node.id),
                cfg.left_column: Increment(shift),
                cfg.right_column: Increment(shift),
            },
            label="move subtree",
        ))
        plan.add(Patch(
            eq(ID_COLUMN, node.id),
            self._root_assignments(node.id, new_left, new_right),
            label="make root",
        ))
        return plan

    def plan_new_root(self, node_id: int, left: int, right: int,
                      scope: Clause) -> UpdatePlan:
        """Single patch turning a freshly inserted row into a singleton root."""
        return UpdatePlan(scope=scope).add(Patch(
            eq(ID_COLUMN, node_id),
            self._root_assignments(node_id, left, right),
            label="new root",
        ))

    def _root_assignments(self, node_id: int, left: int, right: int) -> dict:
        cfg = self.config
        return {
            cfg.root_column: Assign(node_id),
            cfg.depth_column: Assign(0),
            cfg.parent_column: Assign(NO_PARENT),
            cfg.left_column: Assign(left),
            cfg.right_column: Assign(right),
        }

