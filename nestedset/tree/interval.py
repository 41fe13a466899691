"""
Interval algebra for nested-set forests.

Pure functions over Node snapshots: containment tests, the insertion
point for a new child, and the offsets needed to relocate or reorder
subtrees. Nothing here reads or writes a store.

Every scope is one number line: roots sit one after another and each
subtree occupies a contiguous ``[left, right]`` stretch of it. Moving a
subtree therefore means rotating a stretch of that line, which is what
``relocation`` describes.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from nestedset.core.node import Node


@dataclass(frozen=True)
class Relocation:
    """
    How to move a subtree to a new insertion point.

    Attributes:
        shift: added to ``left``/``right`` of every row of the subtree
        depth_delta: added to ``depth`` of every row of the subtree
        band_low, band_high: inclusive range of bound values displaced
            by the move (empty when ``band_low > band_high``)
        band_delta: added to any ``left`` or ``right`` inside the band
    """
    shift: int
    depth_delta: int
    band_low: int
    band_high: int
    band_delta: int

    @property
    def has_band(self) -> bool:
        return self.band_low <= self.band_high

    def moved_interval(self, node: Node) -> Tuple[int, int]:
        return node.left + self.shift, node.right + self.shift


def span(node: Node) -> int:
    """Number of bound values a subtree occupies on the line."""
    return node.right - node.left + 1


def contains(outer: Node, inner: Node) -> bool:
    """True if ``inner`` is a strict descendant of ``outer``."""
    return (outer.root_id == inner.root_id and
            outer.scope_key == inner.scope_key and
            outer.left < inner.left and inner.right < outer.right)


def can_attach(parent: Node, child: Node) -> bool:
    """
    True unless attaching ``child`` under ``parent`` would create a cycle.

    That happens when the child is a strict ancestor of the parent, or
    when both are the same node.
    """
    if parent.id == child.id:
        return False
    return not contains(child, parent)


def insertion_point(parent: Node, last_other_child: Optional[Node]) -> int:
    """
    Left bound a new last child of ``parent`` should take.

    Right after the rightmost existing child (other than the one being
    moved), or right after the parent's own left bound when it has none.
    """
    if last_other_child is not None:
        return last_other_child.right + 1
    return parent.left + 1


def relocation(child: Node, new_left: int, depth_delta: int) -> Relocation:
    """
    Offsets for moving ``child``'s subtree to the insertion point ``new_left``.

    The subtree leaves its old stretch and everything between the old
    stretch and the insertion point slides by the subtree's span to fill
    the hole, so no new gap is created:

    - insertion point left of the child: the band ``[new_left,
      child.left)`` slides right by the span and the child lands on
      ``new_left``
    - insertion point right of the child: the band ``(child.right,
      new_left)`` slides left by the span and the child lands just
      before the (shifted) insertion point

    Ancestors need no special handling: a bound inside the band is
    exactly the bound of a node whose interval gains or loses the
    subtree.
    """
    width = span(child)
    if new_left > child.right:
        return Relocation(
            shift=new_left - child.right - 1,
            depth_delta=depth_delta,
            band_low=child.right + 1,
            band_high=new_left - 1,
            band_delta=-width,
        )
    return Relocation(
        shift=new_left - child.left,
        depth_delta=depth_delta,
        band_low=new_left,
        band_high=child.left - 1,
        band_delta=width,
    )


def root_slot(max_right: int, width: int = 0) -> Tuple[int, int]:
    """
    Slot after the last root: ``(max+1, max+2)`` for a leaf, or
    ``(max+1, max+width+2)`` to leave ``width`` interior values.
    """
    return max_right + 1, max_right + width + 2


def normalize_index(target_index: int, size: int) -> int:
    """
    Resolve a sibling position for insertion into a list of ``size``
    remaining siblings.

    Negative indices count from the end (``-1`` is the last position);
    anything out of range clamps to the nearest end.
    """
    if target_index < 0:
        target_index = size + 1 + target_index
    return max(0, min(target_index, size))


def reorder_shifts(desired: Sequence[Node], start_left: int) -> List[Tuple[Node, int]]:
    """
    Shifts that lay ``desired`` out one after another from ``start_left``.

    Walks the desired order from the last element to the first; each
    element's new left is ``start_left`` plus the total span of the
    elements that end up before it. Elements whose shift is zero are
    left out.
    """
    shifts: List[Tuple[Node, int]] = []
    offset_before = sum(span(e) for e in desired)
    for element in reversed(desired):
        offset_before -= span(element)
        shift = start_left + offset_before - element.left
        if shift:
            shifts.append((element, shift))
    shifts.reverse()
    return shifts
