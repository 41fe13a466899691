"""
Rich rendering of forests, for examples and debugging sessions.
"""
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.tree import Tree

from nestedset.core.node import Node
from .tree_index import TreeIndex


def node_label(node: Node) -> str:
    name = node.get("name")
    title = f"[bold]{name}[/bold]" if name is not None else f"[bold]#{node.id}[/bold]"
    return f"{title} [dim][{node.left}, {node.right}][/dim]"


def render_forest(index: TreeIndex, scope_key: Any = None,
                  title: Optional[str] = None) -> Tree:
    """
    Build a rich Tree showing every root of a scope and its subtree.

    Each forest is read with one query per root and assembled from the
    parent links, so the picture reflects the stored state at call time.
    """
    if title is None:
        title = "Forest" if scope_key is None else f"Forest {scope_key!r}"
    forest = Tree(f"[bold blue]{title}[/bold blue]")

    for root in index.roots(scope_key):
        branches: Dict[int, Tree] = {root.id: forest.add(node_label(root))}
        for node in index.descendants(root):
            parent_branch = branches.get(node.parent_id)
            if parent_branch is None:
                continue
            branches[node.id] = parent_branch.add(node_label(node))

    return forest


def print_forest(index: TreeIndex, scope_key: Any = None,
                 console: Optional[Console] = None) -> None:
    """Print a scope's forest to the console."""
    (console or Console()).print(render_forest(index, scope_key))


def outline(index: TreeIndex, scope_key: Any = None) -> List[str]:
    """Plain ``depth``-indented names, handy in assertions."""
    lines = []
    for root in index.roots(scope_key):
        for node in index.full_set(root):
            lines.append("  " * node.depth + str(node.get("name", node.id)))
    return lines
