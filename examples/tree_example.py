#!/usr/bin/env python3
"""
Nested Set Forest Example

This example walks through the life of a small forest stored as nested
sets in a SQLite table:
- Creating roots and children
- Reading descendants, siblings and positions with range queries
- Reordering siblings
- Moving a whole branch to another root
- Promoting a branch to a root of its own
- Rejecting a move that would create a cycle

Run with: python examples/tree_example.py
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.rule import Rule
from rich import box

from nestedset import (
    TreeIndex, TreeConfig, TreeValidator, SqliteStore, CyclicReparentError,
)
from nestedset.tree import render_forest

console = Console()


def print_header(title: str, subtitle: str = ""):
    """Print a header panel"""
    if subtitle:
        full_title = f"[bold blue]{title}[/bold blue]\n[dim]{subtitle}[/dim]"
    else:
        full_title = f"[bold blue]{title}[/bold blue]"

    console.print(Panel(full_title, style="bright_blue", box=box.DOUBLE, padding=(1, 2)))


def print_step(step_num: int, title: str, description: str = ""):
    """Print a step header"""
    step_text = f"[bold yellow]Step {step_num}: {title}[/bold yellow]"
    if description:
        step_text += f"\n[dim italic]{description}[/dim italic]"
    console.print(step_text)
    console.print()


def print_success(message: str):
    console.print(f"[bold green]✓[/bold green] {message}")


def print_error(message: str):
    console.print(f"[bold red]✗[/bold red] {message}")


def bounds_table(tree: TreeIndex, scope_key: int) -> Table:
    """Tabulate every stored row of a scope"""
    table = Table(title=f"Rows of project {scope_key}", box=box.SIMPLE)
    table.add_column("Id", style="cyan", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Parent", justify="right")
    table.add_column("Root", justify="right")
    table.add_column("Depth", justify="right")
    table.add_column("Bounds", style="magenta")

    for root in tree.roots(scope_key):
        for node in tree.full_set(root):
            table.add_row(str(node.id), node.get("name"), str(node.parent_id),
                          str(node.root_id), str(node.depth),
                          f"[{node.left}, {node.right}]")
    return table


def show(tree: TreeIndex, scope_key: int):
    console.print(render_forest(tree, scope_key))
    console.print(bounds_table(tree, scope_key))
    console.print()


def main():
    print_header("Nested Set Forest", "Ordered trees over a flat SQLite table")

    config = TreeConfig(scope="project")
    store = SqliteStore(":memory:", config=config)
    store.create_table({"name": "TEXT"})
    tree = TreeIndex(store, config)

    try:
        print_step(1, "Create a family", "Roots are laid out one after another")
        mother = tree.create_node(scope_key=1, name="Mother")
        daughter = tree.create_node(parent=mother, name="Daughter")
        brother = tree.create_node(parent=mother, name="Brother")
        tree.create_node(parent=daughter, name="Granddaughter")
        uncle = tree.create_node(scope_key=1, name="Uncle")
        show(tree, 1)

        print_step(2, "Query by interval")
        console.print(f"Descendants of Mother: "
                      f"{[n.get('name') for n in tree.descendants(mother)]}")
        console.print(f"Child count of Mother: {tree.child_count(mother)}")
        console.print(f"Brother's position: {tree.index_in_parent(brother)}")
        console.print()

        print_step(3, "Reorder siblings", "Brother moves in front of Daughter")
        tree.move_to_top(brother)
        show(tree, 1)

        print_step(4, "Move a branch", "Daughter and her subtree go to Uncle")
        tree.attach_child(uncle, daughter)
        show(tree, 1)

        print_step(5, "Promote a branch", "Daughter becomes a root, leaving a gap behind")
        tree.promote_to_root(daughter)
        show(tree, 1)

        print_step(6, "Refuse a cycle")
        granddaughter = tree.descendants(daughter)[0]
        try:
            tree.attach_child(granddaughter, daughter)
        except CyclicReparentError as e:
            print_error(f"Rejected: {e}")
        console.print()

        validator = TreeValidator(config)
        if validator.validate_store(store, 1):
            print_success("Forest is consistent")
        else:
            for error in validator.get_validation_errors():
                print_error(error)

        console.print()
        console.print(Rule("[dim]Done[/dim]"))
    finally:
        store.close()


if __name__ == "__main__":
    main()
