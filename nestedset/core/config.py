"""
Tree configuration: which columns carry the nested-set bookkeeping.
"""
import json
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Optional, Union

from .exceptions import DbException
from .types import Clause, ALWAYS, eq


@dataclass(frozen=True)
class TreeConfig:
    """
    Column names used by a tree definition.

    Resolved once when the tree is defined and threaded through every
    predicate and patch builder. Names are opaque to the tree code; they
    are never parsed, only quoted by stores that render SQL.
    """

    """🌳 Column holding the id of the node's root"""
    root_column: str = "root_id"

    """👆 Column holding the parent id (0 for roots)"""
    parent_column: str = "parent_id"

    """⬅️ Column holding the left bound"""
    left_column: str = "lft"

    """➡️ Column holding the right bound"""
    right_column: str = "rgt"

    """📏 Column holding the number of strict ancestors"""
    depth_column: str = "depth"

    """🏷️ Column partitioning the rows into independent forests"""
    scope: Optional[str] = None

    def __post_init__(self):
        """
        🎬 Normalize the scope column: ``project`` becomes ``project_id``.
        """
        if self.scope and not self.scope.endswith("_id"):
            object.__setattr__(self, "scope", f"{self.scope}_id")

    @property
    def columns(self) -> tuple:
        """Bookkeeping columns in a stable order."""
        return (self.root_column, self.parent_column, self.left_column,
                self.right_column, self.depth_column)

    def scope_condition(self, scope_key: Any) -> Clause:
        """
        Clause restricting rows to one forest.

        Without a scope column every row belongs to the same forest. A
        ``None`` key selects rows whose scope column IS NULL.
        """
        if self.scope is None:
            return ALWAYS
        return eq(self.scope, scope_key)

    def to_dict(self) -> dict:
        """
        📦 Convert the config to a dictionary for serialization.
        """
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'TreeConfig':
        """
        📥 Create a config from a dictionary, ignoring unknown keys.
        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'TreeConfig':
        """Load a config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise DbException(f"Tree config not found: {path}")

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise DbException(f"Failed to load tree config {path}: {e}")

        return cls.from_dict(data.get("tree", data))

    def save(self, path: Union[str, Path]) -> None:
        """Write the config to a JSON file (temp file, then rename)."""
        path = Path(path)
        temp_file = path.with_suffix('.tmp')
        try:
            with open(temp_file, 'w') as f:
                json.dump({"version": "1.0", "tree": self.to_dict()}, f, indent=2)
            temp_file.replace(path)
        except OSError as e:
            raise DbException(f"Failed to save tree config {path}: {e}")
