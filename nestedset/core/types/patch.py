from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from .condition import Clause, And, Or, ALWAYS
from .expression import Expression


@dataclass(frozen=True)
class Patch:
    """
    One rule of a batched update: rows matching ``clause`` get each
    column in ``assignments`` recomputed by its expression.
    """
    clause: Clause
    assignments: Dict[str, Expression]
    label: str = ""

    def matches(self, row: Mapping[str, Any]) -> bool:
        return self.clause.matches(row)

    def __str__(self) -> str:
        sets = ", ".join(f"{col} {expr}" for col, expr in self.assignments.items())
        prefix = f"{self.label}: " if self.label else ""
        return f"{prefix}WHERE {self.clause} SET {sets}"


@dataclass
class UpdatePlan:
    """
    An ordered list of patches applied as one multi-row statement.

    Semantics (shared by every store):
    - only rows matching ``scope`` and at least one patch are touched
    - every predicate and expression sees the pre-update row
    - when several patches assign the same column of the same row, the
      later patch wins
    - rows matching no patch are left unchanged
    """
    patches: List[Patch] = field(default_factory=list)
    scope: Clause = ALWAYS

    def add(self, patch: Patch) -> 'UpdatePlan':
        self.patches.append(patch)
        return self

    def is_empty(self) -> bool:
        return not self.patches

    def columns(self) -> List[str]:
        """Columns assigned by any patch, in first-seen order."""
        seen: List[str] = []
        for patch in self.patches:
            for column in patch.assignments:
                if column not in seen:
                    seen.append(column)
        return seen

    def target_clause(self) -> Clause:
        """Clause selecting every row this plan may touch."""
        return And.of(self.scope, Or.any(p.clause for p in self.patches))

    def evaluate(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Compute the new column values for one pre-update row.

        Returns an empty dict when no patch matches.
        """
        changes: Dict[str, Any] = {}
        for patch in self.patches:
            if not patch.matches(row):
                continue
            for column, expression in patch.assignments.items():
                changes[column] = expression.evaluate(row, column)
        return changes

    def __len__(self) -> int:
        return len(self.patches)

    def __str__(self) -> str:
        lines = [f"UpdatePlan(scope={self.scope})"]
        lines.extend(f"  {patch}" for patch in self.patches)
        return "\n".join(lines)
