"""
Render clauses, expressions and update plans to parameterized SQL.

Every renderer returns ``(sql, params)`` with ``?`` placeholders in the
same order as ``params``. Column names are quoted, never interpolated
raw. SQLite reads a double-quoted name that matches no column as a string
literal, so callers check names with ``clause_columns`` before rendering.
"""
from typing import Any, List, Optional, Set, Tuple

from nestedset.core.types import (
    Clause, Condition, And, Or, Always, Predicate,
    Expression, Assign, Increment, UpdatePlan,
)

Rendered = Tuple[str, List[Any]]


def quote(identifier: str) -> str:
    """Quote an identifier for SQLite."""
    return '"' + identifier.replace('"', '""') + '"'


def clause_columns(clause: Clause) -> Set[str]:
    """Every column name a clause refers to."""
    if isinstance(clause, Condition):
        return {clause.column}
    if isinstance(clause, (And, Or)):
        names: Set[str] = set()
        for sub in clause.clauses:
            names |= clause_columns(sub)
        return names
    return set()


def render_clause(clause: Clause) -> Rendered:
    if isinstance(clause, Always):
        return "(1=1)", []

    if isinstance(clause, Condition):
        column = quote(clause.column)
        if clause.value is None:
            if clause.predicate is Predicate.EQUALS:
                return f"{column} IS NULL", []
            if clause.predicate is Predicate.NOT_EQUALS:
                return f"{column} IS NOT NULL", []
            return "(1=0)", []
        return f"{column} {clause.predicate.value} ?", [clause.value]

    if isinstance(clause, (And, Or)):
        if not clause.clauses:
            return ("(1=1)" if isinstance(clause, And) else "(1=0)"), []
        joiner = " AND " if isinstance(clause, And) else " OR "
        parts, params = [], []
        for sub in clause.clauses:
            sql, sub_params = render_clause(sub)
            parts.append(f"({sql})")
            params.extend(sub_params)
        return joiner.join(parts), params

    raise TypeError(f"Cannot render clause of type {type(clause).__name__}")


def render_expression(expression: Expression, column: str) -> Rendered:
    if isinstance(expression, Assign):
        return "?", [expression.value]
    if isinstance(expression, Increment):
        return f"{quote(column)} + ?", [expression.delta]
    raise TypeError(
        f"Cannot render expression of type {type(expression).__name__}")


def render_select(table: str, clause: Clause, columns: str = "*",
                  order_by: Optional[str] = None, descending: bool = False,
                  limit: Optional[int] = None, id_column: str = "id") -> Rendered:
    where, params = render_clause(clause)
    sql = f"SELECT {columns} FROM {quote(table)} WHERE {where}"
    if order_by is not None:
        direction = "DESC" if descending else "ASC"
        sql += f" ORDER BY {quote(order_by)} {direction}, {quote(id_column)} {direction}"
    else:
        sql += f" ORDER BY {quote(id_column)} ASC"
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)
    return sql, params


def render_update(table: str, plan: UpdatePlan) -> Rendered:
    """
    Render a whole plan as one UPDATE with a CASE per column.

    SQL evaluates every CASE against the row as it was before the
    statement, which is exactly the UpdatePlan contract. Patches are
    emitted last-first so that a later patch wins over an earlier one.

    Example (two patches touching ``lft``):
        UPDATE "nodes" SET "lft" = CASE
            WHEN (<patch 2>) THEN "lft" + ?
            WHEN (<patch 1>) THEN "lft" + ?
            ELSE "lft" END
        WHERE <scope> AND (<patch 1> OR <patch 2>)
    """
    set_parts, params = [], []
    for column in plan.columns():
        whens = []
        for patch in reversed(plan.patches):
            expression = patch.assignments.get(column)
            if expression is None:
                continue
            cond_sql, cond_params = render_clause(patch.clause)
            expr_sql, expr_params = render_expression(expression, column)
            whens.append(f"WHEN ({cond_sql}) THEN ({expr_sql})")
            params.extend(cond_params)
            params.extend(expr_params)
        set_parts.append(
            f"{quote(column)} = CASE {' '.join(whens)} ELSE {quote(column)} END")

    where, where_params = render_clause(plan.target_clause())
    params.extend(where_params)
    sql = f"UPDATE {quote(table)} SET {', '.join(set_parts)} WHERE {where}"
    return sql, params


def render_insert(table: str, row: dict) -> Rendered:
    columns = list(row)
    placeholders = ", ".join("?" for _ in columns)
    names = ", ".join(quote(c) for c in columns)
    return (f"INSERT INTO {quote(table)} ({names}) VALUES ({placeholders})",
            [row[c] for c in columns])
