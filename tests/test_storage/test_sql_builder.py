"""
Tests for SQL rendering of clauses and update plans.
"""

import pytest

from nestedset.core.types import (
    ALWAYS, And, Or, Assign, Increment, Patch, UpdatePlan, eq, ne, gt, between,
)
from nestedset.storage.sqlite.sql_builder import (
    quote, render_clause, render_expression, render_select, render_update,
    render_insert,
)


class TestRenderClause:
    """Test cases for render_clause."""

    def test_quote_escapes_quotes(self):
        assert quote("lft") == '"lft"'
        assert quote('we"ird') == '"we""ird"'

    def test_always(self):
        assert render_clause(ALWAYS) == ("(1=1)", [])

    def test_condition_uses_placeholder(self):
        assert render_clause(gt("lft", 3)) == ('"lft" > ?', [3])

    def test_null_conditions(self):
        assert render_clause(eq("project_id", None)) == ('"project_id" IS NULL', [])
        assert render_clause(ne("project_id", None)) == ('"project_id" IS NOT NULL', [])

    def test_and_keeps_parameter_order(self):
        sql, params = render_clause(And.of(eq("root_id", 1), between("lft", 2, 9)))

        assert sql == '("root_id" = ?) AND ("lft" >= ?) AND ("lft" <= ?)'
        assert params == [1, 2, 9]

    def test_or(self):
        sql, params = render_clause(Or.of(eq("id", 1), eq("id", 2)))
        assert sql == '("id" = ?) OR ("id" = ?)'
        assert params == [1, 2]

    def test_empty_or_matches_nothing(self):
        assert render_clause(Or.any([])) == ("(1=0)", [])

    def test_unknown_clause_type(self):
        with pytest.raises(TypeError):
            render_clause("lft = 1")


class TestRenderStatements:
    """Test cases for SELECT, UPDATE and INSERT rendering."""

    def test_render_expression(self):
        assert render_expression(Assign(4), "lft") == ("?", [4])
        assert render_expression(Increment(-2), "lft") == ('"lft" + ?', [-2])

    def test_select_orders_by_column_then_id(self):
        sql, params = render_select("nodes", eq("parent_id", 0),
                                    order_by="rgt", descending=True, limit=1)

        assert sql == ('SELECT * FROM "nodes" WHERE "parent_id" = ? '
                       'ORDER BY "rgt" DESC, "id" DESC LIMIT ?')
        assert params == [0, 1]

    def test_select_defaults_to_id_order(self):
        sql, _ = render_select("nodes", ALWAYS)
        assert sql.endswith('ORDER BY "id" ASC')

    def test_update_renders_case_per_column(self):
        plan = UpdatePlan(scope=eq("project_id", 1))
        plan.add(Patch(gt("lft", 4), {"lft": Increment(2), "rgt": Increment(2)}))
        plan.add(Patch(eq("id", 7), {"lft": Assign(1)}))

        sql, params = render_update("nodes", plan)

        assert sql == (
            'UPDATE "nodes" SET '
            '"lft" = CASE WHEN ("id" = ?) THEN (?) '
            'WHEN ("lft" > ?) THEN ("lft" + ?) ELSE "lft" END, '
            '"rgt" = CASE WHEN ("lft" > ?) THEN ("rgt" + ?) ELSE "rgt" END '
            'WHERE ("project_id" = ?) AND (("lft" > ?) OR ("id" = ?))'
        )
        assert params == [7, 1, 4, 2, 4, 2, 1, 4, 7]

    def test_insert(self):
        sql, params = render_insert("nodes", {"name": "a", "lft": 1})
        assert sql == 'INSERT INTO "nodes" ("name", "lft") VALUES (?, ?)'
        assert params == ["a", 1]
