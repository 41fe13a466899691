"""
Tests for expressions, patches and update plans.
"""

from nestedset.core.types import (
    Assign, Increment, Patch, UpdatePlan, ALWAYS, And, Or, eq, ge,
)


class TestExpressions:
    """Test cases for Assign and Increment."""

    def test_assign_ignores_current_value(self):
        assert Assign(7).evaluate({"lft": 3}, "lft") == 7

    def test_increment_adds_delta(self):
        assert Increment(2).evaluate({"lft": 3}, "lft") == 5
        assert Increment(-2).evaluate({"lft": 3}, "lft") == 1

    def test_increment_noop(self):
        assert Increment(0).is_noop()
        assert not Increment(1).is_noop()

    def test_str(self):
        assert str(Assign(1)) == ":= 1"
        assert str(Increment(3)) == "+= 3"
        assert str(Increment(-3)) == "-= 3"


class TestUpdatePlan:
    """Test cases for UpdatePlan evaluation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.plan = UpdatePlan()
        self.plan.add(Patch(ge("lft", 5), {"lft": Increment(10), "rgt": Increment(10)},
                            label="shift"))
        self.plan.add(Patch(eq("id", 2), {"lft": Assign(1)}, label="pin"))

    def test_empty_plan(self):
        plan = UpdatePlan()
        assert plan.is_empty()
        assert len(plan) == 0
        assert plan.evaluate({"id": 1, "lft": 1}) == {}

    def test_add_is_chainable(self):
        plan = UpdatePlan()
        assert plan.add(Patch(ALWAYS, {"lft": Assign(0)})) is plan
        assert len(plan) == 1

    def test_columns_in_first_seen_order(self):
        assert self.plan.columns() == ["lft", "rgt"]

    def test_unmatched_row_is_unchanged(self):
        assert self.plan.evaluate({"id": 1, "lft": 1, "rgt": 2}) == {}

    def test_single_patch_match(self):
        changes = self.plan.evaluate({"id": 3, "lft": 5, "rgt": 6})
        assert changes == {"lft": 15, "rgt": 16}

    def test_later_patch_wins(self):
        changes = self.plan.evaluate({"id": 2, "lft": 5, "rgt": 6})
        assert changes == {"lft": 1, "rgt": 16}

    def test_predicates_see_pre_update_row(self):
        """A row shifted by one patch is not re-matched by another."""
        plan = UpdatePlan()
        plan.add(Patch(eq("lft", 1), {"lft": Assign(5)}))
        plan.add(Patch(eq("lft", 5), {"rgt": Assign(99)}))

        assert plan.evaluate({"id": 1, "lft": 1, "rgt": 2}) == {"lft": 5}

    def test_expressions_see_pre_update_row(self):
        plan = UpdatePlan()
        plan.add(Patch(ALWAYS, {"lft": Increment(1)}))
        plan.add(Patch(ALWAYS, {"lft": Increment(2)}))

        assert plan.evaluate({"id": 1, "lft": 10}) == {"lft": 12}

    def test_target_clause_combines_scope_and_patches(self):
        plan = UpdatePlan(scope=eq("project_id", 1))
        plan.add(Patch(eq("id", 1), {"lft": Assign(1)}))
        plan.add(Patch(eq("id", 2), {"lft": Assign(2)}))

        target = plan.target_clause()
        assert isinstance(target, And)
        assert isinstance(target.clauses[1], Or)
        assert target.matches({"id": 2, "project_id": 1})
        assert not target.matches({"id": 2, "project_id": 2})
        assert not target.matches({"id": 3, "project_id": 1})

    def test_str_lists_patches(self):
        text = str(self.plan)
        assert "shift" in text
        assert "pin" in text
