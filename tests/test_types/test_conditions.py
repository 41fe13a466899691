"""
Tests for predicates and clauses.
"""

import pytest

from nestedset.core.types import (
    Predicate, Condition, And, Or, Always, ALWAYS,
    eq, ne, gt, lt, ge, le, between,
)


class TestPredicate:
    """Test cases for Predicate.apply."""

    def test_ordering_predicates(self):
        assert Predicate.GREATER_THAN.apply(5, 3)
        assert not Predicate.GREATER_THAN.apply(3, 3)
        assert Predicate.GREATER_THAN_OR_EQ.apply(3, 3)
        assert Predicate.LESS_THAN.apply(2, 3)
        assert not Predicate.LESS_THAN.apply(3, 3)
        assert Predicate.LESS_THAN_OR_EQ.apply(3, 3)

    def test_equality_predicates(self):
        assert Predicate.EQUALS.apply(1, 1)
        assert not Predicate.EQUALS.apply(1, 2)
        assert Predicate.NOT_EQUALS.apply(1, 2)
        assert not Predicate.NOT_EQUALS.apply(2, 2)

    def test_none_follows_null_semantics(self):
        """Comparing with None means IS NULL / IS NOT NULL."""
        assert Predicate.EQUALS.apply(None, None)
        assert not Predicate.EQUALS.apply(1, None)
        assert Predicate.NOT_EQUALS.apply(1, None)
        assert not Predicate.NOT_EQUALS.apply(None, None)
        assert not Predicate.NOT_EQUALS.apply(None, 1)
        assert not Predicate.EQUALS.apply(None, 1)

    def test_ordering_with_none_is_false(self):
        assert not Predicate.GREATER_THAN.apply(None, 1)
        assert not Predicate.LESS_THAN_OR_EQ.apply(1, None)


class TestClauses:
    """Test cases for Condition, And, Or and Always."""

    def setup_method(self):
        """Set up test fixtures."""
        self.row = {"id": 4, "lft": 6, "rgt": 11, "project_id": None}

    def test_helpers_build_conditions(self):
        assert eq("lft", 1) == Condition("lft", Predicate.EQUALS, 1)
        assert ne("lft", 1).predicate is Predicate.NOT_EQUALS
        assert gt("lft", 1).predicate is Predicate.GREATER_THAN
        assert lt("lft", 1).predicate is Predicate.LESS_THAN
        assert ge("lft", 1).predicate is Predicate.GREATER_THAN_OR_EQ
        assert le("lft", 1).predicate is Predicate.LESS_THAN_OR_EQ

    def test_condition_matches_row(self):
        assert eq("id", 4).matches(self.row)
        assert gt("rgt", 10).matches(self.row)
        assert not lt("lft", 6).matches(self.row)

    def test_missing_column_reads_as_null(self):
        assert eq("name", None).matches(self.row)
        assert eq("project_id", None).matches(self.row)

    def test_between_is_inclusive(self):
        assert between("lft", 6, 6).matches(self.row)
        assert between("rgt", 5, 11).matches(self.row)
        assert not between("lft", 7, 9).matches(self.row)

    def test_and_flattens_and_drops_always(self):
        clause = And.of(ALWAYS, eq("id", 4), And.of(gt("lft", 1), lt("rgt", 20)))

        assert isinstance(clause, And)
        assert len(clause.clauses) == 3
        assert clause.matches(self.row)

    def test_and_of_single_clause_returns_it(self):
        single = eq("id", 4)
        assert And.of(ALWAYS, single) is single

    def test_empty_and_is_always(self):
        assert And.of() is ALWAYS
        assert And.of(ALWAYS, ALWAYS) is ALWAYS

    def test_or_matches_any(self):
        clause = Or.of(eq("id", 1), eq("id", 4))
        assert clause.matches(self.row)
        assert not Or.of(eq("id", 1), eq("id", 2)).matches(self.row)

    def test_empty_or_matches_nothing(self):
        empty = Or.any([])
        assert not empty.matches(self.row)
        assert str(empty) == "(1=0)"

    def test_operators_combine_clauses(self):
        both = eq("id", 4) & gt("lft", 100)
        either = eq("id", 4) | gt("lft", 100)

        assert not both.matches(self.row)
        assert either.matches(self.row)

    def test_always(self):
        assert Always().matches({})
        assert Always() == ALWAYS
        assert str(ALWAYS) == "(1=1)"

    def test_condition_str(self):
        assert str(eq("project_id", 1)) == "project_id = 1"
        assert str(eq("project_id", None)) == "project_id IS NULL"
        assert str(ne("project_id", None)) == "project_id IS NOT NULL"

    def test_conditions_are_immutable(self):
        condition = eq("id", 1)
        with pytest.raises(Exception):
            condition.value = 2
