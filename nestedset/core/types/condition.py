from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .predicate import Predicate


class Clause(ABC):
    """
    A boolean filter over store rows.

    Clauses are plain data: stores either evaluate them directly with
    ``matches`` (in-memory) or render them to their own query language
    (SQL). Column names are opaque strings taken from the tree config.
    """

    @abstractmethod
    def matches(self, row: Mapping[str, Any]) -> bool:
        """Return True if the row satisfies this clause."""
        pass

    def __and__(self, other: 'Clause') -> 'Clause':
        return And.of(self, other)

    def __or__(self, other: 'Clause') -> 'Clause':
        return Or.of(self, other)


@dataclass(frozen=True)
class Condition(Clause):
    """A single ``column <predicate> value`` comparison."""
    column: str
    predicate: Predicate
    value: Any

    def matches(self, row: Mapping[str, Any]) -> bool:
        return self.predicate.apply(row.get(self.column), self.value)

    def __str__(self) -> str:
        if self.value is None:
            op = "IS NULL" if self.predicate is Predicate.EQUALS else "IS NOT NULL"
            return f"{self.column} {op}"
        return f"{self.column} {self.predicate.value} {self.value!r}"


@dataclass(frozen=True)
class And(Clause):
    """Conjunction. An empty conjunction matches every row."""
    clauses: tuple

    @classmethod
    def of(cls, *clauses: Clause) -> 'Clause':
        flat = []
        for clause in clauses:
            if isinstance(clause, Always):
                continue
            if isinstance(clause, And):
                flat.extend(clause.clauses)
            else:
                flat.append(clause)
        if not flat:
            return ALWAYS
        if len(flat) == 1:
            return flat[0]
        return cls(tuple(flat))

    def matches(self, row: Mapping[str, Any]) -> bool:
        return all(clause.matches(row) for clause in self.clauses)

    def __str__(self) -> str:
        return " AND ".join(f"({clause})" for clause in self.clauses)


@dataclass(frozen=True)
class Or(Clause):
    """Disjunction. An empty disjunction matches no row."""
    clauses: tuple

    @classmethod
    def of(cls, *clauses: Clause) -> 'Or':
        return cls(tuple(clauses))

    @classmethod
    def any(cls, clauses: Iterable[Clause]) -> 'Or':
        return cls(tuple(clauses))

    def matches(self, row: Mapping[str, Any]) -> bool:
        return any(clause.matches(row) for clause in self.clauses)

    def __str__(self) -> str:
        if not self.clauses:
            return "(1=0)"
        return " OR ".join(f"({clause})" for clause in self.clauses)


class Always(Clause):
    """Matches every row."""

    def matches(self, row: Mapping[str, Any]) -> bool:
        return True

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Always)

    def __hash__(self) -> int:
        return hash("ALWAYS")

    def __str__(self) -> str:
        return "(1=1)"

    def __repr__(self) -> str:
        return "ALWAYS"


ALWAYS = Always()


def eq(column: str, value: Any) -> Condition:
    return Condition(column, Predicate.EQUALS, value)


def ne(column: str, value: Any) -> Condition:
    return Condition(column, Predicate.NOT_EQUALS, value)


def gt(column: str, value: Any) -> Condition:
    return Condition(column, Predicate.GREATER_THAN, value)


def lt(column: str, value: Any) -> Condition:
    return Condition(column, Predicate.LESS_THAN, value)


def ge(column: str, value: Any) -> Condition:
    return Condition(column, Predicate.GREATER_THAN_OR_EQ, value)


def le(column: str, value: Any) -> Condition:
    return Condition(column, Predicate.LESS_THAN_OR_EQ, value)


def between(column: str, low: Any, high: Any) -> Clause:
    """Inclusive range ``low <= column <= high``."""
    return And.of(ge(column, low), le(column, high))
