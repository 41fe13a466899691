from enum import Enum


class Predicate(Enum):
    """Predicate operations for column comparisons."""
    EQUALS = "="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_THAN_OR_EQ = ">="
    LESS_THAN_OR_EQ = "<="

    def apply(self, actual, expected) -> bool:
        """
        Evaluate ``actual <op> expected``.

        ``None`` follows SQL null semantics: EQUALS/NOT_EQUALS against
        ``None`` mean IS NULL / IS NOT NULL, and ordering comparisons
        involving ``None`` are false.
        """
        if self is Predicate.EQUALS:
            return actual is None if expected is None else actual == expected
        if self is Predicate.NOT_EQUALS:
            return actual is not None if expected is None else (
                actual is not None and actual != expected)

        if actual is None or expected is None:
            return False

        comparisons = {
            Predicate.GREATER_THAN: lambda a, b: a > b,
            Predicate.LESS_THAN: lambda a, b: a < b,
            Predicate.GREATER_THAN_OR_EQ: lambda a, b: a >= b,
            Predicate.LESS_THAN_OR_EQ: lambda a, b: a <= b,
        }
        return comparisons[self](actual, expected)
