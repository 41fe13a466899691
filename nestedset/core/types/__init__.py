from .predicate import Predicate
from .condition import (
    Clause,
    Condition,
    And,
    Or,
    Always,
    ALWAYS,
    eq,
    ne,
    gt,
    lt,
    ge,
    le,
    between,
)
from .expression import Expression, Assign, Increment
from .patch import Patch, UpdatePlan

__all__ = [
    'Predicate',
    'Clause',
    'Condition',
    'And',
    'Or',
    'Always',
    'ALWAYS',
    'eq',
    'ne',
    'gt',
    'lt',
    'ge',
    'le',
    'between',
    'Expression',
    'Assign',
    'Increment',
    'Patch',
    'UpdatePlan',
]
