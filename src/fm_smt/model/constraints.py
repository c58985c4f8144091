"""
Constraint AST
==============

Boolean cross-tree constraints of a feature model. Comparison leaves hold
``Expression`` trees on both sides.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fm_smt.model.expressions import Expression


class Constraint:
    """Base class for all constraint nodes. Structure only."""


class ComparisonOperator(Enum):
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESS = "<"
    LESS_EQUAL = "<="
    GREATER = ">"
    GREATER_EQUAL = ">="


@dataclass(frozen=True)
class And(Constraint):
    left: Constraint
    right: Constraint


@dataclass(frozen=True)
class Or(Constraint):
    left: Constraint
    right: Constraint


@dataclass(frozen=True)
class Not(Constraint):
    content: Constraint


@dataclass(frozen=True)
class Implies(Constraint):
    left: Constraint
    right: Constraint


@dataclass(frozen=True)
class Equivalence(Constraint):
    left: Constraint
    right: Constraint


@dataclass(frozen=True)
class Parenthesis(Constraint):
    content: Constraint


@dataclass(frozen=True)
class Comparison(Constraint):
    """
    Arithmetic or string comparison.

    Example:
        A.Price + B.Price == 30

    Becomes:
        Comparison(
            operator=ComparisonOperator.EQUAL,
            left=Add(VariableLiteral("A", "Price"), VariableLiteral("B", "Price")),
            right=NumberLiteral(30),
        )
    """
    operator: ComparisonOperator
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Literal(Constraint):
    """Selection of the referenced feature."""
    feature: str


CONSTRAINT_TYPES = (And, Or, Not, Implies, Equivalence, Parenthesis, Comparison, Literal)
