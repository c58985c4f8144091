"""
Expression AST
==============

Arithmetic and string expressions appearing on either side of a comparison
constraint. The set of node types is closed: every encoder dispatches over
``EXPRESSION_TYPES`` and is checked for exhaustiveness at import time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class Expression:
    """Base class for all expression nodes. Structure only."""


@dataclass(frozen=True)
class Add(Expression):
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Sub(Expression):
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Mul(Expression):
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Div(Expression):
    """Integer division. A zero divisor evaluates to 0."""
    left: Expression
    right: Expression


@dataclass(frozen=True)
class NumberLiteral(Expression):
    value: int


@dataclass(frozen=True)
class StringLiteral(Expression):
    value: str


@dataclass(frozen=True)
class VariableLiteral(Expression):
    """
    Reference to a feature or to one of its attributes.

    Examples:
        VariableLiteral("Cache")            -> selection of Cache as 0/1
        VariableLiteral("Cache", "Price")   -> Cache.Price
    """
    feature: str
    attribute: Optional[str] = None


@dataclass(frozen=True)
class SumAggregate(Expression):
    """sum(attribute) over every feature declaring it."""
    attribute: str


@dataclass(frozen=True)
class AvgAggregate(Expression):
    """avg(attribute) over the selected features declaring it."""
    attribute: str


@dataclass(frozen=True)
class LengthAggregate(Expression):
    """len(reference); the value is tracked outside the encoder."""
    reference: str


EXPRESSION_TYPES = (
    Add, Sub, Mul, Div,
    NumberLiteral, StringLiteral, VariableLiteral,
    SumAggregate, AvgAggregate, LengthAggregate,
)
