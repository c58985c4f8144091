"""
Feature Model Types
===================

Features, groups and attributes plus the constraint and expression ASTs.
"""

from .constraints import (
    CONSTRAINT_TYPES,
    And,
    Comparison,
    ComparisonOperator,
    Constraint,
    Equivalence,
    Implies,
    Literal,
    Not,
    Or,
    Parenthesis,
)
from .expressions import (
    EXPRESSION_TYPES,
    Add,
    AvgAggregate,
    Div,
    Expression,
    LengthAggregate,
    Mul,
    NumberLiteral,
    StringLiteral,
    Sub,
    SumAggregate,
    VariableLiteral,
)
from .features import (
    Attribute,
    AttributeType,
    Feature,
    FeatureModel,
    FeatureType,
    Group,
    GroupType,
)

__all__ = [
    'Add', 'And', 'Attribute', 'AttributeType', 'AvgAggregate', 'Comparison',
    'ComparisonOperator', 'CONSTRAINT_TYPES', 'Constraint', 'Div', 'Equivalence',
    'EXPRESSION_TYPES', 'Expression', 'Feature', 'FeatureModel', 'FeatureType',
    'Group', 'GroupType', 'Implies', 'LengthAggregate', 'Literal', 'Mul', 'Not',
    'NumberLiteral', 'Or', 'Parenthesis', 'StringLiteral', 'Sub', 'SumAggregate',
    'VariableLiteral',
]
