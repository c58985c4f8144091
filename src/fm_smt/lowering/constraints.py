"""
Constraint Encoder
==================

Lowers boolean constraint trees to solver formulas, delegating comparison
leaves to the ``ExpressionEncoder``.
"""

from fm_smt.errors import EncodingError
from fm_smt.lowering.context import ConversionContext
from fm_smt.lowering.dispatch import check_exhaustive
from fm_smt.lowering.expressions import ExpressionEncoder
from fm_smt.model.constraints import (
    CONSTRAINT_TYPES, And, Comparison, ComparisonOperator, Constraint, Equivalence,
    Implies, Literal, Not, Or, Parenthesis,
)
from fm_smt.solver.backend import FormulaBackend


class ConstraintEncoder:
    """Constraint tree -> solver boolean formula."""

    _HANDLERS = {
        And: "_encode_and",
        Or: "_encode_or",
        Not: "_encode_not",
        Implies: "_encode_implies",
        Equivalence: "_encode_equivalence",
        Parenthesis: "_encode_parenthesis",
        Comparison: "_encode_comparison",
        Literal: "_encode_literal",
    }

    def __init__(self, backend: FormulaBackend, expressions: ExpressionEncoder = None):
        self.backend = backend
        self.expressions = expressions or ExpressionEncoder(backend)

        b = backend
        self._integer_comparisons = {
            ComparisonOperator.EQUAL: b.int_equal,
            ComparisonOperator.LESS: b.less,
            ComparisonOperator.LESS_EQUAL: b.less_equal,
            ComparisonOperator.GREATER: b.greater,
            ComparisonOperator.GREATER_EQUAL: b.greater_equal,
        }

    def encode(self, constraint: Constraint, context: ConversionContext):
        handler = self._HANDLERS.get(type(constraint))
        if handler is None:
            raise EncodingError(f"Unsupported constraint node: {type(constraint).__name__}")
        return getattr(self, handler)(constraint, context)

    def _encode_and(self, c: And, context):
        return self.backend.and_([self.encode(c.left, context), self.encode(c.right, context)])

    def _encode_or(self, c: Or, context):
        return self.backend.or_([self.encode(c.left, context), self.encode(c.right, context)])

    def _encode_not(self, c: Not, context):
        return self.backend.not_(self.encode(c.content, context))

    def _encode_implies(self, c: Implies, context):
        return self.backend.implies(self.encode(c.left, context), self.encode(c.right, context))

    def _encode_equivalence(self, c: Equivalence, context):
        return self.backend.equivalence(self.encode(c.left, context), self.encode(c.right, context))

    def _encode_parenthesis(self, c: Parenthesis, context):
        return self.encode(c.content, context)

    def _encode_literal(self, c: Literal, context: ConversionContext):
        if context.model.get_feature(c.feature) is None:
            raise EncodingError(f"Reference to unknown feature '{c.feature}'")
        return self.backend.bool_var(c.feature)

    def _encode_comparison(self, c: Comparison, context):
        if c.operator in (ComparisonOperator.EQUAL, ComparisonOperator.NOT_EQUAL):
            equal = self._encode_equal(c, context)
            if c.operator == ComparisonOperator.NOT_EQUAL:
                return self.backend.not_(equal)
            return equal
        compare = self._integer_comparisons.get(c.operator)
        if compare is None:
            raise EncodingError(f"Unsupported comparison operator: {c.operator}")
        return compare(self.expressions.encode(c.left, context),
                       self.expressions.encode(c.right, context))

    def _encode_equal(self, c: Comparison, context):
        # string equality only when both sides are string-typed
        left = self.expressions.encode_string(c.left, context)
        right = self.expressions.encode_string(c.right, context)
        if left is not None and right is not None:
            return self.backend.string_equal(left, right)
        return self.backend.int_equal(self.expressions.encode(c.left, context),
                                      self.expressions.encode(c.right, context))


check_exhaustive(ConstraintEncoder._HANDLERS, CONSTRAINT_TYPES, "Constraint")
