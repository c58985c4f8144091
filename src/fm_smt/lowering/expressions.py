"""
Expression Encoder
==================

Lowers expression trees to integer or string solver terms.

* A feature reference is the feature's selection as 0/1.
* An attribute reference is the companion integer variable ``<feature>.<attr>``,
  which the structure encoder pins to the declared value or 0 (deactivation).
* sum/avg range over every feature declaring the attribute; deactivated
  features contribute 0.
* Division never divides by zero: ``n / 0`` is 0 (see ``FormulaBackend``).
"""

import logging
from typing import Any, List, Optional

from fm_smt.errors import EncodingError
from fm_smt.lowering.context import ConversionContext
from fm_smt.lowering.dispatch import check_exhaustive
from fm_smt.lowering.naming import (
    attribute_name, avg_divider_name, length_name, string_value_name,
)
from fm_smt.model.expressions import (
    EXPRESSION_TYPES, Add, AvgAggregate, Div, Expression, LengthAggregate, Mul,
    NumberLiteral, StringLiteral, Sub, SumAggregate, VariableLiteral,
)
from fm_smt.model.features import AttributeType, Feature, FeatureType
from fm_smt.solver.backend import FormulaBackend

logger = logging.getLogger(__name__)


class ExpressionEncoder:
    """Expression tree -> solver term. Stateless; per-conversion state lives in the context."""

    _HANDLERS = {
        Add: "_encode_add",
        Sub: "_encode_sub",
        Mul: "_encode_mul",
        Div: "_encode_div",
        NumberLiteral: "_encode_number",
        StringLiteral: "_encode_string_literal",
        VariableLiteral: "_encode_variable",
        SumAggregate: "_encode_sum",
        AvgAggregate: "_encode_avg",
        LengthAggregate: "_encode_length",
    }

    def __init__(self, backend: FormulaBackend):
        self.backend = backend

    # ---------- routing ----------

    def encode(self, expression: Expression, context: ConversionContext):
        """Lower ``expression`` to an integer term."""
        handler = self._HANDLERS.get(type(expression))
        if handler is None:
            raise EncodingError(f"Unsupported expression node: {type(expression).__name__}")
        return getattr(self, handler)(expression, context)

    def encode_string(self, expression: Expression, context: ConversionContext) -> Optional[Any]:
        """
        Lower ``expression`` to a string term if it is string-typed.

        Returns:
            The string term, or None when the expression is not string-typed
        """
        b = self.backend
        if isinstance(expression, StringLiteral):
            return b.string_val(expression.value)
        if isinstance(expression, VariableLiteral):
            feature = self._feature(expression.feature, context)
            if expression.attribute is None:
                if feature.feature_type == FeatureType.STRING:
                    return b.string_var(string_value_name(feature.identifier))
                return None
            attribute = self._attribute(feature, expression.attribute)
            if attribute.attribute_type == AttributeType.STRING:
                return b.string_var(attribute_name(feature.identifier, attribute.name))
        return None

    # ---------- helpers ----------

    @staticmethod
    def _feature(identifier: str, context: ConversionContext) -> Feature:
        feature = context.model.get_feature(identifier)
        if feature is None:
            raise EncodingError(f"Reference to unknown feature '{identifier}'")
        return feature

    @staticmethod
    def _attribute(feature: Feature, name: str):
        attribute = feature.attributes.get(name)
        if attribute is None:
            raise EncodingError(f"Feature '{feature.identifier}' declares no attribute '{name}'")
        return attribute

    def _numeric_declarations(self, attribute: str, context: ConversionContext) -> List[Feature]:
        return [f for f in context.model.declaring_features(attribute)
                if f.attributes[attribute].attribute_type == AttributeType.NUMBER]

    # ---------- arithmetic ----------

    def _encode_add(self, e: Add, context):
        return self.backend.add(self.encode(e.left, context), self.encode(e.right, context))

    def _encode_sub(self, e: Sub, context):
        return self.backend.sub(self.encode(e.left, context), self.encode(e.right, context))

    def _encode_mul(self, e: Mul, context):
        return self.backend.mul(self.encode(e.left, context), self.encode(e.right, context))

    def _encode_div(self, e: Div, context):
        return self.backend.div(self.encode(e.left, context), self.encode(e.right, context))

    def _encode_number(self, e: NumberLiteral, context):
        return self.backend.int_val(e.value)

    def _encode_string_literal(self, e: StringLiteral, context):
        raise EncodingError(f"String literal '{e.value}' used in an arithmetic position")

    def _encode_variable(self, e: VariableLiteral, context):
        b = self.backend
        feature = self._feature(e.feature, context)
        if e.attribute is None:
            return b.bool_to_int(b.bool_var(feature.identifier))
        attribute = self._attribute(feature, e.attribute)
        if attribute.attribute_type != AttributeType.NUMBER:
            # mixed-type comparison: the integer side is left unconstrained
            logger.debug(f"Non-numeric attribute {feature.identifier}.{attribute.name} "
                         f"lowered as integer")
        return b.int_var(attribute_name(feature.identifier, attribute.name))

    # ---------- aggregates ----------

    def _encode_sum(self, e: SumAggregate, context):
        features = self._numeric_declarations(e.attribute, context)
        return self.backend.sum_(
            [self.backend.int_var(attribute_name(f.identifier, e.attribute)) for f in features])

    def _encode_avg(self, e: AvgAggregate, context: ConversionContext):
        b = self.backend
        features = self._numeric_declarations(e.attribute, context)
        if not features:
            return b.int_val(0)
        values = [b.int_var(attribute_name(f.identifier, e.attribute)) for f in features]
        dividers = [b.int_var(avg_divider_name(f.identifier)) for f in features]

        if not context.has_dividers(e.attribute):
            setters = []
            for feature, divider in zip(features, dividers):
                selected = b.bool_var(feature.identifier)
                setters.append(b.implies(selected, b.int_equal(divider, b.int_val(1))))
                setters.append(b.implies(b.not_(selected), b.int_equal(divider, b.int_val(0))))
            context.record_dividers(e.attribute, setters)
            logger.debug(f"avg({e.attribute}): {len(setters)} divider constraints")

        return b.div(b.sum_(values), b.sum_(dividers))

    def _encode_length(self, e: LengthAggregate, context):
        return self.backend.int_var(length_name(e.reference))


check_exhaustive(ExpressionEncoder._HANDLERS, EXPRESSION_TYPES, "Expression")
