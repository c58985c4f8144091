"""
Tests for the Expression Encoder.

Arithmetic over attribute companions, guarded division, feature literals as
0/1, aggregates and string comparisons, checked against a SatChecker loaded
with the converted model.
"""

import pytest

from fm_smt.errors import EncodingError
from fm_smt.lowering.context import ConversionContext
from fm_smt.lowering.converter import FeatureModelConverter
from fm_smt.lowering.dispatch import check_exhaustive
from fm_smt.lowering.expressions import ExpressionEncoder
from fm_smt.model import (
    EXPRESSION_TYPES, Add, AvgAggregate, Comparison, ComparisonOperator, Div, Expression,
    Feature, FeatureModel, FeatureType, GroupType, LengthAggregate, Literal, Mul, Not,
    NumberLiteral, StringLiteral, Sub, SumAggregate, VariableLiteral,
)
from fm_smt.solver.sat_checker import SatChecker

EQ = ComparisonOperator.EQUAL


def price(feature):
    return VariableLiteral(feature, "Price")


def equals(left, value):
    return Comparison(EQ, left, NumberLiteral(value))


@pytest.fixture
def priced(backend, priced_model):
    converter = FeatureModelConverter(priced_model, backend)
    result = converter.convert()
    with SatChecker(result.formula, backend) as checker:
        yield converter, result, checker


class TestArithmetic:

    def test_add_over_alternative(self, priced):
        converter, result, checker = priced
        probe = lambda c: converter.convert_constraint(c, result)

        assert not checker.is_sat_with(probe(equals(Add(price("A1"), price("A2")), 30)))
        assert checker.is_sat_with(probe(equals(Add(price("A1"), price("A2")), 20)))
        assert checker.is_sat_with(probe(equals(Add(price("A1"), price("A2")), 10)))

    def test_mul_over_or(self, priced):
        converter, result, checker = priced
        probe = lambda c: converter.convert_constraint(c, result)

        assert checker.is_sat_with(probe(equals(Mul(price("O1"), price("O2")), 0)))
        assert checker.is_sat_with(probe(equals(Mul(price("O1"), price("O2")), 6)))
        assert not checker.is_sat_with(probe(equals(Mul(price("O1"), price("O2")), 3)))

    def test_sub_over_optional(self, priced):
        converter, result, checker = priced
        probe = lambda c: converter.convert_constraint(c, result)

        assert checker.is_sat_with(probe(equals(Sub(price("P1"), price("P2")), 6)))
        assert checker.is_sat_with(probe(equals(Sub(price("P2"), price("P1")), 1)))
        assert not checker.is_sat_with(probe(equals(Sub(price("P1"), price("P2")), 3)))

    def test_div_floors(self, priced):
        converter, result, checker = priced
        probe = lambda c: converter.convert_constraint(c, result)

        # M1 = 5, M2 = 10 are always selected
        assert not checker.is_sat_with(probe(Not(equals(Div(price("M1"), price("M2")), 0))))
        assert not checker.is_sat_with(probe(Not(equals(Div(price("M2"), price("M1")), 2))))

    def test_div_by_deselected_feature_is_zero(self, priced):
        """P1 / P2 is 7 (both), 0 (P2 deselected, divisor 0) or 0 (P1 deselected)"""
        converter, result, checker = priced
        probe = lambda c: converter.convert_constraint(c, result)

        assert checker.is_sat_with(probe(equals(Div(price("P1"), price("P2")), 7)))
        assert checker.is_sat_with(probe(equals(Div(price("P1"), price("P2")), 0)))
        assert not checker.is_sat_with(probe(equals(Div(price("P1"), price("P2")), 5)))

    def test_div_by_literal_zero(self, priced):
        converter, result, checker = priced
        probe = converter.convert_constraint(
            Not(equals(Div(NumberLiteral(7), NumberLiteral(0)), 0)), result)
        assert not checker.is_sat_with(probe)

    def test_feature_literal_counts_as_zero_or_one(self, priced):
        converter, result, checker = priced
        both = Add(VariableLiteral("A1"), VariableLiteral("A2"))

        assert not checker.is_sat_with(converter.convert_constraint(Not(equals(both, 1)), result))
        assert not checker.is_sat_with(converter.convert_constraint(equals(both, 2), result))


@pytest.fixture
def aggregate_model():
    """X (Price 4) mandatory, Y (Price 6, Lang "en") optional, Name a string feature"""
    root = Feature("Root")
    x, y = Feature("X"), Feature("Y")
    x.add_attribute("Price", 4)
    y.add_attribute("Price", 6)
    y.add_attribute("Lang", "en")
    name = Feature("Name", FeatureType.STRING)
    root.add_group(GroupType.MANDATORY, [x])
    root.add_group(GroupType.OPTIONAL, [y, name])
    return FeatureModel.from_root(root)


@pytest.fixture
def aggregates(backend, aggregate_model):
    converter = FeatureModelConverter(aggregate_model, backend)
    result = converter.convert()
    with SatChecker(result.formula, backend) as checker:
        yield converter, result, checker


class TestAggregates:

    def test_sum(self, aggregates):
        converter, result, checker = aggregates
        probe = lambda c: converter.convert_constraint(c, result)

        assert checker.is_sat_with(probe(equals(SumAggregate("Price"), 4)))
        assert checker.is_sat_with(probe(equals(SumAggregate("Price"), 10)))
        assert not checker.is_sat_with(probe(equals(SumAggregate("Price"), 6)))

    def test_sum_of_unknown_attribute_is_zero(self, aggregates):
        converter, result, checker = aggregates
        probe = converter.convert_constraint(Not(equals(SumAggregate("Weight"), 0)), result)
        assert not checker.is_sat_with(probe)

    def test_avg_counts_only_selected(self, aggregates):
        converter, result, checker = aggregates
        probe = lambda c: converter.convert_constraint(c)

        assert checker.is_sat_with(probe(equals(AvgAggregate("Price"), 4)))
        assert checker.is_sat_with(probe(equals(AvgAggregate("Price"), 5)))
        assert not checker.is_sat_with(probe(equals(AvgAggregate("Price"), 2)))

    def test_avg_without_declarations_is_zero(self, aggregates):
        converter, result, checker = aggregates
        probe = converter.convert_constraint(Not(equals(AvgAggregate("Weight"), 0)))
        assert not checker.is_sat_with(probe)

    def test_length_is_opaque_variable(self, backend, aggregates):
        converter, result, checker = aggregates
        probe = converter.convert_constraint(equals(LengthAggregate("Name"), 3), result)

        assert "Name-len" in backend.variable_names(probe)
        assert checker.is_sat_with(probe)


class TestStrings:

    def test_string_attribute_equality(self, aggregates):
        converter, result, checker = aggregates
        lang = VariableLiteral("Y", "Lang")
        en = Comparison(EQ, lang, StringLiteral("en"))
        de = Comparison(EQ, lang, StringLiteral("de"))

        assert checker.is_sat_with(converter.convert_constraint(en, result))
        assert not checker.is_sat_with(converter.convert_constraint(de, result))

    def test_string_inequality(self, aggregates):
        converter, result, checker = aggregates
        lang = VariableLiteral("Y", "Lang")
        not_en = Comparison(ComparisonOperator.NOT_EQUAL, lang, StringLiteral("en"))
        probe = converter.convert_constraint(not_en, result)

        assert checker.is_sat_with(probe)
        assert not checker.is_sat_with(
            converter.backend.and_([probe, converter.backend.bool_var("Y")]))

    def test_string_feature_uses_value_variable(self, backend, aggregates):
        converter, result, checker = aggregates
        named = Comparison(EQ, VariableLiteral("Name"), StringLiteral("box"))
        probe = converter.convert_constraint(named, result)

        assert "Name-str" in backend.variable_names(probe)
        assert checker.is_sat_with(probe)

    def test_mixed_types_fall_back_to_integers(self, backend, aggregates):
        converter, result, checker = aggregates
        mixed = Comparison(EQ, VariableLiteral("Y", "Lang"), NumberLiteral(3))
        probe = converter.convert_constraint(mixed, result)

        assert checker.is_sat_with(probe)

    def test_string_literal_in_arithmetic_rejected(self, aggregates):
        converter, result, checker = aggregates
        with pytest.raises(EncodingError):
            converter.convert_constraint(equals(Add(StringLiteral("a"), NumberLiteral(1)), 1))


class TestErrors:

    def test_unknown_node_kind(self, backend, aggregate_model):
        class Power(Expression):
            pass

        encoder = ExpressionEncoder(backend)
        with pytest.raises(EncodingError):
            encoder.encode(Power(), ConversionContext(model=aggregate_model))

    def test_unknown_feature(self, backend, aggregate_model):
        encoder = ExpressionEncoder(backend)
        with pytest.raises(EncodingError):
            encoder.encode(VariableLiteral("Ghost"), ConversionContext(model=aggregate_model))

    def test_undeclared_attribute(self, backend, aggregate_model):
        encoder = ExpressionEncoder(backend)
        with pytest.raises(EncodingError):
            encoder.encode(VariableLiteral("X", "Weight"), ConversionContext(model=aggregate_model))

    def test_every_expression_type_is_handled(self):
        assert set(ExpressionEncoder._HANDLERS) == set(EXPRESSION_TYPES)

    def test_missing_handler_fails_exhaustiveness_check(self):
        handlers = dict(ExpressionEncoder._HANDLERS)
        del handlers[Div]
        with pytest.raises(TypeError, match="Div"):
            check_exhaustive(handlers, EXPRESSION_TYPES, "Expression")


def test_literal_constraint_on_feature(aggregates):
    converter, result, checker = aggregates
    assert checker.is_sat_with(converter.convert_constraint(Literal("Y"), result))
    assert not checker.is_sat_with(converter.convert_constraint(Not(Literal("X")), result))
