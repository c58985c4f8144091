"""
Feature Model Converter
=======================

Entry point of the lowering: validates the model, then combines the
structural formula, the own-constraint formula and the deferred average
divider formulas into one z3 formula.

Usage:
    converter = FeatureModelConverter(model)
    result = converter.convert()
    with converter.checker(result) as checker:
        checker.is_sat_with(converter.convert_constraint(probe, result))
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fm_smt.lowering.constraints import ConstraintEncoder
from fm_smt.lowering.context import ConversionContext
from fm_smt.lowering.expressions import ExpressionEncoder
from fm_smt.lowering.structure import StructureEncoder
from fm_smt.model.constraints import Constraint
from fm_smt.model.features import FeatureModel
from fm_smt.errors import EncodingError
from fm_smt.solver.backend import FormulaBackend, Z3Backend
from fm_smt.solver.sat_checker import SatChecker
from fm_smt.types import EncoderSettings
from fm_smt.validation.model_integrity import validate_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """
    Output of one conversion.

    Attributes:
        formula: structure AND constraints AND dividers
        structure: Tree, group and attribute formula
        constraints: Conjunction of the model's own constraints
        average_dividers: attribute name -> divider formulas emitted once
        context: The conversion context, used to lower follow-up probes
    """
    formula: Any
    structure: Any
    constraints: Any
    average_dividers: Dict[str, List[Any]] = field(default_factory=dict)
    context: Optional[ConversionContext] = None


class FeatureModelConverter:
    """Converts one immutable feature model; every ``convert()`` call is independent."""

    def __init__(self, model: FeatureModel, backend: Optional[FormulaBackend] = None,
                 settings: Optional[EncoderSettings] = None):
        self.model = model
        self.backend = backend or Z3Backend()
        self.settings = settings or EncoderSettings()
        self.expressions = ExpressionEncoder(self.backend)
        self.constraint_encoder = ConstraintEncoder(self.backend, self.expressions)
        self.structure_encoder = StructureEncoder(self.backend)

    def convert(self) -> ConversionResult:
        if self.settings.validate_model:
            validate_model(self.model)
        context = ConversionContext(model=self.model)

        structure = self.convert_tree()
        constraints = self.convert_constraints(context)
        dividers = context.divider_formulas()
        formula = self.backend.and_([structure, constraints, *dividers])

        logger.info(f"Converted feature model: {len(self.model.features)} features, "
                    f"{len(self.model.constraints)} constraints, "
                    f"{len(context.average_dividers)} averaged attributes")
        return ConversionResult(
            formula=formula,
            structure=structure,
            constraints=constraints,
            average_dividers={k: list(v) for k, v in context.average_dividers.items()},
            context=context,
        )

    def convert_tree(self):
        return self.structure_encoder.encode(self.model)

    def convert_constraints(self, context: ConversionContext):
        parts = [self._encode_constraint(c, context) for c in self.model.constraints]
        return self.backend.and_(parts)

    def _encode_constraint(self, constraint: Constraint, context: ConversionContext):
        try:
            return self.constraint_encoder.encode(constraint, context)
        except RecursionError as e:
            raise EncodingError(
                f"Constraint nesting too deep to encode: {type(constraint).__name__}") from e

    def convert_constraint(self, constraint: Constraint,
                           base: Optional[ConversionResult] = None):
        """
        Lower a single constraint, e.g. a probe for ``SatChecker.is_sat_with``.

        Divider formulas the constraint needs are conjoined to the result
        unless ``base`` already emitted them for the same attribute.

        Args:
            constraint: Constraint over features of this model
            base: Earlier conversion result the probe will be checked against

        Returns:
            Solver formula
        """
        if base is not None and base.context is not None:
            context = base.context.child(self.model)
        else:
            context = ConversionContext(model=self.model)
        formula = self._encode_constraint(constraint, context)
        dividers = context.divider_formulas()
        if not dividers:
            return formula
        return self.backend.and_([formula, *dividers])

    def checker(self, result: ConversionResult) -> SatChecker:
        """SatChecker over ``result.formula`` using the configured solver settings."""
        return SatChecker(result.formula, self.backend, self.settings.solver)


def convert_feature_model(model: FeatureModel, backend: Optional[FormulaBackend] = None,
                          settings: Optional[EncoderSettings] = None) -> ConversionResult:
    return FeatureModelConverter(model, backend, settings).convert()
