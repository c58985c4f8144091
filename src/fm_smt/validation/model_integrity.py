#!/usr/bin/env python3
"""
Model Integrity Checker
Validates a feature model before encoding so that malformed input is rejected
with a descriptive error instead of producing a malformed formula.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Set

from fm_smt.errors import ModelIntegrityError
from fm_smt.lowering.naming import is_auxiliary_name
from fm_smt.model.constraints import Comparison, Constraint, Literal, Not, Parenthesis
from fm_smt.model.expressions import (
    AvgAggregate, Expression, LengthAggregate, SumAggregate, VariableLiteral,
)
from fm_smt.model.features import AttributeType, FeatureModel, GroupType

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of model integrity validation"""
    is_valid: bool
    issues: List[str]
    warnings: List[str]
    stats: Dict[str, Any] = field(default_factory=dict)


def _walk_constraint(constraint: Constraint) -> Iterator[Any]:
    """Yield every constraint and expression node below ``constraint``."""
    stack: List[Any] = [constraint]
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, (Not, Parenthesis)):
            stack.append(node.content)
        elif isinstance(node, (Literal, Comparison)):
            continue
        elif hasattr(node, "left") and hasattr(node, "right"):
            stack.extend((node.right, node.left))


class ModelIntegrityChecker:
    """Check the structural invariants of a feature model"""

    def __init__(self, model: FeatureModel):
        self.model = model
        self.issues: List[str] = []
        self.warnings: List[str] = []

    def validate(self) -> ValidationResult:
        """
        Run every check and collect issues.

        Returns:
            ValidationResult with issues (fatal) and warnings (informative)
        """
        self.issues = []
        self.warnings = []

        self._check_roots()
        self._check_parent_links()
        self._check_groups()
        self._check_cycles()
        self._check_attributes()
        self._check_constraints()

        stats = {
            'features': len(self.model.features),
            'groups': sum(1 for _ in self.model.groups()),
            'cardinality_groups': sum(
                1 for g in self.model.groups() if g.group_type == GroupType.CARDINALITY),
            'constraints': len(self.model.constraints),
        }
        return ValidationResult(
            is_valid=not self.issues,
            issues=list(self.issues),
            warnings=list(self.warnings),
            stats=stats,
        )

    def _check_roots(self):
        roots = self.model.roots
        if not roots:
            self.issues.append("Model has no root feature")
        elif len(roots) > 1:
            names = ", ".join(r.identifier for r in roots)
            self.issues.append(f"Model has multiple root features: {names}")

    def _check_parent_links(self):
        for identifier, feature in self.model.features.items():
            if identifier != feature.identifier:
                self.issues.append(
                    f"Feature map key '{identifier}' does not match identifier '{feature.identifier}'")
            if is_auxiliary_name(feature.identifier):
                self.issues.append(
                    f"Feature identifier '{feature.identifier}' is reserved for cardinality "
                    f"counter variables")
            group = feature.parent_group
            if group is None:
                continue
            if group.parent_feature is None:
                self.issues.append(f"Parent group of feature '{identifier}' has no parent feature")
            elif group.parent_feature.identifier not in self.model.features:
                self.issues.append(
                    f"Parent feature '{group.parent_feature.identifier}' of '{identifier}' "
                    f"is not part of the model")
            elif not any(g is group for g in group.parent_feature.children):
                self.issues.append(
                    f"Parent group of '{identifier}' is not among the groups of "
                    f"'{group.parent_feature.identifier}'")
            if not any(child is feature for child in group.features):
                self.issues.append(f"Feature '{identifier}' is not a child of its parent group")

    def _check_groups(self):
        memberships: Dict[str, int] = {}
        for feature in self.model.features.values():
            for position, group in enumerate(feature.children):
                where = f"group {position} of '{feature.identifier}'"
                if group.parent_feature is not feature:
                    self.issues.append(f"The {where} does not reference its parent feature")
                for child in group.features:
                    memberships[child.identifier] = memberships.get(child.identifier, 0) + 1
                    if child.parent_group is not group:
                        self.issues.append(
                            f"Feature '{child.identifier}' in {where} points to another parent group")
                    if self.model.features.get(child.identifier) is not child:
                        self.issues.append(
                            f"Feature '{child.identifier}' in {where} is not part of the model")
                if group.group_type == GroupType.CARDINALITY:
                    lower, upper = group.cardinality
                    n = len(group.features)
                    if not 0 <= lower <= upper <= n:
                        self.issues.append(
                            f"Cardinality [{lower}..{upper}] of {where} is outside "
                            f"0 <= lower <= upper <= {n}")
                elif group.lower is not None or group.upper is not None:
                    self.warnings.append(
                        f"Bounds on {group.group_type.value} {where} are ignored")
        for identifier, count in memberships.items():
            if count > 1:
                self.issues.append(f"Feature '{identifier}' belongs to {count} groups")

    def _check_cycles(self):
        for feature in self.model.features.values():
            seen: Set[int] = {id(feature)}
            current = feature.parent_feature
            while current is not None:
                if id(current) in seen:
                    self.issues.append(f"Feature '{feature.identifier}' has a cyclic ancestry")
                    break
                seen.add(id(current))
                current = current.parent_feature

    def _check_attributes(self):
        for feature in self.model.features.values():
            for name, attribute in feature.attributes.items():
                if name != attribute.name:
                    self.issues.append(
                        f"Attribute key '{name}' on '{feature.identifier}' does not match "
                        f"attribute name '{attribute.name}'")
                if attribute.attribute_type == AttributeType.UNSUPPORTED:
                    self.issues.append(
                        f"Attribute '{feature.identifier}.{name}' has unsupported value type "
                        f"{type(attribute.value).__name__}")

    def _check_constraints(self):
        for index, constraint in enumerate(self.model.constraints):
            for node in _walk_constraint(constraint):
                if isinstance(node, Literal):
                    self._check_reference(index, node.feature, None)
                elif isinstance(node, Comparison):
                    for side in (node.left, node.right):
                        self._check_expression(index, side)

    def _check_expression(self, index: int, expression: Expression):
        stack = [expression]
        while stack:
            node = stack.pop()
            if isinstance(node, VariableLiteral):
                self._check_reference(index, node.feature, node.attribute)
            elif isinstance(node, (SumAggregate, AvgAggregate)):
                if not self.model.declaring_features(node.attribute):
                    self.warnings.append(
                        f"Constraint {index}: no feature declares attribute '{node.attribute}'")
            elif isinstance(node, LengthAggregate):
                continue
            elif hasattr(node, "left") and hasattr(node, "right"):
                stack.extend((node.right, node.left))

    def _check_reference(self, index: int, feature_id: str, attribute: Any):
        feature = self.model.get_feature(feature_id)
        if feature is None:
            self.issues.append(f"Constraint {index} references unknown feature '{feature_id}'")
        elif attribute is not None and attribute not in feature.attributes:
            self.issues.append(
                f"Constraint {index} references undeclared attribute '{feature_id}.{attribute}'")


def validate_model(model: FeatureModel) -> ValidationResult:
    """Validate ``model`` and raise ``ModelIntegrityError`` listing every issue."""
    result = ModelIntegrityChecker(model).validate()
    for warning in result.warnings:
        logger.warning(warning)
    if not result.is_valid:
        summary = "; ".join(result.issues)
        raise ModelIntegrityError(f"Invalid feature model: {summary}", result.issues)
    return result
