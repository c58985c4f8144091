"""
Structure Encoder
=================

Walks the feature tree and emits:

* root selected; child selected => parent selected
* per group: parent selected => group formula
* per numeric attribute: selected => var == value, not selected => var == 0
* per string attribute: selected => var == value, not selected => var == ""
"""

import logging
from typing import Any, List

from fm_smt.errors import ModelIntegrityError
from fm_smt.lowering.cardinality import CardinalityEncoder
from fm_smt.lowering.naming import attribute_name, group_namespace
from fm_smt.model.features import AttributeType, Feature, FeatureModel, Group, GroupType
from fm_smt.solver.backend import FormulaBackend

logger = logging.getLogger(__name__)


class StructureEncoder:
    """Feature tree, group semantics and attribute consistency."""

    def __init__(self, backend: FormulaBackend):
        self.backend = backend

    def encode(self, model: FeatureModel):
        parts: List[Any] = []
        for feature in model.features.values():
            parts.extend(self.encode_feature(feature))
        return self.backend.and_(parts)

    def encode_feature(self, feature: Feature) -> List[Any]:
        b = self.backend
        selected = b.bool_var(feature.identifier)
        parts: List[Any] = []
        if feature.parent_group is None:
            parts.append(selected)
        else:
            parent = feature.parent_feature
            if parent is None:
                raise ModelIntegrityError(
                    f"Parent group of feature '{feature.identifier}' has no parent feature")
            parts.append(b.implies(selected, b.bool_var(parent.identifier)))
        for group in feature.children:
            parts.append(self.encode_group(group))
        parts.extend(self.encode_attributes(feature))
        return parts

    def encode_attributes(self, feature: Feature) -> List[Any]:
        b = self.backend
        selected = b.bool_var(feature.identifier)
        parts: List[Any] = []
        for attribute in feature.attributes.values():
            name = attribute_name(feature.identifier, attribute.name)
            if attribute.attribute_type == AttributeType.NUMBER:
                variable = b.int_var(name)
                declared, deactivated = b.int_val(attribute.value), b.int_val(0)
            elif attribute.attribute_type == AttributeType.STRING:
                variable = b.string_var(name)
                declared, deactivated = b.string_val(attribute.value), b.string_val("")
            else:
                continue
            equal = self._equal(attribute.attribute_type)
            parts.append(b.implies(selected, equal(variable, declared)))
            parts.append(b.implies(b.not_(selected), equal(variable, deactivated)))
        return parts

    def _equal(self, attribute_type: AttributeType):
        if attribute_type == AttributeType.STRING:
            return self.backend.string_equal
        return self.backend.int_equal

    def encode_group(self, group: Group):
        """parent selected => group formula"""
        b = self.backend
        if group.parent_feature is None:
            raise ModelIntegrityError("Group without parent feature cannot be encoded")
        children = [b.bool_var(f.identifier) for f in group.features]
        group_type = group.group_type

        if group_type == GroupType.OR:
            formula = b.or_(children)
        elif group_type == GroupType.MANDATORY:
            formula = b.and_(children)
        elif group_type == GroupType.ALTERNATIVE:
            clauses = []
            for i in range(len(children)):
                for j in range(i + 1, len(children)):
                    clauses.append(b.or_([b.not_(children[i]), b.not_(children[j])]))
            clauses.append(b.or_(children))
            formula = b.and_(clauses)
        elif group_type == GroupType.CARDINALITY:
            lower, upper = group.cardinality
            namespace = group_namespace(group.parent_feature.identifier, group.index)
            logger.debug(f"Cardinality group {namespace}: [{lower}..{upper}] "
                         f"over {len(children)} children")
            formula = CardinalityEncoder(b, children, lower, upper, namespace).encode()
        elif group_type == GroupType.OPTIONAL:
            return b.true()
        else:
            raise ModelIntegrityError(f"Unknown group type: {group_type}")

        return b.implies(b.bool_var(group.parent_feature.identifier), formula)
