"""
Feature Model Data Structures
=============================

In-memory representation of an attributed feature model: a tree of features,
each owning an ordered list of groups, each group owning an ordered list of
child features. The model is produced upstream (e.g. by a UVL parser) and is
treated as read-only by every encoder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

AttributeValue = Union[int, str, bool]


class FeatureType(Enum):
    """Value type of a feature. Only STRING features carry a value variable."""
    BOOLEAN = "Boolean"
    STRING = "String"
    INTEGER = "Integer"
    REAL = "Real"


class GroupType(Enum):
    """Selection semantics of a group."""
    MANDATORY = "mandatory"
    OR = "or"
    ALTERNATIVE = "alternative"
    OPTIONAL = "optional"
    CARDINALITY = "cardinality"


class AttributeType(Enum):
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Attribute:
    """
    A typed attribute value declared on a feature.

    Attributes:
        name: Attribute name, unique per feature
        value: Declared value (int, str or bool)
    """
    name: str
    value: AttributeValue

    @property
    def attribute_type(self) -> AttributeType:
        # bool is a subclass of int and must be checked first
        if isinstance(self.value, bool):
            return AttributeType.BOOLEAN
        if isinstance(self.value, int):
            return AttributeType.NUMBER
        if isinstance(self.value, str):
            return AttributeType.STRING
        return AttributeType.UNSUPPORTED


@dataclass(eq=False)
class Feature:
    """
    A node of the feature tree.

    Back references (``parent_group``) are excluded from repr to keep the
    output finite for trees.
    """
    identifier: str
    feature_type: FeatureType = FeatureType.BOOLEAN
    attributes: Dict[str, Attribute] = field(default_factory=dict)
    children: List[Group] = field(default_factory=list, repr=False)
    parent_group: Optional[Group] = field(default=None, repr=False)

    @property
    def parent_feature(self) -> Optional[Feature]:
        return self.parent_group.parent_feature if self.parent_group else None

    @property
    def is_root(self) -> bool:
        return self.parent_group is None

    def add_attribute(self, name: str, value: AttributeValue) -> Attribute:
        attribute = Attribute(name=name, value=value)
        self.attributes[name] = attribute
        return attribute

    def add_group(
        self,
        group_type: GroupType,
        features: Sequence[Feature],
        lower: Optional[int] = None,
        upper: Optional[int] = None,
    ) -> Group:
        """
        Attach a new child group and wire the back references of its features.

        Args:
            group_type: Selection semantics of the group
            features: Ordered child features
            lower: Lower bound (CARDINALITY only)
            upper: Upper bound (CARDINALITY only, None means number of children)

        Returns:
            The created group
        """
        group = Group(group_type=group_type, parent_feature=self,
                      features=list(features), lower=lower, upper=upper)
        for child in group.features:
            child.parent_group = group
        self.children.append(group)
        return group


@dataclass(eq=False)
class Group:
    """A set of sibling features under one parent with a selection semantics."""
    group_type: GroupType
    parent_feature: Optional[Feature] = field(default=None, repr=False)
    features: List[Feature] = field(default_factory=list)
    lower: Optional[int] = None
    upper: Optional[int] = None

    @property
    def cardinality(self) -> Tuple[int, int]:
        """(lower, upper) with defaults resolved against the child count."""
        lower = self.lower if self.lower is not None else 0
        upper = self.upper if self.upper is not None else len(self.features)
        return lower, upper

    @property
    def index(self) -> int:
        """Position of this group in its parent's child-group list."""
        if self.parent_feature is None:
            return 0
        for position, group in enumerate(self.parent_feature.children):
            if group is self:
                return position
        return 0


@dataclass
class FeatureModel:
    """
    Feature map (id -> Feature, ordered) plus the model-level constraints.

    Attributes:
        features: All features of the model in traversal order
        constraints: Own (cross-tree) constraints of the model
    """
    features: Dict[str, Feature] = field(default_factory=dict)
    constraints: List = field(default_factory=list)

    @classmethod
    def from_root(cls, root: Feature, constraints: Sequence = ()) -> FeatureModel:
        """Collect the feature map by a pre-order walk starting at ``root``."""
        features: Dict[str, Feature] = {}
        stack = [root]
        while stack:
            feature = stack.pop()
            if feature.identifier in features:
                continue
            features[feature.identifier] = feature
            pending = [child for group in feature.children for child in group.features]
            stack.extend(reversed(pending))
        return cls(features=features, constraints=list(constraints))

    @property
    def roots(self) -> List[Feature]:
        return [f for f in self.features.values() if f.is_root]

    def groups(self) -> Iterator[Group]:
        for feature in self.features.values():
            yield from feature.children

    def get_feature(self, identifier: str) -> Optional[Feature]:
        return self.features.get(identifier)

    def declaring_features(self, attribute_name: str) -> List[Feature]:
        """Features declaring ``attribute_name``, in model order."""
        return [f for f in self.features.values() if attribute_name in f.attributes]
