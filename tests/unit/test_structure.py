"""
Tests for the Structure Encoder.

Tests verify that:
    - group formulas follow OR / MANDATORY / ALTERNATIVE / OPTIONAL / CARDINALITY semantics
    - the root is asserted and children imply their parent
    - attribute companions follow the deactivation invariant
"""

import pytest

from fm_smt.errors import ModelIntegrityError
from fm_smt.lowering.structure import StructureEncoder
from fm_smt.model import Feature, FeatureModel, Group, GroupType
from fm_smt.solver.sat_checker import is_sat_once
from tests.helpers import exactly

CHILDREN = ["c0", "c1", "c2", "c3", "c4"]
PARENT = "Parent"


def _group_formula(backend, group_type, lower=None, upper=None):
    parent = Feature(PARENT)
    group = parent.add_group(group_type, [Feature(n) for n in CHILDREN], lower, upper)
    return StructureEncoder(backend).encode_group(group)


def _sat(backend, *formulas):
    return is_sat_once(backend.and_(list(formulas)), backend)


class TestGroups:

    def test_alternative(self, backend):
        group = _group_formula(backend, GroupType.ALTERNATIVE)
        parent = backend.bool_var(PARENT)

        assert _sat(backend, group, parent, exactly(backend, CHILDREN, 1))
        assert not _sat(backend, group, parent, exactly(backend, CHILDREN, 0))
        assert not _sat(backend, group, parent, exactly(backend, CHILDREN, 2))
        assert not _sat(backend, group, parent, exactly(backend, CHILDREN, 5))

    def test_or(self, backend):
        group = _group_formula(backend, GroupType.OR)
        parent = backend.bool_var(PARENT)

        assert _sat(backend, group, parent, exactly(backend, CHILDREN, 1))
        assert _sat(backend, group, parent, exactly(backend, CHILDREN, 5))
        assert not _sat(backend, group, parent, exactly(backend, CHILDREN, 0))

    def test_mandatory(self, backend):
        group = _group_formula(backend, GroupType.MANDATORY)
        parent = backend.bool_var(PARENT)

        assert _sat(backend, group, parent, exactly(backend, CHILDREN, 5))
        assert not _sat(backend, group, parent, exactly(backend, CHILDREN, 4))
        assert not _sat(backend, group, parent, exactly(backend, CHILDREN, 0))

    def test_optional(self, backend):
        group = _group_formula(backend, GroupType.OPTIONAL)
        parent = backend.bool_var(PARENT)

        for k in range(len(CHILDREN) + 1):
            assert _sat(backend, group, parent, exactly(backend, CHILDREN, k))

    def test_cardinality(self, backend):
        group = _group_formula(backend, GroupType.CARDINALITY, 2, 3)
        parent = backend.bool_var(PARENT)

        assert _sat(backend, group, parent, exactly(backend, CHILDREN, 2))
        assert _sat(backend, group, parent, exactly(backend, CHILDREN, 3))
        assert not _sat(backend, group, parent, exactly(backend, CHILDREN, 1))
        assert not _sat(backend, group, parent, exactly(backend, CHILDREN, 4))

    def test_cardinality_without_upper_means_all_children(self, backend):
        group = _group_formula(backend, GroupType.CARDINALITY, 4)
        parent = backend.bool_var(PARENT)

        assert _sat(backend, group, parent, exactly(backend, CHILDREN, 5))
        assert not _sat(backend, group, parent, exactly(backend, CHILDREN, 3))

    @pytest.mark.parametrize("group_type", [
        GroupType.ALTERNATIVE, GroupType.OR, GroupType.MANDATORY, GroupType.CARDINALITY,
    ])
    def test_unselected_parent_releases_group(self, backend, group_type):
        """A deselected parent imposes nothing on its group"""
        group = _group_formula(backend, group_type, 2, 3)
        parent = backend.bool_var(PARENT)

        assert _sat(backend, group, backend.not_(parent), exactly(backend, CHILDREN, 0))
        assert _sat(backend, group, backend.not_(parent), exactly(backend, CHILDREN, 5))

    def test_group_without_parent_rejected(self, backend):
        orphan = Group(GroupType.OR, parent_feature=None, features=[Feature("x")])
        with pytest.raises(ModelIntegrityError):
            StructureEncoder(backend).encode_group(orphan)


class TestTree:

    def setup_method(self):
        self.root = Feature("Root")
        self.child = Feature("Child")
        self.grandchild = Feature("Grandchild")
        self.root.add_group(GroupType.OPTIONAL, [self.child])
        self.child.add_group(GroupType.OPTIONAL, [self.grandchild])
        self.model = FeatureModel.from_root(self.root)

    def test_root_is_always_selected(self, backend):
        tree = StructureEncoder(backend).encode(self.model)
        assert not _sat(backend, tree, backend.not_(backend.bool_var("Root")))

    def test_child_implies_parent(self, backend):
        tree = StructureEncoder(backend).encode(self.model)

        assert _sat(backend, tree, backend.bool_var("Grandchild"))
        assert not _sat(backend, tree, backend.bool_var("Grandchild"),
                        backend.not_(backend.bool_var("Child")))

    def test_feature_map_is_preorder(self):
        assert list(self.model.features) == ["Root", "Child", "Grandchild"]


class TestAttributes:

    def setup_method(self):
        self.root = Feature("Root")
        self.feature = Feature("Cache")
        self.feature.add_attribute("Size", 64)
        self.feature.add_attribute("Vendor", "acme")
        self.feature.add_attribute("Tested", True)
        self.root.add_group(GroupType.OPTIONAL, [self.feature])
        self.model = FeatureModel.from_root(self.root)

    def test_selected_feature_takes_declared_value(self, backend):
        tree = StructureEncoder(backend).encode(self.model)
        cache, size = backend.bool_var("Cache"), backend.int_var("Cache.Size")

        assert _sat(backend, tree, cache, backend.int_equal(size, backend.int_val(64)))
        assert not _sat(backend, tree, cache, backend.int_equal(size, backend.int_val(0)))

    def test_deselected_feature_contributes_zero(self, backend):
        tree = StructureEncoder(backend).encode(self.model)
        cache, size = backend.bool_var("Cache"), backend.int_var("Cache.Size")

        assert _sat(backend, tree, backend.not_(cache), backend.int_equal(size, backend.int_val(0)))
        assert not _sat(backend, tree, backend.not_(cache),
                        backend.int_equal(size, backend.int_val(64)))

    def test_string_attribute_follows_selection(self, backend):
        tree = StructureEncoder(backend).encode(self.model)
        cache, vendor = backend.bool_var("Cache"), backend.string_var("Cache.Vendor")

        assert not _sat(backend, tree, cache,
                        backend.string_equal(vendor, backend.string_val("other")))
        assert _sat(backend, tree, backend.not_(cache),
                    backend.string_equal(vendor, backend.string_val("")))

    def test_boolean_attribute_has_no_companion(self, backend):
        tree = StructureEncoder(backend).encode(self.model)
        assert "Cache.Tested" not in backend.variable_names(tree)
