import pytest
import z3

from fm_smt.model import Feature, FeatureModel, GroupType
from fm_smt.solver.backend import Z3Backend


@pytest.fixture
def backend():
    """Backend on a private z3 context so tests never share terms"""
    return Z3Backend(ctx=z3.Context())


@pytest.fixture
def priced_model():
    """
    Root with one group of each simple kind, every child priced:

        alternative: A1 (20), A2 (10)
        or:          O1 (2),  O2 (3)
        optional:    P1 (7),  P2 (1)
        mandatory:   M1 (5),  M2 (10)
    """
    root = Feature("Root")
    layout = {
        GroupType.ALTERNATIVE: [("A1", 20), ("A2", 10)],
        GroupType.OR: [("O1", 2), ("O2", 3)],
        GroupType.OPTIONAL: [("P1", 7), ("P2", 1)],
        GroupType.MANDATORY: [("M1", 5), ("M2", 10)],
    }
    for group_type, entries in layout.items():
        features = []
        for name, price in entries:
            feature = Feature(name)
            feature.add_attribute("Price", price)
            features.append(feature)
        root.add_group(group_type, features)
    return FeatureModel.from_root(root)
