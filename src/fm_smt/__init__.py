"""
fm-smt: Feature Model to SMT Encoder
=====================================

Translates attributed feature models (feature tree, group semantics,
cross-tree constraints, numeric and string attributes) into a single z3
formula, and answers satisfiability queries against it.
"""

from fm_smt.errors import (
    ConfigError,
    EncodingError,
    FmSmtError,
    ModelIntegrityError,
    SolverSessionError,
)
from fm_smt.lowering.converter import ConversionResult, FeatureModelConverter
from fm_smt.solver.backend import FormulaBackend, Z3Backend
from fm_smt.solver.sat_checker import SatChecker, is_sat_once

__version__ = "0.1.0"

__all__ = [
    'ConfigError',
    'ConversionResult',
    'EncodingError',
    'FeatureModelConverter',
    'FmSmtError',
    'FormulaBackend',
    'ModelIntegrityError',
    'SatChecker',
    'SolverSessionError',
    'Z3Backend',
    'is_sat_once',
]
