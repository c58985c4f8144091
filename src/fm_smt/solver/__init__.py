from .backend import FormulaBackend, SolverSession, Z3Backend, Z3Session
from .sat_checker import SatChecker, is_sat_once

__all__ = [
    'FormulaBackend',
    'SatChecker',
    'SolverSession',
    'Z3Backend',
    'Z3Session',
    'is_sat_once',
]
