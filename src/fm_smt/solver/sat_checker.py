"""
Satisfiability Checker
======================

Thin incremental wrapper over one solver session pre-loaded with a base
formula. A checker's push/pop stack is shared state: use one checker per
logical caller, or ``is_sat_once`` for stateless single queries.
"""

import logging
from typing import Any, Dict, Optional

from fm_smt.errors import SolverSessionError
from fm_smt.solver.backend import FormulaBackend, SolverSession
from fm_smt.types import SolverSettings

logger = logging.getLogger(__name__)


class SatChecker:
    """
    Answers satisfiability queries against a fixed base formula.

    Args:
        base_formula: Formula asserted for the whole lifetime of the session
        backend: Backend that built the formula
        settings: Solver options (timeout, raw z3 parameters)
    """

    def __init__(self, base_formula: Any, backend: FormulaBackend,
                 settings: Optional[SolverSettings] = None):
        self.base_formula = base_formula
        self._session: SolverSession = backend.new_session(settings)
        self._session.add(base_formula)
        self.kept_probes = 0

    def is_sat(self) -> bool:
        """True iff the base formula (plus kept probes) is satisfiable."""
        sat = not self._session.is_unsat()
        logger.debug(f"is_sat -> {sat}")
        return sat

    def is_sat_with(self, probe: Any) -> bool:
        """Check base AND probe; the probe is always removed again."""
        self._session.push(probe)
        try:
            sat = not self._session.is_unsat()
        finally:
            self._session.pop()
        logger.debug(f"is_sat_with -> {sat}")
        return sat

    def check_and_keep_if_satisfiable(self, probe: Any) -> bool:
        """
        Check base AND probe and keep the probe asserted if satisfiable.

        Kept probes narrow every later query on this checker. An
        unsatisfiable probe is popped.
        """
        self._session.push(probe)
        try:
            sat = not self._session.is_unsat()
        except SolverSessionError:
            self._session.pop()
            raise
        if sat:
            self.kept_probes += 1
        else:
            self._session.pop()
        logger.debug(f"check_and_keep_if_satisfiable -> {sat} ({self.kept_probes} kept)")
        return sat

    def witness(self, terms: Dict[str, Any]) -> Dict[str, Any]:
        """Values of ``terms`` in a model of the current scope; empty if unsatisfiable."""
        if self._session.is_unsat():
            return {}
        return self._session.values(terms)

    def close(self) -> None:
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def is_sat_once(formula: Any, backend: FormulaBackend,
                settings: Optional[SolverSettings] = None) -> bool:
    """Assert ``formula`` in a disposable session and check it."""
    with backend.new_session(settings) as session:
        session.add(formula)
        return not session.is_unsat()
