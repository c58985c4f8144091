"""
Solver Backend
==============

Minimal capability interface the encoders are written against, and its z3
implementation. Encoders never import z3 directly; they only call the
operations below, so the lowering core stays solver-agnostic.

Division semantics (shared by every call site):
    ``div(n, d)`` is SMT-LIB integer ``div`` (floor for positive divisors)
    and evaluates to 0 when ``d == 0``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from time import perf_counter
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

import z3

from fm_smt.errors import SolverSessionError
from fm_smt.types import SolverSettings

logger = logging.getLogger(__name__)


class SolverSession(ABC):
    """Incremental solver handle: assert, push/pop scopes, check."""

    @abstractmethod
    def add(self, formula: Any) -> None: ...

    @abstractmethod
    def push(self, formula: Any) -> None:
        """Open a scope and assert ``formula`` inside it."""

    @abstractmethod
    def pop(self) -> None: ...

    @abstractmethod
    def is_unsat(self) -> bool: ...

    @abstractmethod
    def values(self, terms: Dict[str, Any]) -> Dict[str, Any]:
        """Model values of ``terms`` after a satisfiable check."""

    @abstractmethod
    def close(self) -> None: ...

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class FormulaBackend(ABC):
    """Formula construction capabilities needed by the encoders."""

    # ---------- variables & constants ----------

    @abstractmethod
    def bool_var(self, name: str) -> Any: ...

    @abstractmethod
    def int_var(self, name: str) -> Any: ...

    @abstractmethod
    def string_var(self, name: str) -> Any: ...

    @abstractmethod
    def true(self) -> Any: ...

    @abstractmethod
    def false(self) -> Any: ...

    @abstractmethod
    def int_val(self, value: int) -> Any: ...

    @abstractmethod
    def string_val(self, value: str) -> Any: ...

    # ---------- boolean ----------

    @abstractmethod
    def not_(self, formula: Any) -> Any: ...

    @abstractmethod
    def and_(self, formulas: Sequence[Any]) -> Any:
        """Conjunction; the empty conjunction is true."""

    @abstractmethod
    def or_(self, formulas: Sequence[Any]) -> Any:
        """Disjunction; the empty disjunction is false."""

    @abstractmethod
    def implies(self, left: Any, right: Any) -> Any: ...

    @abstractmethod
    def equivalence(self, left: Any, right: Any) -> Any: ...

    # ---------- integer ----------

    @abstractmethod
    def bool_to_int(self, formula: Any) -> Any:
        """1 if ``formula`` holds, else 0."""

    @abstractmethod
    def add(self, left: Any, right: Any) -> Any: ...

    @abstractmethod
    def sub(self, left: Any, right: Any) -> Any: ...

    @abstractmethod
    def mul(self, left: Any, right: Any) -> Any: ...

    @abstractmethod
    def div(self, left: Any, right: Any) -> Any: ...

    @abstractmethod
    def sum_(self, terms: Sequence[Any]) -> Any:
        """Integer sum; the empty sum is 0."""

    @abstractmethod
    def int_equal(self, left: Any, right: Any) -> Any: ...

    @abstractmethod
    def less(self, left: Any, right: Any) -> Any: ...

    @abstractmethod
    def less_equal(self, left: Any, right: Any) -> Any: ...

    @abstractmethod
    def greater(self, left: Any, right: Any) -> Any: ...

    @abstractmethod
    def greater_equal(self, left: Any, right: Any) -> Any: ...

    # ---------- string ----------

    @abstractmethod
    def string_equal(self, left: Any, right: Any) -> Any: ...

    # ---------- sessions & inspection ----------

    @abstractmethod
    def new_session(self, settings: Optional[SolverSettings] = None) -> SolverSession: ...

    @abstractmethod
    def variable_names(self, formula: Any) -> Set[str]:
        """Names of all uninterpreted constants occurring in ``formula``."""


def _z3_to_py(val):
    """Best-effort conversion of z3 values to plain Python types."""
    if val is None:
        return None
    if z3.is_true(val):
        return True
    if z3.is_false(val):
        return False
    if z3.is_int_value(val):
        return val.as_long()
    if z3.is_string_value(val):
        return val.as_string()
    return str(val)


class Z3Session(SolverSession):
    """
    One ``z3.Solver`` with push/pop scopes. Not safe for concurrent use.

    ``params`` holds the z3 parameters applied from the settings.
    """

    def __init__(self, ctx: Optional[z3.Context] = None,
                 settings: Optional[SolverSettings] = None):
        self._solver = z3.Solver(ctx=ctx)
        settings = settings or SolverSettings()
        params = dict(settings.params)
        if settings.timeout_ms is not None:
            params["timeout"] = settings.timeout_ms
        if params:
            try:
                self._solver.set(**params)
            except z3.Z3Exception as e:
                raise SolverSessionError(f"Invalid solver parameters {params}: {e}") from e
        self.params = params
        self._closed = False

    def _ensure_open(self):
        if self._closed:
            raise SolverSessionError("Solver session already closed")

    def add(self, formula) -> None:
        self._ensure_open()
        try:
            self._solver.add(formula)
        except z3.Z3Exception as e:
            raise SolverSessionError(f"Assert failed: {e}") from e

    def push(self, formula) -> None:
        self._ensure_open()
        try:
            self._solver.push()
        except z3.Z3Exception as e:
            raise SolverSessionError(f"Push failed: {e}") from e
        try:
            self._solver.add(formula)
        except z3.Z3Exception as e:
            # the scope was opened for this formula only
            self._solver.pop()
            raise SolverSessionError(f"Push failed: {e}") from e

    def pop(self) -> None:
        self._ensure_open()
        try:
            self._solver.pop()
        except z3.Z3Exception as e:
            raise SolverSessionError(f"Pop failed: {e}") from e

    def is_unsat(self) -> bool:
        self._ensure_open()
        t0 = perf_counter()
        try:
            res = self._solver.check()
        except z3.Z3Exception as e:
            raise SolverSessionError(f"Check failed: {e}") from e
        ms = (perf_counter() - t0) * 1000.0
        logger.debug(f"check -> {res} in {ms:.1f} ms ({self._solver.num_scopes()} scopes)")
        if res == z3.unsat:
            return True
        if res == z3.sat:
            return False
        raise SolverSessionError(f"Solver returned unknown: {self._solver.reason_unknown()}")

    def values(self, terms: Dict[str, Any]) -> Dict[str, Any]:
        self._ensure_open()
        try:
            m = self._solver.model()
        except z3.Z3Exception as e:
            raise SolverSessionError(f"No model available: {e}") from e
        return {name: _z3_to_py(m.eval(term, model_completion=True))
                for name, term in terms.items()}

    def close(self) -> None:
        if not self._closed:
            self._solver.reset()
            self._closed = True


class Z3Backend(FormulaBackend):
    """
    z3 implementation of ``FormulaBackend``.

    Args:
        ctx: z3 context to build terms in. Independent conversions running on
             different threads need different contexts.
    """

    def __init__(self, ctx: Optional[z3.Context] = None):
        self.ctx = ctx

    def bool_var(self, name: str):
        return z3.Bool(name, self.ctx)

    def int_var(self, name: str):
        return z3.Int(name, self.ctx)

    def string_var(self, name: str):
        return z3.String(name, self.ctx)

    def true(self):
        return z3.BoolVal(True, self.ctx)

    def false(self):
        return z3.BoolVal(False, self.ctx)

    def int_val(self, value: int):
        return z3.IntVal(value, self.ctx)

    def string_val(self, value: str):
        return z3.StringVal(value, self.ctx)

    def not_(self, formula):
        return z3.Not(formula)

    def and_(self, formulas):
        formulas = list(formulas)
        if not formulas:
            return self.true()
        if len(formulas) == 1:
            return formulas[0]
        return z3.And(formulas)

    def or_(self, formulas):
        formulas = list(formulas)
        if not formulas:
            return self.false()
        if len(formulas) == 1:
            return formulas[0]
        return z3.Or(formulas)

    def implies(self, left, right):
        return z3.Implies(left, right)

    def equivalence(self, left, right):
        return left == right

    def bool_to_int(self, formula):
        return z3.If(formula, self.int_val(1), self.int_val(0))

    def add(self, left, right):
        return left + right

    def sub(self, left, right):
        return left - right

    def mul(self, left, right):
        return left * right

    def div(self, left, right):
        return z3.If(right == 0, self.int_val(0), left / right)

    def sum_(self, terms):
        terms = list(terms)
        if not terms:
            return self.int_val(0)
        if len(terms) == 1:
            return terms[0]
        return z3.Sum(terms)

    def int_equal(self, left, right):
        return left == right

    def less(self, left, right):
        return left < right

    def less_equal(self, left, right):
        return left <= right

    def greater(self, left, right):
        return left > right

    def greater_equal(self, left, right):
        return left >= right

    def string_equal(self, left, right):
        return left == right

    def new_session(self, settings: Optional[SolverSettings] = None) -> Z3Session:
        return Z3Session(ctx=self.ctx, settings=settings)

    def variable_names(self, formula) -> Set[str]:
        names: Set[str] = set()
        seen: Set[int] = set()
        todo: List[Any] = [formula]
        while todo:
            term = todo.pop()
            if term.get_id() in seen:
                continue
            seen.add(term.get_id())
            if z3.is_const(term) and term.decl().kind() == z3.Z3_OP_UNINTERPRETED:
                names.add(term.decl().name())
            todo.extend(term.children())
        return names
