"""
Cardinality Encoder
===================

Encodes ``lower <= count(true) <= upper`` over an ordered list of boolean
terms with the sequential counter of Sinz ("Towards an Optimal CNF Encoding
of Boolean Cardinality Constraints", CP 2005).

The counter bit s[i][j] holds iff at least j+1 of the first i+1 literals are
true; the overflow bit v[i] holds iff literal i would push the count past
the bound. Asserting every overflow bit false bounds the count from above.
"at least L" is "at most n-L" over the negated literals, so one
construction serves both directions; each direction gets its own suffix so
the two counters never share variables.
"""

import logging
from typing import Any, List, Sequence

from fm_smt.errors import ModelIntegrityError
from fm_smt.lowering.naming import LOWER_SUFFIX, UPPER_SUFFIX, counter_name, overflow_name
from fm_smt.solver.backend import FormulaBackend

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "card"


class CardinalityEncoder:
    """
    Sequential-counter encoder for one cardinality constraint.

    Args:
        backend: Formula backend used to build terms
        variables: Ordered boolean terms x_0 .. x_{n-1}
        lower: Minimum number of true terms
        upper: Maximum number of true terms
        namespace: Prefix for the auxiliary counter/overflow variables; must
            differ between constraints encoded into the same formula
    """

    def __init__(self, backend: FormulaBackend, variables: Sequence[Any],
                 lower: int, upper: int, namespace: str = DEFAULT_NAMESPACE):
        n = len(variables)
        if not 0 <= lower <= upper <= n:
            raise ModelIntegrityError(
                f"Cardinality [{lower}..{upper}] over {n} variables violates "
                f"0 <= lower <= upper <= {n}")
        self.backend = backend
        self.variables = list(variables)
        self.lower = lower
        self.upper = upper
        self.namespace = namespace

    def encode(self):
        b = self.backend
        if self.upper == 0:
            # every variable is dead
            return b.and_([b.not_(x) for x in self.variables])
        if not self.variables:
            return b.true()
        return b.and_([self.at_most(), self.at_least()])

    def at_most(self):
        """count(x_i) <= upper"""
        return self._at_most_k(self.variables, self.upper, UPPER_SUFFIX)

    def at_least(self):
        """count(x_i) >= lower, as count(not x_i) <= n - lower"""
        negated = [self.backend.not_(x) for x in self.variables]
        return self._at_most_k(negated, len(self.variables) - self.lower, LOWER_SUFFIX)

    def _at_most_k(self, literals: List[Any], bound: int, suffix: str):
        b = self.backend
        n = len(literals)
        if n == 0:
            return b.true()
        if bound == 0:
            return b.and_([b.not_(lit) for lit in literals])

        s = [[b.bool_var(counter_name(self.namespace, suffix, i, j)) for j in range(bound)]
             for i in range(n)]
        v = [b.bool_var(overflow_name(self.namespace, suffix, i)) for i in range(n)]
        clauses = []

        # base: s_0,0 <=> x_0 ; s_0,j false
        clauses.append(b.equivalence(s[0][0], literals[0]))
        for j in range(1, bound):
            clauses.append(b.not_(s[0][j]))

        # s_i,0 <=> x_i | s_i-1,0 ; s_i,j <=> (x_i & s_i-1,j-1) | s_i-1,j
        for i in range(1, n):
            lit = literals[i]
            clauses.append(b.equivalence(s[i][0], b.or_([lit, s[i - 1][0]])))
            for j in range(1, bound):
                clauses.append(b.equivalence(
                    s[i][j],
                    b.or_([b.and_([lit, s[i - 1][j - 1]]), s[i - 1][j]]),
                ))

        # v_0 is false; v_i <=> x_i & s_i-1,k-1
        clauses.append(b.not_(v[0]))
        for i in range(1, n):
            clauses.append(b.equivalence(v[i], b.and_([literals[i], s[i - 1][bound - 1]])))
        clauses.extend(b.not_(overflow) for overflow in v)

        logger.debug(f"{self.namespace}{suffix}: {n} literals, bound {bound}, "
                     f"{n * bound + n} auxiliary variables")
        return b.and_(clauses)


def encode_cardinality(backend: FormulaBackend, variables: Sequence[Any], lower: int,
                       upper: int, namespace: str = DEFAULT_NAMESPACE):
    """Shorthand for ``CardinalityEncoder(...).encode()``."""
    return CardinalityEncoder(backend, variables, lower, upper, namespace).encode()
