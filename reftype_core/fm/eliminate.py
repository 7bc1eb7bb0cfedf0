"""
Fourier-Motzkin elimination.

Removing variable x from a conjunction: every inequality with a positive
coefficient on x is a lower bound, every negative one an upper bound. Each
(lower, upper) pair is scaled so x cancels and the two are added; the rest is
copied through. Satisfiability over the reals is preserved exactly. For
integer variables the bounds are tightened first (see rounding), which is
sound but not complete for divisibility facts spanning several variables.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from ..config import DEFAULT_LIMITS, SolverLimits
from .errors import CapacityError, PreconditionError
from .rounding import round_integer_bound
from .types import InequalitySystem, LinearInequality, LinearTerm, VarInfo


def combine_bounds(
    lower: LinearInequality,
    lower_coeff: float,
    upper: LinearInequality,
    upper_abs_coeff: float,
    var_id: int,
    limits: SolverLimits = DEFAULT_LIMITS,
) -> LinearInequality:
    """upper_abs_coeff * lower + lower_coeff * upper, without `var_id`."""
    coeffs: Dict[int, float] = {}
    order: List[int] = []

    for ineq, scale in ((lower, upper_abs_coeff), (upper, lower_coeff)):
        for t in ineq.terms:
            if t.var_id == var_id:
                continue
            if t.var_id not in coeffs:
                if len(order) >= limits.max_terms_per_ineq:
                    raise CapacityError("terms per inequality", limits.max_terms_per_ineq)
                order.append(t.var_id)
                coeffs[t.var_id] = 0.0
            coeffs[t.var_id] += t.coeff * scale

    # prune cancelled terms so they don't eat capacity in later rounds
    terms = [LinearTerm(v, coeffs[v]) for v in order if coeffs[v] != 0.0]
    return LinearInequality(
        terms=tuple(terms),
        constant=lower.constant * upper_abs_coeff + upper.constant * lower_coeff,
        strict=lower.strict or upper.strict,
    )


def _all_integer(ineq: LinearInequality, vars: VarInfo) -> bool:
    return all(vars.is_integer(t.var_id) for t in ineq.terms)


def eliminate_variable(system: InequalitySystem, var_id: int) -> InequalitySystem:
    vars = system.vars
    if var_id < 0 or var_id >= len(vars):
        raise PreconditionError(f"eliminate_variable: var_id {var_id} out of range")

    result = InequalitySystem((), vars)
    lowers: List[Tuple[LinearInequality, float]] = []
    uppers: List[Tuple[LinearInequality, float]] = []

    for ineq in system.inequalities:
        coeff = ineq.coefficient_of(var_id)
        if coeff > 0.0:
            lowers.append((ineq, coeff))
        elif coeff < 0.0:
            uppers.append((ineq, -coeff))
        else:
            result = result.add(ineq)

    if vars.is_integer(var_id):
        # a bound that mixes in real variables has no integer granularity
        lowers = [
            (round_integer_bound(i, True, c) if _all_integer(i, vars) else i, c)
            for i, c in lowers
        ]
        uppers = [
            (round_integer_bound(i, False, c) if _all_integer(i, vars) else i, c)
            for i, c in uppers
        ]

    for lower, lc in lowers:
        for upper, uc in uppers:
            result = result.add(combine_bounds(lower, lc, upper, uc, var_id, system.limits))

    return result


def has_contradiction(system: InequalitySystem) -> bool:
    """Check a constant-only system: `c >= 0` with c < 0, or `c > 0` with c <= 0."""
    for ineq in system.inequalities:
        if ineq.terms:
            raise PreconditionError("has_contradiction: system still has variable terms")
        if ineq.strict and ineq.constant <= 0.0:
            return True
        if not ineq.strict and ineq.constant < 0.0:
            return True
    return False


def fm_is_unsat(system: InequalitySystem) -> bool:
    for var_id in range(len(system.vars)):
        system = eliminate_variable(system, var_id)
    return has_contradiction(system)
