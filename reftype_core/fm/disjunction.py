"""
DNF-level operations: clause implication and clause cleanup.

Implication between two conjunctions is decided one conclusion inequality at
a time (A ∧ ¬b_i UNSAT for every b_i), so the conclusion is never negated as a
whole and no disjunctive blow-up occurs.
"""

from __future__ import annotations

from typing import List

from .eliminate import fm_is_unsat
from .errors import PreconditionError
from .parser import ParseResult
from .types import InequalitySystem, LinearInequality, LinearTerm


def negate_inequality(ineq: LinearInequality) -> LinearInequality:
    """¬(e >= 0) is (-e > 0) and ¬(e > 0) is (-e >= 0)."""
    return LinearInequality(
        terms=tuple(LinearTerm(t.var_id, -t.coeff) for t in ineq.terms),
        constant=-ineq.constant,
        strict=not ineq.strict,
    )


def clause_implies(a: InequalitySystem, b: InequalitySystem) -> bool:
    """Every solution of `a` satisfies `b`."""
    if not a.vars.agrees_with(b.vars):
        raise PreconditionError(
            f"clause_implies: registries disagree on variable positions ({a.vars!r} vs {b.vars!r})"
        )
    base = a if len(a.vars) >= len(b.vars) else a.with_vars(b.vars)
    for ineq in b.inequalities:
        if not fm_is_unsat(base.add(negate_inequality(ineq))):
            return False
    return True


def remove_unsat_clauses(dnf: ParseResult) -> ParseResult:
    return ParseResult(tuple(c for c in dnf.clauses if not fm_is_unsat(c)), dnf.limits)


def remove_subsumed_clauses(dnf: ParseResult) -> ParseResult:
    """Drop every clause C_j that implies a surviving clause C_i (j != i)."""
    clauses = dnf.clauses
    subsumed: List[bool] = [False] * len(clauses)
    for i, ci in enumerate(clauses):
        if subsumed[i]:
            continue
        for j, cj in enumerate(clauses):
            if i == j or subsumed[j]:
                continue
            if clause_implies(cj, ci):
                subsumed[j] = True
    return ParseResult(tuple(c for c, gone in zip(clauses, subsumed) if not gone), dnf.limits)


def simplify_dnf(dnf: ParseResult) -> ParseResult:
    return remove_subsumed_clauses(remove_unsat_clauses(dnf))
