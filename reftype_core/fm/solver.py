"""
Public decision API.

    is_unsat / is_sat          satisfiability of a system, a DNF or a predicate
    is_valid                   predicate holds for every assignment
    is_valid_implication       premise => conclusion (refinement subtyping)

Variables default to the integer domain; pass a VarInfo with variables
pre-registered as real to decide over the reals instead.
"""

from __future__ import annotations

from typing import Optional, Union

from ..language.ast import Expression, land, lnot
from .disjunction import clause_implies
from .eliminate import fm_is_unsat
from .errors import UnsupportedNodeError
from .parser import FormulaParser, ParseResult, parse_to_system
from .types import InequalitySystem, VarInfo


Decidable = Union[InequalitySystem, ParseResult, Expression]


def is_unsat(formula: Decidable, vars: Optional[VarInfo] = None) -> bool:
    """
    A system is decided by elimination; a DNF is UNSAT iff every clause is
    (the empty DNF is UNSAT); a predicate is parsed first.
    """
    if isinstance(formula, InequalitySystem):
        return fm_is_unsat(formula)
    if isinstance(formula, ParseResult):
        return all(fm_is_unsat(clause) for clause in formula.clauses)
    if isinstance(formula, Expression):
        return is_unsat(parse_to_system(formula, vars))
    raise UnsupportedNodeError(f"cannot decide object of type {type(formula).__name__}")


def is_sat(formula: Decidable, vars: Optional[VarInfo] = None) -> bool:
    return not is_unsat(formula, vars)


def is_valid(formula: Expression, vars: Optional[VarInfo] = None) -> bool:
    return is_unsat(parse_to_system(lnot(formula), vars))


def is_valid_implication(premise: Expression, conclusion: Expression,
                         vars: Optional[VarInfo] = None) -> bool:
    parser = FormulaParser(vars.copy() if vars is not None else None)
    p = parser.parse_formula(premise)
    q = parser.parse_formula(conclusion)

    final = parser.vars.copy()
    p = p.with_vars(final)
    q = q.with_vars(final)

    if q.is_conjunctive():
        target = q.system()
        return all(clause_implies(clause, target) for clause in p.clauses)

    # disjunctive conclusion: P ∧ ¬Q must be UNSAT
    return is_unsat(parse_to_system(land(premise, lnot(conclusion)), vars))
