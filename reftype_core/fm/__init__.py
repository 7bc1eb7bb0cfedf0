from __future__ import annotations

from .errors import (
    FMError, NonLinearError, NonLinearMultiplicationError, NonLinearDivisionError,
    DivisionByZeroError, UnsupportedNodeError, CapacityError, PreconditionError,
)
from .types import LinearTerm, LinearInequality, VarInfo, InequalitySystem, format_inequality, format_system
from .parser import ParseResult, FormulaParser, parse_to_system
from .rounding import round_integer_bound
from .eliminate import eliminate_variable, has_contradiction, fm_is_unsat
from .disjunction import negate_inequality, clause_implies, remove_unsat_clauses, remove_subsumed_clauses, simplify_dnf
from .solver import is_unsat, is_sat, is_valid, is_valid_implication

__all__ = [
    "FMError",
    "NonLinearError",
    "NonLinearMultiplicationError",
    "NonLinearDivisionError",
    "DivisionByZeroError",
    "UnsupportedNodeError",
    "CapacityError",
    "PreconditionError",
    "LinearTerm",
    "LinearInequality",
    "VarInfo",
    "InequalitySystem",
    "format_inequality",
    "format_system",
    "ParseResult",
    "FormulaParser",
    "parse_to_system",
    "round_integer_bound",
    "eliminate_variable",
    "has_contradiction",
    "fm_is_unsat",
    "negate_inequality",
    "clause_implies",
    "remove_unsat_clauses",
    "remove_subsumed_clauses",
    "simplify_dnf",
    "is_unsat",
    "is_sat",
    "is_valid",
    "is_valid_implication",
]
