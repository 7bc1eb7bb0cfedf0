"""
z3 cross-check for Fourier-Motzkin verdicts.

The FM core is sound but incomplete for integer divisibility. Encoding the
same DNF into z3 (Int / Real per registry flag, coefficients as exact
rationals) lets the verifier
- extract a concrete model when FM says SAT or an implication fails,
- flag an FM "SAT" that z3 refutes (expected incompleteness, warning),
- flag an FM "UNSAT" that z3 satisfies (a soundness bug, error).
"""

from __future__ import annotations

from fractions import Fraction
from typing import Any, Dict, List, Optional, Tuple

import z3

from ...fm.parser import ParseResult
from ...fm.types import InequalitySystem, LinearInequality, VarInfo


SAT = "sat"
UNSAT = "unsat"
UNKNOWN = "unknown"


class Z3CrossChecker:
    def __init__(self, timeout_ms: int = 5000):
        self.timeout_ms = timeout_ms
        self.z3_vars: Dict[str, z3.ExprRef] = {}
        self._integer: Dict[str, bool] = {}

    # -----------------------------
    # Encoding
    # -----------------------------
    def declare(self, vars: VarInfo):
        """(Re)build the symbol table for one registry."""
        self.z3_vars = {}
        self._integer = {}
        for name, is_integer in vars:
            self.z3_vars[name] = z3.Int(name) if is_integer else z3.Real(name)
            self._integer[name] = is_integer

    def _as_real(self, name: str) -> z3.ArithRef:
        sym = self.z3_vars[name]
        return z3.ToReal(sym) if self._integer[name] else sym

    @staticmethod
    def _rational(x: float) -> z3.RatNumRef:
        f = Fraction(x)
        return z3.RealVal(f"{f.numerator}/{f.denominator}")

    def encode_inequality(self, ineq: LinearInequality, vars: VarInfo) -> z3.BoolRef:
        lhs = self._rational(ineq.constant)
        for t in ineq.terms:
            lhs = lhs + self._rational(t.coeff) * self._as_real(vars.name(t.var_id))
        return lhs > 0 if ineq.strict else lhs >= 0

    def encode_system(self, system: InequalitySystem) -> z3.BoolRef:
        parts = [self.encode_inequality(i, system.vars) for i in system.inequalities]
        return z3.And(*parts) if parts else z3.BoolVal(True)

    def encode_dnf(self, dnf: ParseResult) -> z3.BoolRef:
        parts = [self.encode_system(c) for c in dnf.clauses]
        return z3.Or(*parts) if parts else z3.BoolVal(False)

    # -----------------------------
    # Queries
    # -----------------------------
    def check(self, dnf: ParseResult) -> Tuple[str, Optional[Dict[str, Any]]]:
        """Satisfiability of a DNF: (verdict, model-or-None)."""
        if dnf.vars is None:
            return UNSAT, None
        self.declare(dnf.vars)
        return self._solve(self.encode_dnf(dnf))

    def find_counterexample(self, premise: ParseResult, conclusion: ParseResult) -> Tuple[str, Optional[Dict[str, Any]]]:
        """
        Model of premise ∧ ¬conclusion. Both DNFs must share one registry
        (as produced by one FormulaParser).
        """
        vars = self._shared_vars(premise, conclusion)
        if vars is None:
            return UNSAT, None
        self.declare(vars)
        p = self.encode_dnf(premise)
        q = self.encode_dnf(conclusion)
        return self._solve(z3.And(p, z3.Not(q)))

    def _solve(self, formula: z3.BoolRef) -> Tuple[str, Optional[Dict[str, Any]]]:
        solver = z3.Solver()
        solver.set("timeout", self.timeout_ms)
        solver.add(formula)
        res = solver.check()
        if res == z3.sat:
            return SAT, self._model_to_dict(solver.model())
        if res == z3.unsat:
            return UNSAT, None
        return UNKNOWN, None

    @staticmethod
    def _shared_vars(premise: ParseResult, conclusion: ParseResult) -> Optional[VarInfo]:
        candidates: List[VarInfo] = [d.vars for d in (premise, conclusion) if d.vars is not None]
        if not candidates:
            return None
        return max(candidates, key=len)

    def _model_to_dict(self, model: z3.ModelRef) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for name in sorted(self.z3_vars):
            z = self.z3_vars[name]
            val = model.eval(z, model_completion=True)
            if z3.is_int_value(val):
                result[name] = val.as_long()
            elif z3.is_rational_value(val):
                frac = val.as_fraction()
                result[name] = int(frac) if frac.denominator == 1 else float(frac)
            else:
                result[name] = str(val)
        return result


def model_satisfies(dnf: ParseResult, model: Dict[str, Any]) -> bool:
    """Evaluate a DNF directly under a model (independent of either solver)."""
    return any(clause.holds(model) for clause in dnf.clauses)
