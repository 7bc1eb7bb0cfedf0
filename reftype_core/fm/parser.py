"""
Predicate tree -> DNF of linear inequality systems.

The input vocabulary is fixed:

    arithmetic:  literal, variable, add, sub, neg, mul, div
    comparison:  eq, lt, gt, le, ge
    boolean:     land, lor, lnot

Negation is pushed to the leaves (De Morgan) by the mutually recursive pair
`parse_formula` / `parse_negated`, so every DNF clause is a plain conjunction
of `>= 0` / `> 0` inequalities. Variables are registered in one shared VarInfo
(integer domain unless the caller pre-registered them as real).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, Optional, Tuple

from ..config import DEFAULT_LIMITS, SolverLimits
from ..language.ast import (
    Expression, Variable, Literal, BinaryOp, UnaryOp,
    ComparisonOperator, LogicalOperator, ArithmeticOperator,
)
from .errors import (
    CapacityError, PreconditionError, UnsupportedNodeError,
    NonLinearMultiplicationError, NonLinearDivisionError, DivisionByZeroError,
)
from .types import InequalitySystem, LinearInequality, LinearTerm, VarInfo


# ============================================================================
# LINEAR EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class LinearExpr:
    """Σ coeffs[id] * x_id + constant (intermediate form, before comparison)."""
    coeffs: Dict[int, float] = field(default_factory=dict)
    constant: float = 0.0

    def is_constant(self) -> bool:
        return all(c == 0 for c in self.coeffs.values())


def const_expr(value: float) -> LinearExpr:
    return LinearExpr({}, float(value))


def var_expr(var_id: int) -> LinearExpr:
    return LinearExpr({var_id: 1.0}, 0.0)


def add_expr(a: LinearExpr, b: LinearExpr) -> LinearExpr:
    coeffs = dict(a.coeffs)
    for var_id, c in b.coeffs.items():
        coeffs[var_id] = coeffs.get(var_id, 0.0) + c
    return LinearExpr(coeffs, a.constant + b.constant)


def scale_expr(a: LinearExpr, k: float) -> LinearExpr:
    return LinearExpr({v: c * k for v, c in a.coeffs.items()}, a.constant * k)


def negate_expr(a: LinearExpr) -> LinearExpr:
    return scale_expr(a, -1.0)


def sub_expr(a: LinearExpr, b: LinearExpr) -> LinearExpr:
    return add_expr(a, negate_expr(b))


def to_inequality(lhs: LinearExpr, rhs: LinearExpr, strict: bool,
                  limits: SolverLimits = DEFAULT_LIMITS) -> LinearInequality:
    """`lhs - rhs >= 0` (or `> 0`), zero coefficients dropped, ids ascending."""
    diff = sub_expr(lhs, rhs)
    terms = [LinearTerm(v, c) for v, c in sorted(diff.coeffs.items()) if c != 0.0]
    return LinearInequality.make(terms, diff.constant, strict, limits)


# ============================================================================
# DNF
# ============================================================================

@dataclass(frozen=True)
class ParseResult:
    """Disjunction of conjunctive systems (clauses)."""
    clauses: Tuple[InequalitySystem, ...] = ()
    limits: SolverLimits = DEFAULT_LIMITS

    def is_conjunctive(self) -> bool:
        return len(self.clauses) == 1

    def system(self) -> InequalitySystem:
        if not self.is_conjunctive():
            raise PreconditionError(f"system() requires exactly one clause, DNF has {len(self.clauses)}")
        return self.clauses[0]

    def add_clause(self, system: InequalitySystem) -> "ParseResult":
        if len(self.clauses) >= self.limits.max_clauses:
            raise CapacityError("clauses", self.limits.max_clauses)
        return replace(self, clauses=self.clauses + (system,))

    def with_vars(self, vars: VarInfo) -> "ParseResult":
        return replace(self, clauses=tuple(c.with_vars(vars) for c in self.clauses))

    @property
    def vars(self) -> Optional[VarInfo]:
        return self.clauses[0].vars if self.clauses else None

    def __len__(self) -> int:
        return len(self.clauses)

    def __iter__(self) -> Iterator[InequalitySystem]:
        return iter(self.clauses)


def single_clause(vars: VarInfo, *ineqs: LinearInequality) -> ParseResult:
    system = InequalitySystem((), vars).extend(ineqs)
    return ParseResult((system,), vars.limits)


def merge_systems(a: InequalitySystem, b: InequalitySystem) -> InequalitySystem:
    """Conjunction of two clauses; the larger registry wins."""
    vars = a.vars if len(a.vars) >= len(b.vars) else b.vars
    return a.with_vars(vars).extend(b.inequalities)


def conjoin(a: ParseResult, b: ParseResult) -> ParseResult:
    """(A1 ∨ A2 ..) ∧ (B1 ∨ B2 ..) as the cross product of clauses."""
    limits = a.limits
    if len(a.clauses) * len(b.clauses) > limits.max_clauses:
        raise CapacityError("clauses", limits.max_clauses)
    result = ParseResult((), limits)
    for ca in a.clauses:
        for cb in b.clauses:
            result = result.add_clause(merge_systems(ca, cb))
    return result


def disjoin(a: ParseResult, b: ParseResult) -> ParseResult:
    result = a
    for clause in b.clauses:
        result = result.add_clause(clause)
    return result


# ============================================================================
# PARSER
# ============================================================================

class FormulaParser:
    """
    Translates predicate trees into DNF against one registry.

    Several formulas parsed through the same FormulaParser share variable
    ids, which is what implication checks need.
    """

    def __init__(self, vars: Optional[VarInfo] = None, limits: Optional[SolverLimits] = None):
        self.vars: VarInfo = vars if vars is not None else VarInfo(limits)
        self.limits: SolverLimits = self.vars.limits

    def parse(self, node: Expression) -> ParseResult:
        return self.parse_formula(node)

    def finish(self, result: ParseResult) -> ParseResult:
        """Rebind the final registry onto every clause."""
        return result.with_vars(self.vars.copy())

    # -----------------------------
    # Arithmetic
    # -----------------------------
    def parse_arith(self, node: Expression) -> LinearExpr:
        if isinstance(node, Literal):
            if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
                raise UnsupportedNodeError(f"non-numeric literal {node.value!r} in arithmetic", node.location)
            return const_expr(node.value)

        if isinstance(node, Variable):
            return var_expr(self.vars.find_or_add(node.name, True))

        if isinstance(node, UnaryOp) and node.operator == ArithmeticOperator.SUB:
            return negate_expr(self.parse_arith(node.operand))

        if isinstance(node, BinaryOp) and isinstance(node.operator, ArithmeticOperator):
            left = self.parse_arith(node.left)
            right = self.parse_arith(node.right)
            op = node.operator

            if op == ArithmeticOperator.ADD:
                return add_expr(left, right)
            if op == ArithmeticOperator.SUB:
                return sub_expr(left, right)
            if op == ArithmeticOperator.MUL:
                if left.is_constant():
                    return scale_expr(right, left.constant)
                if right.is_constant():
                    return scale_expr(left, right.constant)
                raise NonLinearMultiplicationError("multiplication of two non-constant terms", node.location)
            if op == ArithmeticOperator.DIV:
                if not right.is_constant():
                    raise NonLinearDivisionError("division by a non-constant term", node.location)
                if right.constant == 0:
                    raise DivisionByZeroError("division by zero", node.location)
                return scale_expr(left, 1.0 / right.constant)

        raise UnsupportedNodeError(f"unsupported arithmetic node: {node!r}", getattr(node, "location", None))

    # -----------------------------
    # Comparisons
    # -----------------------------
    def parse_comparison(self, node: BinaryOp, negate: bool = False) -> ParseResult:
        op = node.operator
        if op == ComparisonOperator.NEQ:
            op, negate = ComparisonOperator.EQ, not negate

        lhs = self.parse_arith(node.left)
        rhs = self.parse_arith(node.right)

        def ineq(a: LinearExpr, b: LinearExpr, strict: bool) -> LinearInequality:
            return to_inequality(a, b, strict, self.limits)

        if op == ComparisonOperator.EQ:
            if not negate:
                return single_clause(self.vars, ineq(lhs, rhs, False), ineq(rhs, lhs, False))
            # a != b  ->  (b - a > 0) ∨ (a - b > 0)
            return disjoin(single_clause(self.vars, ineq(rhs, lhs, True)),
                           single_clause(self.vars, ineq(lhs, rhs, True)))

        # ¬(e >= 0) ≡ -e > 0 ; ¬(e > 0) ≡ -e >= 0
        table = {
            (ComparisonOperator.GT, False): (lhs, rhs, True),
            (ComparisonOperator.GTE, False): (lhs, rhs, False),
            (ComparisonOperator.LT, False): (rhs, lhs, True),
            (ComparisonOperator.LTE, False): (rhs, lhs, False),
            (ComparisonOperator.GT, True): (rhs, lhs, False),
            (ComparisonOperator.GTE, True): (rhs, lhs, True),
            (ComparisonOperator.LT, True): (lhs, rhs, False),
            (ComparisonOperator.LTE, True): (lhs, rhs, True),
        }
        key = (op, negate)
        if key not in table:
            raise UnsupportedNodeError(f"unsupported comparison operator: {op}", node.location)
        a, b, strict = table[key]
        return single_clause(self.vars, ineq(a, b, strict))

    # -----------------------------
    # Formulas
    # -----------------------------
    def parse_formula(self, node: Expression) -> ParseResult:
        if isinstance(node, BinaryOp):
            if isinstance(node.operator, ComparisonOperator):
                return self.parse_comparison(node, negate=False)
            if node.operator == LogicalOperator.AND:
                return conjoin(self.parse_formula(node.left), self.parse_formula(node.right))
            if node.operator == LogicalOperator.OR:
                return disjoin(self.parse_formula(node.left), self.parse_formula(node.right))

        if isinstance(node, UnaryOp) and node.operator == LogicalOperator.NOT:
            return self.parse_negated(node.operand)

        raise UnsupportedNodeError(f"unsupported formula node: {node!r}", getattr(node, "location", None))

    def parse_negated(self, node: Expression) -> ParseResult:
        if isinstance(node, BinaryOp):
            if isinstance(node.operator, ComparisonOperator):
                return self.parse_comparison(node, negate=True)
            # ¬(A ∧ B) ≡ ¬A ∨ ¬B
            if node.operator == LogicalOperator.AND:
                return disjoin(self.parse_negated(node.left), self.parse_negated(node.right))
            # ¬(A ∨ B) ≡ ¬A ∧ ¬B
            if node.operator == LogicalOperator.OR:
                return conjoin(self.parse_negated(node.left), self.parse_negated(node.right))

        if isinstance(node, UnaryOp) and node.operator == LogicalOperator.NOT:
            return self.parse_formula(node.operand)

        raise UnsupportedNodeError(f"unsupported formula node: {node!r}", getattr(node, "location", None))


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def parse_arith(node: Expression, vars: VarInfo) -> LinearExpr:
    return FormulaParser(vars).parse_arith(node)


def parse_comparison(node: BinaryOp, vars: VarInfo, negate: bool = False) -> ParseResult:
    return FormulaParser(vars).parse_comparison(node, negate)


def parse_formula(node: Expression, vars: VarInfo) -> ParseResult:
    return FormulaParser(vars).parse_formula(node)


def parse_negated(node: Expression, vars: VarInfo) -> ParseResult:
    return FormulaParser(vars).parse_negated(node)


def parse_to_system(formula: Expression, vars: Optional[VarInfo] = None) -> ParseResult:
    """
    Parse a predicate into DNF.

    `vars` seeds the registry (e.g. to mark variables as real); it is copied,
    never mutated. Every clause of the result carries the final registry.
    """
    parser = FormulaParser(vars.copy() if vars is not None else None)
    return parser.finish(parser.parse_formula(formula))
