"""
Predicate Validator - Vocabulary checks

Rejects predicates the decision procedure cannot consume, before any solving:
- unknown node classes or operators
- boolean or non-numeric literals
- boolean nodes used as arithmetic operands, arithmetic nodes used as formulas

Linearity is not checked here; the FM parser reports it as its own error kind.
"""

from typing import List, Optional, Any

from .ast import (
    Expression, Variable, Literal, BinaryOp, UnaryOp,
    ComparisonOperator, LogicalOperator, ArithmeticOperator,
)


class ValidationError(Exception):
    """Base exception for vocabulary validation errors."""
    def __init__(self, message: str, location: Optional[tuple] = None):
        self.message = message
        self.location = location
        prefix = f"Line {location[0]}, Col {location[1]}: " if location else ""
        super().__init__(f"{prefix}{message}")


class PredicateValidator:
    """
    Fail-closed vocabulary check.

    Collects every problem, then raises the first one.
    allowed_variables: optional whitelist of names (e.g. {"#v", "n"}).
    """

    def __init__(self, allowed_variables: Optional[set] = None):
        self.errors: List[ValidationError] = []
        self.allowed_variables = set(allowed_variables) if allowed_variables is not None else None

    def validate(self, predicate: Expression) -> bool:
        """Main validation entry point."""
        self.errors = []

        self._validate_formula(predicate)

        if self.errors:
            raise self.errors[0]

        return True

    def _validate_formula(self, expr: Any):
        loc = getattr(expr, "location", None)

        if isinstance(expr, BinaryOp) and isinstance(expr.operator, ComparisonOperator):
            self._validate_arith(expr.left)
            self._validate_arith(expr.right)
            return

        if isinstance(expr, BinaryOp) and expr.operator in (LogicalOperator.AND, LogicalOperator.OR):
            self._validate_formula(expr.left)
            self._validate_formula(expr.right)
            return

        if isinstance(expr, UnaryOp) and expr.operator == LogicalOperator.NOT:
            self._validate_formula(expr.operand)
            return

        if isinstance(expr, Literal) and isinstance(expr.value, bool):
            self.errors.append(ValidationError(
                f"Boolean constant {expr.value} is not supported; write a comparison instead", loc))
            return

        self.errors.append(ValidationError(f"Expected a comparison or boolean connective, got {self._describe(expr)}", loc))

    def _validate_arith(self, expr: Any):
        loc = getattr(expr, "location", None)

        if isinstance(expr, Variable):
            if self.allowed_variables is not None and expr.name not in self.allowed_variables:
                self.errors.append(ValidationError(f"Unknown variable '{expr.name}'", loc))
            return

        if isinstance(expr, Literal):
            if isinstance(expr.value, bool) or not isinstance(expr.value, (int, float)):
                self.errors.append(ValidationError(f"Expected a number, got literal {expr.value!r}", loc))
            return

        if isinstance(expr, UnaryOp) and expr.operator == ArithmeticOperator.SUB:
            self._validate_arith(expr.operand)
            return

        if isinstance(expr, BinaryOp) and isinstance(expr.operator, ArithmeticOperator):
            self._validate_arith(expr.left)
            self._validate_arith(expr.right)
            return

        self.errors.append(ValidationError(f"Expected an arithmetic term, got {self._describe(expr)}", loc))

    @staticmethod
    def _describe(expr: Any) -> str:
        if isinstance(expr, (BinaryOp, UnaryOp)):
            return f"{expr.__class__.__name__} '{expr.operator.value}'"
        return expr.__class__.__name__
