"""
Abstract Syntax Tree (AST) for refinement predicates

Defines the node types of the predicate vocabulary and builder helpers.

    arithmetic:  Literal, Variable, + - * / and unary -
    comparison:  == != < > <= >=
    boolean:     AND OR NOT
"""

from typing import List, Optional, Dict, Any, Union, Set
from enum import Enum
from dataclasses import dataclass, field, is_dataclass, fields


# ============================================================================
# BASE NODE
# ============================================================================

@dataclass(kw_only=True)
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location (line, column) for error reporting
    """
    location: Optional[tuple] = field(default=None, compare=False)  # (line, column)

    def __repr__(self):
        return f"{self.__class__.__name__}(...)"


# ============================================================================
# OPERATORS (Enums)
# ============================================================================

class ComparisonOperator(Enum):
    """Comparison operators"""
    EQ = "=="   # Equal
    NEQ = "!="  # Not equal (sugar for NOT ==)
    LT = "<"    # Less than
    GT = ">"    # Greater than
    LTE = "<="  # Less than or equal
    GTE = ">="  # Greater than or equal


class LogicalOperator(Enum):
    """Logical operators"""
    AND = "AND"
    OR = "OR"
    NOT = "NOT"


class ArithmeticOperator(Enum):
    """Arithmetic operators"""
    ADD = "+"
    SUB = "-"  # binary minus, or negation when used in UnaryOp
    MUL = "*"
    DIV = "/"


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass
class Expression(ASTNode):
    """Base class for expressions"""
    pass


@dataclass
class Variable(Expression):
    """Variable reference"""
    name: str

    def __repr__(self):
        return f"Variable({self.name})"


@dataclass
class Literal(Expression):
    """Literal value (number or boolean)"""
    value: Union[int, float, bool]
    type: str  # "int", "float", "bool"

    def __repr__(self):
        return f"Literal({self.value})"


@dataclass
class BinaryOp(Expression):
    """Binary operation (e.g., a + b, x < y)"""
    left: Expression
    operator: Union[ComparisonOperator, LogicalOperator, ArithmeticOperator]
    right: Expression

    def __repr__(self):
        return f"BinaryOp({self.left} {self.operator.value} {self.right})"


@dataclass
class UnaryOp(Expression):
    """Unary operation (e.g., NOT x, -y)"""
    operator: Union[LogicalOperator, ArithmeticOperator]
    operand: Expression

    def __repr__(self):
        return f"UnaryOp({self.operator.value} {self.operand})"


# ============================================================================
# BUILDERS
# ============================================================================

Operand = Union[Expression, int, float, str]


def lit(value: Union[int, float]) -> Literal:
    if isinstance(value, bool):
        return Literal(value=value, type="bool")
    if isinstance(value, int):
        return Literal(value=value, type="int")
    return Literal(value=float(value), type="float")


def var(name: str) -> Variable:
    return Variable(name=name)


def _coerce(x: Operand) -> Expression:
    """Numbers become literals, strings become variables."""
    if isinstance(x, Expression):
        return x
    if isinstance(x, str):
        return Variable(name=x)
    if isinstance(x, (int, float)):
        return lit(x)
    raise TypeError(f"cannot build a predicate node from {x!r}")


def add(a: Operand, b: Operand) -> BinaryOp:
    return BinaryOp(left=_coerce(a), operator=ArithmeticOperator.ADD, right=_coerce(b))


def sub(a: Operand, b: Operand) -> BinaryOp:
    return BinaryOp(left=_coerce(a), operator=ArithmeticOperator.SUB, right=_coerce(b))


def neg(a: Operand) -> UnaryOp:
    return UnaryOp(operator=ArithmeticOperator.SUB, operand=_coerce(a))


def mul(a: Operand, b: Operand) -> BinaryOp:
    return BinaryOp(left=_coerce(a), operator=ArithmeticOperator.MUL, right=_coerce(b))


def div(a: Operand, b: Operand) -> BinaryOp:
    return BinaryOp(left=_coerce(a), operator=ArithmeticOperator.DIV, right=_coerce(b))


def eq(a: Operand, b: Operand) -> BinaryOp:
    return BinaryOp(left=_coerce(a), operator=ComparisonOperator.EQ, right=_coerce(b))


def ne(a: Operand, b: Operand) -> UnaryOp:
    return lnot(eq(a, b))


def lt(a: Operand, b: Operand) -> BinaryOp:
    return BinaryOp(left=_coerce(a), operator=ComparisonOperator.LT, right=_coerce(b))


def gt(a: Operand, b: Operand) -> BinaryOp:
    return BinaryOp(left=_coerce(a), operator=ComparisonOperator.GT, right=_coerce(b))


def le(a: Operand, b: Operand) -> BinaryOp:
    return BinaryOp(left=_coerce(a), operator=ComparisonOperator.LTE, right=_coerce(b))


def ge(a: Operand, b: Operand) -> BinaryOp:
    return BinaryOp(left=_coerce(a), operator=ComparisonOperator.GTE, right=_coerce(b))


def land(a: Expression, b: Expression) -> BinaryOp:
    return BinaryOp(left=a, operator=LogicalOperator.AND, right=b)


def lor(a: Expression, b: Expression) -> BinaryOp:
    return BinaryOp(left=a, operator=LogicalOperator.OR, right=b)


def lnot(a: Expression) -> UnaryOp:
    return UnaryOp(operator=LogicalOperator.NOT, operand=a)


def conjunction(*preds: Expression) -> Expression:
    """Left-nested AND of one or more predicates."""
    if not preds:
        raise ValueError("conjunction() needs at least one predicate")
    result = preds[0]
    for p in preds[1:]:
        result = land(result, p)
    return result


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def visit_ast(node: ASTNode, visitor_func, _seen=None):
    """
    Visit all nodes in AST tree in a deterministic, dataclass-safe way.
    """
    if _seen is None:
        _seen = set()

    node_id = id(node)
    if node_id in _seen:
        return
    _seen.add(node_id)

    visitor_func(node)

    if not is_dataclass(node):
        return

    for f in fields(node):
        if f.name == "location":
            continue
        attr = getattr(node, f.name)

        if isinstance(attr, ASTNode):
            visit_ast(attr, visitor_func, _seen)


def collect_variables(node: ASTNode) -> List[str]:
    """Variable names in first-occurrence order."""
    names: List[str] = []
    seen: Set[str] = set()

    def _visit(n):
        if isinstance(n, Variable) and n.name not in seen:
            seen.add(n.name)
            names.append(n.name)

    visit_ast(node, _visit)
    return names


def ast_to_dict(node: ASTNode) -> Dict[str, Any]:
    """
    Convert AST node to dictionary (for JSON serialization).

    Args:
        node: AST node

    Returns:
        Dictionary representation
    """
    result = {"type": node.__class__.__name__}

    for attr_name, attr_value in node.__dict__.items():
        if attr_name == "location":
            result[attr_name] = attr_value
            continue

        if isinstance(attr_value, ASTNode):
            result[attr_name] = ast_to_dict(attr_value)
        elif isinstance(attr_value, Enum):
            result[attr_name] = attr_value.value
        else:
            result[attr_name] = attr_value

    return result


# Binding strength for infix rendering; higher binds tighter.
_PRECEDENCE = {
    LogicalOperator.OR: 1,
    LogicalOperator.AND: 2,
    ComparisonOperator.EQ: 3, ComparisonOperator.NEQ: 3,
    ComparisonOperator.LT: 3, ComparisonOperator.GT: 3,
    ComparisonOperator.LTE: 3, ComparisonOperator.GTE: 3,
    ArithmeticOperator.ADD: 4, ArithmeticOperator.SUB: 4,
    ArithmeticOperator.MUL: 5, ArithmeticOperator.DIV: 5,
}


def format_expression(node: Expression) -> str:
    """
    Render a predicate in the infix syntax accepted by the text parser.

    Parentheses are emitted only where precedence requires them, so
    parse_predicate(format_expression(e)) rebuilds an equivalent tree
    (a negative literal comes back as a negated positive one).
    """
    return _fmt(node, 0)


def _fmt(node: Expression, parent: int) -> str:
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, Literal):
        if isinstance(node.value, bool):
            return "TRUE" if node.value else "FALSE"
        return str(node.value)
    if isinstance(node, UnaryOp):
        if node.operator == LogicalOperator.NOT:
            return f"NOT {_fmt(node.operand, 6)}"
        return f"-{_fmt(node.operand, 6)}"
    if isinstance(node, BinaryOp):
        prec = _PRECEDENCE[node.operator]
        # left-associative; comparisons do not chain at all
        left_prec = prec + 1 if isinstance(node.operator, ComparisonOperator) else prec
        text = f"{_fmt(node.left, left_prec)} {node.operator.value} {_fmt(node.right, prec + 1)}"
        return f"({text})" if prec < parent else text
    raise TypeError(f"cannot format {node!r}")
