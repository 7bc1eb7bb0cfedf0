from __future__ import annotations

from .ast import Expression, Variable, Literal, BinaryOp, UnaryOp, format_expression
from .parser import parse_predicate, parse_predicate_file, ParseError
from .validator import PredicateValidator, ValidationError
from .types import BaseKind, BaseType, RefinedType, ArrowType, TInt, TBool, TReal, tref, tarr, pos_int

__all__ = [
    "Expression",
    "Variable",
    "Literal",
    "BinaryOp",
    "UnaryOp",
    "format_expression",
    "parse_predicate",
    "parse_predicate_file",
    "ParseError",
    "PredicateValidator",
    "ValidationError",
    "BaseKind",
    "BaseType",
    "RefinedType",
    "ArrowType",
    "TInt",
    "TBool",
    "TReal",
    "tref",
    "tarr",
    "pos_int",
]
