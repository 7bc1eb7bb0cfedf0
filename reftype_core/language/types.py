"""
Refinement types

    Int | Bool | Real                 base types
    {#v : Base | predicate}           refinement over the value variable #v
    (x : In) -> Out                   arrow types

Types are plain immutable values compared structurally (source locations of
predicate nodes are ignored).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .ast import Expression, Variable, gt, format_expression


VALUE_VAR = "#v"


class BaseKind(Enum):
    INT = "Int"
    BOOL = "Bool"
    REAL = "Real"


@dataclass(frozen=True)
class BaseType:
    kind: BaseKind

    def __repr__(self):
        return self.kind.value


@dataclass(frozen=True)
class RefinedType:
    """{#v : base | predicate}"""
    base: BaseType
    predicate: Expression

    def __repr__(self):
        return format_type(self)


@dataclass(frozen=True)
class ArrowType:
    """(param : input) -> output"""
    param: str
    input: "Type"
    output: "Type"

    def __repr__(self):
        return format_type(self)


Type = Union[BaseType, RefinedType, ArrowType]


TInt = BaseType(BaseKind.INT)
TBool = BaseType(BaseKind.BOOL)
TReal = BaseType(BaseKind.REAL)

_BASE_BY_NAME = {"int": TInt, "bool": TBool, "real": TReal}


def base_type(name: str) -> BaseType:
    """'int' / 'bool' / 'real' (case-insensitive) to a base type."""
    try:
        return _BASE_BY_NAME[name.lower()]
    except KeyError:
        raise ValueError(f"unknown base type '{name}' (expected one of: int, bool, real)")


def tref(base: BaseType, predicate: Expression) -> RefinedType:
    return RefinedType(base=base, predicate=predicate)


def tarr(param: str, input: Type, output: Type) -> ArrowType:
    return ArrowType(param=param, input=input, output=output)


def pos_int() -> RefinedType:
    """{#v : Int | #v > 0}"""
    return tref(TInt, gt(Variable(name=VALUE_VAR), 0))


def types_equal(a: Type, b: Type) -> bool:
    return a == b


def format_type(t: Type) -> str:
    if isinstance(t, BaseType):
        return t.kind.value
    if isinstance(t, RefinedType):
        return f"{{{VALUE_VAR} : {t.base.kind.value} | {format_expression(t.predicate)}}}"
    if isinstance(t, ArrowType):
        return f"({t.param} : {format_type(t.input)}) -> {format_type(t.output)}"
    raise TypeError(f"not a type: {t!r}")
