"""
Subtyping and join for refinement types.

Refinement subtyping reduces to linear-arithmetic implication:

    {#v : B1 | P} <: {#v : B2 | Q}   iff   B1 widens to B2  and  P => Q

The value variable #v ranges over integers unless the relevant base is Real.
"""

from __future__ import annotations

from typing import Optional

from ..config import SolverLimits
from ..fm.solver import is_valid, is_valid_implication
from ..fm.types import VarInfo
from ..language.ast import lor
from ..language.types import (
    VALUE_VAR, BaseKind, BaseType, RefinedType, ArrowType, Type,
    TInt, TReal, tref, types_equal,
)


class SubtypeError(Exception):
    """Raised when two types have no join."""
    pass


# Bool <: Int <: Real
_WIDENS = {
    (BaseKind.BOOL, BaseKind.INT),
    (BaseKind.INT, BaseKind.REAL),
    (BaseKind.BOOL, BaseKind.REAL),
}


def base_widens(sub: BaseType, sup: BaseType) -> bool:
    return (sub.kind, sup.kind) in _WIDENS


def base_compatible(sub: BaseType, sup: BaseType) -> bool:
    return sub.kind == sup.kind or base_widens(sub, sup)


def wider_base(a: BaseType, b: BaseType) -> BaseType:
    if a.kind == b.kind:
        return a
    if BaseKind.REAL in (a.kind, b.kind):
        return TReal
    if BaseKind.INT in (a.kind, b.kind):
        return TInt
    raise SubtypeError(f"incompatible base types for widening: {a!r}, {b!r}")


def value_vars(base: BaseType, limits: Optional[SolverLimits] = None) -> VarInfo:
    """Registry with #v registered in the domain `base` implies."""
    vars = VarInfo(limits)
    vars.find_or_add(VALUE_VAR, base.kind != BaseKind.REAL)
    return vars


def is_subtype(sub: Type, sup: Type, limits: Optional[SolverLimits] = None) -> bool:
    if types_equal(sub, sup):
        return True

    if isinstance(sub, BaseType) and isinstance(sup, BaseType):
        return base_widens(sub, sup)

    # an unrefined type fits a refinement only if the refinement always holds
    if isinstance(sub, BaseType) and isinstance(sup, RefinedType):
        if not base_compatible(sub, sup.base):
            return False
        return is_valid(sup.predicate, value_vars(sup.base, limits))

    if isinstance(sub, RefinedType) and isinstance(sup, BaseType):
        return base_compatible(sub.base, sup)

    if isinstance(sub, RefinedType) and isinstance(sup, RefinedType):
        if not base_compatible(sub.base, sup.base):
            return False
        # #v ranges over the narrower type
        return is_valid_implication(sub.predicate, sup.predicate, value_vars(sub.base, limits))

    if isinstance(sub, ArrowType) and isinstance(sup, ArrowType):
        return is_subtype(sup.input, sub.input, limits) and is_subtype(sub.output, sup.output, limits)

    return False


def join(t1: Type, t2: Type) -> Type:
    """Least upper bound."""
    if types_equal(t1, t2):
        return t1

    if isinstance(t1, BaseType) and isinstance(t2, BaseType):
        return wider_base(t1, t2)

    if isinstance(t1, RefinedType) and isinstance(t2, RefinedType):
        return tref(wider_base(t1.base, t2.base), lor(t1.predicate, t2.predicate))

    if isinstance(t1, RefinedType) and isinstance(t2, BaseType):
        return wider_base(t1.base, t2)
    if isinstance(t1, BaseType) and isinstance(t2, RefinedType):
        return wider_base(t1, t2.base)

    raise SubtypeError(f"incompatible types for join: {t1!r}, {t2!r}")
