"""
Integer bound tightening (Omega-test style).

When the variable being eliminated ranges over integers, a bound such as
`x > 2.5` can be tightened to `x >= 3` before combining. Tightening only moves
the constant; coefficients are left alone and the result is non-strict.
"""

from __future__ import annotations

import math
from dataclasses import replace

from .errors import CapacityError
from .types import LinearInequality

# Values outside the signed 64-bit range cannot be rounded exactly.
_INT64_MIN = float(-(2 ** 63))
_INT64_MAX = float(2 ** 63 - 1)


def _check_range(x: float, fn: str):
    if math.isnan(x) or x < _INT64_MIN or x > _INT64_MAX:
        raise CapacityError("numeric range", message=f"{fn}: value {x!r} outside the integer rounding range")


def ceil_val(x: float) -> float:
    _check_range(x, "ceil_val")
    return float(math.ceil(x))


def floor_val(x: float) -> float:
    _check_range(x, "floor_val")
    return float(math.floor(x))


def is_integer_val(x: float) -> bool:
    _check_range(x, "is_integer_val")
    return float(x).is_integer()


def round_integer_bound(ineq: LinearInequality, is_lower: bool, target_coeff: float = 1.0) -> LinearInequality:
    """
    Tighten the constant of a bound on an integer variable.

    is_lower:     True when the variable's coefficient is positive (x >= ...)
    target_coeff: |coefficient| of the variable being eliminated

    A single-term bound is normalized by `target_coeff` first (2x >= 3 ->
    x >= 1.5 -> x >= 2 -> 2x >= 4). A multi-term bound is only tightened when
    every coefficient is an integer, and then as if the coefficient were 1.
    """
    if ineq.term_count > 1:
        if not all(is_integer_val(t.coeff) for t in ineq.terms):
            return ineq

    coeff = target_coeff if ineq.term_count == 1 else 1.0

    if is_lower:
        # a*x + c >= 0  ->  x >= -c/a
        bound = -ineq.constant / coeff
        if ineq.strict and is_integer_val(bound):
            constant = -(bound + 1.0) * coeff
        else:
            constant = -ceil_val(bound) * coeff
    else:
        # -a*x + c >= 0  ->  x <= c/a
        bound = ineq.constant / coeff
        if ineq.strict and is_integer_val(bound):
            constant = (bound - 1.0) * coeff
        else:
            constant = floor_val(bound) * coeff

    return replace(ineq, constant=constant, strict=False)
