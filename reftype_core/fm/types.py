"""
Value model of the Fourier-Motzkin core.

A LinearInequality is the normalized form

    Σ coeff_i * x_i + constant  >= 0    (strict=False)
    Σ coeff_i * x_i + constant  >  0    (strict=True)

`<=` / `<` are stored negated, equality is two non-strict inequalities.
Variables are dense integer ids handed out by a VarInfo registry which also
records whether each variable ranges over integers or reals.

InequalitySystem values are immutable: `add` returns a new system, and every
system holds its own copy of the registry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from ..config import DEFAULT_LIMITS, SolverLimits
from .errors import CapacityError, PreconditionError


Number = Union[int, float]


# ============================================================================
# TERMS & INEQUALITIES
# ============================================================================

@dataclass(frozen=True)
class LinearTerm:
    """coeff * x[var_id]"""
    var_id: int
    coeff: float


@dataclass(frozen=True)
class LinearInequality:
    terms: Tuple[LinearTerm, ...] = ()
    constant: float = 0.0
    strict: bool = False

    @classmethod
    def make(
        cls,
        terms: Iterable[Union[LinearTerm, Tuple[int, Number]]] = (),
        constant: Number = 0.0,
        strict: bool = False,
        limits: SolverLimits = DEFAULT_LIMITS,
    ) -> "LinearInequality":
        """
        Build an inequality, enforcing the per-inequality term ceiling.

        Terms may be given as LinearTerm or as (var_id, coeff) pairs.
        """
        normalized: List[LinearTerm] = []
        for t in terms:
            if not isinstance(t, LinearTerm):
                var_id, coeff = t
                t = LinearTerm(int(var_id), float(coeff))
            normalized.append(t)
        if len(normalized) > limits.max_terms_per_ineq:
            raise CapacityError("terms per inequality", limits.max_terms_per_ineq)
        return cls(terms=tuple(normalized), constant=float(constant), strict=bool(strict))

    @property
    def term_count(self) -> int:
        return len(self.terms)

    def is_constant(self) -> bool:
        return not self.terms

    def coefficient_of(self, var_id: int) -> float:
        for t in self.terms:
            if t.var_id == var_id:
                return t.coeff
        return 0.0

    def evaluate(self, values: Mapping[int, Number]) -> float:
        """Left-hand side under an assignment of ids to numbers (missing ids count as 0)."""
        return sum(t.coeff * float(values.get(t.var_id, 0)) for t in self.terms) + self.constant

    def holds(self, values: Mapping[int, Number]) -> bool:
        lhs = self.evaluate(values)
        return lhs > 0 if self.strict else lhs >= 0


# ============================================================================
# VARIABLE REGISTRY
# ============================================================================

class VarInfo:
    """
    Ordered registry of (name, is_integer) pairs.

    Ids are positions and never change once handed out. Registering an
    existing name returns its id and keeps the domain flag it was first
    registered with.
    """

    def __init__(self, limits: Optional[SolverLimits] = None):
        self.limits: SolverLimits = limits or DEFAULT_LIMITS
        self._names: List[str] = []
        self._integer: List[bool] = []

    @classmethod
    def of(cls, *names: str, real: Sequence[str] = (), limits: Optional[SolverLimits] = None) -> "VarInfo":
        """Registry seeded with `names` (integer) and `real` (real-valued), in that order."""
        info = cls(limits)
        for n in names:
            info.find_or_add(n, True)
        for n in real:
            info.find_or_add(n, False)
        return info

    def find_or_add(self, name: str, is_integer: bool = True) -> int:
        found = self.find(name)
        if found is not None:
            return found
        if len(self._names) >= self.limits.max_vars:
            raise CapacityError("variables", self.limits.max_vars)
        self._names.append(name)
        self._integer.append(bool(is_integer))
        return len(self._names) - 1

    def find(self, name: str) -> Optional[int]:
        try:
            return self._names.index(name)
        except ValueError:
            return None

    def is_integer(self, var_id: int) -> bool:
        self._check_id(var_id)
        return self._integer[var_id]

    def name(self, var_id: int) -> str:
        self._check_id(var_id)
        return self._names[var_id]

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._names)

    def copy(self) -> "VarInfo":
        other = VarInfo(self.limits)
        other._names = list(self._names)
        other._integer = list(self._integer)
        return other

    def agrees_with(self, other: "VarInfo") -> bool:
        """True if the shorter registry is a positional prefix of the longer one."""
        small, large = (self, other) if len(self) <= len(other) else (other, self)
        return all(large.find(n) == i for i, n in enumerate(small._names))

    def _check_id(self, var_id: int):
        if var_id < 0 or var_id >= len(self._names):
            raise PreconditionError(f"variable id {var_id} out of range (registry has {len(self._names)})")

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[Tuple[str, bool]]:
        return iter(zip(self._names, self._integer))

    def __contains__(self, name: str) -> bool:
        return name in self._names

    def __eq__(self, other) -> bool:
        if not isinstance(other, VarInfo):
            return NotImplemented
        return self._names == other._names and self._integer == other._integer

    __hash__ = None

    def __repr__(self):
        inner = ", ".join(f"{n}:{'int' if i else 'real'}" for n, i in self)
        return f"VarInfo({inner})"


# ============================================================================
# CONJUNCTIVE SYSTEM
# ============================================================================

@dataclass(frozen=True)
class InequalitySystem:
    """Conjunction of inequalities plus the registry their ids refer to."""
    inequalities: Tuple[LinearInequality, ...] = ()
    vars: VarInfo = field(default_factory=VarInfo)

    def __post_init__(self):
        # each system keeps its own registry snapshot
        object.__setattr__(self, "vars", self.vars.copy())

    @property
    def limits(self) -> SolverLimits:
        return self.vars.limits

    def add(self, ineq: LinearInequality) -> "InequalitySystem":
        if len(self.inequalities) >= self.limits.max_ineqs:
            raise CapacityError("inequalities", self.limits.max_ineqs)
        return replace(self, inequalities=self.inequalities + (ineq,))

    def extend(self, ineqs: Iterable[LinearInequality]) -> "InequalitySystem":
        result = self
        for ineq in ineqs:
            result = result.add(ineq)
        return result

    def with_vars(self, vars: VarInfo) -> "InequalitySystem":
        return replace(self, vars=vars)

    def holds(self, assignment: Mapping[str, Number]) -> bool:
        """Evaluate every inequality under a name -> value assignment."""
        values: Dict[int, Number] = {}
        for var_id, name in enumerate(self.vars.names):
            if name in assignment:
                values[var_id] = assignment[name]
        return all(ineq.holds(values) for ineq in self.inequalities)

    def __len__(self) -> int:
        return len(self.inequalities)

    def __iter__(self) -> Iterator[LinearInequality]:
        return iter(self.inequalities)


# ============================================================================
# FORMATTING
# ============================================================================

def _fmt_number(x: float) -> str:
    if math.isfinite(x) and x == int(x):
        return str(int(x))
    return repr(x)


def format_inequality(ineq: LinearInequality, vars: Optional[VarInfo] = None) -> str:
    """Render as e.g. `2*x - y + 3 >= 0`."""
    def _name(var_id: int) -> str:
        if vars is not None and 0 <= var_id < len(vars):
            return vars.name(var_id)
        return f"x{var_id}"

    parts: List[str] = []
    for t in ineq.terms:
        mag = abs(t.coeff)
        body = _name(t.var_id) if mag == 1 else f"{_fmt_number(mag)}*{_name(t.var_id)}"
        if not parts:
            parts.append(f"-{body}" if t.coeff < 0 else body)
        else:
            parts.append(f"- {body}" if t.coeff < 0 else f"+ {body}")

    if ineq.constant != 0 or not parts:
        c = ineq.constant
        if not parts:
            parts.append(_fmt_number(c))
        else:
            parts.append(f"- {_fmt_number(-c)}" if c < 0 else f"+ {_fmt_number(c)}")

    op = ">" if ineq.strict else ">="
    return f"{' '.join(parts)} {op} 0"


def format_system(system: InequalitySystem) -> str:
    if not system.inequalities:
        return "true"
    return " AND ".join(format_inequality(i, system.vars) for i in system.inequalities)
