"""
reftype-core - Configuration

Capacity ceilings for the Fourier-Motzkin core and behavior toggles for the
verifier facade. Defaults are conservative: a query that outgrows a ceiling is
rejected with a CapacityError, never truncated.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class SolverLimits:
    """
    Hard ceilings for one query.

    Every value created while deciding a formula (registry, systems, DNF) is
    bounded by these numbers, so worst-case memory is known up front.
    """
    max_vars: int = 16
    max_ineqs: int = 64  # per conjunctive system
    max_clauses: int = 8  # per DNF
    max_terms_per_ineq: int = 8

    def __post_init__(self):
        for name in ("max_vars", "max_ineqs", "max_clauses", "max_terms_per_ineq"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ValueError(f"SolverLimits.{name} must be a positive int, got {value!r}")


DEFAULT_LIMITS = SolverLimits()


@dataclass(frozen=True)
class VerifierConfig:
    """
    Verifier behavior toggles.

    debug:      keep a bounded event trace and attach it to INTERNAL_ERROR issues
    crosscheck: confirm every FM verdict with z3 and extract counterexample models
    trace_max:  trace buffer size (oldest events are dropped first)
    """
    debug: bool = False
    crosscheck: bool = False
    trace_max: int = 400
    limits: SolverLimits = field(default_factory=lambda: DEFAULT_LIMITS)
