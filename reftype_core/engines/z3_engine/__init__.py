from __future__ import annotations

from .crosscheck import Z3CrossChecker, model_satisfies, SAT, UNSAT, UNKNOWN

__all__ = [
    "Z3CrossChecker",
    "model_satisfies",
    "SAT",
    "UNSAT",
    "UNKNOWN",
]
