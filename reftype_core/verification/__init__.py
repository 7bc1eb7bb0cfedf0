from __future__ import annotations

from .verifier import RefinementVerifier, VerificationIssue
from .subtype import is_subtype, join, SubtypeError

__all__ = [
    "RefinementVerifier",
    "VerificationIssue",
    "is_subtype",
    "join",
    "SubtypeError",
]
