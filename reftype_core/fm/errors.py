"""
Error taxonomy of the Fourier-Motzkin core.

Three families, all propagated immediately (no retries, no partial results):

1) Non-linear input: the formula is not expressible in linear arithmetic.
2) Capacity: a hard ceiling from SolverLimits was exceeded.
3) Precondition: an internal contract was violated by the caller.

Every class carries a stable `kind` string that the verifier and CLI use
for structured reporting.
"""

from typing import Optional


class FMError(Exception):
    """Base class for all decision-procedure errors."""
    kind = "fm-error"

    def __init__(self, message: str, location: Optional[tuple] = None):
        self.message = message
        self.location = location
        prefix = f"Line {location[0]}, Col {location[1]}: " if location else ""
        super().__init__(f"{prefix}{message}")


# ----------------------------------------------------------------------------
# Non-linear
# ----------------------------------------------------------------------------

class NonLinearError(FMError):
    """Formula leaves the linear-arithmetic fragment."""
    kind = "non-linear"


class NonLinearMultiplicationError(NonLinearError):
    kind = "non-linear-multiplication"


class NonLinearDivisionError(NonLinearError):
    kind = "non-linear-division"


class DivisionByZeroError(NonLinearError):
    kind = "division-by-zero"


class UnsupportedNodeError(FMError):
    """Node outside the predicate vocabulary (e.g. a bare variable used as a formula)."""
    kind = "unsupported-node"


# ----------------------------------------------------------------------------
# Capacity
# ----------------------------------------------------------------------------

class CapacityError(FMError):
    """A SolverLimits ceiling (or the numeric envelope) was exceeded."""
    kind = "capacity-exceeded"

    def __init__(self, resource: str, limit: Optional[int] = None, message: Optional[str] = None):
        self.resource = resource
        self.limit = limit
        if message is None:
            message = f"capacity exceeded: {resource}"
            if limit is not None:
                message += f" (limit {limit})"
        super().__init__(message)


# ----------------------------------------------------------------------------
# Precondition
# ----------------------------------------------------------------------------

class PreconditionError(FMError):
    kind = "precondition-violation"
