from .z3_engine.crosscheck import Z3CrossChecker

__all__ = [
    "Z3CrossChecker",
]
