"""
reftype-core Factory
====================
Turns predicate text into validated ASTs so the verifier and the CLI only
ever see predicates inside the supported vocabulary.
"""

import os
from typing import Iterable, Optional, Union
from pathlib import Path

from .config import SolverLimits
from .fm.types import VarInfo
from .language.ast import Expression
from .language.parser import parse_predicate, parse_predicate_file
from .language.validator import PredicateValidator


def predicate_from_string(text: str, validate: bool = True) -> Expression:
    """
    Parse (and by default validate) a predicate given as text.

    Raises:
        ParseError: On syntax error.
        ValidationError: If the predicate leaves the vocabulary.
    """
    expr = parse_predicate(text)
    if validate:
        PredicateValidator().validate(expr)
    return expr


def predicate_from_file(path: Union[str, Path], validate: bool = True) -> Expression:
    """
    Load a predicate from disk. Supports relative paths and ~/.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path_obj = Path(path).expanduser().resolve()

    if not path_obj.exists():
        raise FileNotFoundError(
            f"Predicate file not found at: '{path_obj}'\n"
            f"   (Current working directory: '{os.getcwd()}')"
        )

    expr = parse_predicate_file(str(path_obj))
    if validate:
        PredicateValidator().validate(expr)
    return expr


def vars_with_reals(real: Iterable[str] = (), limits: Optional[SolverLimits] = None) -> Optional[VarInfo]:
    """Registry marking `real` as real-valued, or None when every variable is an integer."""
    names = list(real)
    if not names:
        return None
    return VarInfo.of(real=names, limits=limits)
