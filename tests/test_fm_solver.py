from __future__ import annotations

import pytest

from reftype_core.fm import is_sat, is_unsat, is_valid, is_valid_implication
from reftype_core.fm.errors import UnsupportedNodeError
from reftype_core.fm.parser import ParseResult, parse_to_system
from reftype_core.fm.types import VarInfo
from reftype_core.language.parser import parse_predicate as P


def test_implication_of_narrower_interval():
    assert is_valid_implication(P("x >= 1 AND x <= 3"), P("x >= 0 AND x <= 5")) is True


def test_implication_of_wider_interval_does_not_hold():
    assert is_valid_implication(P("x >= 0 AND x <= 5"), P("x >= 1 AND x <= 3")) is False


def test_integer_tightening(real_x):
    f = P("x > 2 AND x < 3")
    assert is_unsat(f) is True
    assert is_sat(f, real_x) is True


def test_fractional_coefficients_stay_satisfiable():
    assert is_sat(P("0.5*x + y - 0.3 >= 0 AND -0.5*x - y + 0.8 >= 0")) is True


def test_disjunctive_premise_and_conclusion():
    assert is_valid_implication(P("x > 5 OR x < -5"), P("x > 0 OR x < 0")) is True
    assert is_valid_implication(P("x > 0 OR x < 0"), P("x > 5 OR x < -5")) is False


def test_disjunctive_premise_conjunctive_conclusion():
    assert is_valid_implication(P("x > 5 OR x > 10"), P("x > 0")) is True
    assert is_valid_implication(P("x > 5 OR x < -5"), P("x > 0")) is False


@pytest.mark.parametrize("text", ["x > 0", "x >= 1 AND y <= 2", "x == 3 OR y != 4"])
def test_implication_is_reflexive(text):
    assert is_valid_implication(P(text), P(text)) is True


def test_unsat_premise_implies_anything():
    assert is_valid_implication(P("x > 3 AND x < 3"), P("y == 42")) is True


def test_premise_variables_constrain_conclusion():
    assert is_valid_implication(P("x == y AND y > 0"), P("x > 0")) is True
    assert is_valid_implication(P("y > 0"), P("x > 0")) is False


def test_is_valid_depends_on_domain(real_x):
    f = P("x >= 1 OR x <= 0")
    assert is_valid(f) is True
    assert is_valid(f, real_x) is False


def test_is_valid_simple_cases():
    assert is_valid(P("x > 0 OR x <= 0")) is True
    assert is_valid(P("x + 1 > x")) is True
    assert is_valid(P("x > 0")) is False


def test_empty_dnf_is_unsat():
    assert is_unsat(ParseResult(())) is True


def test_dnf_is_sat_if_any_clause_is():
    assert is_sat(parse_to_system(P("(x > 2 AND x < 3) OR x == 7"))) is True
    assert is_unsat(parse_to_system(P("(x > 2 AND x < 3) OR (x > 9 AND x < 8)"))) is True


def test_system_input():
    clause = parse_to_system(P("x >= 0 AND x <= 0")).system()
    assert is_sat(clause) is True


def test_caller_registry_is_not_mutated():
    vars = VarInfo.of("x")
    is_valid_implication(P("x > 1 AND y > 1"), P("x + y > 2"), vars)
    is_valid(P("z >= 0 OR z < 0"), vars)
    assert vars.names == ("x",)


def test_undecidable_object_is_rejected():
    with pytest.raises(UnsupportedNodeError):
        is_unsat("x > 0")
