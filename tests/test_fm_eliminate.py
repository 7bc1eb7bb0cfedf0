from __future__ import annotations

import pytest

from reftype_core.fm.eliminate import combine_bounds, eliminate_variable, fm_is_unsat, has_contradiction
from reftype_core.fm.errors import PreconditionError
from reftype_core.fm.parser import parse_to_system
from reftype_core.fm.types import InequalitySystem, LinearInequality, LinearTerm, VarInfo
from reftype_core.language.parser import parse_predicate


def system(text: str, vars: VarInfo = None) -> InequalitySystem:
    return parse_to_system(parse_predicate(text), vars).system()


def test_combine_bounds_cancels_target_and_ors_strictness():
    # 2x - y >= 0 (lower on x), -3x + 6 > 0 (upper on x)
    lower = LinearInequality.make([(0, 2.0), (1, -1.0)], 0.0, False)
    upper = LinearInequality.make([(0, -3.0)], 6.0, True)
    r = combine_bounds(lower, 2.0, upper, 3.0, 0)
    # 3*(2x - y) + 2*(-3x + 6) = -3y + 12
    assert r.terms == (LinearTerm(1, -3.0),)
    assert r.constant == 12.0
    assert r.strict is True


def test_combine_bounds_prunes_cancelled_terms():
    lower = LinearInequality.make([(0, 1.0), (1, 1.0)], -1.0)
    upper = LinearInequality.make([(0, -1.0), (1, -1.0)], 2.0)
    r = combine_bounds(lower, 1.0, upper, 1.0, 0)
    assert r.terms == ()
    assert r.constant == 1.0


def test_eliminate_variable_copies_unrelated_inequalities():
    s = system("x > 0 AND x < 10 AND y >= 1", VarInfo.of("x", "y"))
    r = eliminate_variable(s, 0)
    assert all(i.coefficient_of(0) == 0.0 for i in r.inequalities)
    # y >= 1 carried through + one combined pair
    assert len(r) == 2


def test_eliminate_variable_rejects_bad_id():
    s = system("x > 0")
    with pytest.raises(PreconditionError):
        eliminate_variable(s, 1)
    with pytest.raises(PreconditionError):
        eliminate_variable(s, -1)


def test_has_contradiction_requires_constant_system():
    with pytest.raises(PreconditionError):
        has_contradiction(system("x > 0"))


def test_has_contradiction_rules():
    vars = VarInfo()
    def const(c: float, strict: bool) -> InequalitySystem:
        return InequalitySystem((), vars).add(LinearInequality.make([], c, strict))

    assert has_contradiction(const(0.0, True))
    assert has_contradiction(const(-1.0, False))
    assert not has_contradiction(const(0.0, False))
    assert not has_contradiction(const(0.5, True))
    assert not has_contradiction(InequalitySystem((), vars))


@pytest.mark.parametrize(
    "text, unsat",
    [
        ("x > 2.5 AND x < 3.5", False),
        ("x > 2 AND x < 3", True),
        ("x > 0 AND x < 1", True),
        ("x + y > 4 AND x + y < 6", False),
        ("x + y > 4 AND x + y < 5", True),
        ("2*x + 3*y >= 7.5 AND 2*x + 3*y <= 8.5", False),
        ("2*x + 3*y > 8 AND 2*x + 3*y < 9", True),
        ("3*x >= 7 AND 3*x <= 8", True),
        ("2*x > 5 AND 2*x < 7", False),
        ("x >= 0 AND x <= 0", False),
        ("x > 5 AND x < 3", True),
    ],
)
def test_integer_elimination(text, unsat):
    assert fm_is_unsat(system(text)) is unsat, f"{text}: expected unsat={unsat}"


def test_same_gap_is_satisfiable_over_reals(real_x):
    assert fm_is_unsat(system("x > 0 AND x < 1", real_x)) is False
    assert fm_is_unsat(system("x > 2 AND x < 3", real_x)) is False


def test_fractional_coefficients_are_not_over_tightened():
    # x = 1, y = 0 is a witness
    s = system("0.5*x + y - 0.3 >= 0 AND -0.5*x - y + 0.8 >= 0")
    assert s.holds({"x": 1, "y": 0})
    assert fm_is_unsat(s) is False


def test_bounds_mixing_real_variables_are_not_tightened():
    # x integer, y real: x = 1, y = 0.5 puts x - y inside (0, 1)
    s = system("x - y > 0 AND x - y < 1", VarInfo.of("x", real=["y"]))
    assert s.holds({"x": 1, "y": 0.5})
    assert fm_is_unsat(s) is False


def test_multi_variable_divisibility_gap_is_a_known_limitation():
    # 3x + 3y in [1, 2] has no integer solution, but the multi-variable
    # bound is only tightened with unit coefficient, so FM reports SAT.
    s = system("3*x + 3*y >= 1 AND 3*x + 3*y <= 2")
    assert fm_is_unsat(s) is False

    # the single-variable form is caught
    assert fm_is_unsat(system("3*x >= 1 AND 3*x <= 2")) is True
