from __future__ import annotations

import pytest

from reftype_core.factory import predicate_from_file, predicate_from_string, vars_with_reals
from reftype_core.language.ast import add, gt, land, lit, var
from reftype_core.language.parser import ParseError, parse_predicate
from reftype_core.language.validator import PredicateValidator, ValidationError


@pytest.mark.parametrize(
    "text",
    [
        "x > 0",
        "#v >= 0 AND #v < n + 1",
        "NOT (x == 1) OR -y * 2 <= x / 3",
        "x * y > 0",  # non-linear, but inside the vocabulary
    ],
)
def test_accepts_vocabulary(text):
    assert PredicateValidator().validate(parse_predicate(text)) is True


def test_boolean_constant_is_rejected_with_location():
    with pytest.raises(ValidationError) as exc:
        PredicateValidator().validate(parse_predicate("x > 0 AND TRUE"))
    assert exc.value.location == (1, 11)
    assert "Boolean constant" in exc.value.message
    assert str(exc.value).startswith("Line 1, Col 11:")


def test_every_error_is_collected_and_the_first_raised():
    validator = PredicateValidator()
    with pytest.raises(ValidationError) as exc:
        validator.validate(parse_predicate("TRUE OR FALSE"))
    assert len(validator.errors) == 2
    assert exc.value is validator.errors[0]
    assert exc.value.location == (1, 1)


def test_boolean_inside_arithmetic_is_rejected():
    with pytest.raises(ValidationError, match="Expected a number"):
        PredicateValidator().validate(parse_predicate("x + TRUE > 0"))


def test_arithmetic_used_as_formula_is_rejected():
    with pytest.raises(ValidationError, match="Expected a comparison"):
        PredicateValidator().validate(parse_predicate("x + 1"))
    with pytest.raises(ValidationError, match="Expected a comparison"):
        PredicateValidator().validate(land(gt("x", 0), var("y")))


def test_formula_used_as_arithmetic_is_rejected():
    with pytest.raises(ValidationError, match="Expected an arithmetic term"):
        PredicateValidator().validate(parse_predicate("(x > 0) + 1 > 2"))


def test_variable_whitelist():
    validator = PredicateValidator(allowed_variables={"#v"})
    assert validator.validate(parse_predicate("#v > 0"))
    with pytest.raises(ValidationError, match="Unknown variable 'n'"):
        validator.validate(parse_predicate("#v > n"))


def test_errors_reset_between_calls():
    validator = PredicateValidator()
    with pytest.raises(ValidationError):
        validator.validate(parse_predicate("TRUE"))
    assert validator.validate(gt(add("x", lit(1)), 0))
    assert validator.errors == []


def test_predicate_from_string():
    assert predicate_from_string("x > 0") == gt("x", 0)
    with pytest.raises(ValidationError):
        predicate_from_string("FALSE")
    assert predicate_from_string("FALSE", validate=False).value is False
    with pytest.raises(ParseError):
        predicate_from_string("x >")


def test_predicate_from_file(predicates_dir, tmp_path):
    expr = predicate_from_file(predicates_dir / "bounded_nat.pred")
    assert expr.operator.value == "AND"

    with pytest.raises(FileNotFoundError):
        predicate_from_file(tmp_path / "missing.pred")

    bad = tmp_path / "bad.pred"
    bad.write_text("x > 0 OR TRUE", encoding="utf-8")
    with pytest.raises(ValidationError):
        predicate_from_file(bad)


def test_vars_with_reals():
    assert vars_with_reals([]) is None
    vars = vars_with_reals(["r", "s"])
    assert vars.names == ("r", "s")
    assert not vars.is_integer(0) and not vars.is_integer(1)
