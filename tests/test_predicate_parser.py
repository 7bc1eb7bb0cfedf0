from __future__ import annotations

import pytest

from reftype_core.language.ast import (
    ArithmeticOperator, BinaryOp, ComparisonOperator, Literal, LogicalOperator, UnaryOp, Variable,
    add, ast_to_dict, collect_variables, format_expression, ge, gt, land, lnot, lor, lt, mul, ne, neg, sub,
    visit_ast,
)
from reftype_core.language.parser import ParseError, Tokenizer, parse_predicate, parse_predicate_file


def test_tokenizer_folds_symbolic_connectives_onto_keywords():
    tokens = Tokenizer("x>0 && !(y<1) || z==2").tokenize()
    keywords = [t.value for t in tokens if t.type == "KEYWORD"]
    assert keywords == ["AND", "NOT", "OR"]


def test_tokenizer_tracks_lines_and_skips_comments():
    tokens = Tokenizer("// bounds\n#v >= 0\n  AND #v < 10").tokenize()
    assert [(t.value, t.line, t.column) for t in tokens][:2] == [("#v", 2, 1), (">=", 2, 4)]
    assert tokens[-1].line == 3


def test_keywords_are_case_insensitive_but_identifiers_are_not_split():
    expr = parse_predicate("android > 0 and x > 0")
    assert expr.operator == LogicalOperator.AND
    assert collect_variables(expr) == ["android", "x"]


def test_precedence_or_and_comparison_arithmetic():
    expr = parse_predicate("1 + 2 * x > 3 AND y < 1 OR z == 0")
    assert expr == lor(land(gt(add(1, mul(2, "x")), 3), lt("y", 1)), BinaryOp(
        left=Variable(name="z"), operator=ComparisonOperator.EQ, right=Literal(value=0, type="int")))


def test_subtraction_is_left_associative():
    assert parse_predicate("a - b - c > 0") == gt(sub(sub("a", "b"), "c"), 0)


def test_unary_minus_binds_tighter_than_multiplication():
    expr = parse_predicate("-x * 2 >= 0")
    assert expr == ge(mul(neg("x"), 2), 0)
    assert isinstance(expr.left.left, UnaryOp)
    assert expr.left.left.operator == ArithmeticOperator.SUB


def test_not_equal_is_negated_equality():
    expr = parse_predicate("x != 0")
    assert isinstance(expr, UnaryOp) and expr.operator == LogicalOperator.NOT
    assert expr.operand.operator == ComparisonOperator.EQ
    assert expr == ne("x", 0)


def test_numbers():
    expr = parse_predicate("x > 1.5e2 AND y < 3 AND z > 0.25")
    literals = [expr.left.left.right, expr.left.right.right, expr.right.right]
    assert [(l.value, l.type) for l in literals] == [(150.0, "float"), (3, "int"), (0.25, "float")]


def test_value_variable():
    expr = parse_predicate("#v >= 0 AND #v < n + 1")
    assert collect_variables(expr) == ["#v", "n"]


def test_locations_are_recorded():
    expr = parse_predicate("x > 0 AND y < 1")
    assert expr.location == (1, 7)
    assert expr.right.location == (1, 13)
    assert expr.right.left.location == (1, 11)


@pytest.mark.parametrize(
    "text, message, line, column",
    [
        ("", "Empty predicate", 1, 1),
        ("   // only a comment", "Empty predicate", 1, 1),
        ("x > 0 AND", "Unexpected end of input", 1, 10),
        ("(x > 0", "Unexpected end of input", 1, 7),
        ("x > 0 y", "Unexpected token after predicate", 1, 7),
        ("x $ 1", "Unexpected character", 1, 3),
        ("x > * 1", "Unexpected token", 1, 5),
    ],
)
def test_parse_errors_carry_locations(text, message, line, column):
    with pytest.raises(ParseError) as exc:
        parse_predicate(text)
    assert message in exc.value.message
    assert (exc.value.line, exc.value.column) == (line, column)


def test_excessive_nesting_is_a_parse_error():
    text = "(" * 5000 + "x > 0" + ")" * 5000
    with pytest.raises(ParseError) as exc:
        parse_predicate(text)
    assert "nesting depth" in exc.value.message


@pytest.mark.parametrize(
    "text",
    [
        "x + y * 2 > 3 AND NOT (z == 1) OR w < 0",
        "(x > 0 OR y > 0) AND z > 0",
        "2 * (x + 1) <= y - (z - 3)",
        "-x + 4 / 2 >= 0",
        "x != y",
    ],
)
def test_format_expression_parses_back(text):
    expr = parse_predicate(text)
    assert parse_predicate(format_expression(expr)) == expr


def test_format_expression_of_builders():
    assert format_expression(lnot(gt(sub("x", sub("y", 1)), 0))) == "NOT (x - (y - 1) > 0)"
    assert format_expression(land(lor(gt("x", 0), lt("x", -1)), ne("x", 5))) == \
        "(x > 0 OR x < -1) AND NOT (x == 5)"


def test_ast_to_dict():
    d = ast_to_dict(parse_predicate("x > 1"))
    assert d["type"] == "BinaryOp"
    assert d["operator"] == ">"
    assert d["left"] == {"type": "Variable", "location": (1, 1), "name": "x"}


def test_parse_predicate_file(predicates_dir):
    expr = parse_predicate_file(str(predicates_dir / "small_pos.pred"))
    assert format_expression(expr) == "#v >= 1 AND #v <= 3"


def test_visit_ast_walks_children_in_field_order():
    seen = []
    visit_ast(parse_predicate("x + 1 > y"), lambda n: seen.append(type(n).__name__))
    assert seen == ["BinaryOp", "BinaryOp", "Variable", "Literal", "Variable"]
