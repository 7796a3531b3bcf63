# vim: set noexpandtab: -*- indent-tabs-mode: t -*-

import pytest

from glaze.core.errors import ErrorKind, ParseError
from glaze.parser import parse_args, parse_value
from glaze.parser.ast import (
	Accessor,
	ArrayExpr,
	Binary,
	Call,
	Dimension,
	HashColor,
	Index,
	Interpolation,
	Keyword,
	Located,
	Number,
	ObjectExpr,
	String,
	TupleExpr,
	Variable,
)

ORIGIN = Located(1, 1)


def _value(text: str):
	return parse_value(text, ORIGIN)


def test_juxtaposition_builds_tuple() -> None:
	expr = _value("1px solid #000")
	assert expr == TupleExpr(
		loc=Located(1, 1),
		items=[
			Dimension(loc=Located(1, 1), value=1.0, unit="px"),
			Keyword(loc=Located(1, 5), name="solid"),
			HashColor(loc=Located(1, 11), digits="000"),
		],
	)


def test_commas_build_array_of_tuples() -> None:
	expr = _value("a, b c")
	assert isinstance(expr, ArrayExpr)
	assert expr.items[0] == Keyword(loc=Located(1, 1), name="a")
	assert isinstance(expr.items[1], TupleExpr)
	assert [item.name for item in expr.items[1].items] == ["b", "c"]


def test_single_term_is_not_wrapped() -> None:
	assert _value("red") == Keyword(loc=ORIGIN, name="red")
	assert _value("(1)") == Number(loc=Located(1, 2), value=1.0)


def test_arithmetic_precedence() -> None:
	expr = _value("1 + 2 * 3")
	assert isinstance(expr, Binary)
	assert expr.op == "+"
	assert expr.left.value == 1.0
	assert isinstance(expr.right, Binary)
	assert expr.right.op == "*"
	assert (expr.right.left.value, expr.right.right.value) == (2.0, 3.0)


def test_arithmetic_is_left_associative() -> None:
	expr = _value("$a - $b - $c")
	assert expr.op == "-"
	assert isinstance(expr.left, Binary)
	assert expr.left.left == Variable(loc=ORIGIN, name="a")
	assert expr.right == Variable(loc=Located(1, 11), name="c")


def test_parentheses_group() -> None:
	expr = _value("(1 + 2) * 3")
	assert expr.op == "*"
	assert expr.left.op == "+"


def test_slash_between_plain_literals_stays_literal() -> None:
	expr = _value("12px/1.5")
	assert isinstance(expr, Interpolation)
	assert not expr.quoted
	assert expr.parts == [
		Dimension(loc=Located(1, 1), value=12.0, unit="px"),
		Keyword(loc=Located(1, 5), name="/"),
		Number(loc=Located(1, 6), value=1.5),
	]


def test_slash_with_variable_divides() -> None:
	expr = _value("$w / 2")
	assert isinstance(expr, Binary)
	assert expr.op == "/"


def test_variable_names_may_contain_hyphens() -> None:
	assert _value("$primary-color") == Variable(loc=ORIGIN, name="primary-color")
	expr = _value("$a-b - 1")
	assert isinstance(expr, Binary)
	assert expr.left == Variable(loc=ORIGIN, name="a-b")


def test_binary_minus_needs_surrounding_whitespace() -> None:
	with pytest.raises(ParseError) as exc:
		_value("$a -$b")
	assert exc.value.message == "Binary minus needs whitespace on both sides"
	assert exc.value.loc == Located(1, 4)


def test_hole_glues_to_touching_terms() -> None:
	expr = _value("{$w}px")
	assert expr == Interpolation(
		loc=Located(1, 2),
		parts=[Variable(loc=Located(1, 2), name="w"), Keyword(loc=Located(1, 5), name="px")],
	)
	expr = _value("m-{$i} solid")
	assert isinstance(expr, TupleExpr)
	first, second = expr.items
	assert isinstance(first, Interpolation)
	assert first.parts == [Keyword(loc=ORIGIN, name="m-"), Variable(loc=Located(1, 4), name="i")]
	assert second == Keyword(loc=Located(1, 8), name="solid")


def test_bare_identifiers_inside_holes_are_variables() -> None:
	assert _value("{c}") == Variable(loc=Located(1, 2), name="c")
	expr = _value("{lighten(c, 5%)}")
	assert isinstance(expr, Call)
	assert expr.name == "lighten"
	assert expr.args == [Variable(loc=Located(1, 10), name="c"), Dimension(loc=Located(1, 13), value=5.0, unit="%")]


def test_string_literals() -> None:
	assert _value('"plain"') == String(loc=ORIGIN, value="plain")
	assert _value("'it\\'s'") == String(loc=ORIGIN, value="it's")
	assert _value('"{{literal}}"') == String(loc=ORIGIN, value="{literal}")


def test_string_with_holes_is_quoted_interpolation() -> None:
	expr = _value('"a {$x} b"')
	assert isinstance(expr, Interpolation)
	assert expr.quoted
	assert expr.parts == [
		String(loc=ORIGIN, value="a "),
		Variable(loc=Located(1, 5), name="x"),
		String(loc=ORIGIN, value=" b"),
	]


def test_string_hole_errors() -> None:
	with pytest.raises(ParseError) as exc:
		_value('"{ }"')
	assert exc.value.message == "Empty interpolation"
	with pytest.raises(ParseError) as exc:
		_value('"a}"')
	assert exc.value.message == "Unmatched }"
	assert exc.value.kind is ErrorKind.UNMATCHED_DELIMITER
	with pytest.raises(ParseError) as exc:
		_value('"{a"')
	assert exc.value.message == "Unmatched {"


def test_accessor_chain() -> None:
	expr = _value("$theme.colors.primary")
	assert isinstance(expr, Accessor)
	assert expr.base == Variable(loc=ORIGIN, name="theme")
	assert expr.fields == ["colors", "primary"]


def test_index_and_accessor_mix() -> None:
	expr = _value("$xs[0].name")
	assert isinstance(expr, Accessor)
	assert expr.fields == ["name"]
	assert isinstance(expr.base, Index)
	assert expr.base.base == Variable(loc=ORIGIN, name="xs")
	assert expr.base.index == Number(loc=Located(1, 5), value=0.0)


def test_object_literal() -> None:
	expr = _value("{a: 1, 'b c': red}")
	assert isinstance(expr, ObjectExpr)
	assert list(expr.fields) == ["a", "b c"]
	assert expr.fields["a"] == Number(loc=Located(1, 5), value=1.0)
	assert expr.fields["b c"] == Keyword(loc=Located(1, 15), name="red")
	assert _value("{}") == ObjectExpr(loc=ORIGIN, fields={})


def test_arrays_and_tuples() -> None:
	assert _value("[]") == ArrayExpr(loc=ORIGIN, items=[])
	assert _value("()") == TupleExpr(loc=ORIGIN, items=[])
	array = _value("[1, 2]")
	assert isinstance(array, ArrayExpr)
	assert [item.value for item in array.items] == [1.0, 2.0]
	tup = _value("(1, 2)")
	assert isinstance(tup, TupleExpr)
	assert [item.value for item in tup.items] == [1.0, 2.0]


def test_function_call() -> None:
	expr = _value("darken(#fff, 10%)")
	assert expr == Call(
		loc=ORIGIN,
		name="darken",
		args=[HashColor(loc=Located(1, 8), digits="fff"), Dimension(loc=Located(1, 14), value=10.0, unit="%")],
	)
	assert _value("now()") == Call(loc=ORIGIN, name="now", args=[])


def test_url_is_verbatim() -> None:
	assert _value("url(http://x.org/a.png)") == Keyword(loc=ORIGIN, name="url(http://x.org/a.png)")


def test_ranges_and_concat() -> None:
	expr = _value("1..3")
	assert (expr.op, expr.left.value, expr.right.value) == ("..", 1.0, 3.0)
	expr = _value("0..=$n")
	assert expr.op == "..="
	assert expr.right == Variable(loc=Located(1, 5), name="n")
	expr = _value("$xs ++ [4]")
	assert expr.op == "++"
	assert isinstance(expr.right, ArrayExpr)


def test_important_flag() -> None:
	expr = _value("red !important")
	assert expr.items == [Keyword(loc=ORIGIN, name="red"), Keyword(loc=Located(1, 5), name="!important")]


def test_locations_are_shifted_to_the_source() -> None:
	expr = parse_value("red $x", Located(3, 10))
	assert expr.items[1] == Variable(loc=Located(3, 14), name="x")
	expr = parse_value("(a,\n\t\tb)", Located(3, 5))
	assert expr.items[1] == Keyword(loc=Located(4, 3), name="b")
	expr = parse_value("(a,\r\t\tb)", Located(3, 5))
	assert expr.items[1] == Keyword(loc=Located(4, 3), name="b")


def test_parse_args() -> None:
	assert parse_args("", ORIGIN) == []
	args = parse_args("blue, 1px solid", Located(2, 8))
	assert args[0] == Keyword(loc=Located(2, 8), name="blue")
	assert isinstance(args[1], TupleExpr)


def test_grammar_errors() -> None:
	with pytest.raises(ParseError) as exc:
		_value("")
	assert exc.value.message == "Expected value"
	assert exc.value.loc == ORIGIN

	with pytest.raises(ParseError) as exc:
		_value("1 +")
	assert exc.value.message == "Unexpected end of value"
	assert exc.value.loc == Located(1, 4)

	with pytest.raises(ParseError) as exc:
		parse_value("a : b", Located(2, 9))
	assert exc.value.kind is ErrorKind.UNEXPECTED_TOKEN
	assert exc.value.message == "Unexpected symbol: ':'"
	assert exc.value.loc == Located(2, 11)
