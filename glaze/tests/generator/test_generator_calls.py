# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Mixins, functions and native CSS functions."""

import logging

import pytest

from glaze import compile_source
from glaze.core.errors import ErrorKind, EvalError
from glaze.generator import RECURSION_LIMIT, is_native_function


def _css(source: str) -> str:
	css, _js = compile_source(source)
	return css


MIXIN = """
color-weight(c, w)
	color: {c}
	font-weight: {w}

"""


def test_mixin_call_splices_declarations() -> None:
	src = MIXIN + ".class\n\tcolor-weight(blue, 600)\n"
	assert _css(src) == ".class {\n\tcolor: blue;\n\tfont-weight: 600;\n}\n\n"


def test_mixin_used_as_property() -> None:
	src = MIXIN + ".a\n\tcolor-weight: #222 normal\n\tmargin: 0\n"
	assert _css(src) == ".a {\n\tcolor: #222;\n\tfont-weight: normal;\n\tmargin: 0;\n}\n\n"


def test_each_call_binds_its_own_arguments() -> None:
	src = "pad(x)\n\tpadding: {x}\n.a\n\tpad(1px)\n\tpad(2px)\n"
	assert _css(src) == ".a {\n\tpadding: 1px;\n\tpadding: 2px;\n}\n\n"


def test_mixin_arguments_do_not_leak() -> None:
	with pytest.raises(EvalError) as exc:
		_css("pad(x)\n\tpadding: {x}\n.a\n\tpad(1px)\n\tmargin: {x}\n")
	assert exc.value.kind is ErrorKind.UNDEFINED_VARIABLE
	assert exc.value.message == "Could not find variable: $x"


def test_mixins_see_caller_variables() -> None:
	src = "tint()\n\tcolor: $base\n.a\n\t$base = red\n\ttint()\n"
	assert _css(src) == ".a {\n\tcolor: red;\n}\n\n"


def test_mixins_call_mixins() -> None:
	src = """
bordered(c)
	border: 1px solid {c}
card(c)
	bordered: {c}
	padding: 0
.a
	card(red)
"""
	assert _css(src) == ".a {\n\tborder: 1px solid red;\n\tpadding: 0;\n}\n\n"


def test_return_stops_mixin_lines() -> None:
	src = "m()\n\t$c = red\n\treturn 0\n\t$c = blue\n\tcolor: $c\n.a\n\tm()\n"
	assert _css(src) == ".a {\n\tcolor: red;\n}\n\n"


def test_first_declaration_wins(caplog: pytest.LogCaptureFixture) -> None:
	src = "m()\n\tcolor: red\nm()\n\tcolor: blue\n.a\n\tm()\n"
	with caplog.at_level(logging.WARNING, logger="glaze.generator"):
		css = _css(src)
	assert css == ".a {\n\tcolor: red;\n}\n\n"
	assert any("redeclared" in record.getMessage() for record in caplog.records)


def test_function_returns_value() -> None:
	src = "double(x) :: Number -> Number\n\treturn $x * 2\n.a\n\twidth: double(4px)\n"
	assert _css(src) == ".a {\n\twidth: 8px;\n}\n\n"


def test_function_return_inside_loop() -> None:
	src = """
first(xs) :: [Number] -> Number
	for $x in $xs
		return $x
	return 0
.a
	width: first([5px, 6px])
	height: first([])
"""
	assert _css(src) == ".a {\n\twidth: 5px;\n\theight: 0;\n}\n\n"


def test_functions_compose() -> None:
	src = """
double(x) :: Number -> Number
	return $x * 2
quad(x) :: Number -> Number
	$d = double($x)
	return double($d)
.a
	width: quad(1px) + 1px
"""
	assert _css(src) == ".a {\n\twidth: 5px;\n}\n\n"


def test_missing_return() -> None:
	with pytest.raises(EvalError) as exc:
		_css("f() :: Number\n\t$y = 1\n.a\n\twidth: f()\n")
	assert exc.value.kind is ErrorKind.MISSING_RETURN
	assert exc.value.message == "Function f did not return a value"


def test_extra_arguments_are_ignored() -> None:
	assert _css("double(x) :: Number -> Number\n\treturn $x * 2\n.a\n\twidth: double(1, 2)\n") == ".a {\n\twidth: 2;\n}\n\n"
	src = "bd(w)\n\tborder-width: {w}\n.a\n\tbd: 1px 2px\n.b\n\tbd(3px, 4px)\n"
	assert _css(src) == ".a {\n\tborder-width: 1px;\n}\n\n.b {\n\tborder-width: 3px;\n}\n\n"


def test_too_few_arguments() -> None:
	with pytest.raises(EvalError) as exc:
		_css("m(a, b)\n\tcolor: {a}\n.a\n\tm(red)\n")
	assert exc.value.kind is ErrorKind.ARITY
	assert exc.value.message == "Not enough arguments for mixin m: expected 2, got 1"


def test_undefined_function_and_mixin() -> None:
	with pytest.raises(EvalError) as exc:
		_css(".a\n\twidth: nope(1)\n")
	assert exc.value.kind is ErrorKind.UNDEFINED_FUNCTION
	assert exc.value.message == "Could not find function: nope"

	with pytest.raises(EvalError) as exc:
		_css(".a\n\tnope()\n")
	assert exc.value.kind is ErrorKind.UNDEFINED_MIXIN
	assert exc.value.message == "Could not find mixin: nope"


def test_native_functions_pass_through() -> None:
	src = "$gap = 10px\n.a\n\twidth: calc(100% - $gap)\n\tcolor: rgba(0, 0, 0, 0.5)\n"
	assert _css(src) == ".a {\n\twidth: calc(100% - 10px);\n\tcolor: rgba(0, 0, 0, 0.5);\n}\n\n"


def test_glaze_function_shadows_native_name() -> None:
	src = "scale(x) :: Number -> Number\n\treturn $x * 3\n.a\n\twidth: scale(2px)\n"
	assert _css(src) == ".a {\n\twidth: 6px;\n}\n\n"


def test_native_function_names() -> None:
	assert is_native_function("calc")
	assert is_native_function("-webkit-linear-gradient")
	assert is_native_function("RGBA")
	assert not is_native_function("darken")


def test_recursion_limit() -> None:
	with pytest.raises(EvalError) as exc:
		_css("loop(x)\n\tloop(x)\n.a\n\tloop(1)\n")
	assert exc.value.kind is ErrorKind.RECURSION_LIMIT
	assert exc.value.message.startswith(f"Recursion limit ({RECURSION_LIMIT}) exceeded in loop")

	with pytest.raises(EvalError) as exc:
		_css("f(x) :: Number -> Number\n\treturn f($x)\n.a\n\twidth: f(1)\n")
	assert exc.value.kind is ErrorKind.RECURSION_LIMIT
