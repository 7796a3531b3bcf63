# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Evaluated values: binary operators and CSS rendering.

Values are the literal AST forms (`Keyword`, `HashColor`, `Number`, `String`,
`Dimension`) plus `TupleExpr`, `ArrayExpr` and `ObjectExpr` whose items are
themselves values. The generator never hands anything else to this module.
"""

from __future__ import annotations

import math
from typing import List, Optional

from glaze.core.errors import ErrorKind, EvalError
from glaze.parser.ast import (
	ArrayExpr,
	Dimension,
	Expr,
	HashColor,
	Keyword,
	Located,
	Number,
	ObjectExpr,
	String,
	TupleExpr,
)

ARITHMETIC_OPS = ("+", "-", "*", "/")
RANGE_OPS = ("..", "..=")
CONCAT_OP = "++"


def type_name(value: Expr) -> str:
	if isinstance(value, Number):
		return "number"
	if isinstance(value, Dimension):
		return "percentage" if value.unit == "%" else "dimension"
	if isinstance(value, String):
		return "string"
	if isinstance(value, Keyword):
		return "keyword"
	if isinstance(value, HashColor):
		return "color"
	if isinstance(value, TupleExpr):
		return "tuple"
	if isinstance(value, ArrayExpr):
		return "array"
	if isinstance(value, ObjectExpr):
		return "object"
	return type(value).__name__.lower()


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def format_number(value: float) -> str:
	"""
	Render a number the way CSS expects it.

	Integral values drop the decimal point; anything else keeps at most six
	decimals with trailing zeros trimmed. Negative zero renders as `0`.
	"""
	if math.isfinite(value) and value == int(value):
		text = str(int(value))
	else:
		text = f"{value:.6f}".rstrip("0").rstrip(".")
	if text in ("-0", ""):
		return "0"
	return text


def quote_string(value: str) -> str:
	escaped = value.replace("\\", "\\\\").replace('"', '\\"')
	return f'"{escaped}"'


def render(value: Expr) -> str:
	"""Serialize a value as CSS text."""
	if isinstance(value, Keyword):
		return value.name
	if isinstance(value, HashColor):
		return f"#{value.digits}"
	if isinstance(value, Number):
		return format_number(value.value)
	if isinstance(value, Dimension):
		return f"{format_number(value.value)}{value.unit}"
	if isinstance(value, String):
		return quote_string(value.value)
	if isinstance(value, TupleExpr):
		return " ".join(render(item) for item in value.items)
	if isinstance(value, ArrayExpr):
		return ", ".join(render(item) for item in value.items)
	if isinstance(value, ObjectExpr):
		raise EvalError(
			ErrorKind.UNRENDERABLE_VALUE,
			"Cannot render an object as a CSS value; access one of its fields",
			loc=value.loc,
		)
	raise TypeError(f"render expects an evaluated value, got {type(value).__name__}")


def render_text(value: Expr) -> str:
	"""Like `render`, but strings contribute their raw text (used inside interpolations)."""
	if isinstance(value, String):
		return value.value
	return render(value)


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


def _invalid(op: str, left: Expr, right: Expr, loc: Optional[Located]) -> EvalError:
	return EvalError(
		ErrorKind.INVALID_OPERANDS,
		f"Invalid operands for {op}: {type_name(left)} and {type_name(right)}",
		loc=loc,
	)


def binary(op: str, left: Expr, right: Expr, loc: Optional[Located] = None) -> Expr:
	"""Apply a binary operator to two evaluated values."""
	if op in RANGE_OPS:
		return _range(op, left, right, loc)
	if op == CONCAT_OP:
		return _concat(left, right, loc)
	if op in ARITHMETIC_OPS:
		return _arithmetic(op, left, right, loc)
	raise EvalError(ErrorKind.INVALID_OPERANDS, f"Unknown operator {op}", loc=loc)


def _range(op: str, left: Expr, right: Expr, loc: Optional[Located]) -> ArrayExpr:
	if not (isinstance(left, Number) and isinstance(right, Number)):
		raise _invalid(op, left, right, loc)
	start = int(left.value)
	stop = int(right.value)
	if op == "..=":
		stop += 1
	items: List[Expr] = [Number(loc=loc or left.loc, value=float(i)) for i in range(start, stop)]
	return ArrayExpr(loc=loc or left.loc, items=items)


def _concat(left: Expr, right: Expr, loc: Optional[Located]) -> Expr:
	where = loc or left.loc
	if isinstance(left, ArrayExpr) and isinstance(right, ArrayExpr):
		return ArrayExpr(loc=where, items=[*left.items, *right.items])
	if isinstance(left, ArrayExpr):
		return ArrayExpr(loc=where, items=[*left.items, right])
	if isinstance(right, ArrayExpr):
		return ArrayExpr(loc=where, items=[left, *right.items])
	if isinstance(left, TupleExpr) and isinstance(right, TupleExpr):
		return TupleExpr(loc=where, items=[*left.items, *right.items])
	if isinstance(left, TupleExpr) and not isinstance(right, ObjectExpr):
		return TupleExpr(loc=where, items=[*left.items, right])
	if isinstance(right, TupleExpr) and not isinstance(left, ObjectExpr):
		return TupleExpr(loc=where, items=[left, *right.items])
	if isinstance(left, String) and isinstance(right, String):
		return String(loc=where, value=left.value + right.value)
	raise _invalid(CONCAT_OP, left, right, loc)


def _arithmetic(op: str, left: Expr, right: Expr, loc: Optional[Located]) -> Expr:
	where = loc or left.loc
	if isinstance(left, Number) and isinstance(right, Number):
		return Number(loc=where, value=_apply(op, left.value, right.value, loc))
	if isinstance(left, Dimension) and isinstance(right, Number):
		return Dimension(loc=where, value=_apply(op, left.value, right.value, loc), unit=left.unit)
	if isinstance(left, Number) and isinstance(right, Dimension):
		if op == "/":
			raise _invalid(op, left, right, loc)
		return Dimension(loc=where, value=_apply(op, left.value, right.value, loc), unit=right.unit)
	if isinstance(left, Dimension) and isinstance(right, Dimension):
		if op == "*":
			raise _invalid(op, left, right, loc)
		if left.unit != right.unit:
			raise EvalError(
				ErrorKind.INVALID_OPERANDS,
				f"Incompatible units for {op}: {left.unit} and {right.unit}",
				loc=loc,
			)
		value = _apply(op, left.value, right.value, loc)
		if op == "/":
			return Number(loc=where, value=value)
		return Dimension(loc=where, value=value, unit=left.unit)
	raise _invalid(op, left, right, loc)


def _apply(op: str, a: float, b: float, loc: Optional[Located]) -> float:
	if op == "+":
		return a + b
	if op == "-":
		return a - b
	if op == "*":
		return a * b
	if b == 0:
		raise EvalError(ErrorKind.INVALID_OPERANDS, "Division by zero", loc=loc)
	return a / b


__all__ = ["binary", "format_number", "quote_string", "render", "render_text", "type_name"]
