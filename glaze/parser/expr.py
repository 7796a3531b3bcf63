# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Expression fragments.

The structural reader captures the raw text of a value (already scanned by the
lexer) and hands it here together with the location of its first character.
Fragments are parsed with lark and built into `Expr` nodes; every location is
shifted back to absolute source coordinates.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from glaze.core.errors import ErrorKind, ParseError

from .ast import (
	Accessor,
	ArrayExpr,
	Binary,
	Call,
	Dimension,
	Expr,
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

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_VALUE_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start=["value", "args"],
	propagate_positions=True,
	maybe_placeholders=False,
)

_DIMENSION_RE = re.compile(r"(-?\d+(?:\.\d+)?)([A-Za-z]+)$")

# Atoms that keep `/` as a literal CSS slash (`12px/1.5`).
_PLAIN_ATOMS = {"number", "dimension", "percentage", "keyword"}


def parse_value(text: str, origin: Located, *, hole: bool = False) -> Expr:
	"""
	Parse one value fragment.

	`origin` is the source location of `text[0]`. With `hole` set, bare
	identifiers read as variables (the inside of `{...}`).
	"""
	text = _unify_newlines(text)
	tree = _parse(text, origin, "value")
	return _ExprBuilder(text, origin).build(tree, hole)


def parse_args(text: str, origin: Located) -> List[Expr]:
	"""Parse the comma separated arguments of a call (text between the parens)."""
	text = _unify_newlines(text)
	tree = _parse(text, origin, "args")
	builder = _ExprBuilder(text, origin)
	return [builder.build(child) for child in tree.children if isinstance(child, Tree)]


def _unify_newlines(text: str) -> str:
	# lark counts lines on `\n` only.
	return text.replace("\r\n", "\n").replace("\r", "\n").replace("\f", "\n")


def _parse(text: str, origin: Located, start: str) -> Tree:
	try:
		return _VALUE_PARSER.parse(text, start=start)
	except UnexpectedInput as err:
		raise _grammar_error(err, text, origin) from None


def _shift(origin: Located, line: int, column: int) -> Located:
	if line <= 1:
		return Located(line=origin.line, column=origin.column + column - 1)
	return Located(line=origin.line + line - 1, column=column)


def _end_loc(text: str, origin: Located) -> Located:
	lines = text.split("\n")
	return _shift(origin, len(lines), len(lines[-1]) + 1)


def _grammar_error(err: UnexpectedInput, text: str, origin: Located) -> ParseError:
	if isinstance(err, UnexpectedEOF) or (isinstance(err, UnexpectedToken) and err.token.type == "$END"):
		if not text.strip():
			return ParseError(ErrorKind.UNEXPECTED_TOKEN, "Expected value", loc=origin)
		return ParseError(ErrorKind.UNEXPECTED_TOKEN, "Unexpected end of value", loc=_end_loc(text, origin))
	if isinstance(err, UnexpectedToken):
		loc = _shift(origin, err.token.line, err.token.column)
		return ParseError(ErrorKind.UNEXPECTED_TOKEN, f"Unexpected symbol: {err.token.value!r}", loc=loc)
	if isinstance(err, UnexpectedCharacters):
		loc = _shift(origin, err.line, err.column)
		return ParseError(ErrorKind.UNEXPECTED_TOKEN, f"Unexpected symbol: {err.char!r}", loc=loc)
	return ParseError(ErrorKind.UNEXPECTED_TOKEN, "Unexpected symbol", loc=origin)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


def _span(node: Tree | Token) -> Tuple[int, int]:
	if isinstance(node, Token):
		return node.start_pos, node.end_pos
	return node.meta.start_pos, node.meta.end_pos


def _decode_string(raw: str) -> str:
	out: list[str] = []
	i = 0
	while i < len(raw):
		if raw[i] == "\\" and i + 1 < len(raw):
			out.append(raw[i + 1])
			i += 2
			continue
		out.append(raw[i])
		i += 1
	return "".join(out)


class _ExprBuilder:
	def __init__(self, text: str, origin: Located) -> None:
		self.text = text
		self.origin = origin

	def loc(self, node: Tree | Token) -> Located:
		if isinstance(node, Token):
			return _shift(self.origin, node.line, node.column)
		return _shift(self.origin, node.meta.line, node.meta.column)

	def build(self, node: Tree | Token, hole: bool = False) -> Expr:
		name = _name(node)
		if isinstance(node, Token):
			raise TypeError(f"Unexpected bare token in value: {node.type}")
		children = node.children
		trees = [c for c in children if isinstance(c, Tree)]

		if name == "comma_list":
			return ArrayExpr(loc=self.loc(node), items=[self.build(c, hole) for c in trees])
		if name == "item":
			return self._build_juxtaposition(node, hole)
		if name == "range":
			left, op, right = children
			return Binary(loc=self.loc(op), op=op.value, left=self.build(left, hole), right=self.build(right, hole))
		if name in ("concat", "sum", "term"):
			return self._fold_chain(node, hole)
		if name == "postfix":
			return self._build_postfix(node, hole)

		if name == "number":
			return Number(loc=self.loc(node), value=float(children[0].value))
		if name == "dimension":
			match = _DIMENSION_RE.match(children[0].value)
			return Dimension(loc=self.loc(node), value=float(match.group(1)), unit=match.group(2))
		if name == "percentage":
			return Dimension(loc=self.loc(node), value=float(children[0].value[:-1]), unit="%")
		if name == "hash":
			return HashColor(loc=self.loc(node), digits=children[0].value[1:])
		if name == "string":
			return self._build_string(children[0])
		if name == "important":
			return Keyword(loc=self.loc(node), name="!important")
		if name == "var":
			return Variable(loc=self.loc(node), name=children[0].value[1:])
		if name == "keyword":
			if hole:
				return Variable(loc=self.loc(node), name=children[0].value)
			return Keyword(loc=self.loc(node), name=children[0].value)
		if name == "url":
			return Keyword(loc=self.loc(node), name=children[0].value)
		if name == "call":
			func = children[0]
			return Call(loc=self.loc(node), name=func.value[:-1], args=[self.build(c, hole) for c in trees])
		if name == "empty_tuple":
			return TupleExpr(loc=self.loc(node), items=[])
		if name == "paren":
			return self.build(trees[0], hole)
		if name == "tuple_lit":
			return TupleExpr(loc=self.loc(node), items=[self.build(c, hole) for c in trees])
		if name == "empty_array":
			return ArrayExpr(loc=self.loc(node), items=[])
		if name == "array":
			return ArrayExpr(loc=self.loc(node), items=[self.build(c, hole) for c in trees])
		if name == "empty_object":
			return ObjectExpr(loc=self.loc(node), fields={})
		if name == "object":
			return self._build_object(node, hole)
		if name == "hole":
			return self.build(trees[0], hole=True)
		raise TypeError(f"Unexpected value node: {name}")

	def _build_juxtaposition(self, tree: Tree, hole: bool) -> Expr:
		# Terms touching a `{...}` hole glue into one interpolation: `{$w}px`.
		runs: list[list[Tree | Token]] = []
		prev_end: Optional[int] = None
		for child in tree.children:
			start, end = _span(child)
			if runs and prev_end == start:
				runs[-1].append(child)
			else:
				runs.append([child])
			prev_end = end
		items: list[Expr] = []
		for run in runs:
			if len(run) > 1 and any(_name(c) == "hole" for c in run):
				parts = [self.build(c, hole) for c in run]
				items.append(Interpolation(loc=parts[0].loc, parts=parts))
			else:
				items.extend(self.build(c, hole) for c in run)
		if len(items) == 1:
			return items[0]
		return TupleExpr(loc=self.loc(tree), items=items)

	def _fold_chain(self, tree: Tree, hole: bool) -> Expr:
		children = tree.children
		first = children[0]
		result = self.build(first, hole)
		plain = _name(first) in _PLAIN_ATOMS and not (hole and _name(first) == "keyword")
		for i in range(1, len(children), 2):
			op = children[i]
			right_node = children[i + 1]
			right = self.build(right_node, hole)
			right_plain = _name(right_node) in _PLAIN_ATOMS and not (hole and _name(right_node) == "keyword")
			if op.value == "-":
				self._check_minus_spacing(op)
			if op.value == "/" and plain and right_plain:
				result = Interpolation(loc=result.loc, parts=[result, Keyword(loc=self.loc(op), name="/"), right])
				continue
			result = Binary(loc=self.loc(op), op=op.value, left=result, right=right)
			plain = False
		return result

	def _check_minus_spacing(self, op: Token) -> None:
		before = self.text[op.start_pos - 1] if op.start_pos > 0 else " "
		after = self.text[op.end_pos] if op.end_pos < len(self.text) else " "
		if not (before.isspace() and after.isspace()):
			raise ParseError(
				ErrorKind.UNEXPECTED_TOKEN,
				"Binary minus needs whitespace on both sides",
				loc=self.loc(op),
			)

	def _build_postfix(self, tree: Tree, hole: bool) -> Expr:
		expr = self.build(tree.children[0], hole)
		in_chain = False
		for suffix in tree.children[1:]:
			kind = _name(suffix)
			if kind == "field_suffix":
				field_name = suffix.children[0].value
				if in_chain:
					expr.fields.append(field_name)
				else:
					expr = Accessor(loc=self.loc(tree), base=expr, fields=[field_name])
				in_chain = True
			elif kind == "index_suffix":
				index = self.build(suffix.children[0], hole)
				expr = Index(loc=self.loc(suffix), base=expr, index=index)
				in_chain = False
			else:
				raise TypeError(f"Unexpected postfix suffix: {kind}")
		return expr

	def _build_object(self, tree: Tree, hole: bool) -> ObjectExpr:
		fields = {}
		for field_node in tree.children:
			if not isinstance(field_node, Tree):
				continue
			key_token, value_node = field_node.children
			if key_token.type == "STRING":
				key = _decode_string(key_token.value[1:-1])
			else:
				key = key_token.value
			fields[key] = self.build(value_node, hole)
		return ObjectExpr(loc=self.loc(tree), fields=fields)

	def _build_string(self, token: Token) -> Expr:
		"""
		Build a string literal, splitting out `{expr}` holes.

		`{{` and `}}` escape literal braces. A string with at least one hole
		becomes a quoted interpolation.
		"""
		raw = token.value[1:-1]
		loc = self.loc(token)
		if "{" not in raw and "}" not in raw:
			return String(loc=loc, value=_decode_string(raw))

		parts: list[Expr] = []
		text_buf: list[str] = []
		has_hole = False

		def _hole_loc(offset: int) -> Located:
			# +1 for the opening quote.
			return Located(line=loc.line, column=loc.column + offset + 1)

		def _flush_text() -> None:
			if text_buf:
				parts.append(String(loc=loc, value=_decode_string("".join(text_buf))))
				text_buf.clear()

		i = 0
		while i < len(raw):
			if raw.startswith("{{", i):
				text_buf.append("{")
				i += 2
				continue
			if raw.startswith("}}", i):
				text_buf.append("}")
				i += 2
				continue
			ch = raw[i]
			if ch == "}":
				raise ParseError(ErrorKind.UNMATCHED_DELIMITER, "Unmatched }", loc=_hole_loc(i))
			if ch != "{":
				text_buf.append(ch)
				i += 1
				continue

			hole_start = i
			depth = 0
			i += 1
			while i < len(raw):
				c = raw[i]
				if c == "{":
					depth += 1
				elif c == "}":
					if depth == 0:
						break
					depth -= 1
				i += 1
			else:
				raise ParseError(ErrorKind.UNMATCHED_DELIMITER, "Unmatched {", loc=_hole_loc(hole_start))
			source = raw[hole_start + 1:i]
			if not source.strip():
				raise ParseError(ErrorKind.UNEXPECTED_TOKEN, "Empty interpolation", loc=_hole_loc(hole_start))
			_flush_text()
			parts.append(parse_value(source, _hole_loc(hole_start + 1), hole=True))
			has_hole = True
			i += 1
		_flush_text()
		if not has_hole:
			return String(loc=loc, value="".join(p.value for p in parts if isinstance(p, String)))
		return Interpolation(loc=loc, parts=parts, quoted=True)


__all__ = ["parse_value", "parse_args"]
