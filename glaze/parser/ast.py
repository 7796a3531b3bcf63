# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Glaze AST.

The parser produces a flat list of root `Node`s. Expressions are a recursive
sum type; evaluation rewrites an `Expr` into one of the literal forms
(`Keyword`, `HashColor`, `Number`, `String`, `Dimension`, `TupleExpr`,
`ArrayExpr`, `ObjectExpr`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


@dataclass(frozen=True)
class Located:
	line: int
	column: int


@dataclass
class TypeExpr:
	name: str
	args: List["TypeExpr"] = field(default_factory=list)

	def __str__(self) -> str:
		if self.name == "List" and len(self.args) == 1:
			return f"[{self.args[0]}]"
		return self.name


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


class Expr:
	loc: Located


@dataclass
class Keyword(Expr):
	loc: Located
	name: str


@dataclass
class HashColor(Expr):
	loc: Located
	digits: str


@dataclass
class Number(Expr):
	loc: Located
	value: float


@dataclass
class String(Expr):
	loc: Located
	value: str


@dataclass
class Dimension(Expr):
	"""A number with a unit; percentages use the unit `%`."""

	loc: Located
	value: float
	unit: str


@dataclass
class Variable(Expr):
	loc: Located
	name: str


@dataclass
class Interpolation(Expr):
	"""
	Pieces rendered and concatenated with no separator.

	`quoted` interpolations come from strings with `{...}` holes and render as
	a CSS string; unquoted ones come from touching terms such as `{$w}px`.
	"""

	loc: Located
	parts: List[Expr]
	quoted: bool = False


@dataclass
class TupleExpr(Expr):
	loc: Located
	items: List[Expr]


@dataclass
class ArrayExpr(Expr):
	loc: Located
	items: List[Expr]


@dataclass
class ObjectExpr(Expr):
	loc: Located
	fields: Dict[str, Expr]


@dataclass
class Accessor(Expr):
	"""`base.a.b` with the field chain resolved left to right."""

	loc: Located
	base: Expr
	fields: List[str]


@dataclass
class Index(Expr):
	loc: Located
	base: Expr
	index: Expr


@dataclass
class Binary(Expr):
	loc: Located
	op: str
	left: Expr
	right: Expr


@dataclass
class Call(Expr):
	loc: Located
	name: str
	args: List[Expr]


LITERAL_TYPES = (Keyword, HashColor, Number, String, Dimension)


# ---------------------------------------------------------------------------
# Statement lines
# ---------------------------------------------------------------------------


class Line:
	loc: Located


@dataclass
class VarDef(Line):
	loc: Located
	name: str
	value: Expr


@dataclass
class ForLoop(Line):
	loc: Located
	name: str
	iterable: Expr
	body: List[Line]


@dataclass
class Return(Line):
	loc: Located
	value: Expr


# ---------------------------------------------------------------------------
# Blocks and declarations
# ---------------------------------------------------------------------------


@dataclass
class Property:
	"""`name: value`; expands inline when `name` is a declared mixin."""

	loc: Located
	name: str
	value: Expr


@dataclass
class MixinCall:
	"""`name(args)` inside a block."""

	loc: Located
	name: str
	args: List[Expr]


Member = Union[Property, MixinCall]


@dataclass
class Selector:
	loc: Located
	selectors: List[str]
	lines: List[Line] = field(default_factory=list)
	properties: List[Member] = field(default_factory=list)
	nested: List["Selector"] = field(default_factory=list)


@dataclass
class Mixin:
	loc: Located
	name: str
	params: List[str]
	lines: List[Line] = field(default_factory=list)
	properties: List[Member] = field(default_factory=list)


@dataclass
class Function:
	loc: Located
	name: str
	params: List[str]
	types: List[TypeExpr] = field(default_factory=list)
	lines: List[Line] = field(default_factory=list)

	@property
	def return_type(self) -> Optional[TypeExpr]:
		return self.types[-1] if self.types else None


@dataclass
class Comment:
	loc: Located
	text: str


@dataclass
class EndOfInput:
	loc: Located


Node = Union[Comment, VarDef, ForLoop, Selector, Mixin, Function, EndOfInput]
