# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Glaze code generator.

Walks the root nodes in order and produces `(css, js)`. The generator is the
only stateful stage: it owns the scope stack and the mixin/function tables,
both of which evolve as the tree is walked.

Selector nesting is flattened as blocks are visited: every nested selector is
expanded against every selector of its parent, substituting `&` with the
parent text or joining with a descendant combinator. A block emits a rule only
when it resolved at least one declaration.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple

from glaze.core.errors import ErrorKind, EvalError
from glaze.parser.ast import (
	Accessor,
	ArrayExpr,
	Binary,
	Call,
	Comment,
	EndOfInput,
	Expr,
	ForLoop,
	Function,
	Index,
	Interpolation,
	Keyword,
	LITERAL_TYPES,
	Line,
	Located,
	Member,
	Mixin,
	MixinCall,
	Node,
	Number,
	ObjectExpr,
	Return,
	Selector,
	String,
	TupleExpr,
	VarDef,
	Variable,
)
from glaze.scope import ScopeStack
from glaze.values import ARITHMETIC_OPS, binary, render, render_text, type_name

logger = logging.getLogger(__name__)

RECURSION_LIMIT = 64

# CSS functions that pass through untouched when no glaze function shadows them.
NATIVE_FUNCTIONS = frozenset(
	{
		"attr", "blur", "brightness", "calc", "clamp", "color", "color-mix", "conic-gradient",
		"contrast", "counter", "counters", "cross-fade", "cubic-bezier", "drop-shadow", "element",
		"env", "fit-content", "format", "grayscale", "hsl", "hsla", "hue-rotate", "hwb", "image",
		"image-set", "invert", "lab", "lch", "linear-gradient", "local", "matrix", "matrix3d",
		"max", "min", "minmax", "oklab", "oklch", "opacity", "perspective", "radial-gradient",
		"repeat", "repeating-conic-gradient", "repeating-linear-gradient",
		"repeating-radial-gradient", "rgb", "rgba", "rotate", "rotate3d", "rotatex", "rotatey",
		"rotatez", "saturate", "scale", "scale3d", "scalex", "scaley", "scalez", "selector",
		"sepia", "skew", "skewx", "skewy", "steps", "symbols", "translate", "translate3d",
		"translatex", "translatey", "translatez", "var",
	}
)
_VENDOR_PREFIX = re.compile(r"^-[a-z]+-")

Declaration = Tuple[str, str]


def is_native_function(name: str) -> bool:
	return _VENDOR_PREFIX.sub("", name.lower()) in NATIVE_FUNCTIONS


class Generator:
	"""
	Tree-walking evaluator and CSS emitter.

	One instance serves one compilation; `generate` may be called once.
	`compact` selects the production output style (`a,b{p:v;q:w}`).
	"""

	def __init__(self, *, compact: bool = False) -> None:
		self.compact = compact
		self.mixins: List[Mixin] = []
		self.functions: List[Function] = []
		self.scopes = ScopeStack()
		self.call_stack: List[str] = []
		self._css: List[str] = []

	def generate(self, nodes: Sequence[Node]) -> Tuple[str, str]:
		for node in nodes:
			self.gen_node(node)
		return "".join(self._css), ""

	def gen_node(self, node: Node) -> None:
		if isinstance(node, Comment):
			if not self.compact:
				self._css.append(f"/*{node.text}*/\n\n")
		elif isinstance(node, Line):
			self.exec_line(node)
		elif isinstance(node, Selector):
			self.gen_selector(node.selectors, node)
		elif isinstance(node, Mixin):
			self._register(self.mixins, node, "mixin")
		elif isinstance(node, Function):
			self._register(self.functions, node, "function")
		elif isinstance(node, EndOfInput):
			return
		else:
			raise TypeError(f"Unexpected root node: {type(node).__name__}")

	def _register(self, table: list, decl: Mixin | Function, kind: str) -> None:
		first = _find(table, decl.name)
		if first is not None:
			logger.warning(
				"%s %s redeclared at %d:%d; the declaration at %d:%d stays in effect",
				kind,
				decl.name,
				decl.loc.line,
				decl.loc.column,
				first.loc.line,
				first.loc.column,
			)
		else:
			logger.debug("registered %s %s(%s)", kind, decl.name, ", ".join(decl.params))
		table.append(decl)

	# ---------- selectors ----------

	def gen_selector(self, selectors: List[str], node: Selector) -> None:
		"""
		Emit one (already flattened) selector block, then its nested blocks.

		The block's frame stays pushed while nested blocks are generated so they
		see the variables defined here.
		"""
		self.scopes.push()
		try:
			self.exec_lines(node.lines)
			declarations = self.gen_members(node.properties)
			if declarations:
				logger.debug("emit %s (%d declarations)", ", ".join(selectors), len(declarations))
				self._css.append(self._format_rule(selectors, declarations))
			for child in node.nested:
				flattened = [
					child_sel.replace("&", sel) if "&" in child_sel else f"{sel} {child_sel}"
					for child_sel in child.selectors
					for sel in selectors
				]
				self.gen_selector(flattened, child)
		finally:
			self.scopes.pop()

	def _format_rule(self, selectors: List[str], declarations: List[Declaration]) -> str:
		if self.compact:
			body = ";".join(f"{name}:{value}" for name, value in declarations)
			return f"{','.join(selectors)}{{{body}}}"
		header = ",\n".join(selectors)
		body = "".join(f"\t{name}: {value};\n" for name, value in declarations)
		return f"{header} {{\n{body}}}\n\n"

	def gen_members(self, members: Sequence[Member]) -> List[Declaration]:
		"""Resolve properties and mixin calls into rendered declarations, in order."""
		out: List[Declaration] = []
		for member in members:
			if isinstance(member, MixinCall):
				mixin = _find(self.mixins, member.name)
				if mixin is None:
					raise EvalError(ErrorKind.UNDEFINED_MIXIN, f"Could not find mixin: {member.name}", loc=member.loc)
				args = [self.eval_expr(arg) for arg in member.args]
				out.extend(self.expand_mixin(mixin, args, member.loc))
				continue
			mixin = _find(self.mixins, member.name)
			value = self.eval_expr(member.value)
			if mixin is not None:
				args = list(value.items) if isinstance(value, TupleExpr) else [value]
				out.extend(self.expand_mixin(mixin, args, member.loc))
			else:
				out.append((member.name, render(value)))
		return out

	# ---------- invocation ----------

	@contextmanager
	def _invocation(self, name: str, loc: Located) -> Iterator[None]:
		self.call_stack.append(name)
		try:
			if len(self.call_stack) > RECURSION_LIMIT:
				raise EvalError(
					ErrorKind.RECURSION_LIMIT,
					f"Recursion limit ({RECURSION_LIMIT}) exceeded in {name}; "
					f"call stack: {' -> '.join(self.call_stack[-10:])}",
					loc=loc,
				)
			yield
		finally:
			self.call_stack.pop()

	def _bind(self, kind: str, decl: Mixin | Function, args: List[Expr], loc: Located) -> dict:
		expected = len(decl.params)
		if len(args) < expected:
			raise EvalError(
				ErrorKind.ARITY,
				f"Not enough arguments for {kind} {decl.name}: expected {expected}, got {len(args)}",
				loc=loc,
			)
		if len(args) > expected:
			logger.debug("%s %s ignores %d extra argument(s)", kind, decl.name, len(args) - expected)
		return dict(zip(decl.params, args))

	def expand_mixin(self, mixin: Mixin, args: List[Expr], loc: Located) -> List[Declaration]:
		bindings = self._bind("mixin", mixin, args, loc)
		with self._invocation(mixin.name, loc), self.scopes.frame(bindings):
			# A `return` only stops the remaining lines.
			self.exec_lines(mixin.lines)
			return self.gen_members(mixin.properties)

	def call_function(self, call: Call, symbolic: bool = False) -> Expr:
		func = _find(self.functions, call.name)
		if func is None:
			if is_native_function(call.name):
				return self._native_call(call)
			raise EvalError(ErrorKind.UNDEFINED_FUNCTION, f"Could not find function: {call.name}", loc=call.loc)
		args = [self.eval_expr(arg, symbolic) for arg in call.args]
		bindings = self._bind("function", func, args, call.loc)
		with self._invocation(func.name, call.loc), self.scopes.frame(bindings):
			result = self.exec_lines(func.lines)
		if result is None:
			raise EvalError(ErrorKind.MISSING_RETURN, f"Function {func.name} did not return a value", loc=call.loc)
		return result

	def _native_call(self, call: Call) -> Keyword:
		args = [render(self.eval_expr(arg, symbolic=True)) for arg in call.args]
		return Keyword(loc=call.loc, name=f"{call.name}({', '.join(args)})")

	# ---------- lines ----------

	def exec_lines(self, lines: Sequence[Line]) -> Optional[Expr]:
		"""Run lines in the current frame; returns the value of the first `return` reached."""
		for line in lines:
			result = self.exec_line(line)
			if result is not None:
				return result
		return None

	def exec_line(self, line: Line) -> Optional[Expr]:
		if isinstance(line, VarDef):
			self.scopes.define(line.name, self.eval_expr(line.value))
			return None
		if isinstance(line, ForLoop):
			iterable = self.eval_expr(line.iterable)
			if not isinstance(iterable, ArrayExpr):
				raise EvalError(
					ErrorKind.INVALID_OPERANDS,
					f"for loop expects an array, got {type_name(iterable)}",
					loc=line.iterable.loc,
				)
			for item in iterable.items:
				self.scopes.define(line.name, item)
				result = self.exec_lines(line.body)
				if result is not None:
					return result
			return None
		if isinstance(line, Return):
			return self.eval_expr(line.value)
		raise TypeError(f"Unexpected line: {type(line).__name__}")

	# ---------- expressions ----------

	def eval_expr(self, expr: Expr, symbolic: bool = False) -> Expr:
		"""
		Reduce an expression to a value.

		With `symbolic` set (arguments of native CSS functions), arithmetic is
		written out instead of computed so `calc(100% - 10px)` survives.
		"""
		if isinstance(expr, LITERAL_TYPES):
			return expr
		if isinstance(expr, Variable):
			return self.scopes.lookup(expr.name, expr.loc)
		if isinstance(expr, Interpolation):
			text = "".join(render_text(self.eval_expr(part, symbolic)) for part in expr.parts)
			if expr.quoted:
				return String(loc=expr.loc, value=text)
			return Keyword(loc=expr.loc, name=text)
		if isinstance(expr, TupleExpr):
			return TupleExpr(loc=expr.loc, items=[self.eval_expr(item, symbolic) for item in expr.items])
		if isinstance(expr, ArrayExpr):
			return ArrayExpr(loc=expr.loc, items=[self.eval_expr(item, symbolic) for item in expr.items])
		if isinstance(expr, ObjectExpr):
			return ObjectExpr(
				loc=expr.loc,
				fields={key: self.eval_expr(value, symbolic) for key, value in expr.fields.items()},
			)
		if isinstance(expr, Accessor):
			return self._eval_accessor(expr, symbolic)
		if isinstance(expr, Index):
			return self._eval_index(expr, symbolic)
		if isinstance(expr, Binary):
			left = self.eval_expr(expr.left, symbolic)
			right = self.eval_expr(expr.right, symbolic)
			if symbolic and expr.op in ARITHMETIC_OPS:
				return Keyword(loc=expr.loc, name=f"{render(left)} {expr.op} {render(right)}")
			return binary(expr.op, left, right, expr.loc)
		if isinstance(expr, Call):
			return self.call_function(expr, symbolic)
		raise TypeError(f"Unexpected expression: {type(expr).__name__}")

	def _eval_accessor(self, expr: Accessor, symbolic: bool) -> Expr:
		value = self.eval_expr(expr.base, symbolic)
		for field_name in expr.fields:
			if not isinstance(value, ObjectExpr):
				raise EvalError(
					ErrorKind.NOT_INDEXABLE,
					f"Cannot access field '{field_name}' on {type_name(value)}",
					loc=expr.loc,
				)
			if field_name not in value.fields:
				raise EvalError(ErrorKind.FIELD_NOT_FOUND, f"Field '{field_name}' not found", loc=expr.loc)
			value = value.fields[field_name]
		return value

	def _eval_index(self, expr: Index, symbolic: bool) -> Expr:
		base = self.eval_expr(expr.base, symbolic)
		index = self.eval_expr(expr.index, symbolic)
		if isinstance(base, ArrayExpr):
			if not isinstance(index, Number):
				raise EvalError(
					ErrorKind.INVALID_OPERANDS,
					f"Array index must be a number, got {type_name(index)}",
					loc=expr.index.loc,
				)
			position = int(index.value)
			if position < 0 or position >= len(base.items):
				raise EvalError(
					ErrorKind.INDEX_OUT_OF_RANGE,
					f"Index {position} out of range for array of length {len(base.items)}",
					loc=expr.index.loc,
				)
			return base.items[position]
		if isinstance(base, ObjectExpr) and isinstance(index, (String, Keyword)):
			key = index.value if isinstance(index, String) else index.name
			if key not in base.fields:
				raise EvalError(ErrorKind.FIELD_NOT_FOUND, f"Field '{key}' not found", loc=expr.index.loc)
			return base.fields[key]
		raise EvalError(ErrorKind.NOT_INDEXABLE, f"Cannot index into {type_name(base)}", loc=expr.loc)


def _find(table: list, name: str):
	# First declaration wins.
	for decl in table:
		if decl.name == name:
			return decl
	return None


__all__ = ["Generator", "NATIVE_FUNCTIONS", "RECURSION_LIMIT", "is_native_function"]
