# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structural reader for glaze sources.

Lines, indentation, selector lists and declarations are read directly from the
lexer cursor. Every value (property values, `$x = ...`, `for` iterables,
`return` values and call arguments) is captured as a raw fragment and handed
to the expression grammar in `expr.py`.

A block's members sit exactly one indent level below their owner. A shallower
line ends the block; a deeper one where no block can start is an error.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from glaze.core.errors import ErrorKind, ParseError
from .lexer import NEWLINE_CHARS, Lexer, Token, TokenKind, is_ident_char, is_ident_start

from .ast import (
	Comment,
	EndOfInput,
	ForLoop,
	Function,
	Line,
	Member,
	Mixin,
	MixinCall,
	Node,
	Property,
	Return,
	Selector,
	TypeExpr,
	VarDef,
)
from .expr import parse_args, parse_value

logger = logging.getLogger(__name__)

# Block owners: what a body may contain.
SELECTOR = "selector"
MIXIN = "mixin"
FUNCTION = "function"

_PUNCTUATION = {TokenKind.COLON, TokenKind.COMMA, TokenKind.CLOSE_PAREN, TokenKind.OPERATOR}


def parse(source: str) -> List[Node]:
	"""Parse a whole glaze source into its root nodes."""
	return Parser(source).parse()


class Parser:
	def __init__(self, source: str) -> None:
		self.lexer = Lexer(source)

	def parse(self) -> List[Node]:
		nodes: List[Node] = []
		lx = self.lexer
		while True:
			lx.skip_blank_lines()
			if lx.at_end():
				nodes.append(EndOfInput(loc=lx.loc()))
				break
			_level, width = lx.measure_indent()
			if width:
				raise ParseError(ErrorKind.UNEXPECTED_TOKEN, "Unexpected indentation", loc=lx.loc())
			nodes.append(self._top_level())
		logger.debug("parsed %d root nodes", len(nodes))
		return nodes

	# ---------- root ----------

	def _top_level(self) -> Node:
		lx = self.lexer
		if lx.starts_with("/*"):
			tok = lx.next()
			lx.end_of_line()
			return Comment(loc=tok.loc, text=tok.value)
		if lx.peek() == "$":
			return self._var_def()
		word, after = self._peek_name()
		if word == "for" and after in (" ", "\t"):
			return self._for_loop(0, SELECTOR)
		if word == "return" and after in ("", " ", "\t", *NEWLINE_CHARS):
			raise ParseError(ErrorKind.UNEXPECTED_TOKEN, "return outside of a function or mixin", loc=lx.loc())
		if word and after == "(":
			return self._declaration()
		return self._selector(0)

	def _declaration(self) -> Mixin | Function:
		lx = self.lexer
		head = self._expect(TokenKind.FUNCTION, "declaration name")
		params = self._params()
		self._skip_spaces()
		if lx.starts_with("::"):
			lx.advance(2)
			types = self._signature()
			lx.end_of_line()
			lines = self._statements(1, FUNCTION)
			logger.debug("function %s(%s) :: %s", head.value, ", ".join(params), " -> ".join(str(t) for t in types))
			return Function(loc=head.loc, name=head.value, params=params, types=types, lines=lines)
		lx.end_of_line()
		lines, members, _ = self._body(1, MIXIN)
		return Mixin(loc=head.loc, name=head.value, params=params, lines=lines, properties=members)

	def _params(self) -> List[str]:
		params: List[str] = []
		while True:
			tok = self._next_token()
			if tok is not None and tok.kind is TokenKind.CLOSE_PAREN:
				return params
			if tok is None or tok.kind not in (TokenKind.IDENT, TokenKind.VARIABLE):
				raise self._unexpected(tok, "parameter name")
			params.append(tok.value)
			tok = self._next_token()
			if tok is not None and tok.kind is TokenKind.CLOSE_PAREN:
				return params
			if tok is None or tok.kind is not TokenKind.COMMA:
				raise self._missing(tok, ", or )")

	def _signature(self) -> List[TypeExpr]:
		lx = self.lexer
		types = [self._type()]
		while True:
			self._skip_spaces()
			if not lx.starts_with("->"):
				return types
			lx.advance(2)
			types.append(self._type())

	def _type(self) -> TypeExpr:
		tok = self._next_token()
		if tok is not None and tok.kind is TokenKind.IDENT:
			return TypeExpr(name=tok.value)
		if tok is not None and tok.kind is TokenKind.OPERATOR and tok.value == "[":
			inner = self._type()
			self._expect(TokenKind.OPERATOR, "]", value="]")
			return TypeExpr(name="List", args=[inner])
		raise self._unexpected(tok, "type")

	# ---------- blocks ----------

	def _at_line(self, level: int) -> bool:
		"""
		Enter the next non-blank line if it belongs to the block at `level`.

		Consumes exactly `level` indent units; a shallower line leaves the
		cursor untouched and ends the block.
		"""
		lx = self.lexer
		lx.skip_blank_lines()
		if lx.at_end():
			return False
		found, width = lx.measure_indent()
		if found < level:
			return False
		if found > level:
			raise ParseError(ErrorKind.UNEXPECTED_TOKEN, "Unexpected indentation", loc=lx.loc())
		lx.advance(width)
		return True

	def _body(self, level: int, owner: str) -> Tuple[List[Line], List[Member], List[Selector]]:
		lines: List[Line] = []
		members: List[Member] = []
		nested: List[Selector] = []
		while self._at_line(level):
			self._member(level, owner, lines, members, nested)
		return lines, members, nested

	def _member(
		self,
		level: int,
		owner: str,
		lines: List[Line],
		members: List[Member],
		nested: List[Selector],
	) -> None:
		lx = self.lexer
		if lx.starts_with("/*"):
			lx.next()
			lx.end_of_line()
			return
		statement = self._statement(level, owner)
		if statement is not None:
			lines.append(statement)
			return
		word, after = self._peek_name()
		next_level = lx.next_line_indent()
		opens_block = next_level is not None and next_level > level and not lx.line_opens_bracket()
		if word and after == "(" and not opens_block:
			members.append(self._mixin_call())
			return
		# `width: 1px` is a property even with a deeper line after it; `a:hover` is not.
		spaced = lx.peek(len(word) + 1) in (" ", "\t")
		if word and after == ":" and (spaced or not opens_block):
			members.append(self._property())
			return
		if owner == MIXIN:
			raise ParseError(ErrorKind.UNEXPECTED_TOKEN, "Nested selectors are not allowed in a mixin", loc=lx.loc())
		nested.append(self._selector(level))

	def _statement(self, level: int, owner: str) -> Optional[Line]:
		lx = self.lexer
		if lx.peek() == "$":
			return self._var_def()
		word, after = self._peek_name()
		if word == "for" and after in (" ", "\t"):
			return self._for_loop(level, owner)
		if word == "return" and after in ("", " ", "\t", *NEWLINE_CHARS):
			if owner == SELECTOR:
				raise ParseError(ErrorKind.UNEXPECTED_TOKEN, "return outside of a function or mixin", loc=lx.loc())
			return self._return()
		return None

	def _statements(self, level: int, owner: str) -> List[Line]:
		"""Body of a function or for-loop: statement lines only."""
		lx = self.lexer
		lines: List[Line] = []
		while self._at_line(level):
			if lx.starts_with("/*"):
				lx.next()
				lx.end_of_line()
				continue
			statement = self._statement(level, owner)
			if statement is None:
				raise ParseError(ErrorKind.UNEXPECTED_TOKEN, "Expected a variable definition, for or return", loc=lx.loc())
			lines.append(statement)
		return lines

	# ---------- lines ----------

	def _var_def(self) -> VarDef:
		lx = self.lexer
		tok = self._expect(TokenKind.VARIABLE, "variable")
		self._expect(TokenKind.OPERATOR, "=", value="=")
		text, origin = lx.fragment()
		value = parse_value(text, origin)
		lx.end_of_line()
		return VarDef(loc=tok.loc, name=tok.value, value=value)

	def _for_loop(self, level: int, owner: str) -> ForLoop:
		lx = self.lexer
		head = self._expect(TokenKind.IDENT, "for", value="for")
		var = self._expect(TokenKind.VARIABLE, "loop variable")
		self._expect(TokenKind.IDENT, "in", value="in")
		text, origin = lx.fragment()
		iterable = parse_value(text, origin)
		lx.end_of_line()
		body = self._statements(level + 1, owner)
		return ForLoop(loc=head.loc, name=var.value, iterable=iterable, body=body)

	def _return(self) -> Return:
		lx = self.lexer
		head = self._expect(TokenKind.IDENT, "return", value="return")
		text, origin = lx.fragment()
		value = parse_value(text, origin)
		lx.end_of_line()
		return Return(loc=head.loc, value=value)

	# ---------- members ----------

	def _property(self) -> Property:
		lx = self.lexer
		name = self._expect(TokenKind.IDENT, "property name")
		self._expect(TokenKind.COLON, ":")
		text, origin = lx.fragment()
		value = parse_value(text, origin)
		lx.end_of_line()
		return Property(loc=name.loc, name=name.value, value=value)

	def _mixin_call(self) -> MixinCall:
		lx = self.lexer
		head = self._expect(TokenKind.FUNCTION, "mixin name")
		text, origin = lx.fragment(until_close_paren=True)
		args = parse_args(text, origin)
		lx.end_of_line()
		return MixinCall(loc=head.loc, name=head.value, args=args)

	# ---------- selectors ----------

	def _selector(self, level: int) -> Selector:
		lx = self.lexer
		loc = lx.loc()
		selectors = self._selector_list()
		lx.end_of_line()
		lines, members, nested = self._body(level + 1, SELECTOR)
		return Selector(loc=loc, selectors=selectors, lines=lines, properties=members, nested=nested)

	def _selector_list(self) -> List[str]:
		lx = self.lexer
		selectors = [lx.selector().value]
		while True:
			self._skip_spaces()
			if lx.peek() != ",":
				return selectors
			lx.advance()
			# A trailing comma continues the list on the next line.
			lx.skip_line_comment_or_space()
			while lx.peek() and lx.peek() in NEWLINE_CHARS:
				lx.advance()
				lx.skip_blank_lines()
				lx.skip_line_comment_or_space()
			selectors.append(lx.selector().value)

	# ---------- token helpers ----------

	def _peek_name(self) -> Tuple[str, str]:
		"""Identifier at the cursor and the character right after it; nothing is consumed."""
		lx = self.lexer
		n = 0
		while lx.peek(n) == "-" and n < 2:
			n += 1
		if not is_ident_start(lx.peek(n)):
			return "", lx.peek()
		while is_ident_char(lx.peek(n)):
			n += 1
		return lx.source[lx.pos:lx.pos + n], lx.peek(n)

	def _skip_spaces(self) -> None:
		while self.lexer.peek() in (" ", "\t"):
			self.lexer.advance()

	def _next_token(self) -> Optional[Token]:
		while True:
			tok = self.lexer.next()
			if tok is None or tok.kind is not TokenKind.INDENT:
				return tok

	def _expect(self, kind: TokenKind, what: str, *, value: Optional[str] = None) -> Token:
		tok = self._next_token()
		if tok is None or tok.kind is not kind or (value is not None and tok.value != value):
			if kind in _PUNCTUATION:
				raise self._missing(tok, what)
			raise self._unexpected(tok, what)
		return tok

	def _missing(self, tok: Optional[Token], what: str) -> ParseError:
		loc = tok.loc if tok is not None else self.lexer.loc()
		return ParseError(ErrorKind.MISSING_PUNCTUATION, f"Expected {what}", loc=loc)

	def _unexpected(self, tok: Optional[Token], what: str) -> ParseError:
		if tok is None:
			return ParseError(ErrorKind.UNEXPECTED_TOKEN, f"Expected {what}, found end of input", loc=self.lexer.loc())
		if tok.kind is TokenKind.NEWLINE:
			return ParseError(ErrorKind.UNEXPECTED_TOKEN, f"Expected {what}, found end of line", loc=tok.loc)
		return ParseError(ErrorKind.UNEXPECTED_TOKEN, f"Expected {what}, found {tok!r}", loc=tok.loc)


__all__ = ["parse", "Parser"]
