# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Glaze lexer.

Scans the source one token at a time from an explicit cursor (position, line,
column). Tokens are produced lazily by `Lexer.next()`; the cursor only ever
moves forward, and lookahead is limited to peeking raw characters.

Besides the token stream, the lexer exposes the raw-text helpers the
structural parser needs: indentation measurement, selector fragments and
expression fragments (handed to the expression grammar untouched).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from glaze.core.errors import ErrorKind, LexError, ParseError

from .ast import Located

NEWLINE_CHARS = "\n\r\f"
HEX_DIGITS = "0123456789abcdefABCDEF"
OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {")": "(", "]": "[", "}": "{"}
# Longest first: the first match wins.
OPERATORS = ("..=", "->", "..", "++", "+", "*", "/", "=", ".", "&", ">", "~", "(", "[", "]", "{", "}", "%")


class TokenKind(str, Enum):
	MULTILINE_COMMENT = "MULTILINE_COMMENT"
	NEWLINE = "NEWLINE"
	INDENT = "INDENT"
	IDENT = "IDENT"
	VARIABLE = "VARIABLE"
	SELECTOR = "SELECTOR"
	FUNCTION = "FUNCTION"
	AT_RULE = "AT_RULE"
	HASH = "HASH"
	STRING = "STRING"
	NUMBER = "NUMBER"
	DIMENSION = "DIMENSION"
	PERCENTAGE = "PERCENTAGE"
	IMPORTANT = "IMPORTANT"
	OPERATOR = "OPERATOR"
	COLON = "COLON"
	COMMA = "COMMA"
	CLOSE_PAREN = "CLOSE_PAREN"


@dataclass(frozen=True)
class Token:
	kind: TokenKind
	value: object = None
	line: int = 1
	column: int = 1
	unit: Optional[str] = None

	@property
	def loc(self) -> Located:
		return Located(line=self.line, column=self.column)

	def __repr__(self) -> str:
		if self.value is None:
			return self.kind.value
		if self.unit is not None:
			return f"{self.kind.value}({self.value}{self.unit})"
		return f"{self.kind.value}({self.value!r})"


def is_ident_start(ch: str) -> bool:
	return ch.isascii() and (ch.isalpha() or ch == "_")


def is_ident_char(ch: str) -> bool:
	# `"" in "_-"` holds, so end of input must be ruled out first.
	return ch != "" and ch.isascii() and (ch.isalnum() or ch in "_-")


class Lexer:
	def __init__(self, source: str) -> None:
		self.source = source
		self.pos = 0
		self.line = 1
		self.column = 1

	# ---------- cursor ----------

	def peek(self, n: int = 0) -> str:
		idx = self.pos + n
		if idx < len(self.source):
			return self.source[idx]
		return ""

	def starts_with(self, needle: str, offset: int = 0) -> bool:
		return self.source.startswith(needle, self.pos + offset)

	def at_end(self) -> bool:
		return self.pos >= len(self.source)

	def advance(self, n: int = 1) -> None:
		for _ in range(n):
			if self.pos >= len(self.source):
				return
			ch = self.source[self.pos]
			# `\r\n` counts once, on its `\n`.
			if ch == "\n" or ch == "\f" or (ch == "\r" and not self.starts_with("\r\n")):
				self.line += 1
				self.column = 1
			else:
				self.column += 1
			self.pos += 1

	def loc(self) -> Located:
		return Located(line=self.line, column=self.column)

	def _token(self, kind: TokenKind, value: object = None, start: Optional[Located] = None, unit: Optional[str] = None) -> Token:
		start = start or self.loc()
		return Token(kind=kind, value=value, line=start.line, column=start.column, unit=unit)

	# ---------- tokens ----------

	def next(self) -> Optional[Token]:
		"""Return the next token, or None at end of input."""
		while True:
			ch = self.peek()
			if ch == "":
				return None
			start = self.loc()

			if ch == "\t":
				self.advance()
				return self._token(TokenKind.INDENT, start=start)
			if ch == " ":
				if self.starts_with("    "):
					self.advance(4)
					return self._token(TokenKind.INDENT, start=start)
				self.advance()
				continue
			if ch in NEWLINE_CHARS:
				self.advance(2 if self.starts_with("\r\n") else 1)
				return self._token(TokenKind.NEWLINE, start=start)
			if ch == ":":
				self.advance()
				return self._token(TokenKind.COLON, start=start)
			if ch == ",":
				self.advance()
				return self._token(TokenKind.COMMA, start=start)
			if ch == ")":
				self.advance()
				return self._token(TokenKind.CLOSE_PAREN, start=start)
			if self.starts_with("/*"):
				return self._multiline_comment(start)
			if self.starts_with("//"):
				self.skip_line_comment()
				continue
			if ch in "\"'":
				return self._string(start)
			if ch == "-":
				if self.starts_with("->"):
					self.advance(2)
					return self._token(TokenKind.OPERATOR, "->", start=start)
				nxt = self.peek(1)
				if nxt == "-" or is_ident_start(nxt):
					return self._ident(start)
				if nxt.isdigit():
					return self._number(start)
				self.advance()
				return self._token(TokenKind.OPERATOR, "-", start=start)
			if is_ident_start(ch):
				return self._ident(start)
			if ch.isdigit():
				return self._number(start)
			if ch == "#":
				return self._hash(start)
			if ch == "$" and is_ident_start(self.peek(1)):
				self.advance()
				name = self._read_name()
				return self._token(TokenKind.VARIABLE, name, start=start)
			if ch == "@" and is_ident_start(self.peek(1)):
				self.advance()
				return self._token(TokenKind.AT_RULE, self._read_name(), start=start)
			if ch == "!":
				return self._important(start)
			for op in OPERATORS:
				if self.starts_with(op):
					self.advance(len(op))
					return self._token(TokenKind.OPERATOR, op, start=start)
			raise LexError(ErrorKind.UNRECOGNIZED_TOKEN, f"Unrecognized token: {ch!r}", loc=start)

	def skip_line_comment(self) -> None:
		"""Skip a `//` comment up to (not including) the line break."""
		while self.peek() not in ("", *NEWLINE_CHARS):
			self.advance()

	def _multiline_comment(self, start: Located) -> Token:
		self.advance(2)
		begin = self.pos
		while not self.starts_with("*/"):
			if self.at_end():
				raise LexError(ErrorKind.UNTERMINATED_COMMENT, "Could not find closing */", loc=start)
			self.advance()
		text = self.source[begin:self.pos]
		self.advance(2)
		return self._token(TokenKind.MULTILINE_COMMENT, text, start=start)

	def _string(self, start: Located) -> Token:
		quote = self.peek()
		self.advance()
		out: list[str] = []
		while True:
			ch = self.peek()
			if ch == "" or ch in NEWLINE_CHARS:
				raise LexError(ErrorKind.UNTERMINATED_STRING, f"Could not find closing {quote}", loc=start)
			if ch == "\\" and self.peek(1) not in ("", *NEWLINE_CHARS):
				out.append(self.peek(1))
				self.advance(2)
				continue
			self.advance()
			if ch == quote:
				break
			out.append(ch)
		return self._token(TokenKind.STRING, "".join(out), start=start)

	def _read_name(self) -> str:
		begin = self.pos
		while is_ident_char(self.peek()):
			self.advance()
		return self.source[begin:self.pos]

	def _ident(self, start: Located) -> Token:
		name = self._read_name()
		if self.peek() == "(":
			self.advance()
			return self._token(TokenKind.FUNCTION, name, start=start)
		return self._token(TokenKind.IDENT, name, start=start)

	def _number(self, start: Located) -> Token:
		begin = self.pos
		if self.peek() == "-":
			self.advance()
		while self.peek().isdigit():
			self.advance()
		if self.peek() == "." and self.peek(1) != ".":
			if not self.peek(1).isdigit():
				self.advance()
				raise LexError(ErrorKind.MALFORMED_NUMBER, "Trailing . not allowed", loc=self.loc())
			self.advance()
			while self.peek().isdigit():
				self.advance()
		value = float(self.source[begin:self.pos])
		if self.peek() == "%":
			self.advance()
			return self._token(TokenKind.PERCENTAGE, value, start=start)
		if self.peek().isascii() and self.peek().isalpha():
			unit_begin = self.pos
			while self.peek().isascii() and self.peek().isalpha():
				self.advance()
			return self._token(TokenKind.DIMENSION, value, start=start, unit=self.source[unit_begin:self.pos])
		return self._token(TokenKind.NUMBER, value, start=start)

	def _hash(self, start: Located) -> Token:
		self.advance()
		begin = self.pos
		while self.peek() and self.peek() in HEX_DIGITS:
			self.advance()
		if begin == self.pos:
			raise LexError(ErrorKind.MALFORMED_HEX, "Expected hexadecimal", loc=self.loc())
		return self._token(TokenKind.HASH, self.source[begin:self.pos], start=start)

	def _important(self, start: Located) -> Token:
		n = 1
		while self.peek(n) in (" ", "\t"):
			n += 1
		if self.source[self.pos + n:self.pos + n + 9].lower() == "important":
			self.advance(n + 9)
			return self._token(TokenKind.IMPORTANT, "!important", start=start)
		raise LexError(ErrorKind.UNRECOGNIZED_TOKEN, "Unrecognized token: '!'", loc=start)

	# ---------- line structure ----------

	def measure_indent(self) -> Tuple[int, int]:
		"""
		Measure the indentation at the cursor without consuming it.

		Returns (level, width in characters). One level is one tab or one run
		of four spaces; the two are never mixed on one line.
		"""
		n = 0
		while self.peek(n) == "\t":
			n += 1
		if n:
			if self.peek(n) == " ":
				raise ParseError(
					ErrorKind.UNEXPECTED_TOKEN,
					"Indentation must be tabs or groups of four spaces",
					loc=Located(self.line, self.column + n),
				)
			return n, n
		while self.peek(n) == " ":
			n += 1
		if n % 4 or self.peek(n) == "\t":
			if self.peek(n) in ("", *NEWLINE_CHARS):
				return n // 4, n
			raise ParseError(
				ErrorKind.UNEXPECTED_TOKEN,
				"Indentation must be tabs or groups of four spaces",
				loc=Located(self.line, self.column + n),
			)
		return n // 4, n

	def line_is_blank(self, offset: int = 0) -> bool:
		"""True if the line starting at `pos + offset` holds only whitespace or a `//` comment."""
		n = offset
		while self.peek(n) in (" ", "\t"):
			n += 1
		return self.peek(n) in ("", *NEWLINE_CHARS) or self.starts_with("//", n)

	def skip_blank_lines(self) -> None:
		"""Consume whole blank lines; the cursor must sit at the start of a line."""
		while not self.at_end() and self.line_is_blank():
			self.skip_line_comment_or_space()
			if self.peek() in NEWLINE_CHARS and self.peek():
				self.advance(2 if self.starts_with("\r\n") else 1)
			else:
				break

	def skip_line_comment_or_space(self) -> None:
		while self.peek() in (" ", "\t"):
			self.advance()
		if self.starts_with("//"):
			self.skip_line_comment()

	def end_of_line(self) -> None:
		"""
		Finish the current line: trailing spaces and a `//` comment are allowed,
		then a line break or end of input must follow.
		"""
		self.skip_line_comment_or_space()
		ch = self.peek()
		if ch == "":
			return
		if ch in NEWLINE_CHARS:
			self.advance(2 if self.starts_with("\r\n") else 1)
			return
		raise ParseError(ErrorKind.UNEXPECTED_TOKEN, f"Unexpected symbol: {ch!r}", loc=self.loc())

	def next_line_indent(self) -> Optional[int]:
		"""
		Indentation level of the next non-blank line after the current one, or
		None when there is none. Nothing is consumed.
		"""
		n = 0
		while self.peek(n) not in ("", *NEWLINE_CHARS):
			n += 1
		while self.peek(n):
			n += 2 if self.starts_with("\r\n", n) else 1
			if not self.line_is_blank(n):
				break
			while self.peek(n) not in ("", *NEWLINE_CHARS):
				n += 1
		else:
			return None
		tabs = 0
		while self.peek(n + tabs) == "\t":
			tabs += 1
		if tabs:
			return tabs
		spaces = 0
		while self.peek(n + spaces) == " ":
			spaces += 1
		return spaces // 4

	def line_opens_bracket(self) -> bool:
		"""True if the rest of the current line leaves a bracket open (a value continues below)."""
		depth = 0
		quote = ""
		n = 0
		while self.peek(n) not in ("", *NEWLINE_CHARS):
			ch = self.peek(n)
			if quote:
				if ch == "\\":
					n += 1
				elif ch == quote:
					quote = ""
			elif ch in "\"'":
				quote = ch
			elif ch in OPENERS:
				depth += 1
			elif ch in CLOSERS:
				depth -= 1
			n += 1
		return depth > 0

	# ---------- raw fragments ----------

	def selector(self) -> Token:
		"""
		Read one selector fragment up to a top-level comma or the end of line.

		Commas nested in (), [] or quotes stay part of the fragment, so
		`:is(a, b)` and `[title="a,b"]` survive.
		"""
		while self.peek() in (" ", "\t"):
			self.advance()
		start = self.loc()
		begin = self.pos
		stack: list[str] = []
		quote = ""
		while True:
			ch = self.peek()
			if ch == "" or ch in NEWLINE_CHARS:
				break
			if quote:
				if ch == quote:
					quote = ""
			elif ch in "\"'":
				quote = ch
			elif ch in "([":
				stack.append(ch)
			elif ch in ")]":
				if not stack or stack[-1] != CLOSERS[ch]:
					raise ParseError(ErrorKind.UNMATCHED_DELIMITER, f"Unmatched {ch}", loc=self.loc())
				stack.pop()
			elif not stack and ch == ",":
				break
			elif not stack and self.starts_with("//") and (self.pos == begin or self.source[self.pos - 1] in " \t"):
				break
			self.advance()
		if quote:
			raise LexError(ErrorKind.UNTERMINATED_STRING, f"Could not find closing {quote}", loc=start)
		if stack:
			raise ParseError(ErrorKind.UNMATCHED_DELIMITER, "Unmatched parentheses", loc=start)
		text = self.source[begin:self.pos].strip()
		if not text:
			raise ParseError(ErrorKind.UNEXPECTED_TOKEN, "Expected selector", loc=start)
		return self._token(TokenKind.SELECTOR, text, start=start)

	def fragment(self, *, until_close_paren: bool = False) -> Tuple[str, Located]:
		"""
		Tokenize one expression fragment and return its raw text.

		The fragment ends at the line break (or, with `until_close_paren`, at the
		`)` closing an argument list, which is consumed). Line breaks inside open
		brackets do not end it. Scanning through `next()` surfaces lexical errors
		at their real position; the text is then handed to the expression
		grammar. Returns the text and the location of its first character.
		"""
		while self.peek() in (" ", "\t"):
			self.advance()
		start = self.loc()
		begin = self.pos
		end = self.pos
		stack: list[Tuple[str, Located]] = []
		while True:
			while self.peek() in (" ", "\t"):
				self.advance()
			ch = self.peek()
			if not stack:
				if ch == "" or ch in NEWLINE_CHARS:
					break
				if self.starts_with("//"):
					self.skip_line_comment()
					continue
				if ch == ")" and until_close_paren:
					self.advance()
					return self.source[begin:end], start
			elif ch == "":
				raise ParseError(ErrorKind.UNMATCHED_DELIMITER, "Unmatched parentheses", loc=stack[-1][1])
			tok = self.next()
			if tok is None:
				continue
			if tok.kind is TokenKind.FUNCTION:
				if tok.value.lower() == "url":
					self._raw_url(tok.loc)
				else:
					stack.append(("(", tok.loc))
			elif tok.kind is TokenKind.OPERATOR and tok.value in OPENERS:
				stack.append((tok.value, tok.loc))
			elif tok.kind is TokenKind.CLOSE_PAREN or (tok.kind is TokenKind.OPERATOR and tok.value in CLOSERS):
				closer = ")" if tok.kind is TokenKind.CLOSE_PAREN else tok.value
				if not stack:
					raise ParseError(ErrorKind.UNMATCHED_DELIMITER, f"Unmatched {closer}", loc=tok.loc)
				opener, opener_loc = stack.pop()
				if opener != CLOSERS[closer]:
					raise ParseError(ErrorKind.UNMATCHED_DELIMITER, f"Unmatched {opener}", loc=opener_loc)
			if tok.kind not in (TokenKind.NEWLINE, TokenKind.INDENT, TokenKind.MULTILINE_COMMENT):
				end = self.pos
		if until_close_paren:
			raise ParseError(ErrorKind.UNMATCHED_DELIMITER, "Unmatched parentheses", loc=start)
		return self.source[begin:end], start

	def _raw_url(self, start: Located) -> None:
		# url(...) bodies are not tokenized: `//` and `:` are ordinary there.
		while self.peek() != ")":
			if self.peek() == "" or self.peek() in NEWLINE_CHARS:
				raise ParseError(ErrorKind.UNMATCHED_DELIMITER, "Unmatched parentheses", loc=start)
			self.advance()
		self.advance()


__all__ = ["Lexer", "Token", "TokenKind"]
