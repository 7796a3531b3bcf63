# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error model for the glaze compiler.

Every failure in the pipeline is fatal: the first error aborts compilation and
propagates to the caller as a `GlazeError`. Each error carries a stable kind,
a human-readable message and, where known, the source position. Phase
subclasses let a host catch lexer, parser or generator failures separately.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

from .diagnostics import Diagnostic
from .span import Span

if TYPE_CHECKING:
	from glaze.parser.ast import Located


class ErrorKind(str, Enum):
	# lexer
	UNTERMINATED_COMMENT = "unterminated_comment"
	UNTERMINATED_STRING = "unterminated_string"
	UNRECOGNIZED_TOKEN = "unrecognized_token"
	# parser
	UNEXPECTED_TOKEN = "unexpected_token"
	UNMATCHED_DELIMITER = "unmatched_delimiter"
	MISSING_PUNCTUATION = "missing_punctuation"
	MALFORMED_NUMBER = "malformed_number"
	MALFORMED_HEX = "malformed_hex"
	# generator
	UNDEFINED_VARIABLE = "undefined_variable"
	UNDEFINED_MIXIN = "undefined_mixin"
	UNDEFINED_FUNCTION = "undefined_function"
	ARITY = "arity"
	MISSING_RETURN = "missing_return"
	NOT_INDEXABLE = "not_indexable"
	FIELD_NOT_FOUND = "field_not_found"
	INDEX_OUT_OF_RANGE = "index_out_of_range"
	INVALID_OPERANDS = "invalid_operands"
	UNRENDERABLE_VALUE = "unrenderable_value"
	RECURSION_LIMIT = "recursion_limit"
	# outside the core
	IO = "io"
	CONFIG = "config"


class GlazeError(Exception):
	"""Base class for every error surfaced by the compiler."""

	phase: str = "compile"

	def __init__(self, kind: ErrorKind, message: str, *, loc: Optional["Located"] = None) -> None:
		super().__init__(message)
		self.kind = kind
		self.message = message
		self.loc = loc

	@property
	def line(self) -> Optional[int]:
		return self.loc.line if self.loc is not None else None

	@property
	def column(self) -> Optional[int]:
		return self.loc.column if self.loc is not None else None

	def __str__(self) -> str:
		if self.loc is None:
			return self.message
		return f"{self.loc.line}:{self.loc.column}: {self.message}"

	def to_diagnostic(self, file: Optional[str] = None) -> Diagnostic:
		return Diagnostic(
			message=self.message,
			code=self.kind.value,
			phase=self.phase,
			severity="error",
			span=Span.from_loc(self.loc, file=file),
		)


class LexError(GlazeError):
	phase = "lexer"


class ParseError(GlazeError):
	phase = "parser"


class EvalError(GlazeError):
	phase = "generator"


class SourceLoadError(GlazeError):
	"""Raised by the file loader before the core runs (missing file, bad UTF-8)."""

	phase = "io"

	def __init__(self, message: str) -> None:
		super().__init__(ErrorKind.IO, message)


class ConfigError(GlazeError):
	"""Raised when `glaze.json` is malformed."""

	phase = "config"

	def __init__(self, message: str) -> None:
		super().__init__(ErrorKind.CONFIG, message)


__all__ = [
	"ErrorKind",
	"GlazeError",
	"LexError",
	"ParseError",
	"EvalError",
	"SourceLoadError",
	"ConfigError",
]
