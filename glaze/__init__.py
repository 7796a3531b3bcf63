# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
glaze: an indentation-sensitive stylesheet language compiled to CSS.

	css, js = glaze.compile_source(source)
"""

from __future__ import annotations

from glaze.compiler import compile_file, compile_source
from glaze.core.errors import ErrorKind, EvalError, GlazeError, LexError, ParseError

__all__ = ["compile_source", "compile_file", "GlazeError", "ErrorKind", "LexError", "ParseError", "EvalError"]
