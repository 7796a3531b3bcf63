# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Variable scopes.

A stack of frames, innermost last. Each frame is an insertion-ordered mapping
of name -> evaluated value. Lookup walks from the innermost frame outwards;
definition always writes into the innermost frame, replacing an existing
binding of the same name there.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from glaze.core.errors import ErrorKind, EvalError
from glaze.parser.ast import Expr, Located


class ScopeStack:
	def __init__(self) -> None:
		# Root frame: top-level `$x = ...` lines bind here.
		self._frames: List[Dict[str, Expr]] = [{}]

	@property
	def depth(self) -> int:
		return len(self._frames)

	def push(self, bindings: Optional[Dict[str, Expr]] = None) -> None:
		self._frames.append(dict(bindings or {}))

	def pop(self) -> None:
		if len(self._frames) == 1:
			raise RuntimeError("cannot pop the root scope frame")
		self._frames.pop()

	@contextmanager
	def frame(self, bindings: Optional[Dict[str, Expr]] = None) -> Iterator[None]:
		self.push(bindings)
		try:
			yield
		finally:
			self.pop()

	def define(self, name: str, value: Expr) -> None:
		self._frames[-1][name] = value

	def lookup(self, name: str, loc: Optional[Located] = None) -> Expr:
		for frame in reversed(self._frames):
			if name in frame:
				return frame[name]
		raise EvalError(ErrorKind.UNDEFINED_VARIABLE, f"Could not find variable: ${name}", loc=loc)

	def __contains__(self, name: str) -> bool:
		return any(name in frame for frame in self._frames)


__all__ = ["ScopeStack"]
