# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span used by diagnostics.

A Span is a best-effort file/line/column triple. Front-end locations
(`Located`) convert into spans when an error leaves the compiler.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source position (file, line, column); all fields optional."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None

	@classmethod
	def from_loc(cls, loc: Any, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a parser location object.

		Anything exposing `line`/`column` attributes is accepted; `None` maps to
		the unknown span.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc if file is None else cls(file=file, line=loc.line, column=loc.column)
		return cls(
			file=file,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
		)

	def describe(self) -> str:
		line = "?" if self.line is None else str(self.line)
		column = "?" if self.column is None else str(self.column)
		if self.file:
			return f"{self.file}:{line}:{column}"
		return f"{line}:{column}"


__all__ = ["Span"]
