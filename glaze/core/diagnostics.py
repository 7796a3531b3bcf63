# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostic record reported by the CLI.

Compilation stops at the first error, so a run produces at most one
diagnostic; the structure still mirrors what a multi-error driver would emit.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic."""

	message: str
	code: str | None = None
	# Pipeline stage that raised the error ("lexer", "parser", "generator", "io").
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def format_human(self) -> str:
		return f"{self.span.describe()}: {self.severity}: {self.message}"

	def to_dict(self) -> dict:
		return {
			"phase": self.phase,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"code": self.code,
		}


__all__ = ["Diagnostic"]
