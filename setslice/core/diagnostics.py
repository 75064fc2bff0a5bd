# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure shared by the parser, the expander and the driver.

Every SetSliceError carries exactly one Diagnostic; the driver renders them
either as text or as JSON records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a single error/warning about a statement block."""

	message: str
	code: str | None = None
	# Pipeline phase that produced the diagnostic: "parser", "expand" or
	# "execute". Drivers use it to tell all-or-nothing failures (parser/expand)
	# from partial executions.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)
	statement_index: int | None = None
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def render(self) -> str:
		"""Human-readable one-line form used by the CLI."""
		where = str(self.span)
		stmt = f" (statement {self.statement_index})" if self.statement_index is not None else ""
		code = f"[{self.code}] " if self.code else ""
		text = f"{where}: {self.severity}: {code}{self.message}{stmt}"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text

	def to_json(self) -> Dict[str, Any]:
		"""Render to a structured JSON-friendly dict."""
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"statement": self.statement_index,
			"notes": list(self.notes),
		}


__all__ = ["Diagnostic"]
