# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source spans for statements and diagnostics.

A Span is best-effort: statements built by the parser carry line/column
information from lark's propagated positions, while statements constructed by
hand (or diagnostics raised at execution time without a statement) use the
empty sentinel `Span()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (file/line/column, all optional)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None

	@classmethod
	def from_meta(cls, meta: Any, file: Optional[str] = None) -> "Span":
		"""
		Build a Span from a lark `Tree.meta` (or anything with the same fields).

		lark leaves `meta.empty` set when a rule matched no tokens; such metas
		have no position attributes, so we fall back to the sentinel.
		"""
		if meta is None or getattr(meta, "empty", False):
			return cls(file=file)
		return cls(
			file=file,
			line=getattr(meta, "line", None),
			column=getattr(meta, "column", None),
			end_line=getattr(meta, "end_line", None),
			end_column=getattr(meta, "end_column", None),
		)

	def __str__(self) -> str:
		where = self.file or "<block>"
		if self.line is None:
			return where
		if self.column is None:
			return f"{where}:{self.line}"
		return f"{where}:{self.line}:{self.column}"


__all__ = ["Span"]
