# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error taxonomy for statement blocks.

Errors fall into two propagation classes:

* parser/expand errors are all-or-nothing: they are raised before any
  statement of the block has touched a buffer;
* execute errors abort the remaining statements, but effects of statements
  that already completed are kept (the failing statement's region is left
  untouched).

Each error carries a Diagnostic so drivers can render it without knowing the
concrete class.
"""

from __future__ import annotations

from typing import Optional

from .diagnostics import Diagnostic
from .span import Span


class SetSliceError(Exception):
	"""Base class for every error raised while parsing/expanding/executing a block."""

	phase = "expand"
	code = "E000"

	def __init__(
		self,
		message: str,
		*,
		statement_index: Optional[int] = None,
		span: Optional[Span] = None,
		notes: Optional[list[str]] = None,
		phase: Optional[str] = None,
	) -> None:
		super().__init__(message)
		if phase is not None:
			self.phase = phase
		self.message = message
		self.statement_index = statement_index
		self.span = span or Span()
		self.notes = list(notes or [])

	@property
	def diagnostic(self) -> Diagnostic:
		return Diagnostic(
			message=self.message,
			code=self.code,
			phase=self.phase,
			span=self.span,
			statement_index=self.statement_index,
			notes=list(self.notes),
		)

	def __str__(self) -> str:
		if self.statement_index is None:
			return self.message
		return f"statement {self.statement_index}: {self.message}"


class SetSliceSyntaxError(SetSliceError):
	"""Malformed statement; no statement of the block executes."""

	phase = "parser"
	code = "E001"

	def __init__(self, message: str, *, expected: Optional[list[str]] = None, **kwargs) -> None:
		super().__init__(message, **kwargs)
		self.expected = sorted(expected or [])


class StaticSizeError(SetSliceError):
	"""Write length must be known before execution but is not (or contradicts an annotation)."""

	code = "E010"


class CapabilityError(SetSliceError):
	"""Element type lacks the Copy/Clone capability the mode needs."""

	code = "E011"


class UnsafeRequiredError(SetSliceError):
	"""A `ref` source was used without the `unsafe` marker."""

	code = "E012"


class ElementTypeError(SetSliceError):
	"""Source and target element types differ."""

	code = "E013"


class UnknownNameError(SetSliceError):
	"""A statement refers to a name the scope does not bind (or binds to the wrong kind of value)."""

	code = "E014"


class UseAfterMoveError(SetSliceError):
	"""An owned value was used after its ownership moved into a buffer."""

	code = "E015"


class RangeError(SetSliceError):
	"""A resolved range violates `0 <= start <= end <= length`."""

	phase = "execute"
	code = "E020"


class LengthMismatchError(SetSliceError):
	"""Source length differs from the target region length."""

	phase = "execute"
	code = "E021"

	def __init__(self, message: str, *, expected: int, actual: int, **kwargs) -> None:
		super().__init__(message, **kwargs)
		self.expected = expected
		self.actual = actual


__all__ = [
	"SetSliceError",
	"SetSliceSyntaxError",
	"StaticSizeError",
	"CapabilityError",
	"UnsafeRequiredError",
	"ElementTypeError",
	"UnknownNameError",
	"UseAfterMoveError",
	"RangeError",
	"LengthMismatchError",
]
