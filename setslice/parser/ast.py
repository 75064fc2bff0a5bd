# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Statement AST produced by the parser.

Everything here is frozen: a Statement is built once by the parser (or by a
host constructing blocks programmatically) and consumed once by the expander.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union

from setslice.core.span import Span
from setslice.ranges import RangeSpec


@dataclass(frozen=True)
class LiteralValue:
	"""An element literal (int, float, string or bool)."""

	value: object
	span: Span = Span()


@dataclass(frozen=True)
class NameValue:
	"""A name whose value is read from the scope at execution time."""

	ident: str
	span: Span = Span()


Value = Union[LiteralValue, NameValue]


@dataclass(frozen=True)
class NamedOperand:
	"""
	A container named in the scope, e.g. `src`, `&src` or `&src[1..3]`.

	`borrowed` records the `&` marker; `range` selects a sub-view of the
	container and is only legal for borrowing modes.
	"""

	ident: str
	range: Optional[RangeSpec] = None
	borrowed: bool = False
	span: Span = Span()


@dataclass(frozen=True)
class ArrayOperand:
	"""An inline array literal, e.g. `[1, 2]` or `&[x, y]`."""

	values: Tuple[Value, ...]
	borrowed: bool = False
	span: Span = Span()


Operand = Union[NamedOperand, ArrayOperand]


class SourceSpec:
	"""Right-hand side of a statement."""

	span: Span

	def names(self) -> Iterator[str]:
		raise NotImplementedError


def _value_names(values: Tuple[Value, ...]) -> Iterator[str]:
	for value in values:
		if isinstance(value, NameValue):
			yield value.ident


def _operand_names(operand: Operand) -> Iterator[str]:
	if isinstance(operand, NamedOperand):
		yield operand.ident
		if operand.range is not None:
			yield from operand.range.names()
	else:
		yield from _value_names(operand.values)


@dataclass(frozen=True)
class ListSource(SourceSpec):
	"""`v = 1, 2, x` - write length is the literal count."""

	values: Tuple[Value, ...]
	span: Span = Span()

	def names(self) -> Iterator[str]:
		yield from _value_names(self.values)


@dataclass(frozen=True)
class MoveSource(SourceSpec):
	"""`v = move arr` - ownership of the whole operand transfers into the buffer."""

	operand: Operand
	span: Span = Span()

	def names(self) -> Iterator[str]:
		yield from _operand_names(self.operand)


@dataclass(frozen=True)
class CopySource(SourceSpec):
	"""`v = copy &src` - elements are trivially duplicated; `src` stays usable."""

	operand: Operand
	span: Span = Span()

	def names(self) -> Iterator[str]:
		yield from _operand_names(self.operand)


@dataclass(frozen=True)
class CloneSource(SourceSpec):
	"""`v = clone &src` - elements are explicitly duplicated; `src` stays usable."""

	operand: Operand
	span: Span = Span()

	def names(self) -> Iterator[str]:
		yield from _operand_names(self.operand)


@dataclass(frozen=True)
class RawRefSource(SourceSpec):
	"""
	`unsafe v: (N) = ref &src` - the very same element objects are placed in
	the buffer. Target and source alias afterwards; if the elements carry
	mutable state, mutations through one are visible through the other.
	"""

	operand: Operand
	span: Span = Span()

	def names(self) -> Iterator[str]:
		yield from _operand_names(self.operand)


@dataclass(frozen=True)
class SizeLiteral:
	value: int

	def __str__(self) -> str:
		return str(self.value)


@dataclass(frozen=True)
class SizeName:
	"""A size annotation naming a compile-time constant of the scope."""

	ident: str

	def __str__(self) -> str:
		return self.ident


SizeExpr = Union[SizeLiteral, SizeName]


@dataclass(frozen=True)
class Statement:
	index: int
	target: str
	source: SourceSpec
	range: Optional[RangeSpec] = None
	explicit_size: Optional[SizeExpr] = None
	unsafe: bool = False
	span: Span = Span()

	def operand_names(self) -> Iterator[str]:
		"""Names the right-hand side reads (containers and list values)."""
		yield from self.source.names()


@dataclass(frozen=True)
class Block:
	statements: Tuple[Statement, ...] = field(default_factory=tuple)
	file: Optional[str] = None

	def __iter__(self) -> Iterator[Statement]:
		return iter(self.statements)

	def __len__(self) -> int:
		return len(self.statements)

	def __getitem__(self, idx: int) -> Statement:
		return self.statements[idx]


__all__ = [
	"LiteralValue",
	"NameValue",
	"Value",
	"NamedOperand",
	"ArrayOperand",
	"Operand",
	"SourceSpec",
	"ListSource",
	"MoveSource",
	"CopySource",
	"CloneSource",
	"RawRefSource",
	"SizeLiteral",
	"SizeName",
	"SizeExpr",
	"Statement",
	"Block",
]
