# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Range model: target sub-regions of a buffer.

A RangeSpec is one of FULL (`[..]`, or no subscript at all), FROM (`[s..]`),
TO (`[..e]`), FROM_TO (`[s..e]`) and FROM_TO_INCLUSIVE (`[s..=e]`). Each
bound is either a LiteralBound, folded by the parser when the bound
expression is constant, or a DeferredBound holding a small expression tree
(names, integer literals, `+`/`-`) that is evaluated against the scope at
execution time.

Resolution always yields a half-open `(start, end)` pair and enforces
`0 <= start <= end <= length`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Iterator, Mapping, Optional, Tuple, Union

from setslice.core.errors import RangeError
from setslice.core.span import Span


class RangeKind(Enum):
	FULL = auto()
	FROM = auto()
	TO = auto()
	FROM_TO = auto()
	FROM_TO_INCLUSIVE = auto()


@dataclass(frozen=True)
class BoundName:
	"""A run-time name inside a bound expression."""

	ident: str
	span: Span = Span()


@dataclass(frozen=True)
class BoundBinary:
	"""`left + right` / `left - right`."""

	op: str
	left: "BoundExpr"
	right: "BoundExpr"


BoundExpr = Union[int, BoundName, BoundBinary]


@dataclass(frozen=True)
class LiteralBound:
	value: int

	def __str__(self) -> str:
		return str(self.value)


@dataclass(frozen=True)
class DeferredBound:
	expr: BoundExpr

	def names(self) -> Iterator[str]:
		yield from _expr_names(self.expr)

	def __str__(self) -> str:
		return _expr_str(self.expr)


Bound = Union[LiteralBound, DeferredBound]


def make_bound(expr: BoundExpr) -> Bound:
	"""Fold constant bound expressions; anything mentioning a name is deferred."""
	folded = _fold(expr)
	if isinstance(folded, int):
		return LiteralBound(folded)
	return DeferredBound(folded)


def _fold(expr: BoundExpr) -> BoundExpr:
	if isinstance(expr, BoundBinary):
		left = _fold(expr.left)
		right = _fold(expr.right)
		if isinstance(left, int) and isinstance(right, int):
			return left + right if expr.op == "+" else left - right
		return BoundBinary(expr.op, left, right)
	return expr


def _expr_names(expr: BoundExpr) -> Iterator[str]:
	if isinstance(expr, BoundName):
		yield expr.ident
	elif isinstance(expr, BoundBinary):
		yield from _expr_names(expr.left)
		yield from _expr_names(expr.right)


def _expr_str(expr: BoundExpr) -> str:
	if isinstance(expr, BoundName):
		return expr.ident
	if isinstance(expr, BoundBinary):
		return f"{_expr_str(expr.left)} {expr.op} {_expr_str(expr.right)}"
	return str(expr)


@dataclass(frozen=True)
class RangeSpec:
	kind: RangeKind
	start: Optional[Bound] = None
	end: Optional[Bound] = None

	def __post_init__(self) -> None:
		needs_start = self.kind in (RangeKind.FROM, RangeKind.FROM_TO, RangeKind.FROM_TO_INCLUSIVE)
		needs_end = self.kind in (RangeKind.TO, RangeKind.FROM_TO, RangeKind.FROM_TO_INCLUSIVE)
		if needs_start != (self.start is not None) or needs_end != (self.end is not None):
			raise ValueError(f"bounds do not match range kind {self.kind.name}")

	@classmethod
	def full(cls) -> "RangeSpec":
		return cls(RangeKind.FULL)

	@classmethod
	def from_bounds(cls, start: Optional[Bound], end: Optional[Bound], *, inclusive: bool = False) -> "RangeSpec":
		"""Pick the kind from which bounds are present (inclusive requires an end)."""
		if inclusive:
			if end is None:
				raise ValueError("inclusive range requires an end bound")
			return cls(RangeKind.FROM_TO_INCLUSIVE, start or LiteralBound(0), end)
		if start is None and end is None:
			return cls(RangeKind.FULL)
		if end is None:
			return cls(RangeKind.FROM, start)
		if start is None:
			return cls(RangeKind.TO, None, end)
		return cls(RangeKind.FROM_TO, start, end)

	def names(self) -> Iterator[str]:
		"""Run-time names the bounds depend on."""
		for bound in (self.start, self.end):
			if isinstance(bound, DeferredBound):
				yield from bound.names()

	@property
	def is_static(self) -> bool:
		return not any(isinstance(b, DeferredBound) for b in (self.start, self.end))

	def static_length(self) -> Optional[int]:
		"""Region length when both bounds are literal (FULL/FROM depend on the buffer)."""
		if self.kind is RangeKind.FROM_TO and self.is_static:
			return self.end.value - self.start.value  # type: ignore[union-attr]
		if self.kind is RangeKind.FROM_TO_INCLUSIVE and self.is_static:
			return self.end.value + 1 - self.start.value  # type: ignore[union-attr]
		if self.kind is RangeKind.TO and self.is_static:
			return self.end.value  # type: ignore[union-attr]
		return None

	def __str__(self) -> str:
		start = "" if self.start is None else str(self.start)
		end = "" if self.end is None else str(self.end)
		op = "..=" if self.kind is RangeKind.FROM_TO_INCLUSIVE else ".."
		return f"[{start}{op}{end}]"


FULL_RANGE = RangeSpec.full()


def evaluate_bound(bound: Bound, values: Mapping[str, Any]) -> int:
	"""Evaluate a bound against run-time values (names must be bound to ints)."""
	if isinstance(bound, LiteralBound):
		return bound.value
	return _evaluate(bound.expr, values)


def _evaluate(expr: BoundExpr, values: Mapping[str, Any]) -> int:
	if isinstance(expr, BoundBinary):
		left = _evaluate(expr.left, values)
		right = _evaluate(expr.right, values)
		return left + right if expr.op == "+" else left - right
	if isinstance(expr, BoundName):
		if expr.ident not in values:
			raise RangeError(f"range bound '{expr.ident}' is not defined", span=expr.span)
		value = values[expr.ident]
		# bool is an int subclass but never a sensible index.
		if isinstance(value, bool) or not isinstance(value, int):
			raise RangeError(
				f"range bound '{expr.ident}' must be an integer, got {type(value).__name__}",
				span=expr.span,
			)
		return value
	return expr


def resolve_range(
	spec: Optional[RangeSpec],
	length: int,
	values: Optional[Mapping[str, Any]] = None,
) -> Tuple[int, int]:
	"""
	Resolve `spec` against a buffer of `length` elements.

	`None` means "no subscript" and behaves like FULL. Raises RangeError when
	the resolved pair violates `0 <= start <= end <= length`.
	"""
	spec = spec or FULL_RANGE
	values = values or {}
	kind = spec.kind
	if kind is RangeKind.FULL:
		start, end = 0, length
	elif kind is RangeKind.FROM:
		start, end = evaluate_bound(spec.start, values), length  # type: ignore[arg-type]
	elif kind is RangeKind.TO:
		start, end = 0, evaluate_bound(spec.end, values)  # type: ignore[arg-type]
	elif kind is RangeKind.FROM_TO:
		start, end = evaluate_bound(spec.start, values), evaluate_bound(spec.end, values)  # type: ignore[arg-type]
	else:
		start = evaluate_bound(spec.start, values)  # type: ignore[arg-type]
		last = evaluate_bound(spec.end, values)  # type: ignore[arg-type]
		if last < 0:
			raise RangeError(f"range {spec} has inclusive end {last}, below 0")
		end = last + 1
	if start < 0:
		raise RangeError(f"range {spec} starts at {start}, below 0")
	if start > end:
		raise RangeError(f"range {spec} resolved to start {start} > end {end}")
	if end > length:
		raise RangeError(f"range {spec} ends at {end}, past length {length}")
	return start, end


__all__ = [
	"RangeKind",
	"RangeSpec",
	"FULL_RANGE",
	"BoundName",
	"BoundBinary",
	"BoundExpr",
	"LiteralBound",
	"DeferredBound",
	"Bound",
	"make_bound",
	"evaluate_bound",
	"resolve_range",
]
