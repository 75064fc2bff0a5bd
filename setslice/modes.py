# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Mode classification and size resolution.

Given a parsed Statement and the scope's static facts, `ModeClassifier`
decides the AssignmentMode, checks the capability the mode demands of the
element type, and works out whether the write length is known before
execution. Everything here runs at expansion time, before any statement of
the block executes:

  mode      length known before execution        requirement
  LIST      always (literal count)                none
  MOVE      required (array literal, FixedArray,  owned source
            or size annotation)
  COPY      when the view is statically sized     element type is Copy
  CLONE     when the view is statically sized     element type is Clone
  RAW_REF   size annotation (mandatory)           `unsafe` marker

An explicit size annotation that contradicts a length derivable from the
source is a StaticSizeError. Literal values must fit the target element type
(Int, Float, Bool and String are checked; user types are opaque).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional, Sequence

from setslice.core.capabilities import CapabilityRegistry, Duplicator
from setslice.core.errors import (
	CapabilityError,
	ElementTypeError,
	StaticSizeError,
	UnknownNameError,
	UnsafeRequiredError,
	UseAfterMoveError,
)
from setslice.host import Borrowable, Buffer, FixedArray, Owned, Scope, SliceBuffer
from setslice.parser.ast import (
	ArrayOperand,
	CloneSource,
	CopySource,
	ListSource,
	LiteralValue,
	MoveSource,
	NamedOperand,
	RawRefSource,
	SizeExpr,
	SizeLiteral,
	SourceSpec,
	Statement,
	Value,
)


class AssignmentMode(Enum):
	LIST = auto()
	MOVE = auto()
	COPY = auto()
	CLONE = auto()
	RAW_REF = auto()

	@property
	def keyword(self) -> str:
		return {
			AssignmentMode.LIST: "list",
			AssignmentMode.MOVE: "move",
			AssignmentMode.COPY: "copy",
			AssignmentMode.CLONE: "clone",
			AssignmentMode.RAW_REF: "ref",
		}[self]


def mode_of(source: SourceSpec) -> AssignmentMode:
	if isinstance(source, ListSource):
		return AssignmentMode.LIST
	if isinstance(source, MoveSource):
		return AssignmentMode.MOVE
	if isinstance(source, CopySource):
		return AssignmentMode.COPY
	if isinstance(source, CloneSource):
		return AssignmentMode.CLONE
	if isinstance(source, RawRefSource):
		return AssignmentMode.RAW_REF
	raise TypeError(f"unknown source form: {type(source).__name__}")


# Builtin element types whose values can be checked; user types are opaque.
_SCALAR_TYPES = {
	"Int": int,
	"Float": float,
	"Bool": bool,
	"String": str,
}


def value_matches(elem_type: str, value: Any) -> bool:
	"""Whether `value` may be stored as one element of a buffer of `elem_type`."""
	if isinstance(value, Borrowable):
		return False
	expected = _SCALAR_TYPES.get(elem_type)
	if expected is None:
		return True
	# bool is an int subclass but not an Int.
	if expected is int and isinstance(value, bool):
		return False
	return isinstance(value, expected)


def type_name_of(value: Any) -> str:
	if isinstance(value, Borrowable):
		return f"{type(value).__name__} of {value.elem_type}"
	if isinstance(value, bool):
		return "Bool"
	for name, cls in _SCALAR_TYPES.items():
		if isinstance(value, cls):
			return name
	return type(value).__name__


@dataclass(frozen=True)
class ModePlan:
	"""Expansion-time facts about one statement."""

	mode: AssignmentMode
	element_type: str
	# Write length when known before execution (literal count, fixed-size
	# source, or size annotation); None means "length of the run-time view".
	static_length: Optional[int] = None
	# Resolved size annotation, if any. Both the target region and the source
	# must match it at execution.
	declared_size: Optional[int] = None
	duplicate: Optional[Duplicator] = None


class ModeClassifier:
	"""Classify statements against a capability registry."""

	def __init__(self, registry: Optional[CapabilityRegistry] = None) -> None:
		self.registry = registry or CapabilityRegistry()

	def classify(self, stmt: Statement, scope: Scope) -> ModePlan:
		target = self._target(stmt, scope)
		mode = mode_of(stmt.source)
		if mode is AssignmentMode.RAW_REF and not stmt.unsafe:
			raise UnsafeRequiredError(
				"copying arbitrary references is unsafe; mark the statement `unsafe` and give it a size `: (N)`",
				statement_index=stmt.index,
				span=stmt.span,
			)
		declared = self._declared_size(stmt, scope)
		if isinstance(stmt.source, ListSource):
			self._check_values(stmt, stmt.source.values, target.elem_type, scope)
			return self._with_size(stmt, mode, target.elem_type, len(stmt.source.values), declared)

		operand = stmt.source.operand  # type: ignore[attr-defined]
		if isinstance(operand, ArrayOperand):
			self._check_values(stmt, operand.values, target.elem_type, scope)
			elem_type = target.elem_type
			static = len(operand.values)
		else:
			container = self._container(stmt, operand, scope, mode)
			elem_type = container.elem_type
			if elem_type != target.elem_type:
				raise ElementTypeError(
					f"'{operand.ident}' holds {elem_type} elements but '{stmt.target}' holds {target.elem_type}",
					statement_index=stmt.index,
					span=stmt.span,
				)
			static = self._operand_static_length(operand, container)

		if mode is AssignmentMode.MOVE and static is None and declared is None:
			raise StaticSizeError(
				f"cannot move '{operand.ident}': its length is only known at run time; "
				"move a fixed-size array or annotate the statement with `: (N)`",
				statement_index=stmt.index,
				span=stmt.span,
			)
		duplicate = self._duplicator(stmt, mode, elem_type)
		return self._with_size(stmt, mode, elem_type, static, declared, duplicate)

	def _target(self, stmt: Statement, scope: Scope) -> Buffer:
		try:
			return scope.buffer(stmt.target)
		except UnknownNameError as err:
			raise UnknownNameError(err.message, statement_index=stmt.index, span=stmt.span) from None

	def _container(self, stmt: Statement, operand: NamedOperand, scope: Scope, mode: AssignmentMode) -> SliceBuffer | Owned:
		try:
			container = scope.container(operand.ident)
		except UnknownNameError as err:
			raise UnknownNameError(err.message, statement_index=stmt.index, span=operand.span) from None
		if mode is AssignmentMode.MOVE and not isinstance(container, Owned):
			raise UnknownNameError(
				f"'{operand.ident}' is a borrowed slice buffer, not an owned value; use `copy` or `clone`",
				statement_index=stmt.index,
				span=operand.span,
			)
		if isinstance(container, Owned) and container.consumed:
			raise UseAfterMoveError(
				f"use of '{operand.ident}' after it was moved",
				statement_index=stmt.index,
				span=operand.span,
			)
		return container

	def _check_values(self, stmt: Statement, values: Sequence[Value], elem_type: str, scope: Scope) -> None:
		"""
		Literals must fit the element type; names must exist and must not be
		containers. Scalar names are checked again when their value is read.
		"""
		for value in values:
			if isinstance(value, LiteralValue):
				found = value.value
				label = repr(found)
			else:
				if value.ident not in scope:
					raise UnknownNameError(
						f"'{value.ident}' is not defined",
						statement_index=stmt.index,
						span=value.span,
					)
				found = scope[value.ident]
				label = f"'{value.ident}'"
				if not isinstance(found, Borrowable):
					continue
			if not value_matches(elem_type, found):
				raise ElementTypeError(
					f"{label} is {type_name_of(found)} but '{stmt.target}' holds {elem_type} elements",
					statement_index=stmt.index,
					span=value.span,
				)

	def _operand_static_length(self, operand: NamedOperand, container: SliceBuffer | Owned) -> Optional[int]:
		if not isinstance(container, FixedArray):
			return None
		if operand.range is None:
			return container.static_length
		return operand.range.static_length()

	def _declared_size(self, stmt: Statement, scope: Scope) -> Optional[int]:
		size: Optional[SizeExpr] = stmt.explicit_size
		if size is None:
			return None
		if isinstance(size, SizeLiteral):
			return size.value
		value = scope.constant(size.ident)
		if value is None:
			raise StaticSizeError(
				f"size '{size.ident}' is not a compile-time constant",
				statement_index=stmt.index,
				span=stmt.span,
			)
		return value

	def _duplicator(self, stmt: Statement, mode: AssignmentMode, elem_type: str) -> Optional[Duplicator]:
		if mode is AssignmentMode.COPY:
			if not self.registry.is_copy(elem_type):
				raise CapabilityError(
					f"`copy` needs a Copy element type; {elem_type} is not Copy (use `clone`?)",
					statement_index=stmt.index,
					span=stmt.span,
				)
			return self.registry.copier(elem_type)
		if mode is AssignmentMode.CLONE:
			if not self.registry.is_clone(elem_type):
				raise CapabilityError(
					f"`clone` needs a Clone element type; {elem_type} is not Clone",
					statement_index=stmt.index,
					span=stmt.span,
				)
			return self.registry.cloner(elem_type)
		return None

	def _with_size(
		self,
		stmt: Statement,
		mode: AssignmentMode,
		elem_type: str,
		static: Optional[int],
		declared: Optional[int],
		duplicate: Optional[Duplicator] = None,
	) -> ModePlan:
		if declared is not None and static is not None and declared != static:
			raise StaticSizeError(
				f"size annotation ({declared}) contradicts the source length ({static})",
				statement_index=stmt.index,
				span=stmt.span,
			)
		return ModePlan(
			mode=mode,
			element_type=elem_type,
			static_length=declared if declared is not None else static,
			declared_size=declared,
			duplicate=duplicate,
		)


__all__ = ["AssignmentMode", "ModePlan", "ModeClassifier", "mode_of", "type_name_of", "value_matches"]
