# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Expansion engine.

Two phases, mirroring compile time and run time:

1. `Expander.expand(block, scope)` classifies every statement (mode,
   capability, static size) and tracks moves across the block. Any error
   here is fatal to the whole block and nothing has executed yet.
2. `ExpandedBlock.execute(scope)` runs the statements in order. For each
   one it resolves the target range against the buffer's current length,
   resolves the source view, checks the write-length contract and only then
   writes the region. The first failure aborts the rest of the block;
   statements that already completed keep their effects.

Later statements overwrite earlier ones; there is no other interaction
between statements.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from setslice.core.capabilities import CapabilityRegistry
from setslice.core.errors import ElementTypeError, LengthMismatchError, SetSliceError, UnknownNameError, UseAfterMoveError
from setslice.host import Owned, Scope
from setslice.modes import AssignmentMode, ModeClassifier, ModePlan, type_name_of, value_matches
from setslice.parser import parse_block
from setslice.parser.ast import ArrayOperand, Block, ListSource, NamedOperand, NameValue, Statement, Value
from setslice.ranges import resolve_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Operation:
	"""One executed buffer mutation (the execution trace entry)."""

	statement_index: int
	target: str
	start: int
	end: int
	mode: AssignmentMode
	values: Tuple[Any, ...]

	@property
	def length(self) -> int:
		return self.end - self.start


@dataclass(frozen=True)
class PlannedStatement:
	statement: Statement
	plan: ModePlan

	@property
	def mode(self) -> AssignmentMode:
		return self.plan.mode


class ExpandedBlock:
	"""A block that passed every expansion-time check and is ready to run."""

	def __init__(self, planned: Sequence[PlannedStatement], block: Block) -> None:
		self.planned: Tuple[PlannedStatement, ...] = tuple(planned)
		self.block = block
		self.trace: List[Operation] = []

	def __len__(self) -> int:
		return len(self.planned)

	def __iter__(self):
		return iter(self.planned)

	def execute(self, scope: Scope) -> List[Operation]:
		"""
		Run every statement in order and return the operations performed.

		On failure the exception propagates; `self.trace` still lists the
		operations that completed before it.
		"""
		self.trace = []
		for item in self.planned:
			try:
				op = self._execute_one(item, scope)
			except SetSliceError as err:
				_attach(err, item.statement)
				logger.debug(
					"statement %d failed after %d completed: %s",
					item.statement.index,
					len(self.trace),
					err,
				)
				raise
			self.trace.append(op)
			logger.debug(
				"statement %d: %s %s[%d..%d] (%d element(s))",
				op.statement_index,
				op.mode.keyword,
				op.target,
				op.start,
				op.end,
				op.length,
			)
		return list(self.trace)

	def _execute_one(self, item: PlannedStatement, scope: Scope) -> Operation:
		stmt, plan = item.statement, item.plan
		buffer = scope.buffer(stmt.target)
		start, end = resolve_range(stmt.range, buffer.length(), scope)
		region = end - start
		if plan.declared_size is not None and region != plan.declared_size:
			raise LengthMismatchError(
				f"slice length ({region}) is invalid, expected: {plan.declared_size}",
				expected=plan.declared_size,
				actual=region,
			)
		length, producer = self._source(stmt, plan, scope)
		if length != region:
			raise LengthMismatchError(
				f"value length ({length}) is invalid, expected: {region}",
				expected=region,
				actual=length,
			)
		written: List[Any] = []

		def recording() -> Iterable[Any]:
			written.extend(producer())
			return written

		buffer.write_range(start, end, recording)
		return Operation(
			statement_index=stmt.index,
			target=stmt.target,
			start=start,
			end=end,
			mode=plan.mode,
			values=tuple(written),
		)

	def _source(self, stmt: Statement, plan: ModePlan, scope: Scope) -> Tuple[int, Callable[[], Iterable[Any]]]:
		"""Return (run-time source length, producer) without consuming anything yet."""
		if isinstance(stmt.source, ListSource):
			values = _evaluate_values(stmt.source.values, scope, plan.element_type)
			return len(values), lambda: values

		operand = stmt.source.operand  # type: ignore[attr-defined]
		if isinstance(operand, ArrayOperand):
			view: Tuple[Any, ...] = _evaluate_values(operand.values, scope, plan.element_type)
		else:
			view = self._view(operand, scope)
		if plan.declared_size is not None and len(view) != plan.declared_size:
			raise LengthMismatchError(
				f"value length ({len(view)}) is invalid, expected: {plan.declared_size}",
				expected=plan.declared_size,
				actual=len(view),
			)

		mode = plan.mode
		if mode is AssignmentMode.MOVE:
			if isinstance(operand, NamedOperand):
				owned = scope.container(operand.ident)
				if not isinstance(owned, Owned):
					raise UnknownNameError(f"'{operand.ident}' is not an owned value")
				return len(view), lambda: owned.take(stmt.index)
			return len(view), lambda: view
		if mode in (AssignmentMode.COPY, AssignmentMode.CLONE):
			duplicate = plan.duplicate
			if duplicate is None:
				raise ValueError(f"{mode.keyword} plan without a duplicator")
			return len(view), lambda: [duplicate(elem) for elem in view]
		# RAW_REF: the same objects, no duplication.
		return len(view), lambda: view

	def _view(self, operand: NamedOperand, scope: Scope) -> Tuple[Any, ...]:
		container = scope.container(operand.ident)
		if isinstance(container, Owned) and container.consumed:
			raise UseAfterMoveError(f"use of '{operand.ident}' after it was moved", phase="execute", span=operand.span)
		start, end = resolve_range(operand.range, container.length(), scope)
		return container.view(start, end)


def _evaluate_values(values: Sequence[Value], scope: Scope, elem_type: str) -> Tuple[Any, ...]:
	result = []
	for value in values:
		if isinstance(value, NameValue):
			if value.ident not in scope:
				raise UnknownNameError(f"'{value.ident}' is not defined", phase="execute", span=value.span)
			found = scope[value.ident]
			if not value_matches(elem_type, found):
				raise ElementTypeError(
					f"'{value.ident}' is {type_name_of(found)} but the target holds {elem_type} elements",
					phase="execute",
					span=value.span,
				)
			result.append(found)
		else:
			result.append(value.value)
	return tuple(result)


def _attach(err: SetSliceError, stmt: Statement) -> None:
	"""Fill in statement index/span on errors raised below the statement level."""
	if err.statement_index is None:
		err.statement_index = stmt.index
	if err.span.line is None and stmt.span.line is not None:
		err.span = stmt.span
	err.phase = "execute"


class Expander:
	"""Runs every expansion-time check for a block."""

	def __init__(self, registry: Optional[CapabilityRegistry] = None) -> None:
		self.registry = registry or CapabilityRegistry()
		self.classifier = ModeClassifier(self.registry)

	def expand(self, block: Block, scope: Scope) -> ExpandedBlock:
		planned: List[PlannedStatement] = []
		moved: Dict[str, int] = {}
		for stmt in block:
			self._check_moves(stmt, moved)
			plan = self.classifier.classify(stmt, scope)
			planned.append(PlannedStatement(stmt, plan))
			if plan.mode is AssignmentMode.MOVE and isinstance(stmt.source.operand, NamedOperand):  # type: ignore[attr-defined]
				moved[stmt.source.operand.ident] = stmt.index  # type: ignore[attr-defined]
			logger.debug(
				"expanded statement %d: %s -> %s (static length %s)",
				stmt.index,
				stmt.target,
				plan.mode.keyword,
				plan.static_length,
			)
		return ExpandedBlock(planned, block)

	def _check_moves(self, stmt: Statement, moved: Dict[str, int]) -> None:
		for name in stmt.operand_names():
			if name in moved:
				raise UseAfterMoveError(
					f"use of '{name}' after it was moved by statement {moved[name]}",
					statement_index=stmt.index,
					span=stmt.span,
					notes=[f"'{name}' was moved by statement {moved[name]}"],
				)


def expand_block(block: Block, scope: Scope, registry: Optional[CapabilityRegistry] = None) -> ExpandedBlock:
	return Expander(registry).expand(block, scope)


def set_slice(
	source: str | Block,
	scope: Scope,
	registry: Optional[CapabilityRegistry] = None,
	*,
	file: Optional[str] = None,
) -> List[Operation]:
	"""
	Parse, expand and execute a block against `scope` in one call.

	Parse and expansion errors leave every buffer untouched; execution errors
	leave the effects of statements that completed before the failure.
	"""
	block = source if isinstance(source, Block) else parse_block(source, file)
	expanded = Expander(registry).expand(block, scope)
	return expanded.execute(scope)


__all__ = [
	"Expander",
	"ExpandedBlock",
	"Operation",
	"PlannedStatement",
	"expand_block",
	"set_slice",
]
