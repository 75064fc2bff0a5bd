# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
setslice: batch assignment into slices.

A block of statements such as

	v = 1, 2, 3;
	v[..2] = copy &src;
	v[n..] = move arr;
	unsafe v[1..=2]: (2) = ref &cells;

is parsed (`setslice.parser`), checked before anything runs
(`setslice.modes`, `setslice.expander.Expander`) and then executed in order
against buffers supplied by the caller (`setslice.host`).

Stages:
  parser    text -> Block of Statements (lark grammar)
  modes     per-statement mode, capability and static size checks
  expander  whole-block expansion, then ordered execution
  driver    command-line front-end
"""

from setslice.core import (
	Capability,
	CapabilityError,
	CapabilityRegistry,
	Diagnostic,
	ElementTypeError,
	LengthMismatchError,
	RangeError,
	SetSliceError,
	SetSliceSyntaxError,
	Span,
	StaticSizeError,
	UnknownNameError,
	UnsafeRequiredError,
	UseAfterMoveError,
)
from setslice.expander import ExpandedBlock, Expander, Operation, expand_block, set_slice
from setslice.host import FixedArray, Scope, SliceBuffer, Vector
from setslice.modes import AssignmentMode
from setslice.parser import parse_block

__all__ = [
	"AssignmentMode",
	"Capability",
	"CapabilityRegistry",
	"Diagnostic",
	"ExpandedBlock",
	"Expander",
	"FixedArray",
	"Operation",
	"Scope",
	"SliceBuffer",
	"Span",
	"Vector",
	"expand_block",
	"parse_block",
	"set_slice",
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
